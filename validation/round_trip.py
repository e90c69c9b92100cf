"""
Consistency Checks for Coordinate Operations.

This module verifies at runtime the algebraic properties the engine relies
on, for operations and transformation graphs built by callers.

Check Categories
----------------
1. Round trip (an operation followed by its inverse restores the input)
2. Identity law (composing with the identity changes nothing)
3. Graph symmetry (A→B followed by B→A restores the input)
4. Pivot correctness (a derived A→B equals A→REF then REF→B)
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np

from common.exceptions import GeodesyError, ValidationError
from common.logging_config import get_logger
from common.types import CoordinateLike, GeographicPoint, as_coordinate
from datum.geodetic_datum import GeodeticDatum
from datum.transformation_graph import TransformationRegistry
from operations.base import CoordinateOperation, Identity
from operations.sequence import CoordinateOperationSequence

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the check.
    passed : bool
        Whether the check passed.
    message : str
        Description of the result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any] = field(default_factory=dict)


def _max_error(a: Sequence[float], b: Sequence[float], count: Optional[int] = None) -> float:
    n = min(len(a), len(b)) if count is None else count
    return float(np.max(np.abs(np.asarray(a[:n]) - np.asarray(b[:n]))))


class RoundTripChecker:
    """Checker of the algebraic properties of operations and graphs.

    Parameters
    ----------
    strict_mode : bool
        If True, raise :class:`ValidationError` on a failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(self, strict_mode: bool = False, log_violations: bool = True):
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("RoundTripChecker")

    def _report(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"{result.test_name} failed: {result.message}")
            if self.strict_mode:
                raise ValidationError(f"{result.test_name}: {result.message}")
        return result

    def check_round_trip(
        self,
        op: CoordinateOperation,
        coords: Sequence[Sequence[float]],
        tolerance: Optional[float] = None
    ) -> ValidationResult:
        """``op.inverse()`` applied after ``op`` restores each coordinate.

        The tolerance defaults to the precision of the operation.
        """
        tolerance = op.precision if tolerance is None else tolerance
        try:
            inverse = op.inverse()
        except GeodesyError as e:
            return self._report(ValidationResult(
                test_name="round_trip",
                passed=False,
                message=f"{op.name} has no inverse: {e}",
            ))

        worst = 0.0
        for coord in coords:
            back = inverse.transform(op.transform(coord))
            worst = max(worst, _max_error(coord, back))

        return self._report(ValidationResult(
            test_name="round_trip",
            passed=worst <= tolerance,
            message=f"Round trip of {op.name}: max error {worst:.3e} (tolerance {tolerance:.1e})",
            details={'max_error': worst, 'tolerance': tolerance, 'num_points': len(coords)},
        ))

    def check_identity_law(
        self,
        op: CoordinateOperation,
        coords: Sequence[Sequence[float]]
    ) -> ValidationResult:
        """Wrapping ``op`` between identities gives the same results."""
        wrapped = CoordinateOperationSequence(None, Identity.IDENTITY, op, Identity.IDENTITY)
        worst = 0.0
        for coord in coords:
            if Identity.IDENTITY.transform(coord) != as_coordinate(coord):
                worst = np.inf
                break
            worst = max(worst, _max_error(op.transform(coord), wrapped.transform(coord)))

        return self._report(ValidationResult(
            test_name="identity_law",
            passed=worst == 0.0,
            message=f"Identity law for {op.name}: max difference {worst:.3e}",
            details={'max_error': worst},
        ))

    def check_graph_symmetry(
        self,
        registry: TransformationRegistry,
        source: GeodeticDatum,
        target: GeodeticDatum,
        coords: Sequence[Union[GeographicPoint, CoordinateLike]],
        tolerance: float = 1e-10,
        height_tolerance: float = 1e-3
    ) -> ValidationResult:
        """A→B then B→A restores geographic coordinates.

        Parameters
        ----------
        coords : sequence of GeographicPoint or coordinates
            Geographic positions on ``source``, coordinates being (lat, lon, h)
            in radians and meters.
        tolerance : float
            Tolerance on latitude and longitude in radians.
        height_tolerance : float
            Tolerance on the height in meters.
        """
        forward = registry.get_geographic_transformations(source, target)
        backward = registry.get_geographic_transformations(target, source)
        if not forward or not backward:
            return self._report(ValidationResult(
                test_name="graph_symmetry",
                passed=False,
                message=f"No path between {source.short_name} and {target.short_name} "
                        f"({len(forward)} forward, {len(backward)} backward)",
            ))

        worst_angle = 0.0
        worst_height = 0.0
        for point in coords:
            coord = point.as_coordinate() if isinstance(point, GeographicPoint) else as_coordinate(point)
            back = backward[0].transform(forward[0].transform(coord))
            worst_angle = max(worst_angle, _max_error(coord, back, 2))
            if len(coord) > 2 and len(back) > 2:
                worst_height = max(worst_height, abs(coord[2] - back[2]))

        return self._report(ValidationResult(
            test_name="graph_symmetry",
            passed=worst_angle <= tolerance and worst_height <= height_tolerance,
            message=(
                f"{source.short_name} <-> {target.short_name}: max angular error "
                f"{worst_angle:.3e} rad, max height error {worst_height:.3e} m"
            ),
            details={'max_angular_error': worst_angle, 'max_height_error': worst_height},
        ))

    def check_pivot_correctness(
        self,
        registry: TransformationRegistry,
        source: GeodeticDatum,
        target: GeodeticDatum,
        coords: Sequence[Sequence[float]],
        tolerance: float = 1e-6
    ) -> ValidationResult:
        """Derived A→B equals A→REF followed by the inverse of B→REF.

        ``coords`` are geocentric (X, Y, Z) in meters on ``source``.
        """
        reference = registry.reference_datum
        derived = registry.get_geocentric_transformations(source, target)
        source_legs = registry.get_geocentric_transformations(source, reference)
        target_legs = registry.get_geocentric_transformations(target, reference)
        if not derived or not source_legs or not target_legs:
            return self._report(ValidationResult(
                test_name="pivot_correctness",
                passed=False,
                message=f"Missing leg between {source.short_name}, {target.short_name} "
                        f"and {reference.short_name}",
            ))

        through_pivot = CoordinateOperationSequence(None, source_legs[0], target_legs[0].inverse())
        worst = 0.0
        for coord in coords:
            worst = max(worst, _max_error(derived[0].transform(coord), through_pivot.transform(coord)))

        return self._report(ValidationResult(
            test_name="pivot_correctness",
            passed=worst <= tolerance,
            message=f"{source.short_name} -> {target.short_name} through "
                    f"{reference.short_name}: max difference {worst:.3e} m",
            details={'max_error': worst, 'tolerance': tolerance},
        ))

    def check_all(
        self,
        op: CoordinateOperation,
        coords: Sequence[Sequence[float]],
        tolerance: Optional[float] = None
    ) -> List[ValidationResult]:
        """Round trip and identity law of one operation."""
        return [
            self.check_round_trip(op, coords, tolerance),
            self.check_identity_law(op, coords),
        ]
