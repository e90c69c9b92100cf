"""
Cross-check of projections against PROJ.

Projected coordinates computed by a :class:`Projection` are compared with
those of a pyproj ``Transformer`` built from the projection's PROJ string,
from geographic coordinates on the same ellipsoid.
"""

from typing import Sequence, Tuple

import numpy as np
from pyproj import CRS, Transformer

from common.exceptions import ValidationError
from common.logging_config import get_logger
from projections.base import Projection
from validation.round_trip import ValidationResult

logger = get_logger(__name__)


class ProjReferenceChecker:
    """Compare projections with PROJ.

    Parameters
    ----------
    tolerance : float
        Maximum difference in meters.
    strict_mode : bool
        If True, raise :class:`ValidationError` on a failed check.
    """

    def __init__(self, tolerance: float = 1e-3, strict_mode: bool = False):
        self.tolerance = tolerance
        self.strict_mode = strict_mode

    @staticmethod
    def transformer(projection: Projection) -> Transformer:
        """pyproj transformer from (lon, lat) degrees to the projection."""
        ellipsoid = projection.ellipsoid
        geographic = CRS.from_proj4(f"+proj=longlat +a={ellipsoid.a!r} +b={ellipsoid.b!r} +no_defs")
        return Transformer.from_crs(geographic, CRS.from_proj4(projection.proj4_string), always_xy=True)

    def check(self, projection: Projection, points: Sequence[Tuple[float, float]]) -> ValidationResult:
        """Compare forward projections of (lat, lon) points in degrees."""
        transformer = self.transformer(projection)
        worst = 0.0
        for lat, lon in points:
            x, y = projection.to_projected(np.radians(lat), np.radians(lon))
            ref_x, ref_y = transformer.transform(lon, lat)
            worst = max(worst, abs(x - ref_x), abs(y - ref_y))

        result = ValidationResult(
            test_name="proj_reference",
            passed=worst <= self.tolerance,
            message=f"{projection.name} vs PROJ: max difference {worst:.3e} m",
            details={'max_error': worst, 'proj4': projection.proj4_string},
        )
        if not result.passed:
            logger.warning(result.message)
            if self.strict_mode:
                raise ValidationError(result.message)
        return result
