"""
Per-ordinate unit conversion.

Converters are interned: asking twice for the same source and target units
returns the same instance.
"""

import threading
from typing import Any, Dict, Sequence, Tuple

import numpy as np

from common.exceptions import MalformedDefinitionError
from common.identifiers import Identifier
from common.types import Coordinate
from common.units import METER, Quantity, Unit
from common.logging_config import get_logger
from operations.base import CoordinateOperation, Identity

logger = get_logger(__name__)


class UnitConversion(CoordinateOperation):
    """Multiplies each ordinate by source_scale / target_scale.

    NaN ordinates pass through unchanged. Build instances with
    :func:`create_unit_converter`.

    Parameters
    ----------
    source_units, target_units : sequence of Unit
        One unit per ordinate, pairwise of the same quantity.
    """

    def __init__(self, source_units: Sequence[Unit], target_units: Sequence[Unit]):
        if len(source_units) != len(target_units):
            raise MalformedDefinitionError(
                f"Unit lists differ in length: {len(source_units)} and {len(target_units)}"
            )
        for src, tgt in zip(source_units, target_units):
            if src.quantity is not tgt.quantity:
                raise MalformedDefinitionError(
                    f"Cannot convert {src.quantity.label} ({src.name}) "
                    f"to {tgt.quantity.label} ({tgt.name})"
                )
        self.source_units: Tuple[Unit, ...] = tuple(source_units)
        self.target_units: Tuple[Unit, ...] = tuple(target_units)
        self._factors = np.array(
            [src.scale / tgt.scale for src, tgt in zip(source_units, target_units)]
        )
        name = (
            f"Unit conversion [{', '.join(u.name for u in self.source_units)}]"
            f" -> [{', '.join(u.name for u in self.target_units)}]"
        )
        super().__init__(Identifier.local("UnitConversion", name))

    @property
    def dimensions(self) -> Tuple[int, ...]:
        # Ordinates beyond the unit list are not converted
        n = len(self.source_units)
        return tuple(range(min(2, n), n + 1)) if n > 1 else (1,)

    def _transform(self, coord: Coordinate) -> Coordinate:
        for i, value in enumerate(coord):
            if not np.isnan(value):
                coord[i] = float(value * self._factors[i])
        return coord

    def inverse(self) -> CoordinateOperation:
        return create_unit_converter_from_lists(self.target_units, self.source_units)

    def is_identity(self) -> bool:
        return bool(np.all(self._factors == 1.0))

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.source_units, self.target_units)


_converters: Dict[Tuple[Tuple[Unit, ...], Tuple[Unit, ...]], CoordinateOperation] = {}
_converters_lock = threading.Lock()


def create_unit_converter_from_lists(
    source_units: Sequence[Unit],
    target_units: Sequence[Unit]
) -> CoordinateOperation:
    """Interned converter for two unit lists.

    Returns :attr:`Identity.IDENTITY` when all units pairwise match.
    """
    key = (tuple(source_units), tuple(target_units))
    with _converters_lock:
        cached = _converters.get(key)
        if cached is not None:
            return cached
        converter = UnitConversion(source_units, target_units)
        if converter.is_identity():
            converter = Identity.IDENTITY
        _converters[key] = converter
        logger.debug(f"Created unit converter {key}")
        return converter


def create_unit_converter(
    source_unit: Unit,
    target_unit: Unit,
    alti_source: Unit = None,
    alti_target: Unit = None
) -> CoordinateOperation:
    """Converter for a 3-ordinate coordinate.

    Homogeneous form: for length units the three ordinates are converted;
    for angle units the first two are, and the third is a height in meters.

    Mixed form: when ``alti_source`` and ``alti_target`` are given, the
    first two ordinates go from ``source_unit`` to ``target_unit`` and the
    third from ``alti_source`` to ``alti_target``.
    """
    if alti_source is not None or alti_target is not None:
        if alti_source is None or alti_target is None:
            raise MalformedDefinitionError("Both altimetric units are required")
        return create_unit_converter_from_lists(
            [source_unit, source_unit, alti_source],
            [target_unit, target_unit, alti_target]
        )
    if source_unit.quantity is Quantity.ANGLE:
        return create_unit_converter_from_lists(
            [source_unit, source_unit, METER], [target_unit, target_unit, METER]
        )
    return create_unit_converter_from_lists(
        [source_unit] * 3, [target_unit] * 3
    )


def clear_converter_cache() -> None:
    with _converters_lock:
        _converters.clear()


def converter_cache_size() -> int:
    with _converters_lock:
        return len(_converters)