"""
Coordinate operations.

This package provides the operation contract and the elementary operations
pipelines are assembled from:
- Identity and operation sequences
- Dimension change, unit conversion, rounding and axis switch
- Prime meridian rotation
- Geographic <-> geocentric conversions

The factory assembling complete pipelines lives in :mod:`operations.factory`.
"""

from operations.base import (
    PRECISION_FLOOR,
    CoordinateOperation,
    GeoTransformation,
    Identity,
    OperationKind,
)
from operations.sequence import CoordinateOperationSequence, flatten
from operations.dimension import ChangeCoordinateDimension
from operations.unit_conversion import (
    UnitConversion,
    clear_converter_cache,
    converter_cache_size,
    create_unit_converter,
    create_unit_converter_from_lists,
)
from operations.rounding import CoordinateRounding
from operations.axis import CoordinateSwitch
from operations.longitude_rotation import LongitudeRotation
from operations.geocentric import Geocentric2Geographic, Geographic2Geocentric

__all__ = [
    "PRECISION_FLOOR",
    "CoordinateOperation",
    "GeoTransformation",
    "Identity",
    "OperationKind",
    "CoordinateOperationSequence",
    "flatten",
    "ChangeCoordinateDimension",
    "UnitConversion",
    "clear_converter_cache",
    "converter_cache_size",
    "create_unit_converter",
    "create_unit_converter_from_lists",
    "CoordinateRounding",
    "CoordinateSwitch",
    "LongitudeRotation",
    "Geocentric2Geographic",
    "Geographic2Geocentric",
]
