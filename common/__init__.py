"""
Common utilities and infrastructure for the coordinate operation engine.

This package provides foundational components used across all modules:
- Geodetic constants and numerical settings
- Unit registry and measures
- Identifiers and the exception taxonomy
- Coordinate type definitions
- Logging and resolution audit infrastructure
"""

from common.constants import Constant, GeodeticConstants
from common.units import (
    Quantity,
    Unit,
    Measure,
    METER,
    KILOMETER,
    FOOT,
    US_SURVEY_FOOT,
    RADIAN,
    DEGREE,
    GRAD,
    ARC_SECOND,
    UNIT,
    PPM,
    SECOND,
    unit_from_name,
)
from common.identifiers import Identifier
from common.exceptions import (
    GeodesyError,
    CoordinateDimensionError,
    NonInvertibleOperationError,
    OutOfExtentError,
    NoPathFoundError,
    MalformedDefinitionError,
    ConvergenceError,
    IllegalCoordinateError,
    ValidationError,
)
from common.types import Coordinate, GeographicPoint, as_coordinate
from common.logging_config import get_logger, ResolutionAudit, SkippedDerivation, SkipReason

__all__ = [
    "Constant",
    "GeodeticConstants",
    "Quantity",
    "Unit",
    "Measure",
    "METER",
    "KILOMETER",
    "FOOT",
    "US_SURVEY_FOOT",
    "RADIAN",
    "DEGREE",
    "GRAD",
    "ARC_SECOND",
    "UNIT",
    "PPM",
    "SECOND",
    "unit_from_name",
    "Identifier",
    "GeodesyError",
    "CoordinateDimensionError",
    "NonInvertibleOperationError",
    "OutOfExtentError",
    "NoPathFoundError",
    "MalformedDefinitionError",
    "ConvergenceError",
    "IllegalCoordinateError",
    "ValidationError",
    "Coordinate",
    "GeographicPoint",
    "as_coordinate",
    "get_logger",
    "ResolutionAudit",
    "SkippedDerivation",
    "SkipReason",
]
