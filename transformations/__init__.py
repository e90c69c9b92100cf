"""
Datum transformations.

This package provides the datum-to-datum transformations:
- Three-parameter geocentric translation
- Seven-parameter (Bursa-Wolf) transformation
- Composite geocentric transformation sequences
- Grid-based shifts of geographic coordinates and their offset providers
"""

from operations.base import GeoTransformation, Identity
from transformations.geocentric_translation import GeocentricTranslation
from transformations.seven_parameter import RotationConvention, SevenParameterTransformation
from transformations.sequence import GeocentricTransformationSequence
from transformations.grids import (
    GeographicGrid,
    GridOffsetProvider,
    InMemoryGridProvider,
    NTv2GridFile,
)
from transformations.grid_shift import GridShiftTransformation

__all__ = [
    "GeoTransformation",
    "Identity",
    "GeocentricTranslation",
    "RotationConvention",
    "SevenParameterTransformation",
    "GeocentricTransformationSequence",
    "GeographicGrid",
    "GridOffsetProvider",
    "InMemoryGridProvider",
    "NTv2GridFile",
    "GridShiftTransformation",
]
