"""
Map projections.

This package provides the projection contract and its implementations:
- Lambert Conic Conformal (1SP, 2SP) with the French Lambert zones
- Mercator (1SP, 2SP)
- Transverse Mercator (Gauss-Krüger) and UTM
- Lambert Azimuthal Equal-Area
- Tissot indicatrix for distortion analysis
"""

from projections.base import (
    InverseProjection,
    Orientation,
    Parameter,
    Projection,
    Property,
    Surface,
    TissotIndicatrix,
    compute_tissot_indicatrix,
)
from projections.lambert_conic import (
    LAMBERT1,
    LAMBERT2,
    LAMBERT2E,
    LAMBERT3,
    LAMBERT4,
    LAMBERT93,
    LambertConicConformal1SP,
    LambertConicConformal2SP,
)
from projections.mercator import Mercator1SP, Mercator2SP
from projections.transverse_mercator import TransverseMercator, UniversalTransverseMercator
from projections.lambert_azimuthal import LambertAzimuthalEqualArea

__all__ = [
    "InverseProjection",
    "Orientation",
    "Parameter",
    "Projection",
    "Property",
    "Surface",
    "TissotIndicatrix",
    "compute_tissot_indicatrix",
    "LAMBERT1",
    "LAMBERT2",
    "LAMBERT2E",
    "LAMBERT3",
    "LAMBERT4",
    "LAMBERT93",
    "LambertConicConformal1SP",
    "LambertConicConformal2SP",
    "Mercator1SP",
    "Mercator2SP",
    "TransverseMercator",
    "UniversalTransverseMercator",
    "LambertAzimuthalEqualArea",
]
