"""
Geodetic datums.

This package provides the geodetic reference of coordinates:
- Reference ellipsoids and prime meridians
- Geographic extents
- Geodetic datums and the registry of known datums
- The datum transformation graph and its resolution context
"""

from datum.extent import WORLD, GeographicExtent
from datum.ellipsoid import Ellipsoid
from datum.prime_meridian import PrimeMeridian
from datum.geodetic_datum import (
    ED50,
    KNOWN_DATUMS,
    NAD27,
    NAD83,
    NTF,
    NTF_PARIS,
    RGF93,
    WGS84,
    WGS84GUAD,
    WGS84MART,
    WGS84SBSM,
    DatumRegistry,
    GeodeticDatum,
)
from datum.transformation_graph import (
    DatumTransformationGraph,
    TransformationRegistry,
    default_registry,
)

__all__ = [
    "WORLD",
    "GeographicExtent",
    "Ellipsoid",
    "PrimeMeridian",
    "ED50",
    "KNOWN_DATUMS",
    "NAD27",
    "NAD83",
    "NTF",
    "NTF_PARIS",
    "RGF93",
    "WGS84",
    "WGS84GUAD",
    "WGS84MART",
    "WGS84SBSM",
    "DatumRegistry",
    "GeodeticDatum",
    "DatumTransformationGraph",
    "TransformationRegistry",
    "default_registry",
]
