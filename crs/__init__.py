"""
Coordinate reference systems.

This package provides the geographic, geocentric and projected CRS the
operation factory resolves pipelines between.
"""

from crs.reference_systems import (
    AxisOrder,
    GeocentricCRS,
    GeodeticCRS,
    GeographicCRS,
    ProjectedCRS,
)

__all__ = [
    "AxisOrder",
    "GeocentricCRS",
    "GeodeticCRS",
    "GeographicCRS",
    "ProjectedCRS",
]
