"""
Geodetic Constants and Numerical Settings.

This module provides the reference constants and numerical tolerances used by
every coordinate operation. All constants are defined with SI units and are
traceable to authoritative sources, so that a precision figure reported by an
operation can be followed back to the value that produced it.

References
----------
- WGS84 parameters: NIMA TR8350.2, Third Edition, 2000
- GRS80 parameters: Moritz, H. (2000). Geodetic Reference System 1980.
- IGN NT/G 71 and NT/G 76 (algorithms for conformal projections and
  geocentric conversions)
- IOGP Guidance Note 7-2 (EPSG coordinate conversions and transformations)
"""

from dataclasses import dataclass
from typing import Final


@dataclass(frozen=True)
class Constant:
    """A constant with uncertainty and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    uncertainty : float
        The standard uncertainty (1-sigma) of the constant.
    unit : str
        The SI unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    uncertainty: float
    unit: str
    source: str
    description: str


class GeodeticConstants:
    """Registry of constants and tolerances used throughout the system.

    Reference Ellipsoids
    --------------------
    Defining parameters (semi-major axis and inverse flattening) of the
    ellipsoids used by the reference datums. Derived quantities are computed
    by :class:`datum.ellipsoid.Ellipsoid`.

    Numerical Settings
    ------------------
    Stop criteria, iteration bounds and tolerances. These are the
    configuration knobs of the engine; constructors accept overrides.
    """

    # =========================================================================
    # WGS84 / GRS80 Ellipsoid Parameters
    # =========================================================================

    WGS84_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,  # Defined exactly
        unit="m",
        source="WGS84, NIMA TR8350.2",
        description="Semi-major axis (equatorial radius) of WGS84 ellipsoid"
    )

    WGS84_INVERSE_FLATTENING: Final[Constant] = Constant(
        value=298.257223563,
        uncertainty=0.0,  # Defined exactly
        unit="dimensionless",
        source="WGS84, NIMA TR8350.2",
        description="Inverse flattening of WGS84 ellipsoid: 1/f = a / (a - b)"
    )

    GRS80_SEMI_MAJOR_AXIS: Final[Constant] = Constant(
        value=6_378_137.0,
        uncertainty=0.0,
        unit="m",
        source="GRS80, Moritz (2000)",
        description="Semi-major axis of GRS80 ellipsoid"
    )

    GRS80_INVERSE_FLATTENING: Final[Constant] = Constant(
        value=298.257222101,
        uncertainty=0.0,
        unit="dimensionless",
        source="GRS80, Moritz (2000)",
        description="Inverse flattening of GRS80 ellipsoid"
    )

    # =========================================================================
    # Operation Precision
    # =========================================================================

    DEFAULT_PRECISION: Final[Constant] = Constant(
        value=1e-9,
        uncertainty=0.0,
        unit="m",
        source="Engine convention",
        description="Default (and minimum) error bound of a coordinate operation"
    )

    GEOCENTRIC_CONVERSION_PRECISION: Final[Constant] = Constant(
        value=1e-4,
        uncertainty=0.0,
        unit="m",
        source="IGN NT/G 80",
        description="Error bound of the iterative geocentric to geographic conversion"
    )

    MAX_GEOCENTRIC_RADIUS: Final[Constant] = Constant(
        value=6.4e6,
        uncertainty=0.0,
        unit="m",
        source="Engine convention",
        description="Largest distance to the geocenter of a point a datum transformation is bounded for"
    )

    # =========================================================================
    # Iteration Stop Criteria
    # =========================================================================

    GEOCENTRIC_LATITUDE_EPSILON: Final[Constant] = Constant(
        value=1e-11,
        uncertainty=0.0,
        unit="rad",
        source="IGN NT/G 80",
        description="Stop criterion of the latitude fixed point (~0.1 mm on the ellipsoid)"
    )

    ISOMETRIC_LATITUDE_EPSILON: Final[Constant] = Constant(
        value=1e-11,
        uncertainty=0.0,
        unit="rad",
        source="IGN NT/G 71",
        description="Stop criterion when recovering latitude from isometric latitude"
    )

    MAX_ITERATIONS: Final[int] = 100

    # =========================================================================
    # Equality Tolerances
    # =========================================================================

    PRIME_MERIDIAN_TOLERANCE: Final[Constant] = Constant(
        value=1e-11,
        uncertainty=0.0,
        unit="rad",
        source="Engine convention",
        description="Two prime meridians closer than this (< 0.1 mm) are equal"
    )

    SEMI_MAJOR_AXIS_TOLERANCE: Final[Constant] = Constant(
        value=1e-4,
        uncertainty=0.0,
        unit="m",
        source="Engine convention",
        description="Two ellipsoids whose semi-major axes differ less are candidates for equality"
    )

    ECCENTRICITY_SQUARED_TOLERANCE: Final[Constant] = Constant(
        value=1e-11,
        uncertainty=0.0,
        unit="dimensionless",
        source="Engine convention",
        description="Two ellipsoids whose e² differ less (and whose axes match) are equal"
    )

