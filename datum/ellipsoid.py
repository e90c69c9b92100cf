"""
Reference Ellipsoids.

This module implements the reference surface of a geodetic datum and the
ellipsoidal quantities shared by the conversions and projections: radii of
curvature, isometric latitude and its inverse, meridian arc length and the
Krüger series used by Transverse Mercator.

Scientific Context
------------------
Domain: Geodesy, Earth geometry
Model: Oblate ellipsoid of revolution defined by its semi-major axis and
flattening (or semi-minor axis, or eccentricity).

References
----------
- NIMA TR8350.2: WGS84 parameters
- IGN NT/G 71: Isometric latitude and its inverse (ALG0001, ALG0002)
- Karney, C.F.F. (2011). Transverse Mercator with an accuracy of a few
  nanometers. J. Geodesy 85(8), 475-485.
- Snyder, J.P. (1987). Map Projections: A Working Manual. USGS PP 1395.
"""

from dataclasses import dataclass, field
from functools import cached_property
from typing import List, Optional, Tuple

import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import ConvergenceError, MalformedDefinitionError
from common.identifiers import Identifier


@dataclass(frozen=True, eq=False)
class Ellipsoid:
    """Parameters defining a reference ellipsoid.

    Attributes
    ----------
    a : float
        Semi-major axis (equatorial radius) in meters.
    f : float
        Flattening: f = (a - b) / a. Zero for a sphere.
    identifier : Identifier
        Authority identifier of the ellipsoid.

    Derived Parameters
    ------------------
    b : float
        Semi-minor axis (polar radius) in meters.
    e2 : float
        First eccentricity squared: e² = (a² - b²) / a²
    ep2 : float
        Second eccentricity squared: e'² = (a² - b²) / b²

    Notes
    -----
    Two ellipsoids are equal when their semi-major axes differ by less than
    1e-4 m and their squared eccentricities by less than 1e-11, whatever
    their identifiers.
    """
    a: float
    f: float
    identifier: Identifier = field(default=None)

    def __post_init__(self):
        if not np.isfinite(self.a) or self.a <= 0:
            raise MalformedDefinitionError(f"Semi-major axis must be positive, got {self.a}")
        if not 0 <= self.f < 1:
            raise MalformedDefinitionError(f"Flattening must be in [0, 1), got {self.f}")
        object.__setattr__(self, "a", float(self.a))
        object.__setattr__(self, "f", float(self.f))
        if self.identifier is None:
            object.__setattr__(self, "identifier", Identifier.local("Ellipsoid", "Ellipsoid"))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def create_flattened_sphere(
        cls,
        a: float,
        inverse_flattening: float,
        identifier: Optional[Identifier] = None
    ) -> 'Ellipsoid':
        """Ellipsoid from semi-major axis and inverse flattening.

        An inverse flattening of 0 or infinity defines a sphere. A well-known
        ellipsoid equal to the result is returned instead of a new instance.
        """
        if inverse_flattening == 0 or np.isinf(inverse_flattening):
            f = 0.0
        elif inverse_flattening < 1:
            raise MalformedDefinitionError(
                f"Inverse flattening must be >= 1, got {inverse_flattening}"
            )
        else:
            f = 1.0 / inverse_flattening
        return _deduplicate(cls(a, f, identifier))

    @classmethod
    def create_from_semi_minor_axis(
        cls,
        a: float,
        b: float,
        identifier: Optional[Identifier] = None
    ) -> 'Ellipsoid':
        if not 0 < b <= a:
            raise MalformedDefinitionError(f"Semi-minor axis must be in (0, a], got {b}")
        return _deduplicate(cls(a, (a - b) / a, identifier))

    @classmethod
    def create_from_eccentricity(
        cls,
        a: float,
        e: float,
        identifier: Optional[Identifier] = None
    ) -> 'Ellipsoid':
        if not 0 <= e < 1:
            raise MalformedDefinitionError(f"Eccentricity must be in [0, 1), got {e}")
        return _deduplicate(cls(a, 1.0 - np.sqrt(1.0 - e * e), identifier))

    # ------------------------------------------------------------------
    # Defining and derived parameters
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.identifier.name

    @property
    def b(self) -> float:
        """Semi-minor axis in meters."""
        return self.a * (1 - self.f)

    @property
    def inverse_flattening(self) -> float:
        """1/f, infinite for a sphere."""
        return np.inf if self.f == 0 else 1.0 / self.f

    @property
    def e2(self) -> float:
        """First eccentricity squared."""
        return self.f * (2 - self.f)

    @property
    def e(self) -> float:
        """First eccentricity."""
        return float(np.sqrt(self.e2))

    @property
    def ep2(self) -> float:
        """Second eccentricity squared."""
        return self.e2 / (1 - self.e2)

    def is_sphere(self) -> bool:
        return self.f == 0

    # ------------------------------------------------------------------
    # Radii of curvature
    # ------------------------------------------------------------------

    def radius_of_curvature_meridian(self, latitude_rad: float) -> float:
        """Radius of curvature in the meridian plane.

        Notes
        -----
        M = a(1 - e²) / (1 - e² sin²φ)^(3/2)
        """
        sin_lat = np.sin(latitude_rad)
        denominator = (1 - self.e2 * sin_lat**2) ** 1.5
        return float(self.a * (1 - self.e2) / denominator)

    def radius_of_curvature_prime_vertical(self, latitude_rad: float) -> float:
        """Radius of curvature in the prime vertical.

        Notes
        -----
        N = a / (1 - e² sin²φ)^(1/2)

        At the equator (φ=0): N = a
        """
        sin_lat = np.sin(latitude_rad)
        return float(self.a / np.sqrt(1 - self.e2 * sin_lat**2))

    # ------------------------------------------------------------------
    # Isometric latitude
    # ------------------------------------------------------------------

    def isometric_latitude(self, latitude_rad: float) -> float:
        """Isometric latitude L(φ) = atanh(sin φ) - e·atanh(e·sin φ).

        Infinite at the poles.
        """
        sin_lat = np.sin(latitude_rad)
        e = self.e
        return float(np.arctanh(sin_lat) - e * np.arctanh(e * sin_lat))

    def latitude(
        self,
        isometric_latitude: float,
        epsilon: float = GeodeticConstants.ISOMETRIC_LATITUDE_EPSILON.value,
        max_iterations: int = GeodeticConstants.MAX_ITERATIONS
    ) -> float:
        """Latitude recovered from an isometric latitude.

        Fixed point of φ = 2·atan(((1 + e sinφ)/(1 - e sinφ))^(e/2)·exp(L)) - π/2,
        seeded with the spherical value.

        Raises
        ------
        ConvergenceError
            If consecutive latitudes still differ by more than ``epsilon``
            after ``max_iterations`` iterations.
        """
        if np.isinf(isometric_latitude):
            return float(np.copysign(np.pi / 2, isometric_latitude))
        exp_l = np.exp(isometric_latitude)
        lat = 2 * np.arctan(exp_l) - np.pi / 2
        if self.f == 0:
            return float(lat)
        e = self.e
        half_e = e / 2
        delta = np.inf
        for _ in range(max_iterations):
            e_sin = e * np.sin(lat)
            new_lat = 2 * np.arctan(((1 + e_sin) / (1 - e_sin)) ** half_e * exp_l) - np.pi / 2
            delta = abs(new_lat - lat)
            lat = new_lat
            if delta < epsilon:
                return float(lat)
        raise ConvergenceError("Latitude from isometric latitude", max_iterations, delta)

    # ------------------------------------------------------------------
    # Meridian arc and Krüger series
    # ------------------------------------------------------------------

    def meridian_arc_length(self, latitude_rad: float) -> float:
        """Distance along the meridian from the equator, in meters.

        Series expansion to e⁶ (Snyder, eq. 3-21).
        """
        e2 = self.e2
        e4 = e2 * e2
        e6 = e4 * e2
        return float(self.a * (
            (1 - e2 / 4 - 3 * e4 / 64 - 5 * e6 / 256) * latitude_rad
            - (3 * e2 / 8 + 3 * e4 / 32 + 45 * e6 / 1024) * np.sin(2 * latitude_rad)
            + (15 * e4 / 256 + 45 * e6 / 1024) * np.sin(4 * latitude_rad)
            - (35 * e6 / 3072) * np.sin(6 * latitude_rad)
        ))

    @property
    def third_flattening(self) -> float:
        """n = f / (2 - f)"""
        return self.f / (2 - self.f)

    @cached_property
    def rectifying_radius(self) -> float:
        """A = a/(1+n)·(1 + n²/4 + n⁴/64 + n⁶/256)"""
        n = self.third_flattening
        n2 = n * n
        return self.a / (1 + n) * (1 + n2 / 4 + n2 * n2 / 64 + n2 * n2 * n2 / 256)

    @cached_property
    def kruger_alpha(self) -> Tuple[float, float, float, float]:
        """Forward (geographic to Gauss-Krüger) series coefficients α₁..α₄."""
        n = self.third_flattening
        n2, n3, n4 = n**2, n**3, n**4
        return (
            n / 2 - 2 * n2 / 3 + 5 * n3 / 16 + 41 * n4 / 180,
            13 * n2 / 48 - 3 * n3 / 5 + 557 * n4 / 1440,
            61 * n3 / 240 - 103 * n4 / 140,
            49561 * n4 / 161280,
        )

    @cached_property
    def kruger_beta(self) -> Tuple[float, float, float, float]:
        """Inverse series coefficients β₁..β₄."""
        n = self.third_flattening
        n2, n3, n4 = n**2, n**3, n**4
        return (
            n / 2 - 2 * n2 / 3 + 37 * n3 / 96 - n4 / 360,
            n2 / 48 + n3 / 15 - 437 * n4 / 1440,
            17 * n3 / 480 - 37 * n4 / 840,
            4397 * n4 / 161280,
        )

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Ellipsoid):
            return NotImplemented
        return (
            abs(self.a - other.a) < GeodeticConstants.SEMI_MAJOR_AXIS_TOLERANCE.value
            and abs(self.e2 - other.e2) < GeodeticConstants.ECCENTRICITY_SQUARED_TOLERANCE.value
        )

    def __hash__(self) -> int:
        return hash(round(self.a))

    def __repr__(self) -> str:
        return f"Ellipsoid({self.name!r}, a={self.a}, 1/f={self.inverse_flattening})"


def _ellipsoid(code: int, name: str, a: float, inverse_flattening: float) -> Ellipsoid:
    f = 0.0 if inverse_flattening == 0 else 1.0 / inverse_flattening
    return Ellipsoid(a, f, Identifier("EPSG", code, name))


# Well-known ellipsoids
WGS84 = _ellipsoid(
    7030, "WGS 84",
    GeodeticConstants.WGS84_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.WGS84_INVERSE_FLATTENING.value
)
GRS80 = _ellipsoid(
    7019, "GRS 1980",
    GeodeticConstants.GRS80_SEMI_MAJOR_AXIS.value,
    GeodeticConstants.GRS80_INVERSE_FLATTENING.value
)
INTERNATIONAL1924 = _ellipsoid(7022, "International 1924", 6378388.0, 297.0)
CLARKE1866 = Ellipsoid(
    6378206.4, (6378206.4 - 6356583.8) / 6378206.4,
    Identifier("EPSG", 7008, "Clarke 1866")
)
CLARKE1880IGN = Ellipsoid(
    6378249.2, (6378249.2 - 6356515.0) / 6378249.2,
    Identifier("EPSG", 7011, "Clarke 1880 (IGN)")
)
CLARKE1880RGS = _ellipsoid(7012, "Clarke 1880 (RGS)", 6378249.145, 293.465)
BESSEL1841 = _ellipsoid(7004, "Bessel 1841", 6377397.155, 299.1528128)
AIRY = _ellipsoid(7001, "Airy 1830", 6377563.396, 299.3249646)
KRASSOWSKI = _ellipsoid(7024, "Krassowsky 1940", 6378245.0, 298.3)
SPHERE = _ellipsoid(7035, "Sphere", 6371000.0, 0)

WELL_KNOWN_ELLIPSOIDS: List[Ellipsoid] = [
    WGS84, GRS80, INTERNATIONAL1924, CLARKE1866, CLARKE1880IGN,
    CLARKE1880RGS, BESSEL1841, AIRY, KRASSOWSKI, SPHERE,
]


def _deduplicate(ellipsoid: Ellipsoid) -> Ellipsoid:
    for known in WELL_KNOWN_ELLIPSOIDS:
        if known == ellipsoid:
            return known
    return ellipsoid
