"""
Geographic <-> Geocentric Conversions.

Geographic coordinates (latitude, longitude, ellipsoidal height) on an
ellipsoid are converted to Earth-Centered Earth-Fixed cartesian coordinates
and back.

Notes
-----
The ECEF frame has:
- Origin at the center of the ellipsoid
- X-axis through the prime meridian at the equator
- Y-axis through 90°E at the equator
- Z-axis through the North Pole

References
----------
- IGN NT/G 80, ALG0009 (geographic to cartesian) and ALG0012 (cartesian
  to geographic, Heiskanen-Moritz iteration)
- Hofmann-Wellenhof, B. et al. (2008). GNSS. Section 5.6.
"""

from typing import TYPE_CHECKING, Any, Tuple

import numpy as np

from common.constants import GeodeticConstants
from common.exceptions import ConvergenceError
from common.identifiers import Identifier
from common.types import Coordinate
from operations.base import CoordinateOperation

if TYPE_CHECKING:
    from datum.ellipsoid import Ellipsoid


class Geographic2Geocentric(CoordinateOperation):
    """Closed-form conversion (lat, lon[, h]) radians/meters -> (X, Y, Z) meters.

    A missing height is taken as 0.
    """

    def __init__(self, ellipsoid: 'Ellipsoid'):
        self.ellipsoid = ellipsoid
        super().__init__(Identifier(
            "EPSG", 9602, f"Geographic to geocentric ({ellipsoid.name})", "Geo2Geocentric"
        ))

    def _transform(self, coord: Coordinate) -> Coordinate:
        lat, lon = coord[0], coord[1]
        h = coord[2] if len(coord) > 2 else 0.0

        sin_lat = np.sin(lat)
        cos_lat = np.cos(lat)
        N = self.ellipsoid.radius_of_curvature_prime_vertical(lat)

        X = (N + h) * cos_lat * np.cos(lon)
        Y = (N + h) * cos_lat * np.sin(lon)
        Z = (N * (1 - self.ellipsoid.e2) + h) * sin_lat
        return [float(X), float(Y), float(Z)]

    def inverse(self) -> 'Geocentric2Geographic':
        return Geocentric2Geographic(self.ellipsoid)

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.ellipsoid,)


class Geocentric2Geographic(CoordinateOperation):
    """Iterative conversion (X, Y, Z) meters -> (lat, lon, h) radians/meters.

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Reference ellipsoid.
    epsilon : float
        Stop criterion on consecutive latitudes, in radians (1e-11 rad is
        about 0.1 mm on the ellipsoid).
    max_iterations : int
        Iteration bound; exceeding it raises :class:`ConvergenceError`.

    Notes
    -----
    With ρ = √(X² + Y²) and r = √(X² + Y² + Z²), the latitude is seeded with

        φ₀ = atan(Z / (ρ(1 - a·e²/r)))

    and iterated as

        φₙ₊₁ = atan((Z/ρ) / (1 - a·e²·cos φₙ / (ρ·√(1 - e² sin² φₙ))))

    Points on the polar axis (ρ = 0) are resolved in closed form.
    """

    dimensions = (3,)

    def __init__(
        self,
        ellipsoid: 'Ellipsoid',
        epsilon: float = GeodeticConstants.GEOCENTRIC_LATITUDE_EPSILON.value,
        max_iterations: int = GeodeticConstants.MAX_ITERATIONS
    ):
        self.ellipsoid = ellipsoid
        self.epsilon = epsilon
        self.max_iterations = max_iterations
        super().__init__(
            Identifier("EPSG", 9602, f"Geocentric to geographic ({ellipsoid.name})", "Geocentric2Geo"),
            GeodeticConstants.GEOCENTRIC_CONVERSION_PRECISION.value
        )

    def _transform(self, coord: Coordinate) -> Coordinate:
        X, Y, Z = coord
        a = self.ellipsoid.a
        e2 = self.ellipsoid.e2

        # Longitude is independent of the iteration
        lon = np.arctan2(Y, X)

        # Distance from the polar axis
        rho = np.hypot(X, Y)

        # Handle polar singularity
        if rho == 0.0:
            if Z == 0.0:
                return [0.0, float(lon), float(-self.ellipsoid.b)]
            lat = np.copysign(np.pi / 2, Z)
            return [float(lat), float(lon), float(abs(Z) - self.ellipsoid.b)]

        r = np.sqrt(X * X + Y * Y + Z * Z)
        lat = np.arctan(Z / (rho * (1 - a * e2 / r)))

        delta = np.inf
        for _ in range(self.max_iterations):
            sin_lat = np.sin(lat)
            new_lat = np.arctan(
                (Z / rho) / (1 - a * e2 * np.cos(lat) / (rho * np.sqrt(1 - e2 * sin_lat**2)))
            )
            delta = abs(new_lat - lat)
            lat = new_lat
            if delta <= self.epsilon:
                break
        else:
            raise ConvergenceError("Geocentric to geographic conversion", self.max_iterations, delta)

        sin_lat = np.sin(lat)
        h = rho / np.cos(lat) - a / np.sqrt(1 - e2 * sin_lat**2)
        return [float(lat), float(lon), float(h)]

    def inverse(self) -> Geographic2Geocentric:
        return Geographic2Geocentric(self.ellipsoid)

    def _parameters(self) -> Tuple[Any, ...]:
        return (self.ellipsoid, self.epsilon, self.max_iterations)
