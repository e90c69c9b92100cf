"""
Lambert Conic Conformal Projections.

A conformal projection suitable for mid-latitude regions that extend
primarily east-west. It is the legal projection of France (Lambert zones on
the NTF datum, Lambert 93 on RGF93).

Scientific Context
------------------
The ellipsoid is mapped on a cone whose apex lies on the polar axis. With L
the isometric latitude, a point projects at distance R = C·exp(-n·L) from
the apex and at angle n·(λ - λ₀) from the central meridian.

- One standard parallel (1SP): n = sin φ₀ and the scale factor k₀ applies
  along the parallel of origin.
- Two standard parallels (2SP): n and C are chosen so the scale is exactly
  1 along both parallels.

References
----------
- IGN NT/G 71: Projection cartographique conique conforme de Lambert
  (ALG0003, ALG0004, ALG0019, ALG0054)
- IOGP Guidance Note 7-2, sections 3.2.1.1 and 3.2.1.2
"""

from typing import Mapping, Tuple

import numpy as np

from common.identifiers import Identifier
from common.units import DEGREE, GRAD, METER, UNIT, Measure
from datum.ellipsoid import CLARKE1880IGN, GRS80, Ellipsoid
from projections.base import Orientation, Parameter, Projection, Property, Surface, degrees


class LambertConicConformal1SP(Projection):
    """Lambert Conic Conformal with one standard parallel (EPSG 9801).

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid being projected.
    parameters : mapping of str to Measure
        latitude_of_origin, central_meridian, scale_factor, false_easting,
        false_northing.
    """

    surface = Surface.CONICAL
    projection_property = Property.CONFORMAL
    orientation = Orientation.TANGENT

    def __init__(self, ellipsoid: Ellipsoid, parameters: Mapping[str, Measure], identifier: Identifier = None):
        super().__init__(
            identifier or Identifier("EPSG", 9801, "Lambert Conic Conformal (1SP)", "LCC1SP"),
            ellipsoid,
            parameters
        )
        lat0 = self.latitude_of_origin
        k0 = self.scale_factor
        N0 = ellipsoid.radius_of_curvature_prime_vertical(lat0)

        self.n = float(np.sin(lat0))
        self.C = float(k0 * N0 * np.exp(self.n * ellipsoid.isometric_latitude(lat0)) / np.tan(lat0))
        self.xs = self.false_easting
        self.ys = float(self.false_northing + k0 * N0 / np.tan(lat0))

    @classmethod
    def create(
        cls,
        ellipsoid: Ellipsoid,
        latitude_of_origin: float,
        scale_factor: float,
        central_meridian: float,
        false_easting: float,
        false_northing: float,
        angle_unit=DEGREE,
        length_unit=METER
    ) -> 'LambertConicConformal1SP':
        return cls(ellipsoid, {
            Parameter.LATITUDE_OF_ORIGIN: Measure(latitude_of_origin, angle_unit),
            Parameter.CENTRAL_MERIDIAN: Measure(central_meridian, angle_unit),
            Parameter.SCALE_FACTOR: Measure(scale_factor, UNIT),
            Parameter.FALSE_EASTING: Measure(false_easting, length_unit),
            Parameter.FALSE_NORTHING: Measure(false_northing, length_unit),
        })

    @property
    def proj4_string(self) -> str:
        lat0 = degrees(self.latitude_of_origin)
        return (
            f"+proj=lcc +lat_1={lat0!r} +lat_0={lat0!r} "
            f"+lon_0={degrees(self.central_meridian)!r} +k_0={self.scale_factor!r} "
            + self._ellipsoid_proj4()
        )

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        return _cone_forward(self, lat_rad, lon_rad)

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        return _cone_inverse(self, x, y)


class LambertConicConformal2SP(Projection):
    """Lambert Conic Conformal with two standard parallels (EPSG 9802).

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid being projected.
    parameters : mapping of str to Measure
        latitude_of_origin, central_meridian, standard_parallel_1,
        standard_parallel_2, false_easting, false_northing.

    Notes
    -----
    With m(φ) = cos φ / √(1 - e² sin² φ):

        n  = ln(m₁ / m₂) / (L(φ₂) - L(φ₁))
        C  = a·m₁·exp(n·L(φ₁)) / n
        ys = FN + C·exp(-n·L(φ₀))

    A scale factor other than 1 multiplies C.
    """

    surface = Surface.CONICAL
    projection_property = Property.CONFORMAL
    orientation = Orientation.SECANT

    def __init__(self, ellipsoid: Ellipsoid, parameters: Mapping[str, Measure], identifier: Identifier = None):
        super().__init__(
            identifier or Identifier("EPSG", 9802, "Lambert Conic Conformal (2SP)", "LCC2SP"),
            ellipsoid,
            parameters
        )
        lat1 = self.standard_parallel_1
        lat2 = self.standard_parallel_2
        e2 = ellipsoid.e2

        m1 = np.cos(lat1) / np.sqrt(1 - e2 * np.sin(lat1)**2)
        m2 = np.cos(lat2) / np.sqrt(1 - e2 * np.sin(lat2)**2)
        L1 = ellipsoid.isometric_latitude(lat1)
        L2 = ellipsoid.isometric_latitude(lat2)

        if abs(lat1 - lat2) < 1e-12:
            # Degenerates to the tangent cone
            n = np.sin(lat1)
        else:
            n = np.log(m1 / m2) / (L2 - L1)

        self.n = float(n)
        self.C = float(self.scale_factor * ellipsoid.a * m1 * np.exp(self.n * L1) / self.n)
        self.xs = self.false_easting
        self.ys = float(
            self.false_northing
            + self.C * np.exp(-self.n * ellipsoid.isometric_latitude(self.latitude_of_origin))
        )

    @classmethod
    def create(
        cls,
        ellipsoid: Ellipsoid,
        latitude_of_origin: float,
        standard_parallel_1: float,
        standard_parallel_2: float,
        central_meridian: float,
        false_easting: float,
        false_northing: float,
        angle_unit=DEGREE,
        length_unit=METER
    ) -> 'LambertConicConformal2SP':
        return cls(ellipsoid, {
            Parameter.LATITUDE_OF_ORIGIN: Measure(latitude_of_origin, angle_unit),
            Parameter.STANDARD_PARALLEL_1: Measure(standard_parallel_1, angle_unit),
            Parameter.STANDARD_PARALLEL_2: Measure(standard_parallel_2, angle_unit),
            Parameter.CENTRAL_MERIDIAN: Measure(central_meridian, angle_unit),
            Parameter.FALSE_EASTING: Measure(false_easting, length_unit),
            Parameter.FALSE_NORTHING: Measure(false_northing, length_unit),
        })

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=lcc +lat_1={degrees(self.standard_parallel_1)!r} "
            f"+lat_2={degrees(self.standard_parallel_2)!r} "
            f"+lat_0={degrees(self.latitude_of_origin)!r} "
            f"+lon_0={degrees(self.central_meridian)!r} +k_0={self.scale_factor!r} "
            + self._ellipsoid_proj4()
        )

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        return _cone_forward(self, lat_rad, lon_rad)

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        return _cone_inverse(self, x, y)


def _cone_forward(p, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
    R = p.C * np.exp(-p.n * p.ellipsoid.isometric_latitude(lat_rad))
    gamma = p.n * (lon_rad - p.central_meridian)
    x = p.xs + R * np.sin(gamma)
    y = p.ys - R * np.cos(gamma)
    return float(x), float(y)


def _cone_inverse(p, x: float, y: float) -> Tuple[float, float]:
    dx = x - p.xs
    dy = p.ys - y
    R = np.hypot(dx, dy)
    sign = np.sign(p.n)
    gamma = np.arctan2(sign * dx, sign * dy)
    lon = p.central_meridian + gamma / p.n
    if R == 0.0:
        lat = np.copysign(np.pi / 2, p.n)
    else:
        lat = p.ellipsoid.latitude(-np.log(abs(R / p.C)) / p.n)
    return float(lat), float(lon)


# Lambert zones of France (NTF datum, longitudes from the Paris meridian)
LAMBERT1 = LambertConicConformal1SP.create(
    CLARKE1880IGN, 55.0, 0.99987734, 0.0, 600000.0, 200000.0, angle_unit=GRAD)
LAMBERT2 = LambertConicConformal1SP.create(
    CLARKE1880IGN, 52.0, 0.99987742, 0.0, 600000.0, 200000.0, angle_unit=GRAD)
LAMBERT3 = LambertConicConformal1SP.create(
    CLARKE1880IGN, 49.0, 0.99987750, 0.0, 600000.0, 200000.0, angle_unit=GRAD)
LAMBERT4 = LambertConicConformal1SP.create(
    CLARKE1880IGN, 46.85, 0.99994471, 0.0, 234.358, 185861.369, angle_unit=GRAD)
LAMBERT2E = LambertConicConformal1SP.create(
    CLARKE1880IGN, 52.0, 0.99987742, 0.0, 600000.0, 2200000.0, angle_unit=GRAD)

# Lambert 93 (RGF93 datum), the 1SP equivalent of the 44°/49° secant cone
LAMBERT93 = LambertConicConformal1SP.create(
    GRS80, 46.5, 0.9990510286374, 3.0, 700000.0, 6600000.0)
