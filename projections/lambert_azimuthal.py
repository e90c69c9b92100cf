"""
Lambert Azimuthal Equal-Area Projection.

Scientific Context
------------------
The ellipsoid is first mapped onto the authalic sphere of radius Rq (same
surface area) through the authalic latitude β, then projected azimuthally
about the origin with the spherical equal-area formula. Area is preserved
everywhere; shape distortion grows with distance from the origin.

References
----------
- IOGP Guidance Note 7-2, section 3.4.2 (EPSG 9820, oblique aspect)
- Snyder (1987), chapter 24
"""

from typing import Mapping, Tuple

import numpy as np

from common.identifiers import Identifier
from common.units import DEGREE, METER, Measure
from datum.ellipsoid import Ellipsoid
from projections.base import Orientation, Parameter, Projection, Property, Surface, degrees


def _authalic_q(ellipsoid: Ellipsoid, lat_rad: float) -> float:
    """q(φ), proportional to the area between the equator and φ."""
    sin_lat = np.sin(lat_rad)
    if ellipsoid.is_sphere():
        return float(2 * sin_lat)
    e = ellipsoid.e
    e2 = ellipsoid.e2
    return float((1 - e2) * (
        sin_lat / (1 - e2 * sin_lat**2)
        - np.log((1 - e * sin_lat) / (1 + e * sin_lat)) / (2 * e)
    ))


class LambertAzimuthalEqualArea(Projection):
    """Lambert Azimuthal Equal-Area, oblique ellipsoidal form (EPSG 9820).

    Parameters
    ----------
    ellipsoid : Ellipsoid
        Ellipsoid being projected.
    parameters : mapping of str to Measure
        latitude_of_origin, central_meridian, false_easting, false_northing.

    Notes
    -----
    At the polar aspects D is taken as 1, which reduces the oblique
    formulas to ρ = a·√(qP - q).
    """

    surface = Surface.AZIMUTHAL
    projection_property = Property.EQUAL_AREA
    orientation = Orientation.TANGENT

    def __init__(self, ellipsoid: Ellipsoid, parameters: Mapping[str, Measure], identifier: Identifier = None):
        super().__init__(
            identifier or Identifier("EPSG", 9820, "Lambert Azimuthal Equal Area", "LAEA"),
            ellipsoid,
            parameters
        )
        lat0 = self.latitude_of_origin
        e2 = ellipsoid.e2
        self.qp = _authalic_q(ellipsoid, np.pi / 2)
        self.beta0 = float(np.arcsin(np.clip(_authalic_q(ellipsoid, lat0) / self.qp, -1.0, 1.0)))
        self.Rq = float(ellipsoid.a * np.sqrt(self.qp / 2))
        if abs(np.cos(self.beta0)) < 1e-12:
            self.D = 1.0
        else:
            self.D = float(
                ellipsoid.a * (np.cos(lat0) / np.sqrt(1 - e2 * np.sin(lat0)**2))
                / (self.Rq * np.cos(self.beta0))
            )

    @classmethod
    def create(
        cls,
        ellipsoid: Ellipsoid,
        latitude_of_origin: float,
        central_meridian: float,
        false_easting: float,
        false_northing: float,
        angle_unit=DEGREE,
        length_unit=METER
    ) -> 'LambertAzimuthalEqualArea':
        return cls(ellipsoid, {
            Parameter.LATITUDE_OF_ORIGIN: Measure(latitude_of_origin, angle_unit),
            Parameter.CENTRAL_MERIDIAN: Measure(central_meridian, angle_unit),
            Parameter.FALSE_EASTING: Measure(false_easting, length_unit),
            Parameter.FALSE_NORTHING: Measure(false_northing, length_unit),
        })

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=laea +lat_0={degrees(self.latitude_of_origin)!r} "
            f"+lon_0={degrees(self.central_meridian)!r} " + self._ellipsoid_proj4()
        )

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        dlon = lon_rad - self.central_meridian
        beta = np.arcsin(np.clip(_authalic_q(self.ellipsoid, lat_rad) / self.qp, -1.0, 1.0))
        sin_b0, cos_b0 = np.sin(self.beta0), np.cos(self.beta0)

        denominator = 1 + sin_b0 * np.sin(beta) + cos_b0 * np.cos(beta) * np.cos(dlon)
        # Antipode of the origin
        B = self.Rq * np.sqrt(2 / denominator) if denominator > 0 else 2 * self.Rq

        x = self.false_easting + B * self.D * np.cos(beta) * np.sin(dlon)
        y = self.false_northing + (B / self.D) * (
            cos_b0 * np.sin(beta) - sin_b0 * np.cos(beta) * np.cos(dlon)
        )
        return float(x), float(y)

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        dx = x - self.false_easting
        dy = y - self.false_northing
        D = self.D
        rho = np.hypot(dx / D, D * dy)
        if rho == 0.0:
            return self.latitude_of_origin, self.central_meridian

        sin_b0, cos_b0 = np.sin(self.beta0), np.cos(self.beta0)
        C = 2 * np.arcsin(np.clip(rho / (2 * self.Rq), -1.0, 1.0))
        beta = np.arcsin(np.clip(
            np.cos(C) * sin_b0 + D * dy * np.sin(C) * cos_b0 / rho, -1.0, 1.0
        ))
        lon = self.central_meridian + np.arctan2(
            dx * np.sin(C),
            D * rho * cos_b0 * np.cos(C) - D * D * dy * sin_b0 * np.sin(C)
        )

        # Authalic to geodetic latitude
        e2 = self.ellipsoid.e2
        e4 = e2 * e2
        e6 = e4 * e2
        lat = (
            beta
            + (e2 / 3 + 31 * e4 / 180 + 517 * e6 / 5040) * np.sin(2 * beta)
            + (23 * e4 / 360 + 251 * e6 / 3780) * np.sin(4 * beta)
            + (761 * e6 / 45360) * np.sin(6 * beta)
        )
        return float(lat), float(lon)
