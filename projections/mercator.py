"""
Mercator Projections.

Cylindrical conformal projection with the cylinder tangent to the equator
(1SP, scale factor k₀ on the equator) or secant along two parallels ±φ₁
(2SP, unit scale on the latitude of true scale).

Notes
-----
With L the isometric latitude:

    x = FE + a·k₀·(λ - λ₀)
    y = FN + a·k₀·L(φ)

For the 2SP variant k₀ = cos φ₁ / √(1 - e² sin² φ₁).

References
----------
- IOGP Guidance Note 7-2, section 3.2.3 (EPSG 9804, 9805)
- Snyder (1987), chapter 7
"""

from abc import abstractmethod
from typing import Mapping, Tuple

import numpy as np

from common.exceptions import IllegalCoordinateError
from common.identifiers import Identifier
from common.units import DEGREE, METER, UNIT, Measure
from datum.ellipsoid import Ellipsoid
from projections.base import Orientation, Parameter, Projection, Property, Surface, degrees


class _Mercator(Projection):
    """Shared forward and inverse of the normal aspect Mercator."""

    surface = Surface.CYLINDRICAL
    projection_property = Property.CONFORMAL

    @abstractmethod
    def _cylinder_scale(self) -> float:
        """Scale factor k₀ of the cylinder on the equator."""

    def to_projected(self, lat_rad: float, lon_rad: float) -> Tuple[float, float]:
        if abs(lat_rad) >= np.pi / 2:
            raise IllegalCoordinateError(f"{self.name} cannot project the poles")
        ak0 = self.ellipsoid.a * self._cylinder_scale()
        x = self.false_easting + ak0 * (lon_rad - self.central_meridian)
        y = self.false_northing + ak0 * self.ellipsoid.isometric_latitude(lat_rad)
        return float(x), float(y)

    def to_geodetic(self, x: float, y: float) -> Tuple[float, float]:
        ak0 = self.ellipsoid.a * self._cylinder_scale()
        lon = self.central_meridian + (x - self.false_easting) / ak0
        lat = self.ellipsoid.latitude((y - self.false_northing) / ak0)
        return float(lat), float(lon)


class Mercator1SP(_Mercator):
    """Mercator with a scale factor on the equator (EPSG 9804)."""

    orientation = Orientation.TANGENT

    def __init__(self, ellipsoid: Ellipsoid, parameters: Mapping[str, Measure], identifier: Identifier = None):
        super().__init__(
            identifier or Identifier("EPSG", 9804, "Mercator (variant A)", "Mercator1SP"),
            ellipsoid,
            parameters
        )

    @classmethod
    def create(
        cls,
        ellipsoid: Ellipsoid,
        scale_factor: float,
        central_meridian: float,
        false_easting: float,
        false_northing: float,
        angle_unit=DEGREE,
        length_unit=METER
    ) -> 'Mercator1SP':
        return cls(ellipsoid, {
            Parameter.CENTRAL_MERIDIAN: Measure(central_meridian, angle_unit),
            Parameter.SCALE_FACTOR: Measure(scale_factor, UNIT),
            Parameter.FALSE_EASTING: Measure(false_easting, length_unit),
            Parameter.FALSE_NORTHING: Measure(false_northing, length_unit),
        })

    def _cylinder_scale(self) -> float:
        return self.scale_factor

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=merc +lon_0={degrees(self.central_meridian)!r} "
            f"+k_0={self.scale_factor!r} " + self._ellipsoid_proj4()
        )


class Mercator2SP(_Mercator):
    """Mercator secant along the latitude of true scale (EPSG 9805)."""

    orientation = Orientation.SECANT

    def __init__(self, ellipsoid: Ellipsoid, parameters: Mapping[str, Measure], identifier: Identifier = None):
        super().__init__(
            identifier or Identifier("EPSG", 9805, "Mercator (variant B)", "Mercator2SP"),
            ellipsoid,
            parameters
        )
        lat1 = self.latitude_of_true_scale
        self.k0 = float(
            np.cos(lat1) / np.sqrt(1 - ellipsoid.e2 * np.sin(lat1)**2)
        )

    @classmethod
    def create(
        cls,
        ellipsoid: Ellipsoid,
        latitude_of_true_scale: float,
        central_meridian: float,
        false_easting: float,
        false_northing: float,
        angle_unit=DEGREE,
        length_unit=METER
    ) -> 'Mercator2SP':
        return cls(ellipsoid, {
            Parameter.LATITUDE_OF_TRUE_SCALE: Measure(latitude_of_true_scale, angle_unit),
            Parameter.CENTRAL_MERIDIAN: Measure(central_meridian, angle_unit),
            Parameter.FALSE_EASTING: Measure(false_easting, length_unit),
            Parameter.FALSE_NORTHING: Measure(false_northing, length_unit),
        })

    def _cylinder_scale(self) -> float:
        return self.k0

    @property
    def proj4_string(self) -> str:
        return (
            f"+proj=merc +lat_ts={degrees(self.latitude_of_true_scale)!r} "
            f"+lon_0={degrees(self.central_meridian)!r} " + self._ellipsoid_proj4()
        )
