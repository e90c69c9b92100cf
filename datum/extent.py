"""
Geographic extents (area of validity of datums and grids).
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GeographicExtent:
    """A latitude/longitude box in decimal degrees.

    Attributes
    ----------
    name : str
        Name of the area.
    south, north : float
        Bounding latitudes.
    west, east : float
        Bounding longitudes. ``west > east`` denotes a box crossing the
        longitude wrap (e.g. the antimeridian).
    modulo : float
        Longitude period, 360 for degrees.
    """
    name: str = field(compare=False)
    south: float
    north: float
    west: float
    east: float
    modulo: float = 360.0

    def _normalize(self, lon: float) -> float:
        half = self.modulo / 2
        lon = (lon + half) % self.modulo - half
        # keep +180 rather than folding it to -180
        if lon == -half and self.east == half:
            return half
        return lon

    def is_inside(self, lat: float, lon: float) -> bool:
        """True when (lat, lon) in degrees lies in the box, bounds included."""
        if not self.south <= lat <= self.north:
            return False
        lon = self._normalize(lon)
        west = self._normalize(self.west) if abs(self.west) > self.modulo / 2 else self.west
        east = self._normalize(self.east) if abs(self.east) > self.modulo / 2 else self.east
        if west <= east:
            return west <= lon <= east
        return lon >= west or lon <= east


WORLD = GeographicExtent("World", -90.0, 90.0, -180.0, 180.0)
