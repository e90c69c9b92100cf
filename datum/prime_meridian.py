"""
Prime Meridians.

The prime meridian fixes the origin of longitudes of a datum. Its longitude
is stored in decimal degrees from Greenwich (the unit of the EPSG registry)
and exposed in radians for computation.
"""

from typing import Dict, List, Optional

import numpy as np

from common.constants import GeodeticConstants
from common.identifiers import Identifier
from common.units import DEGREE, GRAD, RADIAN, Unit


class PrimeMeridian:
    """Origin of longitudes.

    Parameters
    ----------
    identifier : Identifier
        Authority identifier.
    longitude_deg : float
        Longitude from Greenwich in decimal degrees, positive east.

    Notes
    -----
    Two prime meridians are equal when their codes match, when their names
    match (case-insensitive), or when their longitudes differ by less than
    1e-11 rad.
    """

    def __init__(self, identifier: Identifier, longitude_deg: float):
        self._identifier = identifier
        self._longitude_deg = float(longitude_deg)

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def name(self) -> str:
        return self._identifier.name

    @property
    def longitude_from_greenwich(self) -> float:
        """Longitude in radians."""
        return float(np.radians(self._longitude_deg))

    @property
    def longitude_deg(self) -> float:
        return self._longitude_deg

    def longitude_in(self, unit: Unit) -> float:
        return DEGREE.convert(self._longitude_deg, unit)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create_from_decimal_degrees(
        cls,
        longitude_deg: float,
        identifier: Optional[Identifier] = None
    ) -> 'PrimeMeridian':
        """Prime meridian at the given longitude.

        The matching well-known meridian is returned when one exists.
        """
        candidate = cls(
            identifier or Identifier.local("PrimeMeridian", f"Meridian {longitude_deg}"),
            longitude_deg
        )
        for known in WELL_KNOWN_MERIDIANS:
            if abs(known.longitude_from_greenwich - candidate.longitude_from_greenwich) < \
                    GeodeticConstants.PRIME_MERIDIAN_TOLERANCE.value:
                return known
        return candidate

    @classmethod
    def create_from_radians(cls, longitude_rad: float, identifier: Optional[Identifier] = None) -> 'PrimeMeridian':
        return cls.create_from_decimal_degrees(RADIAN.convert(longitude_rad, DEGREE), identifier)

    @classmethod
    def create_from_grads(cls, longitude_grad: float, identifier: Optional[Identifier] = None) -> 'PrimeMeridian':
        return cls.create_from_decimal_degrees(GRAD.convert(longitude_grad, DEGREE), identifier)

    @classmethod
    def from_name(cls, name: str) -> Optional['PrimeMeridian']:
        """Well-known meridian by name or EPSG code, or None."""
        return _MERIDIANS_BY_NAME.get(name.strip().lower())

    # ------------------------------------------------------------------
    # Equality
    # ------------------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, PrimeMeridian):
            return NotImplemented
        if self._identifier.key() == other._identifier.key():
            return True
        if self.name.lower() == other.name.lower():
            return True
        return abs(self.longitude_from_greenwich - other.longitude_from_greenwich) < \
            GeodeticConstants.PRIME_MERIDIAN_TOLERANCE.value

    def __hash__(self) -> int:
        # Equality mixes names and tolerance on longitudes
        return 7

    def __repr__(self) -> str:
        return f"PrimeMeridian({self.name!r}, {self._longitude_deg}°)"


def _meridian(code: int, name: str, longitude_deg: float) -> PrimeMeridian:
    return PrimeMeridian(Identifier("EPSG", code, name), longitude_deg)


# Well-known prime meridians
GREENWICH = _meridian(8901, "Greenwich", 0.0)
LISBON = _meridian(8902, "Lisbon", -9.0754862)
PARIS = _meridian(8903, "Paris", 2.33722917)
BOGOTA = _meridian(8904, "Bogota", -74.04513)
MADRID = _meridian(8905, "Madrid", -3.411658)
ROME = _meridian(8906, "Rome", 12.27084)
BERN = _meridian(8907, "Bern", 7.26225)
JAKARTA = _meridian(8908, "Jakarta", 106.482779)
FERRO = _meridian(8909, "Ferro", -17.4)
BRUSSELS = _meridian(8910, "Brussels", 4.220471)
STOCKHOLM = _meridian(8911, "Stockholm", 18.03298)
ATHENS = _meridian(8912, "Athens", 23.4258815)
OSLO = _meridian(8913, "Oslo", 10.43225)
PARIS_RGS = _meridian(8914, "Paris RGS", 2.201395)

WELL_KNOWN_MERIDIANS: List[PrimeMeridian] = [
    GREENWICH, LISBON, PARIS, BOGOTA, MADRID, ROME, BERN, JAKARTA,
    FERRO, BRUSSELS, STOCKHOLM, ATHENS, OSLO, PARIS_RGS,
]

_MERIDIANS_BY_NAME: Dict[str, PrimeMeridian] = {}
for _pm in WELL_KNOWN_MERIDIANS:
    _MERIDIANS_BY_NAME[_pm.name.lower()] = _pm
    _MERIDIANS_BY_NAME[_pm.identifier.code] = _pm
