"""
Geodetic Datums.

A geodetic datum anchors an ellipsoid and a prime meridian to the Earth. Each
datum may carry a default geocentric transformation to the reference datum
(WGS 84), which the transformation graph uses as a pivot when no direct path
between two datums is registered.

Scientific Context
------------------
The same point has different geographic coordinates on different datums:
the shift between NTF and RGF93 reaches about 100 m in France. A datum
transformation is therefore required before comparing or combining
coordinates from different systems.

References
----------
- EPSG Geodetic Parameter Dataset
- IGN: Transformations de coordonnées (NTF, RGF93, DOM-TOM WGS84 realizations)
"""

import threading
from typing import Dict, List, Optional

from common.exceptions import MalformedDefinitionError
from common.identifiers import Identifier
from common.logging_config import get_logger
from datum.ellipsoid import (
    CLARKE1866,
    CLARKE1880IGN,
    GRS80,
    INTERNATIONAL1924,
    WGS84 as WGS84_ELLIPSOID,
    Ellipsoid,
)
from datum.extent import WORLD, GeographicExtent
from datum.prime_meridian import GREENWICH, PARIS, PrimeMeridian
from operations.base import GeoTransformation, Identity
from transformations.geocentric_translation import GeocentricTranslation
from transformations.seven_parameter import SevenParameterTransformation

logger = get_logger(__name__)


class GeodeticDatum:
    """Ellipsoid and prime meridian anchored to the Earth.

    Parameters
    ----------
    identifier : Identifier
        Authority identifier.
    prime_meridian : PrimeMeridian
        Origin of longitudes.
    ellipsoid : Ellipsoid
        Reference ellipsoid.
    to_reference : GeoTransformation, optional
        Default geocentric transformation to the reference datum. None when
        unknown.
    extent : GeographicExtent
        Area of validity.
    origin : str, optional
        Description of the fundamental point.
    epoch : str, optional
        Realization epoch.

    Notes
    -----
    Two datums are equal when their identifiers are equal, or when their
    ellipsoids, prime meridians, reference transformations and extents are
    all equal. Two identity reference transformations match whatever their
    classes; a missing reference transformation never matches.
    """

    def __init__(
        self,
        identifier: Identifier,
        prime_meridian: PrimeMeridian,
        ellipsoid: Ellipsoid,
        to_reference: Optional[GeoTransformation] = None,
        extent: GeographicExtent = WORLD,
        origin: Optional[str] = None,
        epoch: Optional[str] = None
    ):
        if ellipsoid is None:
            raise MalformedDefinitionError(f"Datum {identifier.name} has no ellipsoid")
        if prime_meridian is None:
            raise MalformedDefinitionError(f"Datum {identifier.name} has no prime meridian")
        self._identifier = identifier
        self.prime_meridian = prime_meridian
        self.ellipsoid = ellipsoid
        self.to_reference = to_reference
        self.extent = extent
        self.origin = origin
        self.epoch = epoch

    @property
    def identifier(self) -> Identifier:
        return self._identifier

    @property
    def name(self) -> str:
        return self._identifier.name

    @property
    def short_name(self) -> str:
        return self._identifier.short_name

    def to_wkt(self) -> str:
        """WKT DATUM clause with the ellipsoid and TOWGS84 parameters."""
        e = self.ellipsoid
        inverse_flattening = 0 if e.is_sphere() else e.inverse_flattening
        wkt = f'DATUM["{self.name}",SPHEROID["{e.name}",{e.a!r},{inverse_flattening!r}]'
        if self.to_reference is not None:
            wkt += self.to_reference.to_wkt()
        return wkt + "]"

    def _reference_matches(self, other: 'GeodeticDatum') -> bool:
        if self.to_reference is None or other.to_reference is None:
            return False
        if self.to_reference.is_identity() and other.to_reference.is_identity():
            return True
        return self.to_reference == other.to_reference

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, GeodeticDatum):
            return NotImplemented
        if self._identifier == other._identifier:
            return True
        return (
            self.ellipsoid == other.ellipsoid
            and self.prime_meridian == other.prime_meridian
            and self._reference_matches(other)
            and self.extent == other.extent
        )

    def __hash__(self) -> int:
        # Datums sharing an identifier may differ in ellipsoid
        return 11

    def __repr__(self) -> str:
        return f"GeodeticDatum({self.short_name!r})"


# ---------------------------------------------------------------------------
# Well-known datums
# ---------------------------------------------------------------------------

WGS84 = GeodeticDatum(
    Identifier("EPSG", 6326, "World Geodetic System 1984", "WGS 84"),
    GREENWICH, WGS84_ELLIPSOID, Identity.IDENTITY
)

NTF_PARIS = GeodeticDatum(
    Identifier("EPSG", 6807, "Nouvelle Triangulation Française (Paris)", "NTF (Paris)"),
    PARIS, CLARKE1880IGN,
    GeocentricTranslation(-168.0, -60.0, 320.0, 1.0),
    origin="Fundamental point: Pantheon. Latitude: 48 deg 50 min 46.52 sec N; "
           "Longitude: 2 deg 20 min 48.67 sec E (of Greenwich).",
    epoch="1895"
)

NTF = GeodeticDatum(
    Identifier("EPSG", 6275, "Nouvelle Triangulation Française", "NTF"),
    GREENWICH, CLARKE1880IGN,
    GeocentricTranslation(-168.0, -60.0, 320.0, 1.0),
    origin="Fundamental point: Pantheon. Latitude: 48 deg 50 min 46.522 sec N; "
           "Longitude: 2 deg 20 min 48.667 sec E (of Greenwich).",
    epoch="1898"
)

RGF93 = GeodeticDatum(
    Identifier("EPSG", 6171, "Réseau géodésique français 1993", "RGF93"),
    GREENWICH, GRS80, Identity.IDENTITY,
    origin="Coincident with ETRS89 at epoch 1993.0",
    epoch="1993"
)

ED50 = GeodeticDatum(
    Identifier("EPSG", 6230, "European Datum 1950", "ED50"),
    GREENWICH, INTERNATIONAL1924,
    GeocentricTranslation(-84.0, -97.0, -117.0, 1.0),
    origin="Fundamental point: Potsdam (Helmert Tower).",
    epoch="1950"
)

WGS84GUAD = GeodeticDatum(
    Identifier.local("GeodeticDatum", "Guadeloupe : WGS84", "WGS84GUAD"),
    GREENWICH, GRS80,
    SevenParameterTransformation.create_bursa_wolf_transformation(
        1.2239, 2.4156, -1.7598, 0.03800, -0.16101, -0.04925, 0.2387),
    GeographicExtent("Guadeloupe", 15.875, 16.625, -61.85, -61.075)
)

WGS84MART = GeodeticDatum(
    Identifier.local("GeodeticDatum", "Martinique : WGS84", "WGS84MART"),
    GREENWICH, GRS80,
    SevenParameterTransformation.create_bursa_wolf_transformation(
        0.7696, -0.8692, -12.0631, -0.32511, -0.21041, -0.02390, 0.2829),
    GeographicExtent("Martinique", 14.25, 15.025, -61.25, -60.725)
)

WGS84SBSM = GeodeticDatum(
    Identifier.local("GeodeticDatum", "St-Martin St-Barth : WGS84", "WGS84SBSM"),
    GREENWICH, GRS80,
    SevenParameterTransformation.create_bursa_wolf_transformation(
        14.6642, 5.2493, 0.1981, -0.06838, 0.09141, -0.58131, -0.4067),
    GeographicExtent("St-Martin St-Barth", 17.8, 18.2, -63.2, -62.5)
)

NAD27 = GeodeticDatum(
    Identifier("EPSG", 6267, "North American Datum 1927", "NAD27"),
    GREENWICH, CLARKE1866, None, epoch="1927"
)

NAD83 = GeodeticDatum(
    Identifier("EPSG", 6269, "North American Datum 1983", "NAD83"),
    GREENWICH, GRS80, None, epoch="1983"
)

WELL_KNOWN_DATUMS: List[GeodeticDatum] = [
    WGS84, NTF_PARIS, NTF, RGF93, ED50, WGS84GUAD, WGS84MART, WGS84SBSM, NAD27, NAD83,
]


class DatumRegistry:
    """Thread-safe set of known datums with name and code lookup.

    Parameters
    ----------
    datums : list of GeodeticDatum, optional
        Initial content; the well-known datums by default.

    Examples
    --------
    >>> registry = DatumRegistry()
    >>> registry.get("ntf") is NTF
    True
    """

    def __init__(self, datums: Optional[List[GeodeticDatum]] = None):
        self._lock = threading.RLock()
        self._datums: List[GeodeticDatum] = []
        self._by_key: Dict[str, GeodeticDatum] = {}
        for datum in WELL_KNOWN_DATUMS if datums is None else datums:
            self.register(datum)

    @staticmethod
    def _normalize(key: str) -> str:
        return "".join(key.split()).lower()

    def register(self, datum: GeodeticDatum) -> GeodeticDatum:
        with self._lock:
            if datum not in self._datums:
                self._datums.append(datum)
            ident = datum.identifier
            for key in (ident.code, ident.name, ident.short_name, str(ident)):
                self._by_key.setdefault(self._normalize(key), datum)
            return datum

    def get(self, name_or_code: str) -> Optional[GeodeticDatum]:
        """Known datum by code, name or short name (case-insensitive)."""
        with self._lock:
            return self._by_key.get(self._normalize(str(name_or_code)))

    def find(self, datum: GeodeticDatum) -> Optional[GeodeticDatum]:
        """Known datum equal to ``datum``, or None."""
        with self._lock:
            for known in self._datums:
                if known == datum:
                    return known
        return None

    def create_geodetic_datum(
        self,
        identifier: Identifier,
        prime_meridian: PrimeMeridian,
        ellipsoid: Ellipsoid,
        to_reference: Optional[GeoTransformation] = None,
        extent: GeographicExtent = WORLD,
        origin: Optional[str] = None,
        epoch: Optional[str] = None
    ) -> GeodeticDatum:
        """Known datum matching the definition, or a newly registered one.

        A datum is matched by identifier code, then by name, then by
        equality of its definition.
        """
        with self._lock:
            known = self.get(identifier.code) or self.get(identifier.name)
            if known is not None:
                return known
            datum = GeodeticDatum(
                identifier, prime_meridian, ellipsoid, to_reference, extent, origin, epoch
            )
            known = self.find(datum)
            if known is not None:
                return known
            logger.info(f"Registered datum {datum.short_name} ({datum.identifier})")
            return self.register(datum)

    def __contains__(self, datum: object) -> bool:
        with self._lock:
            return datum in self._datums

    def __iter__(self):
        with self._lock:
            return iter(list(self._datums))

    def __len__(self) -> int:
        with self._lock:
            return len(self._datums)


KNOWN_DATUMS = DatumRegistry()
