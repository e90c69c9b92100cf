"""Unit tests for datums, the datum registry and the transformation graph."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest

from common.exceptions import MalformedDefinitionError, NonInvertibleOperationError
from common.identifiers import Identifier
from common.logging_config import ResolutionAudit, SkipReason
from common.types import Coordinate
from datum.ellipsoid import BESSEL1841, CLARKE1880IGN, GRS80, INTERNATIONAL1924
from datum.geodetic_datum import (
    ED50,
    NAD27,
    NAD83,
    NTF,
    NTF_PARIS,
    RGF93,
    WGS84,
    WGS84GUAD,
    DatumRegistry,
    GeodeticDatum,
)
from datum.prime_meridian import GREENWICH, PARIS
from datum.transformation_graph import TransformationRegistry, default_registry
from operations.base import PRECISION_FLOOR, GeoTransformation, Identity
from operations.longitude_rotation import LongitudeRotation
from transformations.geocentric_translation import GeocentricTranslation
from transformations.sequence import GeocentricTransformationSequence


class OneWayShift(GeoTransformation):
    """Geocentric shift without an inverse."""

    def __init__(self):
        super().__init__(Identifier.local("Transformation", "One way shift"))

    def _transform(self, coord: Coordinate) -> Coordinate:
        return [coord[0] + 1.0, coord[1], coord[2]]


def custom_datum(code: str, ellipsoid=GRS80, to_reference=None) -> GeodeticDatum:
    return GeodeticDatum(Identifier("TEST", code, f"Datum {code}"), GREENWICH, ellipsoid, to_reference)


class TestGeodeticDatum:
    """Datum tests"""

    def test_equality_by_identifier(self):
        copy = GeodeticDatum(Identifier("EPSG", 6275, "Another name"), PARIS, BESSEL1841)
        assert copy == NTF

    def test_equality_by_definition(self):
        twin = GeodeticDatum(
            Identifier("TEST", "ED", "European"), GREENWICH, INTERNATIONAL1924,
            GeocentricTranslation(-84.0, -97.0, -117.0)
        )
        assert twin == ED50
        assert hash(twin) == hash(ED50)

    def test_equal_datums_share_hash(self):
        # Same identifier on another ellipsoid still compares equal
        variant = GeodeticDatum(Identifier("EPSG", 6275, "NTF"), PARIS, GRS80)
        assert variant == NTF
        assert hash(variant) == hash(NTF)
        assert {NTF: "ntf"}[variant] == "ntf"
        assert variant in {NTF}

    def test_prime_meridian_distinguishes(self):
        assert NTF != NTF_PARIS

    def test_missing_reference_never_matches(self):
        assert custom_datum("A") != custom_datum("B")

    def test_identity_references_match(self):
        twin = custom_datum("RGF", to_reference=GeocentricTranslation(0.0, 0.0, 0.0))
        assert twin == RGF93

    def test_missing_ellipsoid(self):
        with pytest.raises(MalformedDefinitionError):
            GeodeticDatum(Identifier("TEST", "X", "X"), GREENWICH, None)

    def test_wkt(self):
        wkt = NTF.to_wkt()
        assert wkt.startswith('DATUM["Nouvelle Triangulation Française"')
        assert "TOWGS84[-168,-60,320]" in wkt
        assert "TOWGS84" not in NAD27.to_wkt()


class TestDatumRegistry:
    """Datum lookup tests"""

    def test_lookup(self):
        registry = DatumRegistry()
        assert registry.get("ntf") is NTF
        assert registry.get("6275") is NTF
        assert registry.get("EPSG:6275") is NTF
        assert registry.get("ntf (paris)") is NTF_PARIS
        assert registry.get("World Geodetic System 1984") is WGS84
        assert registry.get("nad83") is NAD83
        assert registry.get("WGS84GUAD") is WGS84GUAD
        assert registry.get("unknown") is None

    def test_create_returns_known_by_code(self):
        registry = DatumRegistry()
        datum = registry.create_geodetic_datum(
            Identifier("EPSG", 6171, "Any name"), GREENWICH, GRS80, Identity.IDENTITY
        )
        assert datum is RGF93

    def test_create_returns_known_by_definition(self):
        registry = DatumRegistry()
        datum = registry.create_geodetic_datum(
            Identifier("TEST", "E50", "Europe 50"), GREENWICH, INTERNATIONAL1924,
            GeocentricTranslation(-84.0, -97.0, -117.0)
        )
        assert datum is ED50

    def test_create_registers_new(self):
        registry = DatumRegistry()
        size = len(registry)
        datum = registry.create_geodetic_datum(
            Identifier("TEST", "NEW1", "Brand new datum"), GREENWICH, BESSEL1841,
            GeocentricTranslation(1.0, 2.0, 3.0)
        )
        assert len(registry) == size + 1
        assert datum in registry
        assert registry.get("brand new datum") is datum


class TestGeocentricResolution:
    """Geocentric transformation graph tests"""

    def test_direct_reference(self, registry):
        ops = registry.get_geocentric_transformations(NTF, WGS84)
        assert ops == [GeocentricTranslation(-168.0, -60.0, 320.0)]

    def test_inverse_registered(self, registry):
        registry.get_geocentric_transformations(NTF, WGS84)
        assert registry.lookup_geocentric(WGS84, NTF) == (GeocentricTranslation(168.0, 60.0, -320.0),)

    def test_overseas_bursa_wolf(self, registry):
        ops = registry.get_geocentric_transformations(WGS84GUAD, WGS84)
        assert ops == [WGS84GUAD.to_reference]
        assert "TOWGS84[1.2239,2.4156,-1.7598,0.038,-0.16101,-0.04925,0.2387]" in WGS84GUAD.to_wkt()
        assert ops[0].precision > PRECISION_FLOOR

    def test_from_reference(self, registry):
        ops = registry.get_geocentric_transformations(WGS84, ED50)
        assert ops[0].transform([0.0, 0.0, 0.0]) == pytest.approx([84.0, 97.0, 117.0])

    def test_pivot(self, registry):
        ops = registry.get_geocentric_transformations(NTF, ED50)
        assert len(ops) == 1
        assert isinstance(ops[0], GeocentricTransformationSequence)
        assert ops[0].transform([0.0, 0.0, 0.0]) == pytest.approx([-84.0, 37.0, 437.0])
        # The derivation is cached, with its inverse
        assert registry.lookup_geocentric(NTF, ED50) == tuple(ops)
        assert len(registry.lookup_geocentric(ED50, NTF)) == 1

    def test_same_reference_combines_to_identity(self, registry):
        ops = registry.get_geocentric_transformations(NTF_PARIS, NTF)
        assert ops == [Identity.IDENTITY]

    def test_direct_entries_returned_as_registered(self, registry):
        shortcut = GeocentricTranslation(-80.0, 40.0, 430.0, precision=0.5)
        registry.add_geocentric_transformation(NTF, ED50, shortcut)
        assert registry.get_geocentric_transformations(NTF, ED50) == [shortcut]

    def test_deduplication(self, registry):
        registry.add_geocentric_transformation(NTF, ED50, GeocentricTranslation(1.0, 2.0, 3.0))
        registry.add_geocentric_transformation(NTF, ED50, GeocentricTranslation(1.0, 2.0, 3.0))
        assert len(registry.lookup_geocentric(NTF, ED50)) == 1
        assert len(registry.lookup_geographic(NTF, ED50)) == 1

    def test_no_reference(self, registry):
        assert registry.get_geocentric_transformations(NAD27, WGS84) == []
        records = registry.skipped(NAD27, WGS84)
        assert [r.reason for r in records] == [SkipReason.NO_REFERENCE_TRANSFORMATION]

    def test_default_reference_override(self, registry):
        registry.set_default_reference_transformation(NAD27, GeocentricTranslation(-8.0, 160.0, 176.0))
        ops = registry.get_geocentric_transformations(NAD27, WGS84)
        assert ops == [GeocentricTranslation(-8.0, 160.0, 176.0)]
        assert len(registry.get_geocentric_transformations(NAD27, ED50)) == 1

    def test_non_invertible_is_audited(self, registry):
        one_way = custom_datum("ONEWAY", to_reference=OneWayShift())
        assert registry.get_geocentric_transformations(ED50, one_way) == []
        reasons = {r.reason for r in registry.skipped(ED50, one_way)}
        assert reasons == {SkipReason.NON_INVERTIBLE}
        # The forward direction still resolves
        assert len(registry.get_geocentric_transformations(one_way, ED50)) == 1

    def test_reset(self, registry):
        registry.get_geocentric_transformations(NTF, ED50)
        registry.reset(ED50)
        assert registry.lookup_geocentric(NTF, ED50) == ()
        assert registry.lookup_geocentric(NTF, WGS84) != ()
        registry.reset()
        assert registry.lookup_geocentric(NTF, WGS84) == ()

    def test_concurrent_resolution(self, registry):
        def resolve(_):
            return registry.get_geocentric_transformations(NTF, ED50)

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(resolve, range(64)))
        assert all(len(ops) == 1 for ops in results)
        assert all(ops[0] is results[0][0] for ops in results)

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()

    def test_shared_audit(self):
        audit = ResolutionAudit()
        registry = TransformationRegistry(audit=audit)
        registry.get_geocentric_transformations(WGS84, NAD27)
        assert registry.audit is audit
        assert audit.summary() == {"no_reference_transformation": 1}


class TestGeographicResolution:
    """Geographic transformation graph tests"""

    def test_geographic_sequence(self, registry):
        ops = registry.get_geographic_transformations(NTF, WGS84)
        assert len(ops) == 1
        lat, lon, h = ops[0].transform([np.radians(48.0), np.radians(2.0), 0.0])
        # NTF to WGS 84 moves Paris by some tens of meters
        assert np.degrees(lat) == pytest.approx(48.0, abs=1e-3)
        assert np.degrees(lon) == pytest.approx(2.0, abs=2e-3)
        assert (lat, lon) != pytest.approx((np.radians(48.0), np.radians(2.0)), abs=1e-7)

    def test_round_trip(self, registry):
        forward = registry.get_geographic_transformations(NTF, ED50)[0]
        backward = registry.get_geographic_transformations(ED50, NTF)[0]
        coord = [float(np.radians(46.0)), float(np.radians(1.0)), 50.0]
        back = backward.transform(forward.transform(coord))
        assert back[:2] == pytest.approx(coord[:2], abs=1e-10)
        assert back[2] == pytest.approx(coord[2], abs=1e-3)

    def test_prime_meridian_change(self, registry):
        ops = registry.get_geographic_transformations(NTF_PARIS, NTF)
        coord = [0.8, 0.01, 10.0]
        result = ops[0].transform(coord)
        assert result[0] == pytest.approx(0.8)
        assert result[1] == pytest.approx(0.01 + np.radians(2.33722917))
        assert result[2] == pytest.approx(10.0)

    def test_geographic_pivot(self, registry):
        a = custom_datum("GA", ellipsoid=CLARKE1880IGN)
        b = custom_datum("GB", ellipsoid=CLARKE1880IGN)
        registry.add_geographic_transformation(a, WGS84, LongitudeRotation(0.001))
        registry.add_geographic_transformation(b, WGS84, LongitudeRotation(0.003))
        ops = registry.get_geographic_transformations(a, b)
        assert len(ops) == 1
        assert ops[0].transform([0.5, 0.1]) == pytest.approx([0.5, 0.098])
        # Neither datum has a geocentric path
        assert registry.lookup_geocentric(a, b) == ()

    def test_geographic_non_invertible_audited(self, registry):
        class Truncate(LongitudeRotation):
            def inverse(self):
                raise NonInvertibleOperationError(self.name, "truncated")

        a = custom_datum("TA")
        registry.add_geographic_transformation(a, WGS84, Truncate(0.001))
        records = registry.skipped(a, WGS84)
        assert [r.reason for r in records] == [SkipReason.NON_INVERTIBLE]
        assert registry.lookup_geographic(WGS84, a) == ()
