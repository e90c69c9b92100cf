"""End-to-end transformations between real-world CRS.

Expected values come from published conversions (IGN Circé Mayotte,
EPSG dataset examples and IGN control points).
"""

import numpy as np
import pytest

from common.identifiers import Identifier
from crs.reference_systems import AxisOrder, GeocentricCRS, GeographicCRS, ProjectedCRS
from datum.ellipsoid import BESSEL1841, CLARKE1880IGN, GRS80, INTERNATIONAL1924
from datum.extent import GeographicExtent
from datum.geodetic_datum import NTF, RGF93, GeodeticDatum
from datum.prime_meridian import GREENWICH
from operations.base import Identity
from projections.lambert_conic import LambertConicConformal2SP
from projections.mercator import Mercator1SP
from projections.transverse_mercator import UniversalTransverseMercator
from transformations.geocentric_translation import GeocentricTranslation
from transformations.grid_shift import GridShiftTransformation
from transformations.grids import NTv2GridFile
from transformations.seven_parameter import SevenParameterTransformation

MM = 1e-3
MM_IN_DEG = 1e-8


def transform(factory, source, target, coord):
    return factory.get_most_precise(factory.create_coordinate_operations(source, target)).transform(coord)


# ---------------------------------------------------------------------------
# Mayotte
# ---------------------------------------------------------------------------

MAYOTTE = GeographicExtent("Ile de Mayotte", -13.05, -12.5, 44.95, 45.4)

COMBANI1950 = GeodeticDatum(
    Identifier("IGNF", "REG3180001", "COMBANI 1950"), GREENWICH, INTERNATIONAL1924,
    SevenParameterTransformation.create_bursa_wolf_transformation(
        -599.928, -275.552, -195.665, -0.0835, -0.4715, 0.0602, 49.2814),
    MAYOTTE
)
CAD1997 = GeodeticDatum(
    Identifier("IGNF", "REG7010001", "CADASTRE 1997"), GREENWICH, INTERNATIONAL1924,
    GeocentricTranslation(-381.788, -57.501, -256.673), MAYOTTE
)
RGM04 = GeodeticDatum(
    Identifier("IGNF", "RGM04", "RGM04"), GREENWICH, GRS80, Identity.IDENTITY, MAYOTTE
)

MAYO50_GEO2D = GeographicCRS(Identifier("IGNF", "MAYO50G", "COMBANI 1950 GEO2D"), COMBANI1950)
MAYO50_UTM38S = ProjectedCRS(
    Identifier("IGNF", "MAYO50UTM38S", "COMBANI 1950 UTM38S"), COMBANI1950,
    UniversalTransverseMercator.create_utm(INTERNATIONAL1924, 38, "SOUTH")
)
CAD1997_GEO2D = GeographicCRS(Identifier("IGNF", "CAD97GEO", "CADASTRE 1997 GEO2D"), CAD1997)
CAD1997_UTM38S = ProjectedCRS(
    Identifier("IGNF", "CAD97UTM38S", "CADASTRE 1997 UTM38S"), CAD1997,
    UniversalTransverseMercator.create_utm(INTERNATIONAL1924, 38, "SOUTH")
)
RGM04_GEOC = GeocentricCRS(Identifier("IGNF", "RGM04GEOC", "RGM04 GEOC"), RGM04)
RGM04_GEO2D = GeographicCRS(Identifier("IGNF", "RGM04GEO", "RGM04 GEO2D"), RGM04)
RGM04_UTM38S = ProjectedCRS(
    Identifier("IGNF", "RGM04UTM38S", "RGM04 UTM38S"), RGM04,
    UniversalTransverseMercator.create_utm(GRS80, 38, "SOUTH")
)

MAYOTTE_POINT = [-12.791, 45.118]


class TestMayotte:
    """Transformations available in Circé Mayotte"""

    @pytest.mark.parametrize("source, target, expected, tolerance", [
        (MAYO50_GEO2D, MAYO50_UTM38S, [512807.225, 8585957.337], 2 * MM),
        (MAYO50_GEO2D, RGM04_GEOC, [4389551.047, 4407994.483, -1403139.565], 2 * MM),
        (MAYO50_GEO2D, RGM04_GEO2D, [-12.79352658, 45.12011640], 2 * MM_IN_DEG),
        (MAYO50_GEO2D, RGM04_UTM38S, [513036.279, 8585694.190], 2 * MM),
        (CAD1997_GEO2D, CAD1997_UTM38S, [512807.225, 8585957.337], 2 * MM),
        (CAD1997_GEO2D, RGM04_GEOC, [4389550.925, 4407994.586, -1403139.687], 2 * MM),
        (CAD1997_GEO2D, RGM04_GEO2D, [-12.79352769, 45.12011787], 2 * MM_IN_DEG),
        (CAD1997_GEO2D, RGM04_UTM38S, [513036.438, 8585694.067], 2 * MM),
    ])
    def test_from_geographic(self, factory, source, target, expected, tolerance):
        result = transform(factory, source, target, MAYOTTE_POINT)
        assert result == pytest.approx(expected, abs=tolerance)

    def test_round_trip_to_rgm04(self, factory):
        forward = transform(factory, MAYO50_GEO2D, RGM04_UTM38S, MAYOTTE_POINT)
        back = transform(factory, RGM04_UTM38S, MAYO50_GEO2D, forward)
        # Reversing a Bursa-Wolf transformation by negating its parameters is
        # accurate to a few centimeters
        assert back == pytest.approx(MAYOTTE_POINT, abs=1e-6)

    def test_datums_are_distinct(self):
        assert RGM04 != RGF93
        assert COMBANI1950 != CAD1997


# ---------------------------------------------------------------------------
# Makassar
# ---------------------------------------------------------------------------

MAKASSAR = GeodeticDatum(
    Identifier("EPSG", 6257, "Makassar"), GREENWICH, BESSEL1841,
    GeocentricTranslation(-587.8, 519.75, 145.76)
)
MAKASSAR_GEO = GeographicCRS(
    Identifier("EPSG", 4257, "Makassar"), MAKASSAR, axis_order=AxisOrder.LON_LAT
)
MAKASSAR_NEIEZ = ProjectedCRS(
    Identifier("EPSG", 3002, "Makassar / NEIEZ"), MAKASSAR,
    Mercator1SP.create(BESSEL1841, 0.997, 110.0, 3900000.0, 900000.0)
)


class TestMakassar:
    """Mercator (1SP) on the Makassar datum"""

    def test_forward(self, factory):
        result = transform(factory, MAKASSAR_GEO, MAKASSAR_NEIEZ, [120.0, -3.0])
        assert result == pytest.approx([5009726.58, 569150.82], abs=0.1)

    def test_backward(self, factory):
        result = transform(factory, MAKASSAR_NEIEZ, MAKASSAR_GEO, [5009726.58, 569150.82])
        assert result == pytest.approx([120.0, -3.0], abs=1e-6)

    def test_wkt(self):
        assert "TOWGS84[-587.8,519.75,145.76]" in MAKASSAR.to_wkt()


# ---------------------------------------------------------------------------
# NTF Lambert II étendu to RGF93 Lambert 93
# ---------------------------------------------------------------------------

LAMBERT2E_CRS = ProjectedCRS(
    Identifier("EPSG", 27572, "NTF (Paris) / Lambert zone II"), NTF,
    LambertConicConformal2SP.create(
        CLARKE1880IGN, 46.8, 45.8989188889, 47.6960144444, 2.3372291667, 600000.0, 2200000.0
    )
)
LAMBERT93_CRS = ProjectedCRS(
    Identifier("EPSG", 2154, "RGF93 / Lambert-93"), RGF93,
    LambertConicConformal2SP.create(GRS80, 46.5, 44.0, 49.0, 3.0, 700000.0, 6600000.0)
)

LAMBERT2E_POINT = [282331.0, 2273699.7]
LAMBERT93_POINT = [332602.961893497, 6709788.26447893]


class TestLambert:
    """NTF to RGF93, through the 3-parameter translation or the IGN grid"""

    def test_translation_is_metric(self, factory):
        result = transform(factory, LAMBERT2E_CRS, LAMBERT93_CRS, LAMBERT2E_POINT)
        assert result == pytest.approx(LAMBERT93_POINT, abs=10.0)

    def test_grid(self, factory, ntf_r93_grid):
        source = ProjectedCRS(LAMBERT2E_CRS.identifier, NTF, LAMBERT2E_CRS.projection)
        target = ProjectedCRS(LAMBERT93_CRS.identifier, RGF93, LAMBERT93_CRS.projection)
        source.add_grid_transformation(RGF93, GridShiftTransformation(NTv2GridFile(ntf_r93_grid), precision=0.01))

        result = transform(factory, source, target, LAMBERT2E_POINT)
        assert result == pytest.approx(LAMBERT93_POINT, abs=1e-2)

        # The grid registered on the NTF side is inverted
        back = transform(factory, target, source, LAMBERT93_POINT)
        assert back == pytest.approx(LAMBERT2E_POINT, abs=1e-2)

    def test_geographic_shift_magnitude(self, factory):
        source = GeographicCRS(Identifier("EPSG", 4275, "NTF"), NTF)
        target = GeographicCRS(Identifier("EPSG", 4171, "RGF93"), RGF93)
        lat, lon = transform(factory, source, target, [46.8, 2.34])
        # Horizontal shift of NTF in central France is a few hundred meters at most
        dy = (lat - 46.8) * 111000.0
        dx = (lon - 2.34) * 111000.0 * np.cos(np.radians(46.8))
        assert 1.0 < np.hypot(dx, dy) < 500.0
