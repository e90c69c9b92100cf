"""Unit tests for datum transformations."""

import math

import pytest

from operations.base import PRECISION_FLOOR, GeoTransformation, Identity, OperationKind
from transformations.geocentric_translation import GeocentricTranslation
from transformations.sequence import GeocentricTransformationSequence
from transformations.seven_parameter import RotationConvention, SevenParameterTransformation

# Position vector example of IOGP Guidance Note 7-2 (WGS 72 to WGS 84)
WGS72_POINT = [3657660.66, 255768.55, 5201382.11]
WGS84_POINT = [3657660.78, 255778.43, 5201387.75]


class TestGeocentricTranslation:
    """Three-parameter translation tests"""

    def test_translation(self):
        op = GeocentricTranslation(-168.0, -60.0, 320.0)
        assert op.transform([1.0, 2.0, 3.0]) == [-167.0, -58.0, 323.0]

    def test_inverse_is_exact(self):
        op = GeocentricTranslation(-168.0, -60.0, 320.0, 1.0)
        inverse = op.inverse()
        assert inverse == GeocentricTranslation(168.0, 60.0, -320.0)
        assert inverse.precision == 1.0
        assert inverse.transform(op.transform([4e6, 1e5, 4.9e6])) == [4e6, 1e5, 4.9e6]

    def test_wkt(self):
        assert GeocentricTranslation(-168, -60, 320).to_wkt() == ",TOWGS84[-168,-60,320]"

    def test_kind(self):
        op = GeocentricTranslation(1, 2, 3)
        assert op.kind is OperationKind.GEO_TRANSFORMATION
        assert isinstance(op, GeoTransformation)


class TestSevenParameterTransformation:
    """Bursa-Wolf tests"""

    def test_position_vector_example(self):
        op = SevenParameterTransformation.create_bursa_wolf_transformation(
            0.0, 0.0, 4.5, 0.0, 0.0, 0.554, 0.219
        )
        assert op.transform(WGS72_POINT) == pytest.approx(WGS84_POINT, abs=0.01)

    def test_coordinate_frame_example(self):
        op = SevenParameterTransformation.create_coordinate_frame_transformation(
            0.0, 0.0, 4.5, 0.0, 0.0, -0.554, 0.219
        )
        assert op.transform(WGS72_POINT) == pytest.approx(WGS84_POINT, abs=0.01)

    def test_conventions_compare_by_effect(self):
        pv = SevenParameterTransformation.create_bursa_wolf_transformation(1, 2, 3, 0.1, 0.2, 0.3, 1.0)
        cf = SevenParameterTransformation.create_coordinate_frame_transformation(1, 2, 3, -0.1, -0.2, -0.3, 1.0)
        assert pv == cf
        assert pv.convention is RotationConvention.POSITION_VECTOR
        assert cf.convention is RotationConvention.COORDINATE_FRAME

    def test_inverse_negates_parameters(self):
        op = SevenParameterTransformation.create_bursa_wolf_transformation(
            -599.928, -275.552, -195.665, -0.0835, -0.4715, 0.0602, 49.2814
        )
        coord = [4389933.0, 4408052.0, -1402882.0]
        back = op.inverse().transform(op.transform(coord))
        # Negating small-angle parameters is exact to first order only
        error = math.dist(back, coord)
        assert error > PRECISION_FLOOR
        assert error <= op.precision
        assert op.inverse().precision == op.precision

    def test_precision_covers_second_order(self):
        op = SevenParameterTransformation.create_bursa_wolf_transformation(
            1.2239, 2.4156, -1.7598, 0.03800, -0.16101, -0.04925, 0.2387
        )
        assert op.precision == pytest.approx(op.inversion_bound())
        assert 1e-6 < op.precision < 1e-4
        coarse = SevenParameterTransformation.create_bursa_wolf_transformation(
            1.2239, 2.4156, -1.7598, 0.03800, -0.16101, -0.04925, 0.2387, precision=0.5
        )
        assert coarse.precision == 0.5
        assert SevenParameterTransformation(0, 0, 0, 0, 0, 0, 0).precision == PRECISION_FLOOR

    def test_wkt(self):
        op = SevenParameterTransformation.create_bursa_wolf_transformation(1, 2, 3, 0.5, 0, 0, 2)
        assert op.to_wkt() == ",TOWGS84[1,2,3,0.5,0,0,2]"


class TestGeocentricTransformationSequence:
    """Composite transformation tests"""

    def test_is_geo_transformation(self):
        seq = GeocentricTransformationSequence(
            None, GeocentricTranslation(-168, -60, 320), GeocentricTranslation(84, 97, 117)
        )
        assert isinstance(seq, GeoTransformation)
        assert seq.kind is OperationKind.GEO_TRANSFORMATION
        assert seq.transform([0.0, 0.0, 0.0]) == pytest.approx([-84.0, 37.0, 437.0])

    def test_inverse_stays_geo_transformation(self):
        seq = GeocentricTransformationSequence(
            None, GeocentricTranslation(1, 2, 3), GeocentricTranslation(4, 5, 6)
        )
        inverse = seq.inverse()
        assert isinstance(inverse, GeocentricTransformationSequence)
        assert inverse.transform(seq.transform([10.0, 20.0, 30.0])) == pytest.approx([10.0, 20.0, 30.0])

    def test_identity_sequence(self):
        seq = GeocentricTransformationSequence(None, Identity.IDENTITY, GeocentricTranslation(0, 0, 0))
        assert seq.is_identity()
        assert seq == Identity.IDENTITY
