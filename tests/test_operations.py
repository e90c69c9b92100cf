"""Unit tests for the elementary coordinate operations."""

import math

import numpy as np
import pytest

from common.exceptions import CoordinateDimensionError, MalformedDefinitionError, NonInvertibleOperationError
from common.units import DEGREE, FOOT, GRAD, METER, RADIAN
from datum.ellipsoid import WGS84 as WGS84_ELLIPSOID
from operations.axis import CoordinateSwitch
from operations.base import PRECISION_FLOOR, Identity, OperationKind
from operations.dimension import ChangeCoordinateDimension
from operations.geocentric import Geocentric2Geographic
from operations.longitude_rotation import LongitudeRotation
from operations.rounding import CoordinateRounding
from operations.sequence import CoordinateOperationSequence, flatten
from operations.unit_conversion import (
    UnitConversion,
    create_unit_converter,
    create_unit_converter_from_lists,
)
from transformations.geocentric_translation import GeocentricTranslation
from transformations.seven_parameter import SevenParameterTransformation


class TestIdentity:
    """Identity operation tests"""

    def test_returns_copy(self):
        coord = [1.0, 2.0, 3.0]
        result = Identity.IDENTITY.transform(coord)
        assert result == coord
        assert result is not coord

    def test_accepts_all_arities(self):
        for coord in ([1.0], [1.0, 2.0], [1.0, 2.0, 3.0]):
            assert Identity.IDENTITY.transform(coord) == coord

    def test_inverse_is_itself(self):
        assert Identity.IDENTITY.inverse() is Identity.IDENTITY

    def test_identity_like_transformations_are_equal(self):
        assert GeocentricTranslation(0, 0, 0) == Identity.IDENTITY
        assert SevenParameterTransformation(0, 0, 0, 0, 0, 0, 0) == Identity.IDENTITY
        assert hash(GeocentricTranslation(0, 0, 0)) == hash(Identity.IDENTITY)


class TestOperationContract:
    """Behaviour shared by every operation"""

    def test_input_not_modified(self):
        coord = [0.5, 0.1, 10.0]
        LongitudeRotation(0.2).transform(coord)
        assert coord == [0.5, 0.1, 10.0]

    def test_numpy_input(self):
        coord = np.array([0.5, 0.1, 10.0])
        result = LongitudeRotation(0.2).transform(coord)
        assert type(result) is list
        assert all(type(v) is float for v in result)
        assert result == pytest.approx([0.5, 0.3, 10.0])
        assert coord.tolist() == [0.5, 0.1, 10.0]

    def test_wrong_arity_rejected(self):
        op = Geocentric2Geographic(WGS84_ELLIPSOID)
        with pytest.raises(CoordinateDimensionError) as excinfo:
            op.transform([1.0, 2.0])
        assert excinfo.value.actual == 2

    def test_precision_floor(self):
        assert GeocentricTranslation(1, 2, 3, precision=0).precision == PRECISION_FLOOR
        assert GeocentricTranslation(1, 2, 3, precision=-5).precision == PRECISION_FLOOR
        assert GeocentricTranslation(1, 2, 3, precision=2.5).precision == 2.5

    def test_value_equality(self):
        assert GeocentricTranslation(1, 2, 3) == GeocentricTranslation(1, 2, 3)
        assert hash(GeocentricTranslation(1, 2, 3)) == hash(GeocentricTranslation(1, 2, 3))
        assert GeocentricTranslation(1, 2, 3) != GeocentricTranslation(1, 2, 4)
        assert LongitudeRotation(0.1) != GeocentricTranslation(0.1, 0, 0)


class TestSequence:
    """CoordinateOperationSequence tests"""

    def test_applies_in_order(self):
        seq = CoordinateOperationSequence(
            None, CoordinateSwitch.SWITCH_LAT_LON, LongitudeRotation(1.0)
        )
        assert seq.transform([10.0, 20.0]) == [20.0, 11.0]

    def test_precision_is_sum(self):
        seq = CoordinateOperationSequence(
            None,
            GeocentricTranslation(1, 0, 0, precision=1.0),
            GeocentricTranslation(0, 1, 0, precision=0.5),
        )
        assert seq.precision == pytest.approx(1.5)
        assert seq.kind is OperationKind.SEQUENCE

    def test_inverse_reverses(self):
        seq = CoordinateOperationSequence(
            None, GeocentricTranslation(1, 2, 3), LongitudeRotation(0.5)
        )
        coord = [100.0, 200.0, 300.0]
        back = seq.inverse().transform(seq.transform(coord))
        assert back == pytest.approx(coord)

    def test_inverse_fails_on_non_invertible_element(self):
        seq = CoordinateOperationSequence(None, LongitudeRotation(0.5), CoordinateRounding.METER)
        with pytest.raises(NonInvertibleOperationError):
            seq.inverse()

    def test_empty_sequence_is_identity(self):
        seq = CoordinateOperationSequence(None)
        assert seq.is_identity()
        assert seq.transform([1.0, 2.0]) == [1.0, 2.0]

    def test_flatten(self):
        rotation = LongitudeRotation(0.5)
        inner = CoordinateOperationSequence(None, Identity.IDENTITY, rotation)
        flat = flatten([inner, Identity.IDENTITY, CoordinateSwitch.SWITCH_LAT_LON])
        assert flat == [rotation, CoordinateSwitch.SWITCH_LAT_LON]
        assert flatten([Identity.IDENTITY]) == []


class TestChangeCoordinateDimension:
    """Dimension change tests"""

    def test_to3d_appends_zero_height(self):
        assert ChangeCoordinateDimension.TO3D.transform([1.0, 2.0]) == [1.0, 2.0, 0.0]

    def test_to2d_drops_height(self):
        assert ChangeCoordinateDimension.TO2D.transform([1.0, 2.0, 3.0]) == [1.0, 2.0]

    def test_passthrough_at_target_arity(self):
        assert ChangeCoordinateDimension.TO3D.transform([1.0, 2.0, 3.0]) == [1.0, 2.0, 3.0]
        assert ChangeCoordinateDimension.TO2D.transform([1.0, 2.0]) == [1.0, 2.0]

    def test_inverses(self):
        assert ChangeCoordinateDimension.TO3D.inverse() is ChangeCoordinateDimension.TO2D
        assert ChangeCoordinateDimension.TO2D.inverse() is ChangeCoordinateDimension.TO3D


class TestUnitConversion:
    """Unit conversion tests"""

    def test_degrees_to_radians(self):
        op = create_unit_converter(DEGREE, RADIAN)
        result = op.transform([180.0, 90.0, 10.0])
        assert result == pytest.approx([math.pi, math.pi / 2, 10.0])

    def test_interned(self):
        assert create_unit_converter(DEGREE, RADIAN) is create_unit_converter(DEGREE, RADIAN)

    def test_same_units_give_identity(self):
        assert create_unit_converter(METER, METER) is Identity.IDENTITY
        assert create_unit_converter(DEGREE, DEGREE) is Identity.IDENTITY

    def test_nan_passes_through(self):
        result = create_unit_converter(GRAD, DEGREE).transform([100.0, float("nan"), 1.0])
        assert result[0] == pytest.approx(90.0)
        assert math.isnan(result[1])

    def test_mixed_form(self):
        op = create_unit_converter(DEGREE, RADIAN, FOOT, METER)
        result = op.transform([90.0, 0.0, 10.0])
        assert result == pytest.approx([math.pi / 2, 0.0, 3.048])

    def test_inverse(self):
        op = create_unit_converter(FOOT, METER)
        assert op.inverse() is create_unit_converter_from_lists([METER] * 3, [FOOT] * 3)
        coord = [1.0, 2.0, 3.0]
        assert op.inverse().transform(op.transform(coord)) == pytest.approx(coord)

    def test_mismatched_quantities_rejected(self):
        with pytest.raises(MalformedDefinitionError):
            UnitConversion([DEGREE], [METER])
        with pytest.raises(MalformedDefinitionError):
            create_unit_converter(DEGREE, RADIAN, FOOT)


class TestCoordinateRounding:
    """Rounding tests"""

    def test_rounds_to_resolution(self):
        result = CoordinateRounding.CENTIMETER.transform([1.234, 5.678])
        assert result == pytest.approx([1.23, 5.68])

    def test_ties_to_even(self):
        assert CoordinateRounding.METER.transform([0.5, 1.5, 2.5]) == [0.0, 2.0, 2.0]

    def test_nan_passes_through(self):
        result = CoordinateRounding.KILOMETER.transform([1499.0, float("nan")])
        assert result[0] == 1000.0
        assert math.isnan(result[1])

    def test_decimal_places(self):
        op = CoordinateRounding.from_decimal_places(3)
        assert op.transform([1.23456]) == pytest.approx([1.235])

    def test_not_invertible(self):
        with pytest.raises(NonInvertibleOperationError):
            CoordinateRounding.MILLIMETER.inverse()

    def test_invalid_resolution(self):
        with pytest.raises(MalformedDefinitionError):
            CoordinateRounding(0.0)


class TestCoordinateSwitch:
    """Axis switch tests"""

    def test_swaps_first_two(self):
        assert CoordinateSwitch.SWITCH_LAT_LON.transform([1.0, 2.0, 3.0]) == [2.0, 1.0, 3.0]

    def test_self_inverse(self):
        assert CoordinateSwitch.SWITCH_LAT_LON.inverse() is CoordinateSwitch.SWITCH_LAT_LON


class TestLongitudeRotation:
    """Prime meridian rotation tests"""

    def test_rotation_and_inverse(self):
        rotation = LongitudeRotation(float(np.radians(2.33722917)))
        coord = [0.8, 0.01, 5.0]
        moved = rotation.transform(coord)
        assert moved[1] == pytest.approx(0.01 + np.radians(2.33722917))
        assert rotation.inverse().transform(moved) == pytest.approx(coord)

    def test_zero_rotation_is_identity(self):
        assert LongitudeRotation(0.0).is_identity()
