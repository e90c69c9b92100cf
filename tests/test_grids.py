"""Unit tests for grid offset providers and grid shift transformations."""

import struct
from pathlib import Path

import numpy as np
import pytest

from common.exceptions import MalformedDefinitionError, OutOfExtentError
from datum.extent import WORLD, GeographicExtent
from operations.base import OperationKind
from transformations.grid_shift import GridShiftTransformation
from transformations.grids import GeographicGrid, InMemoryGridProvider, NTv2GridFile


def _record(key: str, value: bytes) -> bytes:
    return key.ljust(8).encode("ascii") + value


def _int(value: int) -> bytes:
    return struct.pack("<i", value) + b"\x00" * 4


def _double(value: float) -> bytes:
    return struct.pack("<d", value)


def _text(value: str) -> bytes:
    return value.ljust(8).encode("ascii")


def write_ntv2(path: Path) -> Path:
    """Write a 3x3 NTv2 grid over 46-48°N, 2-4°E.

    The latitude shift grows eastward by 1" per degree (0" on 2°E), the
    longitude shift is 4.5" east everywhere.
    """
    data = b"".join([
        _record("NUM_OREC", _int(11)),
        _record("NUM_SREC", _int(11)),
        _record("NUM_FILE", _int(1)),
        _record("GS_TYPE", _text("SECONDS")),
        _record("VERSION", _text("NTv2.0")),
        _record("SYSTEM_F", _text("NTF")),
        _record("SYSTEM_T", _text("RGF93")),
        _record("MAJOR_F", _double(6378249.2)),
        _record("MINOR_F", _double(6356515.0)),
        _record("MAJOR_T", _double(6378137.0)),
        _record("MINOR_T", _double(6356752.314)),
        _record("SUB_NAME", _text("FRANCE")),
        _record("PARENT", _text("NONE")),
        _record("CREATED", _text("")),
        _record("UPDATED", _text("")),
        _record("S_LAT", _double(46 * 3600.0)),
        _record("N_LAT", _double(48 * 3600.0)),
        _record("E_LONG", _double(-4 * 3600.0)),
        _record("W_LONG", _double(-2 * 3600.0)),
        _record("LAT_INC", _double(3600.0)),
        _record("LONG_INC", _double(3600.0)),
        _record("GS_COUNT", _int(9)),
    ])
    # South to north, east to west; longitude shifts positive west
    for _row in range(3):
        for column in range(3):
            data += struct.pack("<4f", 2.0 - column, -4.5, 0.0, 0.0)
    path.write_bytes(data)
    return path


@pytest.fixture
def ntv2_file(tmp_path) -> NTv2GridFile:
    return NTv2GridFile(write_ntv2(tmp_path / "synthetic.gsb"))


@pytest.fixture
def linear_grid() -> GeographicGrid:
    """Grid whose values equal (lat, lon) at the nodes."""
    lats = np.array([48.0, 47.0, 46.0])
    lons = np.array([2.0, 3.0, 4.0])
    values = np.stack(np.meshgrid(lats, lons, indexing="ij"), axis=-1)
    return GeographicGrid(west=2.0, north=48.0, east=4.0, south=46.0, values=values)


class TestGeographicExtent:
    """Extent tests"""

    def test_inside(self):
        extent = GeographicExtent("France", 41.0, 51.5, -5.5, 10.0)
        assert extent.is_inside(48.85, 2.35)
        assert not extent.is_inside(52.0, 2.35)
        assert extent.is_inside(41.0, -5.5)

    def test_antimeridian(self):
        extent = GeographicExtent("Pacific", -10.0, 10.0, 170.0, -170.0)
        assert extent.is_inside(0.0, 175.0)
        assert extent.is_inside(0.0, -175.0)
        assert not extent.is_inside(0.0, 0.0)

    def test_longitudes_wrap(self):
        assert WORLD.is_inside(0.0, 180.0)
        assert WORLD.is_inside(0.0, 540.0)

    def test_equality_ignores_name(self):
        assert GeographicExtent("A", 0, 1, 0, 1) == GeographicExtent("B", 0, 1, 0, 1)


class TestGeographicGrid:
    """Bilinear interpolation tests"""

    def test_nodes(self, linear_grid):
        assert linear_grid.bilinear_interpolation(47.0, 3.0) == pytest.approx([47.0, 3.0])

    def test_interpolation_is_exact_for_linear_values(self, linear_grid):
        assert linear_grid.bilinear_interpolation(46.25, 3.6) == pytest.approx([46.25, 3.6])

    def test_last_row_and_column(self, linear_grid):
        assert linear_grid.bilinear_interpolation(46.0, 4.0) == pytest.approx([46.0, 4.0])

    def test_outside(self, linear_grid):
        with pytest.raises(OutOfExtentError):
            linear_grid.bilinear_interpolation(45.0, 3.0)

    def test_shape_validation(self):
        with pytest.raises(MalformedDefinitionError):
            GeographicGrid(0.0, 1.0, 1.0, 0.0, np.zeros((1, 3, 2)))

    def test_resolution(self, linear_grid):
        assert linear_grid.resolution == pytest.approx(1.0)


class TestInMemoryGridProvider:
    """In-memory provider tests"""

    @pytest.fixture
    def provider(self) -> InMemoryGridProvider:
        values = np.zeros((3, 3, 2))
        values[:, :, 0] = 0.001
        values[:, :, 1] = np.array([0.0, 0.001, 0.002])
        grid = GeographicGrid(west=2.0, north=48.0, east=4.0, south=46.0, values=values)
        return InMemoryGridProvider(grid, "NTF", "RGF93")

    def test_forward_lookup(self, provider):
        assert provider.forward_lookup(47.0, 2.5) == pytest.approx((0.001, 0.0005))

    def test_outside_coverage(self, provider):
        assert provider.forward_lookup(10.0, 2.5) is None
        assert provider.reverse_lookup(10.0, 2.5) is None

    def test_reverse_lookup_inverts_forward(self, provider):
        lat, lon = 47.0, 2.5
        dlat, dlon = provider.forward_lookup(lat, lon)
        rlat, rlon = provider.reverse_lookup(lat + dlat, lon + dlon)
        assert lat + dlat + rlat == pytest.approx(lat, abs=1e-10)
        assert lon + dlon + rlon == pytest.approx(lon, abs=1e-10)

    def test_single_valued_grid_rejected(self):
        grid = GeographicGrid(0.0, 1.0, 1.0, 0.0, np.zeros((2, 2)))
        with pytest.raises(MalformedDefinitionError):
            InMemoryGridProvider(grid, "A", "B")


class TestNTv2GridFile:
    """NTv2 reader tests"""

    def test_lazy_loading(self, ntv2_file):
        assert not ntv2_file.is_loaded()
        ntv2_file.forward_lookup(47.0, 3.0)
        assert ntv2_file.is_loaded()
        ntv2_file.unload()
        assert not ntv2_file.is_loaded()

    def test_header(self, ntv2_file):
        header = ntv2_file.header
        assert header["NUM_FILE"] == 1
        assert header["GS_TYPE"] == "SECONDS"
        assert ntv2_file.from_datum == "NTF"
        assert ntv2_file.to_datum == "RGF93"

    def test_node_offsets(self, ntv2_file):
        dlat, dlon = ntv2_file.forward_lookup(47.0, 3.0)
        assert dlat == pytest.approx(1.0 / 3600)
        assert dlon == pytest.approx(4.5 / 3600)

    def test_interpolated_offsets(self, ntv2_file):
        dlat, dlon = ntv2_file.forward_lookup(47.3, 2.5)
        assert dlat == pytest.approx(0.5 / 3600)
        assert dlon == pytest.approx(4.5 / 3600)

    def test_outside_coverage(self, ntv2_file):
        assert ntv2_file.forward_lookup(40.0, 3.0) is None

    def test_big_endian_file(self, tmp_path):
        little = write_ntv2(tmp_path / "little.gsb").read_bytes()
        # Swap every 4 or 8 byte value of the headers and the nodes
        swapped = bytearray(little)
        for start in range(0, 22 * 16, 16):
            key = little[start:start + 8].decode().strip()
            value = little[start + 8:start + 16]
            if key in ("NUM_OREC", "NUM_SREC", "NUM_FILE", "GS_COUNT"):
                swapped[start + 8:start + 12] = value[:4][::-1]
            elif key not in ("GS_TYPE", "VERSION", "SYSTEM_F", "SYSTEM_T",
                             "SUB_NAME", "PARENT", "CREATED", "UPDATED"):
                swapped[start + 8:start + 16] = value[::-1]
        for start in range(22 * 16, len(little), 4):
            swapped[start:start + 4] = little[start:start + 4][::-1]
        path = tmp_path / "big.gsb"
        path.write_bytes(bytes(swapped))
        dlat, _ = NTv2GridFile(path).forward_lookup(47.0, 3.0)
        assert dlat == pytest.approx(1.0 / 3600)

    def test_missing_file(self, tmp_path):
        with pytest.raises(MalformedDefinitionError):
            NTv2GridFile(tmp_path / "missing.gsb").load()

    def test_truncated_file(self, tmp_path):
        data = write_ntv2(tmp_path / "full.gsb").read_bytes()
        path = tmp_path / "truncated.gsb"
        path.write_bytes(data[:-20])
        with pytest.raises(MalformedDefinitionError):
            NTv2GridFile(path).load()


class TestGridShiftTransformation:
    """Grid shift operation tests"""

    def test_shift(self, ntv2_file):
        op = GridShiftTransformation(ntv2_file, precision=0.01)
        lat, lon = op.transform([np.radians(47.0), np.radians(3.0)])
        assert lat == pytest.approx(np.radians(47.0 + 1.0 / 3600), abs=1e-12)
        assert lon == pytest.approx(np.radians(3.0 + 4.5 / 3600), abs=1e-12)

    def test_height_kept(self, ntv2_file):
        op = GridShiftTransformation(ntv2_file)
        assert op.transform([np.radians(47.0), np.radians(3.0), 12.5])[2] == 12.5

    def test_outside_unchanged(self, ntv2_file):
        op = GridShiftTransformation(ntv2_file)
        coord = [float(np.radians(10.0)), float(np.radians(3.0))]
        assert op.transform(coord) == coord

    def test_inverse(self, ntv2_file):
        op = GridShiftTransformation(ntv2_file, precision=0.01)
        inverse = op.inverse()
        assert inverse.inverse() is op
        assert op.inverse() is inverse
        assert inverse.precision == 0.01
        coord = [float(np.radians(47.3)), float(np.radians(2.5))]
        back = inverse.transform(op.transform(coord))
        assert back == pytest.approx(coord, abs=1e-12)

    def test_datums_and_kind(self, ntv2_file):
        op = GridShiftTransformation(ntv2_file)
        assert op.from_datum == "ntf"
        assert op.to_datum == "rgf93"
        assert op.kind is OperationKind.GRID_SHIFT
