"""
Grid Offset Providers.

A grid offset provider answers "by how much must this geographic point be
shifted?" for a datum change defined by an interpolated grid. Lookups take
latitude and longitude in decimal degrees (longitude positive east) and
return ``(dlat_deg, dlon_deg)``, or ``None`` when the point is outside the
grid coverage. Lack of coverage is an ordinary outcome, not an error.

Implementations
---------------
- :class:`GeographicGrid`: a regular latitude/longitude grid of values with
  bilinear interpolation.
- :class:`InMemoryGridProvider`: offsets held in a :class:`GeographicGrid`.
- :class:`NTv2GridFile`: offsets read from an NTv2 binary grid file.

References
----------
- Junkins, D.R. & Farley, S.A. (1995). NTv2 Developer's Guide.
  Geodetic Survey Division, Natural Resources Canada.
"""

import struct
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from common.exceptions import MalformedDefinitionError, OutOfExtentError
from common.logging_config import get_logger
from datum.extent import GeographicExtent

logger = get_logger(__name__)

Offset = Tuple[float, float]

REVERSE_ITERATIONS = 4


class GeographicGrid:
    """Regular grid of values over a latitude/longitude box.

    Parameters
    ----------
    west, north, east, south : float
        Bounding longitudes and latitudes in decimal degrees. An eastern
        longitude lower than the western one is taken modulo ``modulo``.
    values : ndarray, shape (rows, columns, dim)
        Node values. Row 0 is the northern row, column 0 the western column.
    modulo : float
        Longitude period.
    """

    def __init__(
        self,
        west: float,
        north: float,
        east: float,
        south: float,
        values: np.ndarray,
        modulo: float = 360.0
    ):
        values = np.asarray(values, dtype=np.float64)
        if values.ndim == 2:
            values = values[:, :, np.newaxis]
        if values.ndim != 3 or values.shape[0] < 2 or values.shape[1] < 2:
            raise MalformedDefinitionError(
                f"Grid values must have shape (rows >= 2, columns >= 2, dim), got {values.shape}"
            )
        self.x0 = float(west)
        self.y0 = float(north)
        self.xL = float(east + modulo if east < west else east)
        self.yL = float(south)
        self.modulo = modulo
        self.values = values
        self.rows, self.columns, self.dim = values.shape
        self.dx = (self.xL - self.x0) / (self.columns - 1)
        self.dy = (self.yL - self.y0) / (self.rows - 1)
        self.extent = GeographicExtent("Grid", self.yL, self.y0, self.x0, self.xL, modulo)

    @property
    def resolution(self) -> float:
        return min(abs(self.dx), abs(self.dy))

    def bilinear_interpolation(self, latitude: float, longitude: float) -> np.ndarray:
        """Interpolated value at (latitude, longitude) in degrees.

        Points on the last row or column reuse that row or column.

        Raises
        ------
        OutOfExtentError
            If the point is outside the grid.
        """
        if not self.extent.is_inside(latitude, longitude):
            raise OutOfExtentError(latitude, longitude, str(self))

        x = longitude
        while x < self.x0:
            x += self.modulo
        while x > self.xL and x - self.modulo >= self.x0:
            x -= self.modulo
        y = latitude

        j = int(np.floor((x - self.x0) / self.dx))
        fx = (x - self.x0) / self.dx - j
        i = int(np.floor((y - self.y0) / self.dy))
        fy = (y - self.y0) / self.dy - i
        j = min(max(j, 0), self.columns - 1)
        i = min(max(i, 0), self.rows - 1)
        i1 = i + 1 if i < self.rows - 1 else i
        j1 = j + 1 if j < self.columns - 1 else j

        v = self.values
        return (
            (1 - fx) * (1 - fy) * v[i, j]
            + (1 - fx) * fy * v[i1, j]
            + fx * (1 - fy) * v[i, j1]
            + fx * fy * v[i1, j1]
        )

    def __repr__(self) -> str:
        return (
            f"GeographicGrid(west={self.x0}, north={self.y0}, east={self.xL}, "
            f"south={self.yL}, columns={self.columns}, rows={self.rows})"
        )


class GridOffsetProvider(ABC):
    """Source of (dlat, dlon) offsets in decimal degrees.

    ``reverse_lookup`` is derived from ``forward_lookup`` by fixed-point
    iteration: it finds the offset that, added to the point, gives a point
    whose forward offset brings it back.
    """

    @property
    @abstractmethod
    def from_datum(self) -> str:
        """Name of the datum the forward offsets start from."""

    @property
    @abstractmethod
    def to_datum(self) -> str:
        """Name of the datum the forward offsets lead to."""

    @abstractmethod
    def forward_lookup(self, lat_deg: float, lon_deg: float) -> Optional[Offset]:
        """Offset to add to a point of ``from_datum``, or None outside coverage."""

    def reverse_lookup(self, lat_deg: float, lon_deg: float) -> Optional[Offset]:
        """Offset to add to a point of ``to_datum``, or None outside coverage."""
        first = self.forward_lookup(lat_deg, lon_deg)
        if first is None:
            return None
        dlat, dlon = first
        for _ in range(REVERSE_ITERATIONS):
            shift = self.forward_lookup(lat_deg - dlat, lon_deg - dlon)
            if shift is None:
                break
            dlat, dlon = shift
        return -dlat, -dlon

    @abstractmethod
    def is_loaded(self) -> bool:
        ...

    @abstractmethod
    def load(self) -> None:
        ...

    @abstractmethod
    def unload(self) -> None:
        ...


class InMemoryGridProvider(GridOffsetProvider):
    """Offsets held in memory by a 2-valued :class:`GeographicGrid`.

    Parameters
    ----------
    grid : GeographicGrid
        Grid whose node values are (dlat_deg, dlon_deg).
    from_datum, to_datum : str
        Names of the datums the offsets convert between.
    """

    def __init__(self, grid: GeographicGrid, from_datum: str, to_datum: str):
        if grid.dim < 2:
            raise MalformedDefinitionError("An offset grid needs two values per node")
        self.grid = grid
        self._from_datum = from_datum
        self._to_datum = to_datum

    @property
    def from_datum(self) -> str:
        return self._from_datum

    @property
    def to_datum(self) -> str:
        return self._to_datum

    def forward_lookup(self, lat_deg: float, lon_deg: float) -> Optional[Offset]:
        try:
            value = self.grid.bilinear_interpolation(lat_deg, lon_deg)
        except OutOfExtentError:
            return None
        return float(value[0]), float(value[1])

    def is_loaded(self) -> bool:
        return True

    def load(self) -> None:
        pass

    def unload(self) -> None:
        pass

    def __repr__(self) -> str:
        return f"InMemoryGridProvider({self._from_datum} -> {self._to_datum}, {self.grid!r})"


# ---------------------------------------------------------------------------
# NTv2
# ---------------------------------------------------------------------------

RECORD_SIZE = 16
OVERVIEW_RECORDS = 11
SUBGRID_RECORDS = 11
NODE_SIZE = 16
SECONDS_PER_DEGREE = 3600.0


@dataclass
class NTv2SubGrid:
    """One sub-file of an NTv2 grid, converted to east-positive degrees."""
    name: str
    parent: str
    lat_increment: float
    grid: GeographicGrid


def _read_records(data: bytes, offset: int, count: int) -> Dict[str, bytes]:
    records: Dict[str, bytes] = {}
    for k in range(count):
        start = offset + k * RECORD_SIZE
        key = data[start:start + 8].decode("ascii", errors="replace").strip()
        records[key] = data[start + 8:start + RECORD_SIZE]
    return records


def _as_int(raw: bytes, endian: str) -> int:
    return struct.unpack(endian + "i", raw[:4])[0]


def _as_double(raw: bytes, endian: str) -> float:
    return struct.unpack(endian + "d", raw)[0]


def _as_str(raw: bytes) -> str:
    return raw.decode("ascii", errors="replace").strip()


class NTv2GridFile(GridOffsetProvider):
    """Offsets read from an NTv2 (``.gsb``) grid file.

    The file is parsed lazily on first lookup (or on :meth:`load`) under a
    lock, so one instance can be shared between threads. Both byte orders
    are accepted. When several sub-grids cover a point, the finest is used.

    Parameters
    ----------
    path : str or Path
        Location of the grid file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._subgrids: Optional[List[NTv2SubGrid]] = None
        self._header: Dict[str, object] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def load(self) -> None:
        with self._lock:
            if self._subgrids is not None:
                return
            if not self.path.is_file():
                raise MalformedDefinitionError(f"NTv2 grid file not found: {self.path}")
            data = self.path.read_bytes()
            self._header, self._subgrids = self._parse(data)
            logger.info(
                f"Loaded NTv2 grid {self.path.name}: {len(self._subgrids)} sub-grid(s), "
                f"{self._header.get('SYSTEM_F')} -> {self._header.get('SYSTEM_T')}"
            )

    def unload(self) -> None:
        with self._lock:
            self._subgrids = None

    def is_loaded(self) -> bool:
        return self._subgrids is not None

    def _ensure_loaded(self) -> List[NTv2SubGrid]:
        subgrids = self._subgrids
        if subgrids is None:
            self.load()
            subgrids = self._subgrids
        return subgrids

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    @staticmethod
    def _parse(data: bytes) -> Tuple[Dict[str, object], List[NTv2SubGrid]]:
        if len(data) < OVERVIEW_RECORDS * RECORD_SIZE:
            raise MalformedDefinitionError("NTv2 file too short for its overview header")

        # NUM_OREC is always 11, which tells the byte order
        endian = "<" if struct.unpack("<i", data[8:12])[0] == OVERVIEW_RECORDS else ">"

        overview = _read_records(data, 0, OVERVIEW_RECORDS)
        if "NUM_OREC" not in overview or "NUM_FILE" not in overview:
            raise MalformedDefinitionError("Not an NTv2 grid file (missing overview records)")

        header: Dict[str, object] = {
            "NUM_OREC": _as_int(overview["NUM_OREC"], endian),
            "NUM_SREC": _as_int(overview["NUM_SREC"], endian),
            "NUM_FILE": _as_int(overview["NUM_FILE"], endian),
            "GS_TYPE": _as_str(overview.get("GS_TYPE", b"SECONDS ")),
            "VERSION": _as_str(overview.get("VERSION", b"")),
            "SYSTEM_F": _as_str(overview.get("SYSTEM_F", b"")),
            "SYSTEM_T": _as_str(overview.get("SYSTEM_T", b"")),
        }
        for key in ("MAJOR_F", "MINOR_F", "MAJOR_T", "MINOR_T"):
            if key in overview:
                header[key] = _as_double(overview[key], endian)

        if str(header["GS_TYPE"]).upper() != "SECONDS":
            raise MalformedDefinitionError(f"Unsupported NTv2 GS_TYPE: {header['GS_TYPE']}")

        subgrids: List[NTv2SubGrid] = []
        offset = int(header["NUM_OREC"]) * RECORD_SIZE
        node_dtype = np.dtype(endian + "f4")
        for _ in range(int(header["NUM_FILE"])):
            records = _read_records(data, offset, SUBGRID_RECORDS)
            offset += SUBGRID_RECORDS * RECORD_SIZE

            s_lat = _as_double(records["S_LAT"], endian)
            n_lat = _as_double(records["N_LAT"], endian)
            e_long = _as_double(records["E_LONG"], endian)
            w_long = _as_double(records["W_LONG"], endian)
            lat_inc = _as_double(records["LAT_INC"], endian)
            long_inc = _as_double(records["LONG_INC"], endian)
            count = _as_int(records["GS_COUNT"], endian)

            rows = int(round((n_lat - s_lat) / lat_inc)) + 1
            columns = int(round((w_long - e_long) / long_inc)) + 1
            if rows * columns != count:
                raise MalformedDefinitionError(
                    f"NTv2 sub-grid {_as_str(records['SUB_NAME'])}: "
                    f"{rows}x{columns} nodes expected, GS_COUNT is {count}"
                )
            end = offset + count * NODE_SIZE
            if end > len(data):
                raise MalformedDefinitionError("NTv2 file truncated inside node data")

            nodes = np.frombuffer(data, dtype=node_dtype, count=count * 4, offset=offset)
            offset = end
            # Stored south to north, east to west; seconds, longitude positive west
            nodes = nodes.reshape(rows, columns, 4).astype(np.float64)
            offsets = np.empty((rows, columns, 2))
            offsets[:, :, 0] = nodes[:, :, 0] / SECONDS_PER_DEGREE
            offsets[:, :, 1] = -nodes[:, :, 1] / SECONDS_PER_DEGREE
            offsets = offsets[::-1, ::-1, :]

            grid = GeographicGrid(
                west=-w_long / SECONDS_PER_DEGREE,
                north=n_lat / SECONDS_PER_DEGREE,
                east=-e_long / SECONDS_PER_DEGREE,
                south=s_lat / SECONDS_PER_DEGREE,
                values=offsets
            )
            subgrids.append(NTv2SubGrid(
                name=_as_str(records["SUB_NAME"]),
                parent=_as_str(records["PARENT"]),
                lat_increment=lat_inc,
                grid=grid
            ))
        return header, subgrids

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def header(self) -> Dict[str, object]:
        self._ensure_loaded()
        return dict(self._header)

    @property
    def from_datum(self) -> str:
        self._ensure_loaded()
        return str(self._header.get("SYSTEM_F", ""))

    @property
    def to_datum(self) -> str:
        self._ensure_loaded()
        return str(self._header.get("SYSTEM_T", ""))

    def subgrid_for(self, lat_deg: float, lon_deg: float) -> Optional[NTv2SubGrid]:
        """Finest sub-grid covering the point."""
        best = None
        for subgrid in self._ensure_loaded():
            if subgrid.grid.extent.is_inside(lat_deg, lon_deg):
                if best is None or subgrid.lat_increment < best.lat_increment:
                    best = subgrid
        return best

    def forward_lookup(self, lat_deg: float, lon_deg: float) -> Optional[Offset]:
        subgrid = self.subgrid_for(lat_deg, lon_deg)
        if subgrid is None:
            return None
        value = subgrid.grid.bilinear_interpolation(lat_deg, lon_deg)
        return float(value[0]), float(value[1])

    def __repr__(self) -> str:
        return f"NTv2GridFile({str(self.path)!r})"
