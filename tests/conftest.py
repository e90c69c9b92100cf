"""Pytest configuration and shared fixtures."""

import io
import os
import sys
import zipfile
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import numpy as np
import pytest
import requests
from pyproj.datadir import DataDirError, get_data_dir, get_user_data_dir

from datum.transformation_graph import TransformationRegistry
from operations.factory import CoordinateOperationFactory

NTF_R93_GRID = "ntf_r93.gsb"
PROJ_DATUMGRID_ARCHIVE = "https://download.osgeo.org/proj/proj-datumgrid-1.8.zip"


@pytest.fixture
def registry() -> TransformationRegistry:
    """Return a transformation registry with an empty graph."""
    return TransformationRegistry()


@pytest.fixture
def factory(registry: TransformationRegistry) -> CoordinateOperationFactory:
    """Return a factory resolving through the fresh registry."""
    return CoordinateOperationFactory(registry)


@pytest.fixture
def paris_geographic() -> list:
    """(lat, lon, h) of Paris in radians and meters."""
    return [float(np.radians(48.8566)), float(np.radians(2.3522)), 35.0]


@pytest.fixture(scope="session")
def ntf_r93_grid(request, tmp_path_factory) -> Path:
    """Return the IGN NTF to RGF93 NTv2 grid.

    The grid is looked up in tests/data, the pytest cache and the PROJ data
    directories, then fetched from the PROJ datum grid archive into the pytest
    cache. The test is skipped when none of these provide it.
    """
    cache = getattr(request.config, "cache", None)
    if cache is not None:
        cache_dir = Path(cache.mkdir("grids"))
    else:
        cache_dir = tmp_path_factory.mktemp("grids")
    directories = [Path(__file__).parent / "data", cache_dir]
    try:
        directories += [Path(d) for d in get_data_dir().split(os.pathsep)]
    except DataDirError:
        pass
    directories.append(Path(get_user_data_dir()))
    for directory in directories:
        path = directory / NTF_R93_GRID
        if path.is_file():
            return path

    try:
        response = requests.get(PROJ_DATUMGRID_ARCHIVE, timeout=120)
        response.raise_for_status()
    except requests.RequestException as e:
        pytest.skip(f"{NTF_R93_GRID} not available: {e}")
    with zipfile.ZipFile(io.BytesIO(response.content)) as archive:
        member = next(n for n in archive.namelist() if n.endswith(NTF_R93_GRID))
        (cache_dir / NTF_R93_GRID).write_bytes(archive.read(member))
    return cache_dir / NTF_R93_GRID
