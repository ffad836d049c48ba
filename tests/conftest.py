"""Shared test fixtures for terrain-rgb-dem."""

import io

import numpy as np
import pytest
from unittest.mock import AsyncMock, MagicMock
from PIL import Image


def _encode(elevation_m: float) -> tuple[int, int, int]:
    code = int(round((elevation_m + 10000.0) / 0.1))
    return (code >> 16) & 0xFF, (code >> 8) & 0xFF, code & 0xFF


@pytest.fixture
def encode_elevation():
    """Callable mapping an elevation in metres to its Terrain-RGB triple."""
    return _encode


@pytest.fixture
def sample_rgb_tile():
    """8x8x3 uint8 Terrain-RGB tile with elevations 0-630 m in 10 m steps."""
    tile = np.zeros((8, 8, 3), dtype=np.uint8)
    for row in range(8):
        for col in range(8):
            tile[row, col] = _encode((row * 8 + col) * 10.0)
    return tile


@pytest.fixture
def sample_rgba_tile(sample_rgb_tile):
    """Same tile with an opaque alpha channel."""
    alpha = np.full(sample_rgb_tile.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.concatenate([sample_rgb_tile, alpha], axis=2)


@pytest.fixture
def terrain_png_bytes(sample_rgb_tile):
    """PNG encoding of sample_rgb_tile."""
    img = Image.fromarray(sample_rgb_tile)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def sample_elevation():
    """64x64 float32 elevation grid with values 100-500 m."""
    np.random.seed(42)
    return np.random.uniform(100, 500, (64, 64)).astype(np.float32)


@pytest.fixture
def sample_geotransform():
    """GeoTransform anchored at (13.81, 45.12), zoom 15."""
    from terrain_rgb_dem.core.georeferencer import geotransform_from_lonlat

    return geotransform_from_lonlat(13.81, 45.12, 15)


@pytest.fixture
def mock_client(terrain_png_bytes):
    """TerrainTileClient stand-in returning the sample PNG."""
    from terrain_rgb_dem.core.tile_client import TerrainTileClient

    client = TerrainTileClient(access_token="test-token")
    client.fetch = AsyncMock(return_value=terrain_png_bytes)
    return client


@pytest.fixture
def mock_artifact_store():
    """Mock artifact store."""
    store = AsyncMock()
    store.store = AsyncMock(return_value=None)
    store.retrieve = AsyncMock(return_value=b"fake-geotiff-bytes")
    return store


@pytest.fixture
def mock_manager(mock_client, mock_artifact_store):
    """TerrainManager with mocked tile client and artifact store."""
    from terrain_rgb_dem.core.terrain_manager import TerrainManager

    manager = TerrainManager(client=mock_client)
    manager._get_store = MagicMock(return_value=mock_artifact_store)
    return manager


@pytest.fixture
def mock_mcp():
    """Mock ChukMCPServer."""
    mcp = MagicMock()
    mcp.tool = MagicMock(return_value=lambda fn: fn)
    return mcp
