"""
Tests for lookup tools (terrain_tile_from_lonlat, terrain_tile_from_pixel,
terrain_geotransform, terrain_status).

Tests cover:
- Registration
- Success paths (JSON and text output modes)
- Invalid input -> ErrorResponse
- Token never appearing in tile URLs
"""

import inspect
import json
import math

import pytest
from unittest.mock import MagicMock

from terrain_rgb_dem.core.locator import tile_from_lonlat

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def lookup_tools(mock_manager):
    """Register lookup tools and return (tools_dict, manager)."""
    tools = {}
    mcp = MagicMock()

    def capture_tool(**kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn

        return decorator

    mcp.tool = capture_tool

    from terrain_rgb_dem.tools.lookup import register_lookup_tools

    register_lookup_tools(mcp, mock_manager)
    return tools, mock_manager


class TestRegistration:
    def test_registers_four_tools(self, lookup_tools):
        tools, _ = lookup_tools
        assert set(tools) == {
            "terrain_tile_from_lonlat",
            "terrain_tile_from_pixel",
            "terrain_geotransform",
            "terrain_status",
        }

    def test_all_tools_are_coroutines(self, lookup_tools):
        tools, _ = lookup_tools
        for fn in tools.values():
            assert inspect.iscoroutinefunction(fn)


# ===========================================================================
# terrain_tile_from_lonlat
# ===========================================================================


class TestTileFromLonLat:
    async def test_success_json(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_lonlat"](lon=13.81, lat=45.12, zoom=15)
        data = json.loads(result)

        expected = tile_from_lonlat(13.81, 45.12, 15, 512)
        assert data["mode"] == "lonlat"
        assert data["tile"] == {"zoom": 15, "x": expected.x, "y": expected.y}
        assert data["tile_size"] == 512
        assert data["pixel"][0] // 512 == expected.x
        assert data["tile_url"].endswith(f"/15/{expected.x}/{expected.y}@2x.pngraw")

    async def test_token_not_in_url(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_lonlat"](lon=13.81, lat=45.12, zoom=15)
        assert "test-token" not in result

    async def test_text_mode(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_lonlat"](
            lon=0.0, lat=0.0, zoom=1, tile_size=256, output_mode="text"
        )
        assert "Tile: 1/1/1 (lonlat mode)" in result
        assert "Tile size: 256px" in result

    async def test_latitude_90_error(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_lonlat"](lon=0.0, lat=90.0, zoom=15)
        data = json.loads(result)
        assert "latitude" in data["error"]
        assert data["error_type"] == "InvalidInputError"

    async def test_error_text_mode(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_lonlat"](
            lon=200.0, lat=0.0, zoom=15, output_mode="text"
        )
        assert result.startswith("Error:")


# ===========================================================================
# terrain_tile_from_pixel
# ===========================================================================


class TestTileFromPixel:
    async def test_success_json(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_pixel"](pixel_x=4516100, pixel_y=2930000, zoom=15)
        data = json.loads(result)

        assert data["mode"] == "pixel"
        assert data["tile"] == {"zoom": 15, "x": 4516100 // 512, "y": 2930000 // 512}
        assert data["pixel"] == [4516100, 2930000]

    async def test_256_tiles_no_retina(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_pixel"](
            pixel_x=300, pixel_y=10, zoom=2, tile_size=256
        )
        data = json.loads(result)
        assert data["tile_url"].endswith("/2/1/0.pngraw")

    async def test_negative_pixel_error(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_pixel"](pixel_x=-1, pixel_y=0, zoom=3)
        data = json.loads(result)
        assert "pixel_x" in data["error"]

    async def test_outside_pyramid_error(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_tile_from_pixel"](
            pixel_x=4096, pixel_y=0, zoom=2, tile_size=256
        )
        assert "outside the pyramid" in json.loads(result)["error"]


# ===========================================================================
# terrain_geotransform
# ===========================================================================


class TestGeoTransform:
    async def test_success_json(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_geotransform"](lon=13.81, lat=45.12, zoom=15)
        data = json.loads(result)

        res = (2 * math.pi * 6378137 / 256) / 2**15
        gt = data["geotransform"]
        assert len(gt) == 6
        assert gt[1] == pytest.approx(res, rel=1e-6)
        assert gt[5] == pytest.approx(-res, rel=1e-6)
        assert gt[2] == 0.0 and gt[4] == 0.0
        assert data["resolution_m"] == pytest.approx(res, rel=1e-6)
        assert data["crs"] == "EPSG:3857"

    async def test_bounds_cover_grid(self, lookup_tools):
        tools, _ = lookup_tools
        data = json.loads(await tools["terrain_geotransform"](lon=13.81, lat=45.12, zoom=15))
        min_x, min_y, max_x, max_y = data["bounds"]
        assert max_x - min_x == pytest.approx(512 * data["resolution_m"])
        assert max_y - min_y == pytest.approx(512 * data["resolution_m"])
        assert min_x == pytest.approx(data["geotransform"][0])
        assert max_y == pytest.approx(data["geotransform"][3])

    async def test_text_mode(self, lookup_tools):
        tools, _ = lookup_tools
        result = await tools["terrain_geotransform"](
            lon=13.81, lat=45.12, zoom=15, output_mode="text"
        )
        assert "GeoTransform:" in result
        assert "EPSG:3857" in result

    async def test_pole_error(self, lookup_tools):
        tools, _ = lookup_tools
        data = json.loads(await tools["terrain_geotransform"](lon=0.0, lat=-90.0, zoom=3))
        assert data["error_type"] == "InvalidInputError"


# ===========================================================================
# terrain_status
# ===========================================================================


class TestStatus:
    async def test_success_json(self, lookup_tools, monkeypatch):
        monkeypatch.delenv("CHUK_ARTIFACTS_PROVIDER", raising=False)
        tools, _ = lookup_tools
        data = json.loads(await tools["terrain_status"]())

        assert data["server"] == "terrain-rgb-dem"
        assert data["version"] == "0.1.0"
        assert data["storage_provider"] == "memory"
        assert data["artifact_store_available"] is True
        assert data["token_configured"] is True

    async def test_store_unavailable(self, lookup_tools):
        tools, manager = lookup_tools
        manager._get_store = MagicMock(side_effect=RuntimeError("no store"))
        data = json.loads(await tools["terrain_status"]())
        assert data["artifact_store_available"] is False

    async def test_no_token(self, lookup_tools):
        tools, manager = lookup_tools
        manager.client = None
        data = json.loads(await tools["terrain_status"]())
        assert data["token_configured"] is False

    async def test_provider_from_env(self, lookup_tools, monkeypatch):
        monkeypatch.setenv("CHUK_ARTIFACTS_PROVIDER", "filesystem")
        tools, _ = lookup_tools
        result = await tools["terrain_status"](output_mode="text")
        assert "Storage: filesystem" in result
