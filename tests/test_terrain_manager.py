"""Tests for terrain_rgb_dem.core.terrain_manager.TerrainManager."""

from unittest.mock import AsyncMock, MagicMock, patch

import numpy as np
import pytest
import rasterio

from terrain_rgb_dem.core.georeferencer import geotransform_from_lonlat, tile_origin_lonlat
from terrain_rgb_dem.core.locator import LonLatRequest, PixelRequest, TileCoordinate
from terrain_rgb_dem.core.terrain_manager import TerrainManager, TerrainResult
from terrain_rgb_dem.errors import InvalidInputError, ShapeMismatchError, TileFetchError

LONLAT = LonLatRequest(lon=13.81, lat=45.12, zoom=15, tile_size=512)
PIXEL = PixelRequest(pixel_x=4516100, pixel_y=2930000, zoom=15, tile_size=512)


# ---------------------------------------------------------------------------
# Pure steps
# ---------------------------------------------------------------------------


class TestLocate:
    def test_lonlat(self, mock_manager):
        tile = mock_manager.locate(LONLAT)
        assert tile.zoom == 15

    def test_pixel(self, mock_manager):
        assert mock_manager.locate(PIXEL) == TileCoordinate(15, 4516100 // 512, 2930000 // 512)


class TestTilePath:
    def test_uses_client_base_url(self):
        from terrain_rgb_dem.core.tile_client import TerrainTileClient

        manager = TerrainManager(TerrainTileClient("tok", base_url="http://tiles.local"))
        assert manager.tile_path(TileCoordinate(2, 1, 3), 256) == "http://tiles.local/2/1/3.pngraw"

    def test_without_client(self):
        manager = TerrainManager()
        assert manager.tile_path(TileCoordinate(2, 1, 3), 512).endswith("/2/1/3@2x.pngraw")


class TestGeoreference:
    def test_lonlat_anchors_at_query_point(self, mock_manager):
        assert mock_manager.georeference(LONLAT) == geotransform_from_lonlat(13.81, 45.12, 15)

    def test_pixel_unreferenced_by_default(self, mock_manager):
        assert mock_manager.georeference(PIXEL) is None

    def test_pixel_snapped_to_tile(self, mock_manager):
        tile = mock_manager.locate(PIXEL)
        lon, lat = tile_origin_lonlat(tile, 512)
        assert mock_manager.georeference(PIXEL, snap_to_tile=True) == geotransform_from_lonlat(
            lon, lat, 15
        )

    def test_lonlat_snapped_moves_north_west(self, mock_manager):
        anchored = mock_manager.georeference(LONLAT)
        snapped = mock_manager.georeference(LONLAT, snap_to_tile=True)
        assert snapped.origin_x <= anchored.origin_x
        assert snapped.origin_y >= anchored.origin_y
        assert snapped.pixel_width == anchored.pixel_width

    @pytest.mark.parametrize(
        "request_",
        [
            PixelRequest(pixel_x=0, pixel_y=100000, zoom=1, tile_size=100000),
            PixelRequest(pixel_x=1600, pixel_y=0, zoom=2, tile_size=512),
        ],
    )
    def test_snap_outside_world_rejected_before_projection(self, mock_manager, request_):
        with pytest.raises(InvalidInputError, match="outside the pyramid"):
            mock_manager.georeference(request_, snap_to_tile=True)

    def test_snap_last_world_pixel(self, mock_manager):
        request = PixelRequest(pixel_x=1023, pixel_y=1023, zoom=2, tile_size=512)
        transform = mock_manager.georeference(request, snap_to_tile=True)
        # tile 2/1/1 starts at the centre of the world
        assert transform.origin_x == pytest.approx(0.0, abs=1e-6)
        assert transform.origin_y == pytest.approx(0.0, abs=1e-6)

    def test_unknown_request_rejected(self, mock_manager):
        with pytest.raises(InvalidInputError):
            mock_manager.georeference({"lon": 1.0})


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class TestFetchTile:
    async def test_lonlat_decoded(self, mock_manager, mock_client):
        decoded = await mock_manager.fetch_tile(LONLAT)

        mock_client.fetch.assert_awaited_once_with(mock_manager.locate(LONLAT), 512)
        assert decoded.elevation.shape == (8, 8)
        assert decoded.elevation.dtype == np.float32
        assert decoded.elevation[7, 7] == pytest.approx(630.0, abs=1e-3)
        assert decoded.crs == "EPSG:3857"
        assert decoded.transform == geotransform_from_lonlat(13.81, 45.12, 15)

    async def test_pixel_unreferenced(self, mock_manager):
        decoded = await mock_manager.fetch_tile(PIXEL)
        assert decoded.transform is None
        assert decoded.crs is None

    async def test_logs_tile_size(self, mock_manager, caplog):
        import logging

        with caplog.at_level(logging.INFO, logger="terrain_rgb_dem"):
            await mock_manager.fetch_tile(LONLAT)
        assert "Tile size: 8 x 8 channels: 3" in caplog.text

    async def test_no_client_raises(self):
        with pytest.raises(InvalidInputError, match="token"):
            await TerrainManager().fetch_tile(LONLAT)

    async def test_invalid_request_does_not_fetch(self, mock_manager, mock_client):
        bad = LonLatRequest(lon=13.81, lat=90.0, zoom=15, tile_size=512)
        with pytest.raises(InvalidInputError):
            await mock_manager.fetch_tile(bad)
        mock_client.fetch.assert_not_awaited()

    async def test_fetch_error_propagates(self, mock_manager, mock_client):
        mock_client.fetch = AsyncMock(side_effect=TileFetchError("boom", status_code=404))
        with pytest.raises(TileFetchError):
            await mock_manager.fetch_tile(LONLAT)

    async def test_undecodable_body(self, mock_manager, mock_client):
        mock_client.fetch = AsyncMock(return_value=b"not an image")
        with pytest.raises(ShapeMismatchError):
            await mock_manager.fetch_tile(LONLAT)


class TestFetchToFile:
    async def test_writes_georeferenced_tiff(self, mock_manager, tmp_path):
        result = await mock_manager.fetch_to_file(LONLAT, tmp_path / "out.tif")

        assert isinstance(result, TerrainResult)
        assert result.output_path == str(tmp_path / "out.tif")
        assert result.shape == [8, 8]
        assert result.elevation_range[0] == pytest.approx(0.0, abs=1e-3)
        assert result.elevation_range[1] == pytest.approx(630.0, abs=1e-3)
        assert result.dtype == "float32"
        assert result.crs == "EPSG:3857"

        with rasterio.open(tmp_path / "out.tif") as src:
            assert src.crs.to_epsg() == 3857
            assert src.transform.to_gdal() == pytest.approx(tuple(result.geotransform))
            assert src.read(1)[0, 1] == pytest.approx(10.0, abs=1e-3)

    async def test_pixel_mode_writes_unreferenced(self, mock_manager, tmp_path):
        result = await mock_manager.fetch_to_file(PIXEL, tmp_path / "px.tif")
        assert result.geotransform is None
        assert result.crs is None
        with rasterio.open(tmp_path / "px.tif") as src:
            assert src.crs is None

    async def test_fetch_error_writes_nothing(self, mock_manager, mock_client, tmp_path):
        mock_client.fetch = AsyncMock(side_effect=TileFetchError("boom"))
        with pytest.raises(TileFetchError):
            await mock_manager.fetch_to_file(LONLAT, tmp_path / "out.tif")
        assert not (tmp_path / "out.tif").exists()


class TestFetchToArtifact:
    async def test_stores_geotiff(self, mock_manager, mock_artifact_store):
        result = await mock_manager.fetch_to_artifact(LONLAT)

        assert result.artifact_ref.startswith("terrain/")
        assert result.artifact_ref.endswith(".tif")
        mock_artifact_store.store.assert_awaited_once()
        args, kwargs = mock_artifact_store.store.call_args
        assert args[0] == result.artifact_ref
        assert args[1][:2] in (b"II", b"MM")
        assert kwargs["mime_type"] == "image/tiff"
        assert kwargs["metadata"]["tile"] == result.tile.as_path()
        assert kwargs["metadata"]["crs"] == "EPSG:3857"

    async def test_snap_to_tile_forwarded(self, mock_manager, mock_artifact_store):
        result = await mock_manager.fetch_to_artifact(PIXEL, snap_to_tile=True)
        assert result.crs == "EPSG:3857"
        assert result.geotransform is not None

    async def test_store_failure_propagates(self, mock_manager, mock_artifact_store):
        mock_artifact_store.store = AsyncMock(side_effect=RuntimeError("store down"))
        with pytest.raises(RuntimeError, match="store down"):
            await mock_manager.fetch_to_artifact(LONLAT)

    async def test_no_store_raises(self, mock_client):
        manager = TerrainManager(client=mock_client)
        with patch("chuk_mcp_server.get_artifact_store", MagicMock(return_value=None)):
            with pytest.raises(RuntimeError, match="artifact store"):
                await manager.fetch_to_artifact(LONLAT)
