"""
Fetch tools — download a Terrain-RGB tile, decode elevation, store a GeoTIFF.

These tools perform network I/O and store results in the artifact store.
"""

import logging

from ...constants import DEFAULT_TILE_SIZE, RequestMode, SuccessMessages
from ...core.locator import LonLatRequest, PixelRequest
from ...models.responses import (
    ErrorResponse,
    TerrainFetchResponse,
    TileInfo,
    format_response,
)

logger = logging.getLogger(__name__)


def _to_response(result, mode: str) -> TerrainFetchResponse:
    tile = result.tile
    height, width = result.shape
    return TerrainFetchResponse(
        mode=mode,
        tile=TileInfo(zoom=tile.zoom, x=tile.x, y=tile.y),
        artifact_ref=result.artifact_ref,
        output_path=result.output_path,
        shape=result.shape,
        elevation_range=result.elevation_range,
        dtype=result.dtype,
        geotransform=result.geotransform,
        crs=result.crs,
        message=SuccessMessages.FETCH_COMPLETE.format(
            width, height, tile.as_path(), *result.elevation_range
        ),
    )


def register_fetch_tools(mcp, manager):
    """Register fetch tools with the MCP server."""

    @mcp.tool()
    async def terrain_fetch(
        lon: float,
        lat: float,
        zoom: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        snap_to_tile: bool = False,
        output_mode: str = "json",
    ) -> str:
        """Fetch the Terrain-RGB tile containing lon/lat and store it as an
        EPSG:3857 float32 GeoTIFF artifact.

        Args:
            lon: Longitude of the top-left anchor (-180 to 180)
            lat: Latitude of the top-left anchor (strictly between -90 and 90)
            zoom: Zoom level (>= 0)
            tile_size: Pixels per tile edge (512 selects @2x tiles)
            snap_to_tile: Anchor the GeoTransform at the tile's top-left corner
                instead of the query point
            output_mode: "json" or "text"

        Returns:
            Artifact reference with tile index, elevation range and GeoTransform
        """
        try:
            request = LonLatRequest(lon=lon, lat=lat, zoom=zoom, tile_size=tile_size)
            result = await manager.fetch_to_artifact(request, snap_to_tile=snap_to_tile)
            return format_response(_to_response(result, RequestMode.LONLAT), output_mode)

        except Exception as e:
            logger.error(f"terrain_fetch failed: {e}")
            return format_response(
                ErrorResponse(error=str(e), error_type=type(e).__name__), output_mode
            )

    @mcp.tool()
    async def terrain_fetch_pixel(
        pixel_x: int,
        pixel_y: int,
        zoom: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        snap_to_tile: bool = False,
        output_mode: str = "json",
    ) -> str:
        """Fetch the Terrain-RGB tile containing an absolute pixel coordinate
        and store it as a float32 GeoTIFF artifact.

        The raster is unreferenced unless snap_to_tile is set, in which case it
        is placed in EPSG:3857 from the tile's top-left corner.

        Args:
            pixel_x: Absolute pixel column in the tile pyramid
            pixel_y: Absolute pixel row in the tile pyramid
            zoom: Zoom level (>= 0)
            tile_size: Pixels per tile edge
            snap_to_tile: Georeference from the tile's top-left corner
            output_mode: "json" or "text"

        Returns:
            Artifact reference with tile index and elevation range
        """
        try:
            request = PixelRequest(
                pixel_x=pixel_x, pixel_y=pixel_y, zoom=zoom, tile_size=tile_size
            )
            result = await manager.fetch_to_artifact(request, snap_to_tile=snap_to_tile)
            return format_response(_to_response(result, RequestMode.PIXEL), output_mode)

        except Exception as e:
            logger.error(f"terrain_fetch_pixel failed: {e}")
            return format_response(
                ErrorResponse(error=str(e), error_type=type(e).__name__), output_mode
            )
