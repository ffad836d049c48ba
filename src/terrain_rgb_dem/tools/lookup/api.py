"""
Lookup tools — tile resolution, GeoTransform derivation, server status.

These tools are pure computations over the Locator and Georeferencer and
perform no network I/O.
"""

import logging
import os

from ...constants import (
    DEFAULT_TILE_SIZE,
    EnvVar,
    RequestMode,
    ServerConfig,
    StorageProvider,
    SuccessMessages,
)
from ...core.georeferencer import SPATIAL_REFERENCE, geotransform_from_lonlat
from ...core.locator import LonLatRequest, PixelRequest, lonlat_to_pixel
from ...models.responses import (
    ErrorResponse,
    GeoTransformResponse,
    StatusResponse,
    TileInfo,
    TileLookupResponse,
    format_response,
)

logger = logging.getLogger(__name__)


def register_lookup_tools(mcp, manager):
    """Register lookup tools with the MCP server."""

    @mcp.tool()
    async def terrain_tile_from_lonlat(
        lon: float,
        lat: float,
        zoom: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        output_mode: str = "json",
    ) -> str:
        """Find the Terrain-RGB tile containing a geographic coordinate.

        Args:
            lon: Longitude (-180 to 180)
            lat: Latitude (strictly between -90 and 90)
            zoom: Zoom level (>= 0)
            tile_size: Pixels per tile edge (512 selects @2x tiles)
            output_mode: "json" or "text"

        Returns:
            Tile index, global pixel, and tile URL (without token)
        """
        try:
            tile = manager.locate(LonLatRequest(lon=lon, lat=lat, zoom=zoom, tile_size=tile_size))
            pixel_x, pixel_y = lonlat_to_pixel(lon, lat, zoom)

            response = TileLookupResponse(
                mode=RequestMode.LONLAT,
                tile=TileInfo(zoom=tile.zoom, x=tile.x, y=tile.y),
                tile_size=tile_size,
                pixel=[pixel_x, pixel_y],
                tile_url=manager.tile_path(tile, tile_size),
                message=SuccessMessages.TILE_LOOKUP.format(tile.zoom, tile.x, tile.y, tile_size),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_tile_from_lonlat failed: {e}")
            return format_response(
                ErrorResponse(error=str(e), error_type=type(e).__name__), output_mode
            )

    @mcp.tool()
    async def terrain_tile_from_pixel(
        pixel_x: int,
        pixel_y: int,
        zoom: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        output_mode: str = "json",
    ) -> str:
        """Find the Terrain-RGB tile containing an absolute pixel coordinate.

        Args:
            pixel_x: Absolute pixel column in the tile pyramid
            pixel_y: Absolute pixel row in the tile pyramid
            zoom: Zoom level (>= 0)
            tile_size: Pixels per tile edge
            output_mode: "json" or "text"

        Returns:
            Tile index and tile URL (without token)
        """
        try:
            tile = manager.locate(
                PixelRequest(pixel_x=pixel_x, pixel_y=pixel_y, zoom=zoom, tile_size=tile_size)
            )

            response = TileLookupResponse(
                mode=RequestMode.PIXEL,
                tile=TileInfo(zoom=tile.zoom, x=tile.x, y=tile.y),
                tile_size=tile_size,
                pixel=[pixel_x, pixel_y],
                tile_url=manager.tile_path(tile, tile_size),
                message=SuccessMessages.TILE_LOOKUP.format(tile.zoom, tile.x, tile.y, tile_size),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_tile_from_pixel failed: {e}")
            return format_response(
                ErrorResponse(error=str(e), error_type=type(e).__name__), output_mode
            )

    @mcp.tool()
    async def terrain_geotransform(
        lon: float,
        lat: float,
        zoom: int,
        tile_size: int = DEFAULT_TILE_SIZE,
        output_mode: str = "json",
    ) -> str:
        """Derive the Web Mercator GeoTransform for a grid anchored at lon/lat.

        The anchor is used as the top-left corner as given; it is not snapped
        to the tile boundary.

        Args:
            lon: Anchor longitude (top-left corner)
            lat: Anchor latitude (top-left corner)
            zoom: Zoom level setting the pixel resolution
            tile_size: Grid edge in pixels, used for the bounds
            output_mode: "json" or "text"

        Returns:
            GeoTransform, resolution, bounds in metres, and CRS
        """
        try:
            transform = geotransform_from_lonlat(lon, lat, zoom)

            response = GeoTransformResponse(
                lon=lon,
                lat=lat,
                zoom=zoom,
                tile_size=tile_size,
                geotransform=transform.to_list(),
                resolution_m=transform.pixel_width,
                bounds=list(transform.bounds(tile_size, tile_size)),
                crs=SPATIAL_REFERENCE,
                message=SuccessMessages.GEOTRANSFORM.format(zoom, transform.pixel_width),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_geotransform failed: {e}")
            return format_response(
                ErrorResponse(error=str(e), error_type=type(e).__name__), output_mode
            )

    @mcp.tool()
    async def terrain_status(output_mode: str = "json") -> str:
        """Get server status including version, storage, and token configuration.

        Args:
            output_mode: "json" for structured data, "text" for human-readable summary

        Returns:
            Server status information
        """
        try:
            provider = os.environ.get(EnvVar.ARTIFACTS_PROVIDER, StorageProvider.MEMORY)

            store_available = False
            try:
                manager._get_store()
                store_available = True
            except Exception as e:
                logger.debug(f"Artifact store unavailable: {e}")

            response = StatusResponse(
                server=ServerConfig.NAME,
                version=ServerConfig.VERSION,
                storage_provider=provider,
                artifact_store_available=store_available,
                token_configured=manager.client is not None,
                message=SuccessMessages.STATUS.format(ServerConfig.VERSION, provider),
            )
            return format_response(response, output_mode)

        except Exception as e:
            logger.error(f"terrain_status failed: {e}")
            return format_response(ErrorResponse(error=str(e)), output_mode)
