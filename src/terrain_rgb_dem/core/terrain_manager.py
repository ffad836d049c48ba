"""
Terrain Manager — central orchestrator for Terrain-RGB conversion.

Runs the single-pass pipeline: Locator -> fetch -> PNG decode -> Decoder ->
Georeferencer -> GeoTIFF. Results go to a file on disk or to the artifact
store. Blocking decode/encode work is wrapped in asyncio.to_thread().
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np

from ..constants import ARTIFACT_PREFIX, OUTPUT_DTYPE, ErrorMessages
from ..errors import InvalidInputError
from .decoder import FloatArray, decode_terrain_rgb
from .georeferencer import (
    SPATIAL_REFERENCE,
    GeoTransform,
    geotransform_from_lonlat,
    tile_origin_lonlat,
)
from .locator import LonLatRequest, PixelRequest, TileCoordinate, TileRequest, resolve_tile
from .tile_client import TerrainTileClient, build_tile_path

logger = logging.getLogger(__name__)


@dataclass
class DecodedTile:
    """Decoded elevation grid plus its referencing primitives."""

    tile: TileCoordinate
    elevation: FloatArray
    transform: GeoTransform | None
    crs: str | None


@dataclass
class TerrainResult:
    """Result of a fetch-and-emit run."""

    tile: TileCoordinate
    shape: list[int]
    elevation_range: list[float]
    dtype: str
    geotransform: list[float] | None
    crs: str | None
    output_path: str | None = None
    artifact_ref: str | None = None


class TerrainManager:
    """Central manager for Terrain-RGB tile conversion."""

    def __init__(self, client: TerrainTileClient | None = None) -> None:
        self.client = client

    # ------------------------------------------------------------------
    # Pure steps (sync, no I/O)
    # ------------------------------------------------------------------

    def locate(self, request: TileRequest) -> TileCoordinate:
        """Resolve the tile a request refers to."""
        return resolve_tile(request)

    def tile_path(self, tile: TileCoordinate, tile_size: int) -> str:
        """Tile URL without the access token."""
        if self.client is not None:
            return self.client.tile_path(tile, tile_size)
        return build_tile_path(tile, tile_size)

    def georeference(
        self,
        request: TileRequest,
        snap_to_tile: bool = False,
    ) -> GeoTransform | None:
        """
        GeoTransform for a request, or None when there is no geographic anchor.

        Lon/lat requests anchor at the query point unless ``snap_to_tile``
        is set, in which case the tile's top-left corner is used. Pixel
        requests are only referenced when ``snap_to_tile`` is set.
        """
        if not isinstance(request, (LonLatRequest, PixelRequest)):
            raise InvalidInputError(f"Unsupported tile request: {request!r}")

        if snap_to_tile:
            tile = self.locate(request)
            lon, lat = tile_origin_lonlat(tile, request.tile_size)
            return geotransform_from_lonlat(lon, lat, request.zoom)

        if isinstance(request, LonLatRequest):
            return geotransform_from_lonlat(request.lon, request.lat, request.zoom)

        return None

    # ------------------------------------------------------------------
    # Pipeline (async)
    # ------------------------------------------------------------------

    async def fetch_tile(self, request: TileRequest, snap_to_tile: bool = False) -> DecodedTile:
        """Fetch and decode the tile for a request."""
        from . import raster_io

        tile = self.locate(request)
        transform = self.georeference(request, snap_to_tile)

        data = await self._get_client().fetch(tile, request.tile_size)

        pixels = await asyncio.to_thread(raster_io.decode_png, data)
        height, width, channels = pixels.shape
        logger.info(f"Tile size: {width} x {height} channels: {channels}")

        elevation = await asyncio.to_thread(decode_terrain_rgb, pixels)

        return DecodedTile(
            tile=tile,
            elevation=elevation,
            transform=transform,
            crs=SPATIAL_REFERENCE if transform is not None else None,
        )

    async def fetch_to_file(
        self,
        request: TileRequest,
        output_path: str | Path,
        snap_to_tile: bool = False,
    ) -> TerrainResult:
        """Fetch a tile and write it as a GeoTIFF on disk."""
        from . import raster_io

        decoded = await self.fetch_tile(request, snap_to_tile)
        path = await asyncio.to_thread(
            raster_io.write_geotiff,
            output_path,
            decoded.elevation,
            decoded.transform.to_affine() if decoded.transform else None,
            decoded.crs,
        )

        result = self._make_result(decoded)
        result.output_path = str(path)
        return result

    async def fetch_to_artifact(
        self,
        request: TileRequest,
        snap_to_tile: bool = False,
    ) -> TerrainResult:
        """Fetch a tile and store the GeoTIFF in the artifact store."""
        from . import raster_io

        decoded = await self.fetch_tile(request, snap_to_tile)
        geotiff_bytes = await asyncio.to_thread(
            raster_io.elevation_to_geotiff,
            decoded.elevation,
            decoded.transform.to_affine() if decoded.transform else None,
            decoded.crs,
        )

        result = self._make_result(decoded)
        result.artifact_ref = await self._store_raster(
            geotiff_bytes,
            {
                "type": "terrain_rgb_dem",
                "tile": decoded.tile.as_path(),
                "crs": decoded.crs,
                "geotransform": result.geotransform,
                "shape": result.shape,
            },
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _get_client(self) -> TerrainTileClient:
        if self.client is None:
            raise InvalidInputError(ErrorMessages.MISSING_TOKEN)
        return self.client

    @staticmethod
    def _make_result(decoded: DecodedTile) -> TerrainResult:
        elevation = decoded.elevation
        return TerrainResult(
            tile=decoded.tile,
            shape=list(elevation.shape),
            elevation_range=[float(np.min(elevation)), float(np.max(elevation))],
            dtype=OUTPUT_DTYPE,
            geotransform=decoded.transform.to_list() if decoded.transform else None,
            crs=decoded.crs,
        )

    def _get_store(self) -> Any:
        """Get the artifact store instance."""
        from chuk_mcp_server import get_artifact_store

        store = get_artifact_store()
        if store is None:
            raise RuntimeError(ErrorMessages.NO_ARTIFACT_STORE)
        return store

    async def _store_raster(self, data: bytes, metadata: dict) -> str:
        """Store GeoTIFF bytes in the artifact store."""
        try:
            store = self._get_store()
            ref = f"{ARTIFACT_PREFIX}/{uuid.uuid4().hex[:12]}.tif"

            await store.store(
                ref,
                data,
                mime_type="image/tiff",
                metadata=metadata,
                summary=f"Terrain-RGB elevation tile {metadata.get('tile', 'unknown')}",
            )
            return ref
        except Exception as e:
            logger.error(f"Failed to store raster: {e}")
            raise
