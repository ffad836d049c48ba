"""
Terrain-RGB tile client.

Builds tile URLs and fetches raw PNG bytes over HTTP. One request per call,
no retries: any transport failure or non-200 status becomes a TileFetchError.
The access token is sent as a query parameter and never logged.
"""

import logging

import httpx

from ..constants import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT_S,
    RETINA_SUFFIX,
    RETINA_TILE_SIZE,
    TILE_PATH_TEMPLATE,
    USER_AGENT,
    ErrorMessages,
)
from ..errors import InvalidInputError, TileFetchError
from .locator import TileCoordinate

logger = logging.getLogger(__name__)


def build_tile_path(tile: TileCoordinate, tile_size: int, base_url: str = DEFAULT_BASE_URL) -> str:
    """Tile URL without the query string; 512 px tiles use the @2x variant."""
    scale = RETINA_SUFFIX if tile_size == RETINA_TILE_SIZE else ""
    return TILE_PATH_TEMPLATE.format(
        base_url=base_url.rstrip("/"), z=tile.zoom, x=tile.x, y=tile.y, scale=scale
    )


class TerrainTileClient:
    """Async HTTP client for a Terrain-RGB tile service."""

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not access_token:
            raise InvalidInputError(ErrorMessages.MISSING_TOKEN)
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s
        self._transport = transport

    def tile_path(self, tile: TileCoordinate, tile_size: int) -> str:
        """Tile URL without the query string (safe to log)."""
        return build_tile_path(tile, tile_size, self.base_url)

    def tile_url(self, tile: TileCoordinate, tile_size: int) -> str:
        """Full tile URL including the access token."""
        return f"{self.tile_path(tile, tile_size)}?access_token={self.access_token}"

    async def fetch(self, tile: TileCoordinate, tile_size: int) -> bytes:
        """
        Fetch the PNG bytes for one tile.

        Args:
            tile: Tile to fetch
            tile_size: Requested tile edge in pixels (512 selects @2x tiles)

        Returns:
            Raw response body

        Raises:
            TileFetchError: On transport errors or a non-200 response
        """
        path = self.tile_path(tile, tile_size)
        logger.info(f"Fetching Terrain-RGB tile z={tile.zoom}, x={tile.x}, y={tile.y}")

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_s),
            headers={"User-Agent": USER_AGENT},
            transport=self._transport,
        ) as client:
            try:
                response = await client.get(path, params={"access_token": self.access_token})
            except httpx.RequestError as e:
                logger.error(f"Tile request failed for {path}: {type(e).__name__}")
                raise TileFetchError(ErrorMessages.FETCH_FAILED.format(path, e)) from e

        if response.status_code != httpx.codes.OK:
            logger.error(f"Tile request {path} returned HTTP {response.status_code}")
            raise TileFetchError(
                ErrorMessages.FETCH_STATUS.format(path, response.status_code),
                status_code=response.status_code,
            )

        logger.debug(f"Fetched {len(response.content)} bytes from {path}")
        return response.content
