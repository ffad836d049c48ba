#!/usr/bin/env python3
"""
Async Terrain-RGB MCP Server using chuk-mcp-server

Resolves Terrain-RGB tiles from lon/lat or pixel coordinates, decodes them
into elevation, and stores georeferenced GeoTIFFs in chuk-artifacts.

Storage is managed through chuk-mcp-server's built-in artifact store context.
"""

import logging
import math
import os

from chuk_mcp_server import ChukMCPServer

from .constants import DEFAULT_BASE_URL, DEFAULT_TIMEOUT_S, EnvVar, ServerConfig
from .core.terrain_manager import TerrainManager
from .core.tile_client import TerrainTileClient
from .tools.fetch import register_fetch_tools
from .tools.lookup import register_lookup_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def _timeout_from_env() -> float:
    """Request timeout from the environment, falling back to the default."""
    raw = os.environ.get(EnvVar.TIMEOUT)
    if raw is None or not raw.strip():
        return DEFAULT_TIMEOUT_S
    try:
        timeout = float(raw)
    except ValueError:
        timeout = math.nan
    if not math.isfinite(timeout) or timeout <= 0:
        logger.warning(
            f"Ignoring {EnvVar.TIMEOUT}={raw!r}; using {DEFAULT_TIMEOUT_S}s"
        )
        return DEFAULT_TIMEOUT_S
    return timeout


def _build_client() -> TerrainTileClient | None:
    """Tile client from environment, or None when no token is configured."""
    token = os.environ.get(EnvVar.ACCESS_TOKEN)
    if not token:
        logger.warning(f"{EnvVar.ACCESS_TOKEN} not set; fetch tools will fail")
        return None
    return TerrainTileClient(
        access_token=token,
        base_url=os.environ.get(EnvVar.BASE_URL, DEFAULT_BASE_URL),
        timeout_s=_timeout_from_env(),
    )


# Create the MCP server instance
mcp = ChukMCPServer(ServerConfig.NAME)

# Create terrain manager instance
manager = TerrainManager(client=_build_client())

# Register all tool modules
register_lookup_tools(mcp, manager)
register_fetch_tools(mcp, manager)

# Run the server
if __name__ == "__main__":
    logger.info("Starting Terrain-RGB MCP Server...")
    logger.info("Storage: Using chuk-mcp-server artifact store context")
    mcp.run(stdio=True)
