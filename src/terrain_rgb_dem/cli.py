#!/usr/bin/env python3
"""
terrain-rgb-dem command line entry point.

Fetches one Terrain-RGB tile, decodes elevation and writes a float32 GeoTIFF.
Values come from the environment (and a .env file) and can be overridden
with flags:

    MAPBOX_TOKEN=...  ZOOM=15  TILE_SIZE=512  LONGITUDE=13.81  LATITUDE=45.12
    terrain-rgb-dem
    terrain-rgb-dem pixel --pixel-x 4516100 --pixel-y 2930000 --zoom 15

Exit status is 0 on success, 1 for bad input or an undecodable tile, 2 when
the tile cannot be fetched and 3 when the GeoTIFF cannot be written.
"""

import argparse
import asyncio
import logging
import os
import sys

from .config import TerrainConfig
from .constants import EnvVar, RequestMode, ServerConfig, SuccessMessages
from .core.terrain_manager import TerrainManager, TerrainResult
from .core.tile_client import TerrainTileClient
from .errors import InvalidInputError, ShapeMismatchError, TileFetchError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_FETCH = 2
EXIT_WRITE = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=ServerConfig.NAME,
        description="Convert a Terrain-RGB tile into a georeferenced elevation GeoTIFF",
    )
    parser.add_argument(
        "mode",
        nargs="?",
        choices=[RequestMode.LONLAT, RequestMode.PIXEL],
        default=None,
        help="Request mode (default: inferred from the configuration)",
    )
    parser.add_argument("--zoom", type=int, help=f"Zoom level (env {EnvVar.ZOOM})")
    parser.add_argument("--tile-size", type=int, help=f"Tile edge in pixels (env {EnvVar.TILE_SIZE})")
    parser.add_argument("--lon", type=float, help=f"Anchor longitude (env {EnvVar.LONGITUDE})")
    parser.add_argument("--lat", type=float, help=f"Anchor latitude (env {EnvVar.LATITUDE})")
    parser.add_argument("--pixel-x", type=int, help=f"Absolute pixel X (env {EnvVar.PIXEL_X})")
    parser.add_argument("--pixel-y", type=int, help=f"Absolute pixel Y (env {EnvVar.PIXEL_Y})")
    parser.add_argument("--token", help=f"Tile service access token (env {EnvVar.ACCESS_TOKEN})")
    parser.add_argument("--base-url", help=f"Tileset base URL (env {EnvVar.BASE_URL})")
    parser.add_argument("--output", "-o", help=f"Output GeoTIFF path (env {EnvVar.OUTPUT_PATH})")
    parser.add_argument("--env-file", help="Path to a .env file (default: ./.env)")
    parser.add_argument(
        "--snap-to-tile",
        action="store_true",
        default=None,
        help="Anchor the GeoTransform at the tile's top-left corner",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def load_config(args: argparse.Namespace) -> TerrainConfig:
    """Merge environment and flags into a validated configuration."""
    config = TerrainConfig.from_env(
        env_file=args.env_file,
        mode=args.mode,
        access_token=args.token,
        zoom=args.zoom,
        tile_size=args.tile_size,
        longitude=args.lon,
        latitude=args.lat,
        pixel_x=args.pixel_x,
        pixel_y=args.pixel_y,
        output_path=args.output,
        base_url=args.base_url,
        snap_to_tile=args.snap_to_tile,
    )
    if args.mode is not None and config.mode != args.mode:
        raise InvalidInputError(f"Configuration does not describe a {args.mode} request")
    return config


async def run(config: TerrainConfig) -> TerrainResult:
    """Run one conversion with an explicit configuration."""
    client = TerrainTileClient(
        access_token=config.access_token,
        base_url=config.base_url,
        timeout_s=config.timeout_s,
    )
    manager = TerrainManager(client=client)
    return await manager.fetch_to_file(
        config.to_request(), config.output_path, snap_to_tile=config.snap_to_tile
    )


def _configure_logging(verbose: bool) -> None:
    level_name = "DEBUG" if verbose else os.environ.get(EnvVar.LOG_LEVEL, "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entry point; returns the process exit status."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(args)
        result = asyncio.run(run(config))
    except (InvalidInputError, ShapeMismatchError) as e:
        logger.error(str(e))
        return EXIT_INVALID
    except TileFetchError as e:
        logger.error(f"Error fetching tile: {e}")
        return EXIT_FETCH
    except OSError as e:
        logger.error(f"Error writing raster: {e}")
        return EXIT_WRITE

    height, width = result.shape
    print(
        SuccessMessages.FETCH_COMPLETE.format(
            width, height, result.tile.as_path(), *result.elevation_range
        )
    )
    if result.crs is None:
        print("Raster is not georeferenced (pixel mode)")
    print(SuccessMessages.WRITE_COMPLETE.format(result.output_path))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
