"""
Locator — resolves which Terrain-RGB tile to fetch.

Both entry points (geographic and absolute pixel) reduce to an integer
(zoom, x, y) triple. Global pixel coordinates always use the 256 px base of
the tile pyramid, independent of the requested tile size.
"""

import math
from dataclasses import dataclass

from ..constants import BASE_TILE_SIZE, MAX_LATITUDE, ErrorMessages
from ..errors import InvalidInputError
from ._validation import (
    validate_latitude,
    validate_longitude,
    validate_pixel,
    validate_tile_size,
    validate_zoom,
)


@dataclass(frozen=True)
class TileCoordinate:
    """One tile in the web-map tile pyramid."""

    zoom: int
    x: int
    y: int

    def __post_init__(self) -> None:
        zoom = validate_zoom(self.zoom)
        validate_pixel(self.x, "x")
        validate_pixel(self.y, "y")
        max_index = 2**zoom - 1
        if self.x > max_index or self.y > max_index:
            raise InvalidInputError(
                ErrorMessages.TILE_OUT_OF_RANGE.format(zoom, self.x, self.y, zoom, max_index)
            )

    def as_path(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


@dataclass(frozen=True)
class LonLatRequest:
    """Tile request anchored at a geographic coordinate."""

    lon: float
    lat: float
    zoom: int
    tile_size: int


@dataclass(frozen=True)
class PixelRequest:
    """Tile request given as absolute pixel coordinates in the pyramid."""

    pixel_x: int
    pixel_y: int
    zoom: int
    tile_size: int


TileRequest = LonLatRequest | PixelRequest


def lonlat_to_pixel(lon: float, lat: float, zoom: int) -> tuple[int, int]:
    """
    Project a lon/lat onto global pixel coordinates at ``zoom``.

    Uses the spherical Mercator pixel projection with a 256 px base tile.
    The floored result is clamped into the world extent so that lon=180 and
    latitudes beyond the Mercator limit fall on the edge pixel.

    Args:
        lon: Longitude in degrees, [-180, 180]
        lat: Latitude in degrees, strictly between -90 and 90
        zoom: Zoom level (>= 0)

    Returns:
        Tuple of (pixel_x, pixel_y)

    Raises:
        InvalidInputError: If any input is non-finite or out of range
    """
    lon = validate_longitude(lon)
    lat = validate_latitude(lat)
    zoom = validate_zoom(zoom)

    world_size = BASE_TILE_SIZE * 2**zoom
    # Beyond the Mercator limit every latitude maps to the edge row anyway
    lat = min(max(lat, -MAX_LATITUDE), MAX_LATITUDE)
    sin_lat = math.sin(lat * math.pi / 180.0)
    log_term = math.log((1 + sin_lat) / (1 - sin_lat)) / (4 * math.pi)

    pixel_x = math.floor(((lon + 180.0) / 360.0) * world_size)
    pixel_y = math.floor((0.5 - log_term) * world_size)

    max_pixel = world_size - 1
    return min(max(pixel_x, 0), max_pixel), min(max(pixel_y, 0), max_pixel)


def tile_from_pixel(pixel_x: int, pixel_y: int, tile_size: int, zoom: int) -> TileCoordinate:
    """
    Tile containing an absolute pixel coordinate (integer division, no projection).

    The pixel must lie inside the 256 px base world at ``zoom``, which keeps
    the tile's top-left corner inside the world for any ``tile_size``.
    """
    pixel_x = validate_pixel(pixel_x, "pixel_x")
    pixel_y = validate_pixel(pixel_y, "pixel_y")
    tile_size = validate_tile_size(tile_size)
    zoom = validate_zoom(zoom)

    world_size = BASE_TILE_SIZE * 2**zoom
    for name, value in (("pixel_x", pixel_x), ("pixel_y", pixel_y)):
        if value >= world_size:
            raise InvalidInputError(
                ErrorMessages.PIXEL_OUT_OF_WORLD.format(name, value, zoom, world_size)
            )

    return TileCoordinate(zoom=zoom, x=pixel_x // tile_size, y=pixel_y // tile_size)


def tile_from_lonlat(lon: float, lat: float, zoom: int, tile_size: int) -> TileCoordinate:
    """
    Tile containing a geographic coordinate.

    Args:
        lon: Longitude in degrees
        lat: Latitude in degrees (poles excluded)
        zoom: Zoom level
        tile_size: Pixels per tile edge (e.g. 512)

    Returns:
        TileCoordinate at ``zoom``
    """
    tile_size = validate_tile_size(tile_size)
    pixel_x, pixel_y = lonlat_to_pixel(lon, lat, zoom)
    return tile_from_pixel(pixel_x, pixel_y, tile_size, zoom)


def resolve_tile(request: TileRequest) -> TileCoordinate:
    """Resolve either request variant to its TileCoordinate."""
    if isinstance(request, LonLatRequest):
        return tile_from_lonlat(request.lon, request.lat, request.zoom, request.tile_size)
    if isinstance(request, PixelRequest):
        return tile_from_pixel(request.pixel_x, request.pixel_y, request.tile_size, request.zoom)
    raise InvalidInputError(f"Unsupported tile request: {request!r}")
