"""
Georeferencer — places a decoded tile grid in Web Mercator metres.

The transform is anchored at whatever corner the caller supplies; no
snapping to tile boundaries happens here. Use tile_origin_lonlat() to get
a tile's true top-left corner first when that is wanted.
"""

import math
from typing import Any, NamedTuple

from ..constants import (
    BASE_TILE_SIZE,
    EARTH_RADIUS_M,
    INITIAL_RESOLUTION_M,
    ORIGIN_SHIFT_M,
    WEB_MERCATOR_SRS,
)
from ._validation import validate_latitude, validate_longitude, validate_tile_size, validate_zoom
from .locator import TileCoordinate

SPATIAL_REFERENCE = WEB_MERCATOR_SRS


class GeoTransform(NamedTuple):
    """GDAL-ordered affine coefficients (north-up: pixel_height < 0)."""

    origin_x: float
    pixel_width: float
    row_rotation: float
    origin_y: float
    col_rotation: float
    pixel_height: float

    def to_affine(self) -> Any:
        """Convert to a rasterio Affine."""
        from rasterio.transform import Affine

        return Affine.from_gdal(*self)

    def to_list(self) -> list[float]:
        return [float(v) for v in self]

    def bounds(self, width: int, height: int) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) covered by a width x height grid."""
        max_x = self.origin_x + width * self.pixel_width
        min_y = self.origin_y + height * self.pixel_height
        return (self.origin_x, min_y, max_x, self.origin_y)


def tile_resolution(zoom: int) -> float:
    """Metres per pixel at ``zoom`` under the 256 px base convention."""
    zoom = validate_zoom(zoom)
    return INITIAL_RESOLUTION_M / 2**zoom


def lon_to_mercator_x(lon: float) -> float:
    lon = validate_longitude(lon)
    return lon * ORIGIN_SHIFT_M / 180.0


def lat_to_mercator_y(lat: float) -> float:
    lat = validate_latitude(lat)
    return EARTH_RADIUS_M * math.log(math.tan(math.pi / 4 + lat * math.pi / 360.0))


def geotransform_from_lonlat(lon: float, lat: float, zoom: int) -> GeoTransform:
    """
    Build the GeoTransform for a grid whose top-left corner is (lon, lat).

    Args:
        lon: Anchor longitude in degrees
        lat: Anchor latitude in degrees (poles excluded)
        zoom: Zoom level setting the pixel resolution

    Returns:
        GeoTransform (min_x, res, 0, max_y, 0, -res) in EPSG:3857 metres
    """
    resolution = tile_resolution(zoom)
    min_x = lon_to_mercator_x(lon)
    max_y = lat_to_mercator_y(lat)
    return GeoTransform(min_x, resolution, 0.0, max_y, 0.0, -resolution)


def tile_origin_lonlat(tile: TileCoordinate, tile_size: int) -> tuple[float, float]:
    """
    Top-left corner (lon, lat) of a tile.

    Inverse of the Locator's pixel projection, so the tile's first pixel is
    at global pixel (x * tile_size, y * tile_size) on the 256 px base.
    """
    tile_size = validate_tile_size(tile_size)
    world_size = BASE_TILE_SIZE * 2**tile.zoom

    pixel_x = tile.x * tile_size
    pixel_y = tile.y * tile_size

    lon = pixel_x / world_size * 360.0 - 180.0
    merc = 2 * math.pi * (0.5 - pixel_y / world_size)
    lat = math.degrees(math.atan(math.sinh(merc)))
    return lon, lat
