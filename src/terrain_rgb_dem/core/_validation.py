"""
Shared input validation for the Locator and Georeferencer.

Every check runs before any projection math so that failures carry no
partial results.
"""

import math
import numbers

from ..constants import ErrorMessages
from ..errors import InvalidInputError


def require_int(value: object, name: str) -> int:
    """Return ``value`` as an int, rejecting bools, floats and strings."""
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise InvalidInputError(ErrorMessages.NOT_INTEGER.format(name, value))
    return int(value)


def require_finite(value: object, name: str) -> float:
    """Return ``value`` as a float, rejecting NaN, infinities and non-numbers."""
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidInputError(ErrorMessages.NOT_FINITE.format(name, value))
    result = float(value)
    if not math.isfinite(result):
        raise InvalidInputError(ErrorMessages.NOT_FINITE.format(name, value))
    return result


def validate_longitude(lon: object) -> float:
    lon = require_finite(lon, "longitude")
    if not -180.0 <= lon <= 180.0:
        raise InvalidInputError(ErrorMessages.LONGITUDE_RANGE.format(lon))
    return lon


def validate_latitude(lat: object) -> float:
    """Latitude must exclude the poles, where the Mercator log term diverges."""
    lat = require_finite(lat, "latitude")
    if not -90.0 < lat < 90.0:
        raise InvalidInputError(ErrorMessages.LATITUDE_RANGE.format(lat))
    return lat


def validate_zoom(zoom: object) -> int:
    zoom = require_int(zoom, "zoom")
    if zoom < 0:
        raise InvalidInputError(ErrorMessages.NEGATIVE_ZOOM.format(zoom))
    return zoom


def validate_tile_size(tile_size: object) -> int:
    tile_size = require_int(tile_size, "tile_size")
    if tile_size <= 0:
        raise InvalidInputError(ErrorMessages.INVALID_TILE_SIZE.format(tile_size))
    return tile_size


def validate_pixel(value: object, name: str) -> int:
    value = require_int(value, name)
    if value < 0:
        raise InvalidInputError(ErrorMessages.NEGATIVE_PIXEL.format(name, value))
    return value
