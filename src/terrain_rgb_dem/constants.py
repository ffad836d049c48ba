"""
Constants for terrain-rgb-dem.

All magic strings, projection constants, and configuration values live here.
"""

import math


class ServerConfig:
    NAME = "terrain-rgb-dem"
    VERSION = "0.1.0"
    DESCRIPTION = "Terrain-RGB tile to georeferenced elevation raster converter"


class StorageProvider:
    MEMORY = "memory"
    S3 = "s3"
    FILESYSTEM = "filesystem"


class SessionProvider:
    MEMORY = "memory"
    REDIS = "redis"


class EnvVar:
    # Tile request configuration
    ACCESS_TOKEN = "MAPBOX_TOKEN"
    ZOOM = "ZOOM"
    TILE_SIZE = "TILE_SIZE"
    LONGITUDE = "LONGITUDE"
    LATITUDE = "LATITUDE"
    PIXEL_X = "PIXEL_X"
    PIXEL_Y = "PIXEL_Y"
    OUTPUT_PATH = "OUTPUT_PATH"
    BASE_URL = "TERRAIN_RGB_BASE_URL"
    TIMEOUT = "TERRAIN_RGB_TIMEOUT"
    LOG_LEVEL = "LOG_LEVEL"

    # Server / artifact storage
    ARTIFACTS_PROVIDER = "CHUK_ARTIFACTS_PROVIDER"
    BUCKET_NAME = "BUCKET_NAME"
    REDIS_URL = "REDIS_URL"
    ARTIFACTS_PATH = "CHUK_ARTIFACTS_PATH"
    AWS_ACCESS_KEY_ID = "AWS_ACCESS_KEY_ID"
    AWS_SECRET_ACCESS_KEY = "AWS_SECRET_ACCESS_KEY"
    AWS_ENDPOINT_URL_S3 = "AWS_ENDPOINT_URL_S3"
    MCP_STDIO = "MCP_STDIO"


# ---------------------------------------------------------------------------
# Web Mercator / tile pyramid
# ---------------------------------------------------------------------------

EARTH_RADIUS_M = 6378137.0
BASE_TILE_SIZE = 256  # pixel projection convention of the tile pyramid
ORIGIN_SHIFT_M = math.pi * EARTH_RADIUS_M  # half the equatorial circumference
INITIAL_RESOLUTION_M = 2 * math.pi * EARTH_RADIUS_M / BASE_TILE_SIZE
MAX_LATITUDE = 85.0511287798  # Web Mercator latitude limit

WEB_MERCATOR_EPSG = 3857
WEB_MERCATOR_SRS = f"EPSG:{WEB_MERCATOR_EPSG}"

# ---------------------------------------------------------------------------
# Terrain-RGB encoding
# ---------------------------------------------------------------------------

TERRAIN_RGB_OFFSET_M = -10000.0
TERRAIN_RGB_SCALE_M = 0.1
TERRAIN_RGB_CHANNELS = 3

# ---------------------------------------------------------------------------
# Tile service
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://api.mapbox.com/v4/mapbox.terrain-rgb"
TILE_PATH_TEMPLATE = "{base_url}/{z}/{x}/{y}{scale}.pngraw"
RETINA_TILE_SIZE = 512
RETINA_SUFFIX = "@2x"
DEFAULT_TILE_SIZE = RETINA_TILE_SIZE
DEFAULT_TIMEOUT_S = 30.0
USER_AGENT = f"{ServerConfig.NAME}/{ServerConfig.VERSION}"

# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

DEFAULT_OUTPUT_PATH = "terrain_dem.tif"
OUTPUT_DRIVER = "GTiff"
OUTPUT_DTYPE = "float32"
OUTPUT_BAND_COUNT = 1
ARTIFACT_PREFIX = "terrain"


class RequestMode:
    LONLAT = "lonlat"
    PIXEL = "pixel"


class ErrorMessages:
    NOT_FINITE = "{} must be a finite number, got {}"
    NOT_INTEGER = "{} must be an integer, got {!r}"
    LONGITUDE_RANGE = "longitude must be within [-180, 180], got {}"
    LATITUDE_RANGE = "latitude must be strictly between -90 and 90, got {}"
    NEGATIVE_ZOOM = "zoom must be >= 0, got {}"
    INVALID_TILE_SIZE = "tile_size must be > 0, got {}"
    NEGATIVE_PIXEL = "{} must be >= 0, got {}"
    TILE_OUT_OF_RANGE = "Tile {}/{}/{} is outside the pyramid at zoom {} (max index {})"
    PIXEL_OUT_OF_WORLD = "{} {} is outside the pyramid at zoom {} (world is {} px)"
    BITMAP_NOT_3D = "Bitmap must have shape (height, width, channels), got {}"
    TOO_FEW_CHANNELS = "Bitmap needs at least 3 channels, got {}"
    EMPTY_BITMAP = "Bitmap has zero size: {}x{}"
    BITMAP_DTYPE = "Bitmap must be uint8, got {}"
    PNG_DECODE_FAILED = "Could not decode tile image: {}"
    FETCH_FAILED = "Failed to fetch tile {}: {}"
    FETCH_STATUS = "Tile {} request returned HTTP {}"
    MISSING_TOKEN = f"Missing access token. Set {EnvVar.ACCESS_TOKEN} or pass --token."
    MISSING_ZOOM = f"Missing zoom level. Set {EnvVar.ZOOM} or pass --zoom."
    MIXED_MODE = "Provide either longitude/latitude or pixel_x/pixel_y, not both"
    INCOMPLETE_MODE = "Provide both longitude and latitude, or both pixel_x and pixel_y"
    INVALID_CONFIG = "Invalid configuration: {}"
    NO_ARTIFACT_STORE = (
        "No artifact store available. Configure CHUK_ARTIFACTS_PROVIDER "
        "environment variable (memory, filesystem, or s3)."
    )


class SuccessMessages:
    TILE_LOOKUP = "Tile {}/{}/{} ({}px tiles)"
    GEOTRANSFORM = "GeoTransform at zoom {}: {:.6f} m/pixel"
    FETCH_COMPLETE = "Decoded {}x{} tile {}, elevation {:.1f} to {:.1f} m"
    WRITE_COMPLETE = "Wrote {}"
    STATUS = "terrain-rgb-dem v{} (storage: {})"
