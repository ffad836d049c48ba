"""Response models for terrain-rgb-dem."""

from .responses import (
    ErrorResponse,
    GeoTransformResponse,
    StatusResponse,
    TerrainFetchResponse,
    TileInfo,
    TileLookupResponse,
    format_response,
)

__all__ = [
    "ErrorResponse",
    "TileInfo",
    "TileLookupResponse",
    "GeoTransformResponse",
    "TerrainFetchResponse",
    "StatusResponse",
    "format_response",
]
