"""
Response models for terrain-rgb-dem tools.

All tool responses are Pydantic models for type safety and consistent API.
"""

from pydantic import BaseModel, ConfigDict, Field


def format_response(model: BaseModel, output_mode: str = "json") -> str:
    """Format a response model as JSON or human-readable text.

    Args:
        model: Pydantic response model instance
        output_mode: "json" (default) or "text"

    Returns:
        Formatted string
    """
    if output_mode == "text" and hasattr(model, "to_text"):
        return str(model.to_text())
    return str(model.model_dump_json())


class ErrorResponse(BaseModel):
    """Error response model for tool failures."""

    model_config = ConfigDict(extra="forbid")

    error: str = Field(..., description="Error message describing what went wrong")
    error_type: str | None = Field(None, description="Exception class name")

    def to_text(self) -> str:
        return f"Error: {self.error}"


class TileInfo(BaseModel):
    """A tile index in the web-map pyramid."""

    model_config = ConfigDict(extra="forbid")

    zoom: int = Field(..., description="Zoom level", ge=0)
    x: int = Field(..., description="Tile column", ge=0)
    y: int = Field(..., description="Tile row", ge=0)

    def to_text(self) -> str:
        return f"{self.zoom}/{self.x}/{self.y}"


class TileLookupResponse(BaseModel):
    """Response model for resolving a tile from lon/lat or pixel input."""

    model_config = ConfigDict(extra="forbid")

    mode: str = Field(..., description="Request mode (lonlat or pixel)")
    tile: TileInfo = Field(..., description="Resolved tile")
    tile_size: int = Field(..., description="Pixels per tile edge", gt=0)
    pixel: list[int] = Field(..., description="Global pixel [x, y] on the 256 px base")
    tile_url: str = Field(..., description="Tile URL without access token")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        lines = [
            f"Tile: {self.tile.to_text()} ({self.mode} mode)",
            f"Tile size: {self.tile_size}px",
            f"Global pixel: {self.pixel[0]}, {self.pixel[1]}",
            f"URL: {self.tile_url}",
        ]
        return "\n".join(lines)


class GeoTransformResponse(BaseModel):
    """Response model for a Web Mercator GeoTransform derivation."""

    model_config = ConfigDict(extra="forbid")

    lon: float = Field(..., description="Anchor longitude")
    lat: float = Field(..., description="Anchor latitude")
    zoom: int = Field(..., description="Zoom level", ge=0)
    tile_size: int = Field(..., description="Grid edge in pixels", gt=0)
    geotransform: list[float] = Field(
        ..., description="[origin_x, pixel_width, 0, origin_y, 0, -pixel_height]"
    )
    resolution_m: float = Field(..., description="Metres per pixel", gt=0)
    bounds: list[float] = Field(..., description="[min_x, min_y, max_x, max_y] in metres")
    crs: str = Field(..., description="Spatial reference (EPSG:3857)")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        gt = ", ".join(f"{v:.6f}" for v in self.geotransform)
        bounds = ", ".join(f"{v:.2f}" for v in self.bounds)
        lines = [
            f"Anchor: {self.lon:.6f}, {self.lat:.6f} (zoom {self.zoom})",
            f"Resolution: {self.resolution_m:.6f} m/pixel",
            f"GeoTransform: [{gt}]",
            f"Bounds ({self.tile_size}px): [{bounds}]",
            f"CRS: {self.crs}",
        ]
        return "\n".join(lines)


class TerrainFetchResponse(BaseModel):
    """Response model for a fetched and decoded Terrain-RGB tile."""

    model_config = ConfigDict(extra="forbid")

    mode: str = Field(..., description="Request mode (lonlat or pixel)")
    tile: TileInfo = Field(..., description="Fetched tile")
    artifact_ref: str | None = Field(None, description="Artifact store reference for the GeoTIFF")
    output_path: str | None = Field(None, description="GeoTIFF path on disk")
    shape: list[int] = Field(..., description="Array shape [height, width]")
    elevation_range: list[float] = Field(..., description="[min, max] elevation in metres")
    dtype: str = Field(..., description="Data type of the raster")
    geotransform: list[float] | None = Field(None, description="GeoTransform, if referenced")
    crs: str | None = Field(None, description="Spatial reference, if referenced")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        shape_str = f"{self.shape[0]}x{self.shape[1]}"
        lines = [
            f"Fetched Terrain-RGB tile: {self.tile.to_text()}",
            f"Shape: {shape_str} ({self.dtype})",
            f"Elevation: {self.elevation_range[0]:.1f}m to {self.elevation_range[1]:.1f}m",
        ]
        if self.crs:
            lines.append(f"CRS: {self.crs}")
        else:
            lines.append("CRS: none (unreferenced)")
        if self.artifact_ref:
            lines.append(f"Artifact: {self.artifact_ref}")
        if self.output_path:
            lines.append(f"Output: {self.output_path}")
        return "\n".join(lines)


class StatusResponse(BaseModel):
    """Response model for server status."""

    model_config = ConfigDict(extra="forbid")

    server: str = Field(..., description="Server name")
    version: str = Field(..., description="Server version")
    storage_provider: str = Field(..., description="Active artifact storage provider")
    artifact_store_available: bool = Field(..., description="Whether an artifact store is set")
    token_configured: bool = Field(..., description="Whether a tile access token is set")
    message: str = Field(..., description="Operation result message")

    def to_text(self) -> str:
        token = "configured" if self.token_configured else "missing"
        return "\n".join(
            [
                f"{self.server} v{self.version}",
                f"Storage: {self.storage_provider} (available: {self.artifact_store_available})",
                f"Access token: {token}",
            ]
        )
