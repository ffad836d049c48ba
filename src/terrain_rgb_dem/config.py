"""
Run configuration for terrain-rgb-dem.

TerrainConfig is built and validated once, then passed explicitly to the
entry point. from_env() reads the same variables a .env-driven run uses
(MAPBOX_TOKEN, ZOOM, TILE_SIZE, LONGITUDE, LATITUDE, ...).
"""

import logging
import math
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .constants import (
    DEFAULT_BASE_URL,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_TILE_SIZE,
    DEFAULT_TIMEOUT_S,
    EnvVar,
    ErrorMessages,
    RequestMode,
)
from .core.locator import LonLatRequest, PixelRequest, TileRequest
from .errors import InvalidInputError

logger = logging.getLogger(__name__)


class TerrainConfig(BaseModel):
    """Validated configuration for one conversion run."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    access_token: str | None = Field(None, description="Tile service access token")
    zoom: int = Field(..., ge=0, description="Zoom level")
    tile_size: int = Field(DEFAULT_TILE_SIZE, gt=0, description="Pixels per tile edge")
    longitude: float | None = Field(None, ge=-180.0, le=180.0, description="Anchor longitude")
    latitude: float | None = Field(None, gt=-90.0, lt=90.0, description="Anchor latitude")
    pixel_x: int | None = Field(None, ge=0, description="Absolute pixel X in the pyramid")
    pixel_y: int | None = Field(None, ge=0, description="Absolute pixel Y in the pyramid")
    output_path: Path = Field(Path(DEFAULT_OUTPUT_PATH), description="GeoTIFF output path")
    base_url: str = Field(DEFAULT_BASE_URL, description="Terrain-RGB tileset base URL")
    timeout_s: float = Field(DEFAULT_TIMEOUT_S, gt=0, description="HTTP timeout in seconds")
    snap_to_tile: bool = Field(False, description="Anchor the transform at the tile corner")

    @field_validator("longitude", "latitude")
    @classmethod
    def _finite(cls, v: float | None) -> float | None:
        if v is not None and not math.isfinite(v):
            raise ValueError("must be finite")
        return v

    @model_validator(mode="after")
    def _check_mode(self) -> "TerrainConfig":
        geo = (self.longitude is not None, self.latitude is not None)
        pix = (self.pixel_x is not None, self.pixel_y is not None)
        if any(geo) and any(pix):
            raise ValueError(ErrorMessages.MIXED_MODE)
        if not (all(geo) or all(pix)):
            raise ValueError(ErrorMessages.INCOMPLETE_MODE)
        return self

    @property
    def mode(self) -> str:
        return RequestMode.LONLAT if self.longitude is not None else RequestMode.PIXEL

    def to_request(self) -> TileRequest:
        """Build the TileRequest variant matching this configuration."""
        if self.mode == RequestMode.LONLAT:
            return LonLatRequest(
                lon=self.longitude, lat=self.latitude, zoom=self.zoom, tile_size=self.tile_size
            )
        return PixelRequest(
            pixel_x=self.pixel_x, pixel_y=self.pixel_y, zoom=self.zoom, tile_size=self.tile_size
        )

    @classmethod
    def create(cls, **values: object) -> "TerrainConfig":
        """Validate values, raising InvalidInputError instead of ValidationError."""
        values = {k: v for k, v in values.items() if v is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidInputError(ErrorMessages.INVALID_CONFIG.format(_summarize(e))) from e

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        env_file: str | Path | None = None,
        mode: str | None = None,
        **overrides: object,
    ) -> "TerrainConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read instead of os.environ
            env_file: .env file to load first (defaults to ./.env when present)
            mode: Restrict to one request mode, ignoring the other mode's variables
            **overrides: Explicit values that take precedence over the environment

        Returns:
            Validated TerrainConfig
        """
        if environ is None:
            path = Path(env_file) if env_file else Path.cwd() / ".env"
            if path.exists():
                load_dotenv(path)
                logger.debug(f"Loaded environment from {path}")
            environ = os.environ

        values: dict[str, object] = {
            "access_token": environ.get(EnvVar.ACCESS_TOKEN) or None,
            "zoom": environ.get(EnvVar.ZOOM),
            "tile_size": environ.get(EnvVar.TILE_SIZE),
            "longitude": environ.get(EnvVar.LONGITUDE),
            "latitude": environ.get(EnvVar.LATITUDE),
            "pixel_x": environ.get(EnvVar.PIXEL_X),
            "pixel_y": environ.get(EnvVar.PIXEL_Y),
            "output_path": environ.get(EnvVar.OUTPUT_PATH),
            "base_url": environ.get(EnvVar.BASE_URL),
            "timeout_s": environ.get(EnvVar.TIMEOUT),
        }
        values = {k: v for k, v in values.items() if v not in (None, "")}
        if mode == RequestMode.LONLAT:
            values.pop("pixel_x", None)
            values.pop("pixel_y", None)
        elif mode == RequestMode.PIXEL:
            values.pop("longitude", None)
            values.pop("latitude", None)
        values.update({k: v for k, v in overrides.items() if v is not None})

        if "zoom" not in values:
            raise InvalidInputError(ErrorMessages.MISSING_ZOOM)
        return cls.create(**values)


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "config"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
