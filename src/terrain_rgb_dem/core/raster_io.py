"""
Raster I/O for Terrain-RGB tiles.

All functions are synchronous — callers wrap them in asyncio.to_thread().
Handles PNG decoding of fetched tiles and single-band float32 GeoTIFF output.
"""

import io
import logging
from pathlib import Path
from typing import Any

import numpy as np
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from ..constants import OUTPUT_BAND_COUNT, OUTPUT_DRIVER, OUTPUT_DTYPE, ErrorMessages
from ..errors import ShapeMismatchError

logger = logging.getLogger(__name__)

# Type aliases
FloatArray = NDArray[np.floating[Any]]
Transform = Any  # rasterio.Affine


# ---------------------------------------------------------------------------
# PNG decoding
# ---------------------------------------------------------------------------


def decode_png(data: bytes) -> NDArray[np.uint8]:
    """
    Decode tile image bytes into a (height, width, channels) uint8 array.

    RGB and RGBA images are kept as-is; palette, greyscale and other modes
    are converted to RGB first.

    Args:
        data: Encoded image bytes (PNG)

    Returns:
        uint8 array of shape (height, width, 3 or 4)

    Raises:
        ShapeMismatchError: If the bytes cannot be decoded as an image
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            if img.mode not in ("RGB", "RGBA"):
                img = img.convert("RGB")
            pixels = np.asarray(img, dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ShapeMismatchError(ErrorMessages.PNG_DECODE_FAILED.format(e)) from e

    logger.debug(f"Decoded tile image: shape {pixels.shape}")
    return pixels


# ---------------------------------------------------------------------------
# Output conversion
# ---------------------------------------------------------------------------


def _profile(elevation: FloatArray, transform: Transform | None, crs: Any | None) -> dict:
    height, width = elevation.shape
    profile: dict[str, Any] = {
        "driver": OUTPUT_DRIVER,
        "height": height,
        "width": width,
        "count": OUTPUT_BAND_COUNT,
        "dtype": OUTPUT_DTYPE,
    }
    if transform is not None:
        profile["transform"] = transform
    if crs is not None:
        profile["crs"] = crs
    return profile


def elevation_to_geotiff(
    elevation: FloatArray,
    transform: Transform | None = None,
    crs: Any | None = None,
) -> bytes:
    """
    Convert a 2D elevation array to single-band float32 GeoTIFF bytes.

    Args:
        elevation: 2D elevation array (row-major, top-left origin)
        transform: Affine transform, or None for an unreferenced raster
        crs: CRS (e.g. "EPSG:3857"), or None

    Returns:
        GeoTIFF bytes
    """
    from rasterio.io import MemoryFile

    memfile = MemoryFile()
    with memfile.open(**_profile(elevation, transform, crs)) as dst:
        dst.write(elevation.astype(OUTPUT_DTYPE), 1)

    return memfile.read()


def write_geotiff(
    path: str | Path,
    elevation: FloatArray,
    transform: Transform | None = None,
    crs: Any | None = None,
) -> Path:
    """Write a 2D elevation array to a single-band float32 GeoTIFF on disk."""
    import rasterio

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with rasterio.open(path, "w", **_profile(elevation, transform, crs)) as dst:
        dst.write(elevation.astype(OUTPUT_DTYPE), 1)

    logger.info(f"Wrote {elevation.shape[1]}x{elevation.shape[0]} GeoTIFF to {path}")
    return path
