"""
Decoder — Terrain-RGB pixels to elevation in metres.

elevation = -10000 + (R * 65536 + G * 256 + B) * 0.1

The three 8-bit channels form a base-256 big-endian integer; any channel
past the third (alpha) is ignored.
"""

from typing import Any

import numpy as np
from numpy.typing import NDArray

from ..constants import (
    TERRAIN_RGB_CHANNELS,
    TERRAIN_RGB_OFFSET_M,
    TERRAIN_RGB_SCALE_M,
    ErrorMessages,
)
from ..errors import InvalidInputError, ShapeMismatchError

FloatArray = NDArray[np.floating[Any]]


def decode_terrain_rgb(pixels: NDArray[np.uint8]) -> FloatArray:
    """
    Decode a Terrain-RGB bitmap into a float32 elevation grid.

    Args:
        pixels: Array of shape (height, width, channels), uint8, channels >= 3

    Returns:
        float32 array of shape (height, width)

    Raises:
        ShapeMismatchError: If the array is not 3-D, has < 3 channels, or is empty
        InvalidInputError: If the array is not uint8
    """
    pixels = np.asarray(pixels)

    if pixels.ndim != 3:
        raise ShapeMismatchError(ErrorMessages.BITMAP_NOT_3D.format(pixels.shape))
    height, width, channels = pixels.shape
    if channels < TERRAIN_RGB_CHANNELS:
        raise ShapeMismatchError(ErrorMessages.TOO_FEW_CHANNELS.format(channels))
    if height == 0 or width == 0:
        raise ShapeMismatchError(ErrorMessages.EMPTY_BITMAP.format(width, height))
    if pixels.dtype != np.uint8:
        raise InvalidInputError(ErrorMessages.BITMAP_DTYPE.format(pixels.dtype))

    rgb = pixels[:, :, :TERRAIN_RGB_CHANNELS].astype(np.float64)
    code = rgb[:, :, 0] * 65536.0 + rgb[:, :, 1] * 256.0 + rgb[:, :, 2]
    elevation = TERRAIN_RGB_OFFSET_M + code * TERRAIN_RGB_SCALE_M

    return elevation.astype(np.float32)
