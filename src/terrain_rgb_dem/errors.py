"""Exception types raised by terrain-rgb-dem."""


class TerrainRGBError(Exception):
    """Base exception for all terrain-rgb-dem failures."""


class InvalidInputError(TerrainRGBError, ValueError):
    """Non-finite, out-of-range, missing, or wrongly typed input."""


class ShapeMismatchError(TerrainRGBError, ValueError):
    """Decoded bitmap cannot be read as a (height, width, >=3) uint8 grid."""


class TileFetchError(TerrainRGBError):
    """Tile request failed at the transport level or with a non-200 status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
