"""
Error types raised by the tile map editing core.

Coordinate and tile-encoding errors reject the single call that raised them;
layer-store errors are raised before any mutation happens. Out-of-bounds
paint targets and similar no-op conditions are not errors.
"""

from typing import List, Optional


class TileMapError(Exception):
    """Base class for all tilemaped errors."""
    pass


class ConfigurationError(TileMapError, ValueError):
    """Raised for an unknown topology or invalid map dimensions."""
    pass


class MalformedTileRef(TileMapError, ValueError):
    """Raised when a stored cell value is not three integers."""

    def __init__(self, value: object, reason: str = ""):
        self.value = value
        message = f"Malformed tile reference: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class IndexOutOfRange(TileMapError, IndexError):
    """Raised when a layer index does not exist."""

    def __init__(self, index: int, count: int):
        self.index = index
        self.count = count
        super().__init__(f"Layer index {index} out of range (0..{count - 1})")


class MapFormatError(TileMapError, ValueError):
    """Raised when a persisted map document is rejected as a whole."""

    def __init__(self, errors: List[str], source: Optional[str] = None):
        self.errors = errors
        self.source = source
        where = f" in {source}" if source else ""
        details = "\n  - ".join(errors)
        super().__init__(f"Invalid map document{where}:\n  - {details}")
