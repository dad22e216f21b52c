"""Tileset records, selections and the tileset catalog."""

from .models import Tileset, TileSheet, TileSelection
from .catalog import TilesetCatalog

__all__ = [
    "Tileset",
    "TileSheet",
    "TileSelection",
    "TilesetCatalog",
]
