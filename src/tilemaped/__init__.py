"""
tilemaped: tile map editing model

Layers of tileset tiles on grid or hexagonal maps, with coordinate
transforms, paint tools, persistence, rendering and export.
"""

__version__ = "0.1.0"
__author__ = "tilemaped Contributors"

# Core services
from .editor import EditorSession
from .tilesets import TilesetCatalog
from .utils.logging_config import setup_logging

# Main data models
from .maps.coord_transformer import Topology, CoordinateTransformer, cell_to_pixel, pixel_to_cell
from .maps.models import TileRef, Layer, MapConfig, TileMap
from .maps.paint import PaintTool, apply_tool
from .tilesets.models import Tileset, TileSelection

# Errors
from .errors import (
    TileMapError,
    ConfigurationError,
    MalformedTileRef,
    IndexOutOfRange,
    MapFormatError,
)

__all__ = [
    # Services
    'EditorSession',
    'TilesetCatalog',

    # Logging
    'setup_logging',

    # Data models
    'Topology',
    'CoordinateTransformer',
    'cell_to_pixel',
    'pixel_to_cell',
    'TileRef',
    'Layer',
    'MapConfig',
    'TileMap',
    'PaintTool',
    'apply_tool',
    'Tileset',
    'TileSelection',

    # Errors
    'TileMapError',
    'ConfigurationError',
    'MalformedTileRef',
    'IndexOutOfRange',
    'MapFormatError',
]
