"""Map models, coordinates, paint tools and persistence for tilemaped."""

from .coord_transformer import (
    Topology,
    CoordinateTransformer,
    cell_to_pixel,
    pixel_to_cell,
    HEX_WIDTH_FACTOR,
    HEX_ADVANCE_FACTOR,
)
from .models import (
    TileRef,
    Layer,
    MapConfig,
    TileMap,
    encode_cell,
    decode_cell,
    BASE_LAYER_NAME,
)
from .paint import PaintTool, apply_tool, flood_fill
from .serialization import MapSchema, MapLoader, MapWriter, map_to_document, map_from_document

__all__ = [
    "Topology",
    "CoordinateTransformer",
    "cell_to_pixel",
    "pixel_to_cell",
    "HEX_WIDTH_FACTOR",
    "HEX_ADVANCE_FACTOR",
    "TileRef",
    "Layer",
    "MapConfig",
    "TileMap",
    "encode_cell",
    "decode_cell",
    "BASE_LAYER_NAME",
    "PaintTool",
    "apply_tool",
    "flood_fill",
    "MapSchema",
    "MapLoader",
    "MapWriter",
    "map_to_document",
    "map_from_document",
]
