"""Coordinate transformations between map cells and canvas pixels.

This module handles both supported tilings:
- ``grid``: orthogonal square cells
- ``hex``: flat-topped hexagons in columns, odd columns shifted down by
  half a tile

All functions are pure; nothing here keeps state besides the tile size and
topology bound to a `CoordinateTransformer`.
"""

import math
from enum import Enum
from typing import Union

from ..errors import ConfigurationError


HEX_WIDTH_FACTOR = 1.15
"""Hexagon width relative to the tile size (height equals tile size)."""

HEX_ADVANCE_FACTOR = 0.75
"""Horizontal distance between hex columns, as a fraction of hex width."""


class Topology(str, Enum):
    """Tiling scheme of a map."""

    GRID = "grid"
    """Orthogonal square grid."""

    HEX = "hex"
    """Flat-topped hexagonal grid."""

    @classmethod
    def parse(cls, value: Union["Topology", str]) -> "Topology":
        """Convert a stored topology value to `Topology`.

        Raises:
            ConfigurationError: If the value is not a known topology
        """
        if isinstance(value, Topology):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unknown topology: {value!r}") from None


def _hex_size(tile_size: float) -> tuple[float, float]:
    return tile_size * HEX_WIDTH_FACTOR, float(tile_size)


def cell_to_pixel(
    col: int, row: int, tile_size: int, topology: Union[Topology, str]
) -> tuple[float, float]:
    """Convert a map cell to the top-left pixel of its tile.

    Args:
        col: Map column
        row: Map row
        tile_size: Tile size in pixels
        topology: ``grid`` or ``hex``

    Returns:
        (x, y) in canvas pixels

    Raises:
        ConfigurationError: If topology is unknown
    """
    topology = Topology.parse(topology)

    if topology is Topology.GRID:
        return (float(col * tile_size), float(row * tile_size))

    hex_width, hex_height = _hex_size(tile_size)
    y_offset = 0 if col % 2 == 0 else tile_size / 2
    return (col * (hex_width * HEX_ADVANCE_FACTOR), row * hex_height + y_offset)


def pixel_to_cell(
    x: float, y: float, tile_size: int, topology: Union[Topology, str]
) -> tuple[int, int]:
    """Convert a canvas pixel to the map cell under it.

    For hex maps this is the column/row approximation used for both hit
    testing and placement; it is not an exact hexagon pick near the slanted
    edges.

    Args:
        x: Canvas X in pixels
        y: Canvas Y in pixels
        tile_size: Tile size in pixels
        topology: ``grid`` or ``hex``

    Returns:
        (col, row) map cell; may be outside the map

    Raises:
        ConfigurationError: If topology is unknown
    """
    topology = Topology.parse(topology)

    if topology is Topology.GRID:
        return (math.floor(x / tile_size), math.floor(y / tile_size))

    hex_width, hex_height = _hex_size(tile_size)
    col = math.floor(x / (hex_width * HEX_ADVANCE_FACTOR))
    row = math.floor(y / hex_height - (0.5 if col % 2 else 0))
    return (col, row)


class CoordinateTransformer:
    """Handles coordinate transformations for one map configuration."""

    def __init__(self, tile_size: int, topology: Union[Topology, str]):
        """Initialize the coordinate transformer.

        Args:
            tile_size: Tile size in pixels
            topology: ``grid`` or ``hex``

        Raises:
            ConfigurationError: If topology is unknown or tile size is not positive
        """
        if tile_size <= 0:
            raise ConfigurationError(f"Tile size must be positive, got {tile_size}")
        self.tile_size = tile_size
        self.topology = Topology.parse(topology)

    @property
    def is_hex(self) -> bool:
        return self.topology is Topology.HEX

    def cells_to_pixels(self, col: int, row: int) -> tuple[float, float]:
        """Convert map cell to canvas pixel coordinates."""
        return cell_to_pixel(col, row, self.tile_size, self.topology)

    def pixels_to_cells(self, x: float, y: float) -> tuple[int, int]:
        """Convert canvas pixel coordinates to a map cell."""
        return pixel_to_cell(x, y, self.tile_size, self.topology)

    def canvas_size(self, width: int, height: int) -> tuple[int, int]:
        """Get the pixel size needed to draw a map of ``width`` x ``height`` cells.

        For grid maps this is simply cells times tile size. For hex maps the
        last column's advance, the odd-column stagger and one full tile are
        included so every tile rectangle fits.

        Returns:
            (canvas_width, canvas_height) in whole pixels
        """
        if not self.is_hex:
            return (width * self.tile_size, height * self.tile_size)

        hex_width, hex_height = _hex_size(self.tile_size)
        stagger = self.tile_size / 2 if width > 1 else 0
        canvas_width = (width - 1) * hex_width * HEX_ADVANCE_FACTOR + self.tile_size
        canvas_height = (height - 1) * hex_height + stagger + self.tile_size
        return (math.ceil(canvas_width), math.ceil(canvas_height))

    def hexagon_points(self, col: int, row: int) -> list[tuple[float, float]]:
        """Get the outline corners of a hex cell, used for drawing hex grid lines.

        Corners sit at ``60 * i - 30`` degrees around the cell's pixel
        position, with radii of half the hex width and half the hex height.
        """
        hex_width, hex_height = _hex_size(self.tile_size)
        x, y = self.cells_to_pixels(col, row)

        points: list[tuple[float, float]] = []
        for i in range(6):
            angle = math.radians(60 * i - 30)
            points.append(
                (x + hex_width / 2 * math.cos(angle), y + hex_height / 2 * math.sin(angle))
            )
        return points
