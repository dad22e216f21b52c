"""Paint tools that change the cells of a layer.

Each tool takes a layer, a target cell and the selected tile, and returns a
layer with the result. The input layer is never modified. When a tool has
nothing to do (target outside the map, no tile selected, fill onto the same
value) the very same layer object is returned, so callers can detect no-ops
with ``is``.
"""

import logging
from collections import deque
from enum import Enum
from typing import Optional, Union

from .models import Cell, Grid, Layer, TileRef

logger = logging.getLogger(__name__)


class PaintTool(str, Enum):
    """Drawing tools. Values match the stored tool names."""

    SMALL_BRUSH = "smallBrush"
    """Paint a single cell."""

    LARGE_BRUSH = "largeBrush"
    """Paint a 3x3 block centered on the target."""

    FILL = "fill"
    """Flood fill the 4-connected region of equal cells."""

    ERASER = "eraser"
    """Clear a single cell."""

    @property
    def needs_tile(self) -> bool:
        """Whether the tool does nothing without a selected tile."""
        return self is not PaintTool.ERASER


_NEIGHBOURS_4 = ((1, 0), (-1, 0), (0, 1), (0, -1))
_BLOCK_3X3 = tuple((dx, dy) for dy in (-1, 0, 1) for dx in (-1, 0, 1))


def _in_bounds(col: int, row: int, width: int, height: int) -> bool:
    return 0 <= col < width and 0 <= row < height


def _thaw(tiles: Grid) -> list[list[Cell]]:
    return [list(row) for row in tiles]


def _freeze(tiles: list[list[Cell]]) -> Grid:
    return tuple(tuple(row) for row in tiles)


def paint_cell(layer: Layer, col: int, row: int, tile: Cell) -> Layer:
    """Write ``tile`` (or empty) at one cell.

    Returns:
        New layer, or ``layer`` itself if the cell is outside the layer
    """
    if not _in_bounds(col, row, layer.width, layer.height):
        return layer

    new_row = layer.tiles[row][:col] + (tile,) + layer.tiles[row][col + 1:]
    tiles = layer.tiles[:row] + (new_row,) + layer.tiles[row + 1:]
    return layer.with_tiles(tiles)


def paint_block(layer: Layer, col: int, row: int, tile: TileRef) -> Layer:
    """Write ``tile`` on the 3x3 block centered on (col, row).

    Neighbours outside the layer are skipped; a center outside the layer
    makes the whole call a no-op.
    """
    if not _in_bounds(col, row, layer.width, layer.height):
        return layer

    tiles = _thaw(layer.tiles)
    for dx, dy in _BLOCK_3X3:
        x, y = col + dx, row + dy
        if _in_bounds(x, y, layer.width, layer.height):
            tiles[y][x] = tile
    return layer.with_tiles(_freeze(tiles))


def flood_fill(layer: Layer, col: int, row: int, tile: TileRef) -> Layer:
    """Replace the 4-connected region around (col, row) with ``tile``.

    The region is every cell reachable through orthogonal steps whose value
    equals the target cell's original value (empty matches empty). Uses an
    explicit queue, so depth does not grow with the region size.

    Returns:
        New layer, or ``layer`` itself if the target is outside the layer
        or already holds ``tile``
    """
    width, height = layer.width, layer.height
    if not _in_bounds(col, row, width, height):
        return layer

    target = layer.tiles[row][col]
    if target == tile:
        return layer

    tiles = _thaw(layer.tiles)
    tiles[row][col] = tile
    queue: deque[tuple[int, int]] = deque([(col, row)])
    filled = 1

    while queue:
        x, y = queue.popleft()
        for dx, dy in _NEIGHBOURS_4:
            nx, ny = x + dx, y + dy
            if not _in_bounds(nx, ny, width, height):
                continue
            # Cells are marked as they are queued, so each one is visited once
            if tiles[ny][nx] != target:
                continue
            tiles[ny][nx] = tile
            filled += 1
            queue.append((nx, ny))

    logger.debug(f"Flood fill from ({col}, {row}) replaced {filled} cell(s)")
    return layer.with_tiles(_freeze(tiles))


def apply_tool(
    layer: Layer,
    tool: Union[PaintTool, str],
    col: int,
    row: int,
    tile: Optional[TileRef] = None,
) -> Layer:
    """Apply a paint tool at one map cell.

    Args:
        layer: Layer to paint on (not modified)
        tool: Tool to apply
        col: Target column
        row: Target row
        tile: Selected tile; required by every tool except the eraser

    Returns:
        Resulting layer; ``layer`` itself when the application is a no-op
    """
    tool = PaintTool(tool)

    if not _in_bounds(col, row, layer.width, layer.height):
        logger.debug(f"{tool.value} at ({col}, {row}) is outside the map, ignored")
        return layer

    if tile is None and tool.needs_tile:
        logger.debug(f"{tool.value} at ({col}, {row}) without a selected tile, ignored")
        return layer

    if tool is PaintTool.SMALL_BRUSH:
        return paint_cell(layer, col, row, tile)
    if tool is PaintTool.LARGE_BRUSH:
        return paint_block(layer, col, row, tile)  # type: ignore[arg-type]
    if tool is PaintTool.FILL:
        return flood_fill(layer, col, row, tile)  # type: ignore[arg-type]
    return paint_cell(layer, col, row, None)
