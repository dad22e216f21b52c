"""Rendering of maps to images.

This module draws the visible layers of a map bottom to top, placing each
tile at the pixel position given by the coordinate transformer, and can
overlay grid lines for either topology.
"""

import logging
from typing import Optional

from PIL import Image, ImageDraw

from ..maps.coord_transformer import CoordinateTransformer
from ..maps.models import Layer, TileMap, TileRef
from ..tilesets.catalog import TilesetCatalog

GRID_COLOR = (100, 100, 100, 51)
"""Grid line colour, rgba(100, 100, 100, 0.2)."""


class MapRenderer:
    """Renders TileMap snapshots into Pillow images."""

    def __init__(self, catalog: TilesetCatalog, grid_color: tuple[int, int, int, int] = GRID_COLOR):
        """Initialize the renderer.

        Args:
            catalog: Tileset catalog providing tile images
            grid_color: RGBA colour of grid lines
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.catalog = catalog
        self.grid_color = grid_color

        # (tile_ref, tile_size) -> tile image scaled to the map tile size
        self._scaled_tiles: dict[tuple[TileRef, int], Image.Image] = {}

    def render(
        self,
        tile_map: TileMap,
        include_grid: bool = False,
        only_active_layer: bool = False,
        background: Optional[tuple[int, int, int, int]] = None,
    ) -> Image.Image:
        """Render a map snapshot.

        Args:
            tile_map: Map to render
            include_grid: Draw grid lines (squares or hexagons) on top
            only_active_layer: Draw only the active layer, visible or not
            background: RGBA fill, transparent when omitted

        Returns:
            RGBA image sized to fit every tile of the map
        """
        transformer = tile_map.config.transformer()
        size = transformer.canvas_size(tile_map.width, tile_map.height)
        canvas = Image.new("RGBA", size, background or (0, 0, 0, 0))

        layers = [tile_map.active_layer] if only_active_layer else tile_map.visible_layers()
        drawn = 0
        for layer in layers:
            drawn += self.draw_layer(canvas, layer, transformer)

        if include_grid:
            self.draw_grid(canvas, tile_map.width, tile_map.height, transformer)

        self.logger.debug(
            f"Rendered {len(layers)} layer(s), {drawn} tile(s) on a {size[0]}x{size[1]} canvas"
        )
        return canvas

    def draw_layer(self, canvas: Image.Image, layer: Layer, transformer: CoordinateTransformer) -> int:
        """Draw every non-empty cell of one layer.

        Cells whose tileset or tile image is unavailable are skipped.

        Returns:
            Number of tiles drawn
        """
        drawn = 0
        for col, row, ref in layer.iter_cells():
            tile_image = self.get_tile_image(ref, transformer.tile_size)
            if tile_image is None:
                self.logger.debug(f"No image for tile {ref} at ({col}, {row}), skipped")
                continue

            x, y = transformer.cells_to_pixels(col, row)
            canvas.alpha_composite(tile_image, (round(x), round(y)))
            drawn += 1
        return drawn

    def draw_grid(
        self, canvas: Image.Image, width: int, height: int, transformer: CoordinateTransformer
    ) -> None:
        """Overlay grid lines: cell borders for grid maps, hexagon outlines for hex maps."""
        overlay = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)

        if transformer.is_hex:
            for row in range(height):
                for col in range(width):
                    draw.polygon(transformer.hexagon_points(col, row), outline=self.grid_color)
        else:
            tile_size = transformer.tile_size
            right = width * tile_size
            bottom = height * tile_size
            for col in range(width + 1):
                x = min(col * tile_size, right - 1)
                draw.line([(x, 0), (x, bottom)], fill=self.grid_color, width=1)
            for row in range(height + 1):
                y = min(row * tile_size, bottom - 1)
                draw.line([(0, y), (right, y)], fill=self.grid_color, width=1)

        canvas.alpha_composite(overlay)

    def get_tile_image(self, ref: TileRef, tile_size: int) -> Image.Image | None:
        """Return the tile image scaled to ``tile_size``, or None if unavailable."""
        key = (ref, tile_size)
        cached = self._scaled_tiles.get(key)
        if cached is not None:
            return cached

        tile_image = self.catalog.get_tile_image(ref)
        if tile_image is None:
            return None

        if tile_image.size != (tile_size, tile_size):
            tile_image = tile_image.resize((tile_size, tile_size), Image.Resampling.NEAREST)

        self._scaled_tiles[key] = tile_image
        return tile_image
