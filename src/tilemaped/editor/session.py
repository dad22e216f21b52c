"""Editing session: the single owner of the editor state.

An `EditorSession` holds the current map snapshot plus tool, selection,
cursor and zoom state, and is the only place where edits are applied. Each
edit builds a new `TileMap` from the current one and publishes it; earlier
snapshots handed out to renderers or exporters stay valid.

All mutations run under one re-entrant lock, so a session may be shared
between threads without two edits interleaving.
"""

import logging
import threading
from pathlib import Path
from typing import Callable, Optional, Sequence, Union, TYPE_CHECKING

from ..maps.coord_transformer import Topology
from ..maps.models import Layer, MapConfig, TileMap, TileRef
from ..maps.paint import PaintTool, apply_tool
from ..maps.serialization import MapLoader, MapWriter
from ..settings.editor import ZOOM_STEP, clamp_zoom
from ..tilesets.catalog import TilesetCatalog
from ..tilesets.models import TileSelection

if TYPE_CHECKING:
    from ..settings import AppSettings

MapListener = Callable[[TileMap], None]

DEFAULT_ZOOM = 100


class EditorSession:
    """Manages the map being edited and the editor state around it.

    Attributes:
        tool: Selected paint tool
        catalog: Tilesets available for picking, or None
        selected_tileset_id: Tileset shown for picking, or None
        selected_tile: Tile painted by brushes and fill, or None
        selection: Multi-tile selection block (1x1 for a single tile)
        cursor: Map cell under the pointer, or None when off-canvas
        zoom: Zoom percentage (50-200)
    """

    def __init__(self, tile_map: Optional[TileMap] = None, catalog: Optional[TilesetCatalog] = None):
        """Initialize the session.

        Args:
            tile_map: Map to edit; a default 64x64 grid map when omitted
            catalog: Tilesets to pick from; the first one is selected
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self._lock = threading.RLock()
        self._listeners: list[MapListener] = []

        self._map = tile_map if tile_map is not None else TileMap.create()
        self.tool = PaintTool.SMALL_BRUSH
        self.selected_tileset_id: Optional[int] = None
        self.selected_tile: Optional[TileRef] = None
        self.selection = TileSelection.empty()
        self.cursor: Optional[tuple[int, int]] = None
        self.zoom = DEFAULT_ZOOM
        self._dragging = False

        self.catalog: Optional[TilesetCatalog] = None
        if catalog is not None:
            self.set_catalog(catalog)

    @classmethod
    def from_settings(cls, settings: "AppSettings") -> "EditorSession":
        """Create a session with a new map built from the editor defaults.

        The configured tileset catalog is loaded when its file exists.

        Raises:
            ValueError: If the catalog file is malformed
        """
        editor = settings.editor
        catalog_path = settings.paths.tileset_catalog
        catalog = None
        if catalog_path is not None and catalog_path.is_file():
            catalog = TilesetCatalog.from_file(catalog_path)
        session = cls(
            TileMap.create(
                topology=editor.default_topology,
                tile_size=editor.default_tile_size,
                width=editor.default_map_width,
                height=editor.default_map_height,
            ),
            catalog=catalog,
        )
        session.zoom = editor.zoom_level
        return session

    # ---------------------------------------------------------------------
    # State access
    # ---------------------------------------------------------------------
    @property
    def map(self) -> TileMap:
        """Current map snapshot."""
        return self._map

    @property
    def config(self) -> MapConfig:
        return self._map.config

    @property
    def layers(self) -> tuple[Layer, ...]:
        return self._map.layers

    @property
    def active_layer_index(self) -> int:
        return self._map.active_layer_index

    @property
    def active_layer(self) -> Layer:
        return self._map.active_layer

    @property
    def is_dragging(self) -> bool:
        return self._dragging

    def add_listener(self, listener: MapListener) -> None:
        """Register a callback invoked with every newly published map."""
        self._listeners.append(listener)

    def remove_listener(self, listener: MapListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _publish(self, tile_map: TileMap) -> bool:
        """Make ``tile_map`` current; returns False when nothing changed."""
        if tile_map is self._map:
            return False
        self._map = tile_map
        for listener in list(self._listeners):
            listener(tile_map)
        return True

    def _reset_editor_state(self) -> None:
        self.tool = PaintTool.SMALL_BRUSH
        self.selected_tile = None
        self.selection = TileSelection.empty()
        self.cursor = None
        self.zoom = DEFAULT_ZOOM
        self._dragging = False

    # ---------------------------------------------------------------------
    # Map lifecycle
    # ---------------------------------------------------------------------
    def create_new_map(
        self,
        topology: Union[Topology, str],
        tile_size: int,
        width: int,
        height: int,
    ) -> TileMap:
        """Replace the map with a fresh one holding a single base layer.

        Raises:
            ConfigurationError: If topology or sizes are invalid
        """
        with self._lock:
            tile_map = TileMap.create(topology, tile_size, width, height)
            self._reset_editor_state()
            self._publish(tile_map)
            self.logger.info(
                f"Created new {tile_map.config.topology.value} map {width}x{height} (tile size {tile_size})"
            )
            return tile_map

    def load_map(self, tile_map: TileMap) -> None:
        """Replace the whole map with a loaded one and reset editor state.

        The first catalog tileset becomes the selected one again.
        """
        with self._lock:
            self._reset_editor_state()
            self.selected_tileset_id = self._default_tileset_id()
            self._publish(tile_map.set_active_layer(0))
            self.logger.info(
                f"Loaded {tile_map.width}x{tile_map.height} map with {tile_map.layer_count} layer(s)"
            )

    def load(self, payload: Union[bytes, str], source: str = "") -> TileMap:
        """Load a map from a JSON document.

        The document is fully parsed and validated before the session
        changes; a rejected document leaves the current map in place.

        Raises:
            MapFormatError: If the document is invalid
        """
        tile_map = MapLoader().loads(payload, source=source)
        self.load_map(tile_map)
        return self._map

    def load_file(self, path: Path) -> TileMap:
        """Load a map from a JSON file.

        Raises:
            FileNotFoundError: If file doesn't exist
            MapFormatError: If the document is invalid
        """
        tile_map = MapLoader().load_from_json(path)
        self.load_map(tile_map)
        return self._map

    def dumps(self) -> bytes:
        """Serialize the current map to JSON bytes."""
        return MapWriter().dumps(self._map)

    def save_file(self, path: Path) -> Path:
        """Save the current map to a JSON file."""
        return MapWriter().save_to_json(self._map, path)

    # ---------------------------------------------------------------------
    # Map configuration
    # ---------------------------------------------------------------------
    def set_topology(self, topology: Union[Topology, str]) -> None:
        """Switch between grid and hex topology; layers are untouched.

        Raises:
            ConfigurationError: If topology is unknown
        """
        with self._lock:
            self._publish(self._map.with_topology(topology))
            self.logger.debug(f"Topology set to {self.config.topology.value}")

    def set_tile_size(self, tile_size: int) -> None:
        """Change the tile size in pixels.

        Raises:
            ConfigurationError: If tile size is not a positive integer
        """
        with self._lock:
            self._publish(self._map.with_tile_size(tile_size))
            self.logger.debug(f"Tile size set to {tile_size}")

    def resize_map(self, width: int, height: int) -> None:
        """Resize the map and every layer together.

        Raises:
            ConfigurationError: If width or height is not a positive integer
        """
        with self._lock:
            old_width, old_height = self._map.width, self._map.height
            self._publish(self._map.resize(width, height))
            self.logger.info(f"Resized map from {old_width}x{old_height} to {width}x{height}")

    # ---------------------------------------------------------------------
    # Layer operations
    # ---------------------------------------------------------------------
    def add_layer(self) -> Layer:
        """Append an empty layer and make it active."""
        with self._lock:
            self._publish(self._map.add_layer())
            layer = self._map.active_layer
            self.logger.debug(f"Added layer '{layer.name}' ({layer.id})")
            return layer

    def remove_layer(self, index: int) -> bool:
        """Remove a layer; removing the last remaining layer does nothing.

        Returns:
            True if a layer was removed

        Raises:
            IndexOutOfRange: If index does not exist
        """
        with self._lock:
            removed = self._map.get_layer(index)
            changed = self._publish(self._map.remove_layer(index))
            if changed:
                self.logger.debug(f"Removed layer '{removed.name}' ({removed.id})")
            else:
                self.logger.debug("Refusing to remove the only layer")
            return changed

    def set_active_layer(self, index: int) -> None:
        """Select the layer paint operations target.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        with self._lock:
            self._publish(self._map.set_active_layer(index))

    def toggle_layer_visibility(self, index: int) -> bool:
        """Flip a layer's visibility.

        Returns:
            The new visibility

        Raises:
            IndexOutOfRange: If index does not exist
        """
        with self._lock:
            self._publish(self._map.toggle_layer_visibility(index))
            return self._map.layers[index].visible

    def set_layer_visibility(self, index: int, visible: bool) -> None:
        """Show or hide a layer.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        with self._lock:
            self._publish(self._map.set_layer_visibility(index, visible))

    def rename_layer(self, index: int, name: str) -> None:
        """Rename a layer.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        with self._lock:
            self._publish(self._map.rename_layer(index, name))

    # ---------------------------------------------------------------------
    # Tool and selection
    # ---------------------------------------------------------------------
    def set_tool(self, tool: Union[PaintTool, str]) -> None:
        """Select the paint tool.

        Raises:
            ValueError: If the tool name is unknown
        """
        self.tool = PaintTool(tool)

    def _default_tileset_id(self) -> Optional[int]:
        return self.catalog.first_tileset_id() if self.catalog is not None else None

    def set_catalog(self, catalog: Optional[TilesetCatalog]) -> None:
        """Use ``catalog`` for picking and select its first tileset."""
        with self._lock:
            self.catalog = catalog
            self.set_selected_tileset(self._default_tileset_id())
            self.logger.debug(
                f"Tileset catalog with {len(catalog) if catalog is not None else 0} tileset(s) attached"
            )

    def set_selected_tileset(self, tileset_id: Optional[int]) -> None:
        """Show another tileset for picking; clears the selected tile."""
        with self._lock:
            self.selected_tileset_id = tileset_id
            self.selected_tile = None

    def set_selected_tile(self, tile: Optional[TileRef]) -> None:
        """Pick a single tile; the selection becomes the 1x1 block holding it."""
        with self._lock:
            self.selected_tile = tile
            self.selection = TileSelection.single(tile)

    def set_multi_tile_selection(
        self, width: int, height: int, tiles: Sequence[Sequence[Optional[TileRef]]]
    ) -> None:
        """Pick a block of tiles; the first non-empty one becomes the selected tile.

        Raises:
            ValueError: If ``tiles`` does not match ``width`` x ``height``
        """
        with self._lock:
            selection = TileSelection(width, height, tuple(tuple(row) for row in tiles))
            self.selection = selection
            self.selected_tile = selection.first_tile()

    # ---------------------------------------------------------------------
    # Cursor and zoom
    # ---------------------------------------------------------------------
    def set_cursor(self, col: int, row: int) -> None:
        """Record the map cell under the pointer."""
        self.cursor = (col, row)

    def clear_cursor(self) -> None:
        """Mark the pointer as off-canvas."""
        self.cursor = None

    def set_zoom(self, zoom: int) -> int:
        """Set zoom percentage, clamped to 50-200."""
        self.zoom = clamp_zoom(zoom)
        return self.zoom

    def zoom_in(self) -> int:
        return self.set_zoom(self.zoom + ZOOM_STEP)

    def zoom_out(self) -> int:
        return self.set_zoom(self.zoom - ZOOM_STEP)

    # ---------------------------------------------------------------------
    # Painting
    # ---------------------------------------------------------------------
    def apply_tool_at(self, col: int, row: int) -> bool:
        """Apply the selected tool to the active layer at a map cell.

        Out-of-bounds targets and tools that need a tile while none is
        selected leave the map unchanged.

        Returns:
            True if a new map was published
        """
        with self._lock:
            tile_map = self._map
            index = tile_map.active_layer_index
            layer = tile_map.active_layer
            painted = apply_tool(layer, self.tool, col, row, self.selected_tile)
            if painted is layer:
                return False
            return self._publish(tile_map.replace_layer(index, painted))

    def canvas_to_cell(self, x: float, y: float) -> tuple[int, int]:
        """Convert a pointer position on the zoomed canvas to a map cell."""
        scale = 100 / self.zoom
        return self.config.transformer().pixels_to_cells(x * scale, y * scale)

    def pointer_down(self, x: float, y: float) -> bool:
        """Start a drag gesture and paint at the pointer.

        Returns:
            True if the map changed
        """
        with self._lock:
            self._dragging = True
            col, row = self.canvas_to_cell(x, y)
            self.set_cursor(col, row)
            return self.apply_tool_at(col, row)

    def pointer_move(self, x: float, y: float) -> bool:
        """Track the pointer and paint while a drag is in progress.

        Returns:
            True if the map changed
        """
        with self._lock:
            col, row = self.canvas_to_cell(x, y)
            self.set_cursor(col, row)
            if not self._dragging:
                return False
            return self.apply_tool_at(col, row)

    def pointer_up(self) -> None:
        """End the drag gesture."""
        self._dragging = False

    def pointer_leave(self) -> None:
        """End the drag gesture and move the cursor off-canvas."""
        self._dragging = False
        self.clear_cursor()
