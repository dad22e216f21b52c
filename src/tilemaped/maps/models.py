"""
Data models for map representation during editing.

This module contains the tile reference value, layers and the map container.
All models are immutable snapshots: every editing operation returns a new
object and leaves the old one intact, so anybody holding a previous map or
layer keeps a consistent view of it.

For serialization/deserialization see `tilemaped.maps.serialization`.
"""

import logging
import re
import uuid
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional, Union

from ..errors import ConfigurationError, IndexOutOfRange, MalformedTileRef
from .coord_transformer import CoordinateTransformer, Topology

logger = logging.getLogger(__name__)

TILE_REF_SEPARATOR = ","
_TILE_REF_COMPONENT = re.compile(r"-?[0-9]+")

BASE_LAYER_NAME = "Layer 1 (Base)"


# =============================================================================
# Tile Encoding
# =============================================================================


@dataclass(frozen=True)
class TileRef:
    """Reference to one tile of a tileset, the value painted into cells.

    Attributes:
        tileset_id: Identifier of the tileset in the catalog
        col: Zero-based column inside the tileset grid
        row: Zero-based row inside the tileset grid

    Example:
        >>> ref = TileRef(1, 2, 3)
        >>> ref.encode()
        '1,2,3'
        >>> TileRef.decode("1,2,3") == ref
        True
    """

    tileset_id: int
    col: int
    row: int

    def __post_init__(self) -> None:
        for name in ("tileset_id", "col", "row"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise MalformedTileRef(value, f"'{name}' must be an integer")

    def encode(self) -> str:
        """Get the stored form ``"tilesetId,col,row"``."""
        return f"{self.tileset_id}{TILE_REF_SEPARATOR}{self.col}{TILE_REF_SEPARATOR}{self.row}"

    @classmethod
    def decode(cls, value: str) -> "TileRef":
        """Parse the stored form back into a `TileRef`.

        Args:
            value: Stored cell string, e.g. ``"1,0,4"``

        Returns:
            Parsed TileRef

        Raises:
            MalformedTileRef: If value is not exactly three integers
        """
        if not isinstance(value, str):
            raise MalformedTileRef(value, "expected a string")

        parts = value.split(TILE_REF_SEPARATOR)
        if len(parts) != 3:
            raise MalformedTileRef(value, f"expected 3 components, got {len(parts)}")
        if not all(_TILE_REF_COMPONENT.fullmatch(part) for part in parts):
            raise MalformedTileRef(value, "components must be integers")

        try:
            tileset_id, col, row = (int(part) for part in parts)
        except ValueError as e:
            # Components past the interpreter's integer digit limit
            raise MalformedTileRef(value, str(e)) from e
        return cls(tileset_id, col, row)

    def __str__(self) -> str:
        return self.encode()


def encode_cell(cell: Optional[TileRef]) -> Optional[str]:
    """Encode a cell for storage; empty cells stay ``None``."""
    return cell.encode() if cell is not None else None


def decode_cell(value: Optional[str]) -> Optional[TileRef]:
    """Decode a stored cell; ``None`` means empty.

    Raises:
        MalformedTileRef: If a non-empty value does not parse
    """
    if value is None:
        return None
    return TileRef.decode(value)


# =============================================================================
# Layer Store
# =============================================================================

Cell = Optional[TileRef]
Grid = tuple[tuple[Cell, ...], ...]


def empty_grid(width: int, height: int) -> Grid:
    """Build a ``height`` x ``width`` grid of empty cells."""
    return tuple(tuple(None for _ in range(width)) for _ in range(height))


def _new_layer_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class Layer:
    """One independently visible grid of optional tile references.

    Cells are addressed as ``tiles[row][col]``. The grid always matches the
    owning map's size; `TileMap` enforces this.

    Attributes:
        id: Opaque identifier, stable for the layer's lifetime
        name: Display name
        visible: Whether renderers should draw the layer
        tiles: Rows of cells, each cell a TileRef or None (empty)
    """

    id: str
    name: str
    visible: bool = True
    tiles: Grid = field(default_factory=tuple)

    @classmethod
    def create(cls, width: int, height: int, name: str) -> "Layer":
        """Create an empty, visible layer with a fresh id."""
        if width <= 0 or height <= 0:
            raise ConfigurationError(f"Invalid layer dimensions: {width}x{height}")
        return cls(id=_new_layer_id(), name=name, visible=True, tiles=empty_grid(width, height))

    @property
    def width(self) -> int:
        return len(self.tiles[0]) if self.tiles else 0

    @property
    def height(self) -> int:
        return len(self.tiles)

    def get(self, col: int, row: int) -> Cell:
        """Get the cell at (col, row), or None when empty or outside the layer."""
        if 0 <= col < self.width and 0 <= row < self.height:
            return self.tiles[row][col]
        return None

    def with_tiles(self, tiles: Grid) -> "Layer":
        """Return a copy of this layer holding ``tiles``."""
        return replace(self, tiles=tiles)

    def renamed(self, name: str) -> "Layer":
        return replace(self, name=name)

    def with_visibility(self, visible: bool) -> "Layer":
        return replace(self, visible=visible)

    def resized(self, width: int, height: int) -> "Layer":
        """Return a copy reflowed to ``width`` x ``height``.

        Cells inside both the old and new bounds keep their content; newly
        exposed cells are empty.
        """
        old_width, old_height = self.width, self.height
        tiles = tuple(
            tuple(
                self.tiles[y][x] if y < old_height and x < old_width else None
                for x in range(width)
            )
            for y in range(height)
        )
        return replace(self, tiles=tiles)

    def iter_cells(self) -> Iterator[tuple[int, int, TileRef]]:
        """Iterate over non-empty cells as (col, row, tile_ref), row by row."""
        for y, row in enumerate(self.tiles):
            for x, cell in enumerate(row):
                if cell is not None:
                    yield (x, y, cell)

    def count_filled(self) -> int:
        """Count non-empty cells."""
        return sum(1 for row in self.tiles for cell in row if cell is not None)


# =============================================================================
# Map Model
# =============================================================================


@dataclass(frozen=True)
class MapConfig:
    """Map-level configuration.

    Attributes:
        topology: Tiling scheme (grid or hex)
        tile_size: Tile size in pixels
        width: Width in cells
        height: Height in cells
    """

    topology: Topology = Topology.GRID
    tile_size: int = 16
    width: int = 64
    height: int = 64

    def __post_init__(self) -> None:
        """Normalize topology and validate sizes."""
        object.__setattr__(self, "topology", Topology.parse(self.topology))
        for name in ("tile_size", "width", "height"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"'{name}' must be a positive integer, got {value!r}")

    def contains(self, col: int, row: int) -> bool:
        """Check whether (col, row) lies inside the map."""
        return 0 <= col < self.width and 0 <= row < self.height

    def transformer(self) -> CoordinateTransformer:
        """Get a coordinate transformer for this configuration."""
        return CoordinateTransformer(self.tile_size, self.topology)


@dataclass(frozen=True)
class TileMap:
    """Complete editable map: configuration, ordered layers and active layer.

    Layers are ordered bottom to top. A map always has at least one layer,
    every layer matches the configured size and the active layer index is
    always valid. Every operation returns a new TileMap.

    Attributes:
        config: Map configuration
        layers: Layers, bottom first
        active_layer_index: Index of the layer paint operations target
    """

    config: MapConfig
    layers: tuple[Layer, ...]
    active_layer_index: int = 0

    def __post_init__(self) -> None:
        """Validate layer count, layer dimensions and active index."""
        object.__setattr__(self, "layers", tuple(self.layers))
        if not self.layers:
            raise ConfigurationError("A map must have at least one layer")

        width, height = self.config.width, self.config.height
        for layer in self.layers:
            if layer.height != height:
                raise ConfigurationError(
                    f"Layer '{layer.name}' has {layer.height} rows, expected {height}"
                )
            for row_idx, row in enumerate(layer.tiles):
                if len(row) != width:
                    raise ConfigurationError(
                        f"Layer '{layer.name}' row {row_idx} has {len(row)} cells, expected {width}"
                    )

        if not 0 <= self.active_layer_index < len(self.layers):
            raise IndexOutOfRange(self.active_layer_index, len(self.layers))

    @classmethod
    def create(
        cls,
        topology: Union[Topology, str] = Topology.GRID,
        tile_size: int = 16,
        width: int = 64,
        height: int = 64,
    ) -> "TileMap":
        """Create a fresh map with one empty base layer."""
        config = MapConfig(Topology.parse(topology), tile_size, width, height)
        return cls(config=config, layers=(Layer.create(width, height, BASE_LAYER_NAME),))

    # ---------------------------------------------------------------------
    # Accessors
    # ---------------------------------------------------------------------
    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def layer_count(self) -> int:
        return len(self.layers)

    @property
    def active_layer(self) -> Layer:
        return self.layers[self.active_layer_index]

    def get_layer(self, index: int) -> Layer:
        """Get layer by index.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        self._check_index(index)
        return self.layers[index]

    def visible_layers(self) -> list[Layer]:
        """Get visible layers, bottom first."""
        return [layer for layer in self.layers if layer.visible]

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(self.layers):
            raise IndexOutOfRange(index, len(self.layers))

    # ---------------------------------------------------------------------
    # Map configuration
    # ---------------------------------------------------------------------
    def with_topology(self, topology: Union[Topology, str]) -> "TileMap":
        """Return the map with another topology; layers are untouched."""
        return replace(self, config=replace(self.config, topology=Topology.parse(topology)))

    def with_tile_size(self, tile_size: int) -> "TileMap":
        """Return the map with another tile size; layers are untouched."""
        return replace(self, config=replace(self.config, tile_size=tile_size))

    def resize(self, width: int, height: int) -> "TileMap":
        """Return the map resized to ``width`` x ``height`` cells.

        Every layer is reflowed together: cells still in bounds are kept and
        new cells are empty. Invalid sizes are rejected before any layer is
        touched.

        Raises:
            ConfigurationError: If width or height is not a positive integer
        """
        config = replace(self.config, width=width, height=height)
        layers = tuple(layer.resized(width, height) for layer in self.layers)
        logger.debug(
            f"Resized {len(layers)} layer(s) from {self.width}x{self.height} to {width}x{height}"
        )
        return replace(self, config=config, layers=layers)

    # ---------------------------------------------------------------------
    # Layer operations
    # ---------------------------------------------------------------------
    def add_layer(self, name: Optional[str] = None) -> "TileMap":
        """Append an empty layer named ``"Layer N"`` and make it active."""
        if name is None:
            name = f"Layer {len(self.layers) + 1}"
        layer = Layer.create(self.width, self.height, name)
        layers = self.layers + (layer,)
        return replace(self, layers=layers, active_layer_index=len(layers) - 1)

    def remove_layer(self, index: int) -> "TileMap":
        """Remove the layer at ``index``.

        Removing the only layer is a no-op and returns this map unchanged.
        The active index is clamped into the remaining range.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        self._check_index(index)
        if len(self.layers) <= 1:
            return self

        layers = self.layers[:index] + self.layers[index + 1:]
        active = min(self.active_layer_index, len(layers) - 1)
        return replace(self, layers=layers, active_layer_index=active)

    def set_active_layer(self, index: int) -> "TileMap":
        """Return the map with ``index`` as the active layer.

        Raises:
            IndexOutOfRange: If index does not exist
        """
        self._check_index(index)
        return replace(self, active_layer_index=index)

    def replace_layer(self, index: int, layer: Layer) -> "TileMap":
        """Return the map with the layer at ``index`` swapped for ``layer``.

        Raises:
            IndexOutOfRange: If index does not exist
            ConfigurationError: If layer dimensions do not match the map
        """
        self._check_index(index)
        layers = self.layers[:index] + (layer,) + self.layers[index + 1:]
        return replace(self, layers=layers)

    def rename_layer(self, index: int, name: str) -> "TileMap":
        return self.replace_layer(index, self.get_layer(index).renamed(name))

    def set_layer_visibility(self, index: int, visible: bool) -> "TileMap":
        return self.replace_layer(index, self.get_layer(index).with_visibility(visible))

    def toggle_layer_visibility(self, index: int) -> "TileMap":
        layer = self.get_layer(index)
        return self.replace_layer(index, layer.with_visibility(not layer.visible))
