"""Loading and saving maps as JSON documents.

The stored document shape is::

    {
        "topology": "grid" | "hex",
        "tileSize": 16,
        "width": 64,
        "height": 64,
        "layers": [
            {"id": "...", "name": "...", "visible": true,
             "tiles": [["1,0,0", null, ...], ...]}
        ]
    }

``tiles`` is ``height`` rows of ``width`` cells, each ``"tilesetId,col,row"``
or ``null``. Documents written by older clients use ``mapType`` instead of
``topology``; both are accepted on load.
"""

import logging
from pathlib import Path
from typing import Any, Union, cast

import orjson

from ..errors import ConfigurationError, MalformedTileRef, MapFormatError
from .coord_transformer import Topology
from .models import Layer, MapConfig, TileMap, decode_cell, encode_cell


class MapSchema:
    """Validation of the stored map document structure.

    Validation only reports problems; nothing is built here.
    """

    REQUIRED_ROOT_FIELDS = {"tileSize", "width", "height", "layers"}
    REQUIRED_LAYER_FIELDS = {"id", "name", "visible", "tiles"}
    TOPOLOGY_FIELDS = ("topology", "mapType")

    @staticmethod
    def get_topology(data: dict[str, Any]) -> Any:
        """Get the topology value, preferring ``topology`` over ``mapType``."""
        for key in MapSchema.TOPOLOGY_FIELDS:
            if key in data:
                return data[key]
        return None

    @staticmethod
    def validate_root(data: Any) -> list[str]:
        """Validate root-level fields.

        Args:
            data: Parsed JSON data

        Returns:
            List of error messages (empty if valid)
        """
        if not isinstance(data, dict):
            return [f"Document must be an object, got {type(data).__name__}"]

        data = cast(dict[str, Any], data)
        errors: list[str] = []

        missing = MapSchema.REQUIRED_ROOT_FIELDS - data.keys()
        if missing:
            errors.append(f"Missing required fields: {sorted(missing)}")

        topology = MapSchema.get_topology(data)
        if topology is None:
            errors.append("Missing required field: 'topology'")
        elif not isinstance(topology, str):
            errors.append(f"'topology' must be a string, got {type(topology).__name__}")
        elif topology not in {t.value for t in Topology}:
            errors.append(f"'topology' must be 'grid' or 'hex', got {topology!r}")

        for key in ("tileSize", "width", "height"):
            value = data.get(key)
            if key in data and (isinstance(value, bool) or not isinstance(value, int) or value <= 0):
                errors.append(f"'{key}' must be a positive integer, got {value!r}")

        layers = data.get("layers")
        if "layers" in data:
            if not isinstance(layers, list):
                errors.append("'layers' must be an array")
            elif not layers:
                errors.append("'layers' must contain at least one layer")

        return errors

    @staticmethod
    def validate_layer(layer_data: Any, expected_width: int, expected_height: int) -> list[str]:
        """Validate a layer object.

        Args:
            layer_data: Layer dictionary from JSON
            expected_width: Map width from root
            expected_height: Map height from root

        Returns:
            List of error messages (empty if valid)
        """
        if not isinstance(layer_data, dict):
            return ["Layer must be an object"]

        layer_data = cast(dict[str, Any], layer_data)
        errors: list[str] = []

        missing = MapSchema.REQUIRED_LAYER_FIELDS - layer_data.keys()
        if missing:
            errors.append(f"Layer missing required fields: {sorted(missing)}")
            return errors

        layer_id = layer_data.get("id")
        if not isinstance(layer_id, str) or not layer_id:
            errors.append(f"Layer 'id' must be a non-empty string, got {layer_id!r}")
        if not isinstance(layer_data.get("name"), str):
            errors.append("Layer 'name' must be a string")
        if not isinstance(layer_data.get("visible"), bool):
            errors.append("Layer 'visible' must be a boolean")

        grid = layer_data.get("tiles")
        if not isinstance(grid, list):
            errors.append("Layer 'tiles' must be an array")
            return errors

        grid_list = cast(list[Any], grid)
        if len(grid_list) != expected_height:
            errors.append(f"Layer 'tiles' height is {len(grid_list)}, expected {expected_height}")

        for row_idx, row in enumerate(grid_list):
            if not isinstance(row, list):
                errors.append(f"Layer 'tiles' row {row_idx} is not an array")
                continue
            row_list = cast(list[Any], row)
            if len(row_list) != expected_width:
                errors.append(
                    f"Layer 'tiles' row {row_idx} width is {len(row_list)}, expected {expected_width}"
                )
            for col_idx, cell in enumerate(row_list):
                if cell is not None and not isinstance(cell, str):
                    errors.append(
                        f"Cell ({col_idx}, {row_idx}) must be a string or null, got {cell!r}"
                    )

        return errors

    @staticmethod
    def validate_map(data: Any) -> list[str]:
        """Validate a complete map document.

        Args:
            data: Parsed JSON data

        Returns:
            List of all validation errors (empty if valid)
        """
        errors = MapSchema.validate_root(data)
        if errors:
            return errors  # Don't continue if root is invalid

        width = data["width"]
        height = data["height"]
        seen_layer_ids: set[str] = set()

        for idx, layer in enumerate(data["layers"]):
            layer_errors = MapSchema.validate_layer(layer, width, height)
            if layer_errors:
                errors.extend([f"Layer {idx}: {err}" for err in layer_errors])
                continue

            layer_id = layer["id"]
            if layer_id in seen_layer_ids:
                errors.append(f"Layer {idx}: duplicate 'id' '{layer_id}'")
            else:
                seen_layer_ids.add(layer_id)

        return errors


def map_to_document(tile_map: TileMap, only_active_layer: bool = False) -> dict[str, Any]:
    """Convert a map to the stored document shape.

    Args:
        tile_map: Map to convert
        only_active_layer: Keep only the active layer instead of all layers

    Returns:
        JSON-ready dictionary
    """
    layers = [tile_map.active_layer] if only_active_layer else list(tile_map.layers)
    return {
        "topology": tile_map.config.topology.value,
        "tileSize": tile_map.config.tile_size,
        "width": tile_map.width,
        "height": tile_map.height,
        "layers": [layer_to_document(layer) for layer in layers],
    }


def layer_to_document(layer: Layer) -> dict[str, Any]:
    """Convert one layer to its stored shape."""
    return {
        "id": layer.id,
        "name": layer.name,
        "visible": layer.visible,
        "tiles": [[encode_cell(cell) for cell in row] for row in layer.tiles],
    }


def map_from_document(data: Any, source: str = "") -> TileMap:
    """Build a map from a stored document.

    The whole document is checked first; any structural problem or bad cell
    rejects the document without producing a partial map.

    Args:
        data: Parsed JSON data
        source: Where the data came from, for error messages

    Returns:
        Loaded TileMap with the first layer active

    Raises:
        MapFormatError: If the document does not match the stored shape
    """
    errors = MapSchema.validate_map(data)
    if errors:
        raise MapFormatError(errors, source or None)

    try:
        config = MapConfig(
            topology=Topology.parse(MapSchema.get_topology(data)),
            tile_size=data["tileSize"],
            width=data["width"],
            height=data["height"],
        )
    except ConfigurationError as e:
        raise MapFormatError([str(e)], source or None) from e

    layers: list[Layer] = []
    for idx, layer_data in enumerate(data["layers"]):
        tiles: list[tuple[Any, ...]] = []
        for row_idx, row in enumerate(layer_data["tiles"]):
            try:
                tiles.append(tuple(decode_cell(cell) for cell in row))
            except MalformedTileRef as e:
                raise MapFormatError([f"Layer {idx} row {row_idx}: {e}"], source or None) from e

        layers.append(
            Layer(
                id=layer_data["id"],
                name=layer_data["name"],
                visible=layer_data["visible"],
                tiles=tuple(tiles),
            )
        )

    return TileMap(config=config, layers=tuple(layers))


class MapLoader:
    """Loads maps from JSON bytes or files.

    Handles parsing, validation and conversion to TileMap instances.
    """

    def __init__(self):
        """Initialize the loader."""
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    def loads(self, payload: Union[bytes, str], source: str = "") -> TileMap:
        """Load a map from a JSON payload.

        Raises:
            MapFormatError: If JSON is invalid or doesn't match the stored shape
        """
        try:
            data = orjson.loads(payload)
        except orjson.JSONDecodeError as e:
            raise MapFormatError([f"Failed to parse JSON: {e}"], source or None) from e

        tile_map = map_from_document(data, source)
        self.logger.debug(
            f"Loaded {tile_map.width}x{tile_map.height} {tile_map.config.topology.value} map "
            f"with {tile_map.layer_count} layer(s)"
        )
        return tile_map

    def load_from_json(self, path: Path) -> TileMap:
        """Load a map from a JSON file.

        Args:
            path: Path to JSON file

        Returns:
            Loaded TileMap instance

        Raises:
            FileNotFoundError: If file doesn't exist
            MapFormatError: If JSON is invalid or doesn't match the stored shape
        """
        if not path.exists():
            raise FileNotFoundError(f"Map file not found: {path}")

        self.logger.info(f"Loading map from: {path}")
        return self.loads(path.read_bytes(), source=str(path))


class MapWriter:
    """Writes maps to JSON bytes or files."""

    def __init__(self, indent: bool = True):
        """Initialize the writer.

        Args:
            indent: Pretty-print with two-space indentation
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.indent = indent

    def dumps(self, tile_map: TileMap, only_active_layer: bool = False) -> bytes:
        """Serialize a map to JSON bytes."""
        option = orjson.OPT_INDENT_2 if self.indent else 0
        return orjson.dumps(map_to_document(tile_map, only_active_layer), option=option)

    def save_to_json(self, tile_map: TileMap, path: Path, only_active_layer: bool = False) -> Path:
        """Write a map to a JSON file, creating parent directories.

        Returns:
            Path that was written
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.dumps(tile_map, only_active_layer))
        self.logger.info(f"Saved map to: {path}")
        return path
