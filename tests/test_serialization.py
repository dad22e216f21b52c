"""Tests for the stored JSON map document."""

from pathlib import Path
from typing import Any

import orjson
import pytest

from tilemaped.errors import MapFormatError
from tilemaped.maps.coord_transformer import Topology
from tilemaped.maps.models import TileMap, TileRef
from tilemaped.maps.paint import paint_cell
from tilemaped.maps.serialization import (
    MapLoader,
    MapSchema,
    MapWriter,
    map_from_document,
    map_to_document,
)


def sample_map() -> TileMap:
    """A 3x2 hex map with a painted base layer and a hidden second layer."""
    tile_map = TileMap.create("hex", 24, 3, 2)
    base = paint_cell(tile_map.active_layer, 2, 1, TileRef(1, 0, 4))
    tile_map = tile_map.replace_layer(0, base).add_layer("Overlay")
    overlay = paint_cell(tile_map.active_layer, 0, 0, TileRef(3, 1, 1))
    return tile_map.replace_layer(1, overlay).set_layer_visibility(1, False)


def valid_document() -> dict[str, Any]:
    return {
        "topology": "grid",
        "tileSize": 16,
        "width": 2,
        "height": 2,
        "layers": [
            {"id": "base", "name": "Base", "visible": True, "tiles": [["1,0,0", None], [None, "1,1,0"]]},
        ],
    }


class TestDocumentShape:
    """Test conversion to the stored shape."""

    def test_map_to_document(self) -> None:
        tile_map = sample_map()
        document = map_to_document(tile_map)

        assert document["topology"] == "hex"
        assert document["tileSize"] == 24
        assert (document["width"], document["height"]) == (3, 2)
        assert len(document["layers"]) == 2

        base = document["layers"][0]
        assert base["id"] == tile_map.layers[0].id
        assert base["name"] == "Layer 1 (Base)"
        assert base["visible"] is True
        assert base["tiles"] == [[None, None, None], [None, None, "1,0,4"]]
        assert document["layers"][1]["visible"] is False

    def test_only_active_layer(self) -> None:
        tile_map = sample_map().set_active_layer(0)
        document = map_to_document(tile_map, only_active_layer=True)
        assert [layer["id"] for layer in document["layers"]] == [tile_map.layers[0].id]


class TestRoundTrip:
    """Test that saving then loading preserves the map."""

    def test_bytes_round_trip(self) -> None:
        tile_map = sample_map()
        loaded = MapLoader().loads(MapWriter().dumps(tile_map))

        assert loaded.config == tile_map.config
        assert loaded.layers == tile_map.layers
        assert loaded.active_layer_index == 0

    def test_file_round_trip(self, tmp_path: Path) -> None:
        tile_map = sample_map()
        path = MapWriter().save_to_json(tile_map, tmp_path / "nested" / "map.json")
        assert path.exists()
        assert MapLoader().load_from_json(path).layers == tile_map.layers

    def test_compact_output(self) -> None:
        payload = MapWriter(indent=False).dumps(sample_map())
        assert b"\n" not in payload

    def test_legacy_map_type_key(self) -> None:
        document = valid_document()
        document.pop("topology")
        document["mapType"] = "hex"

        tile_map = map_from_document(document)
        assert tile_map.config.topology is Topology.HEX
        assert map_to_document(tile_map)["topology"] == "hex"
        assert "mapType" not in map_to_document(tile_map)

    def test_decoded_cells(self) -> None:
        layer = map_from_document(valid_document()).layers[0]
        assert layer.get(0, 0) == TileRef(1, 0, 0)
        assert layer.get(1, 0) is None
        assert layer.get(1, 1) == TileRef(1, 1, 0)


class TestRejectedDocuments:
    """Test that invalid documents are rejected as a whole."""

    @pytest.mark.parametrize(
        "change",
        [
            lambda d: d.pop("topology"),
            lambda d: d.update(topology="iso"),
            lambda d: d.update(topology=["grid"]),
            lambda d: d.update(topology={"name": "hex"}),
            lambda d: d.update(mapType=["hex"]) or d.pop("topology"),
            lambda d: d.update(width=0),
            lambda d: d.update(tileSize="16"),
            lambda d: d.update(height=True),
            lambda d: d.update(layers=[]),
            lambda d: d.update(layers={}),
            lambda d: d["layers"][0].pop("visible"),
            lambda d: d["layers"][0].update(id=""),
            lambda d: d["layers"][0].update(visible="yes"),
            lambda d: d["layers"][0]["tiles"].pop(),
            lambda d: d["layers"][0]["tiles"][0].append(None),
            lambda d: d["layers"][0]["tiles"][0].__setitem__(0, 5),
            lambda d: d["layers"][0]["tiles"][0].__setitem__(0, "1,0"),
            lambda d: d["layers"][0]["tiles"][1].__setitem__(1, "x,y,z"),
            lambda d: d["layers"][0]["tiles"][0].__setitem__(0, "1" * 5000 + ",0,0"),
            lambda d: d["layers"][0]["tiles"][0].__setitem__(0, "\uff11,2,3"),
            lambda d: d["layers"].append(dict(d["layers"][0])),
        ],
    )
    def test_invalid_document(self, change: Any) -> None:
        document = valid_document()
        change(document)
        with pytest.raises(MapFormatError) as exc_info:
            map_from_document(document, source="bad.json")
        assert exc_info.value.errors
        assert exc_info.value.source == "bad.json"

    @pytest.mark.parametrize(
        "change",
        [
            lambda d: d.update(topology=["grid"]),
            lambda d: d["layers"][0]["tiles"][0].__setitem__(0, "1" * 5000 + ",0,0"),
        ],
    )
    def test_loader_reports_format_error(self, change: Any) -> None:
        """Bad values in raw JSON surface as MapFormatError, not a builtin error."""
        document = valid_document()
        change(document)
        with pytest.raises(MapFormatError):
            MapLoader().loads(orjson.dumps(document))

    def test_non_object_root(self) -> None:
        with pytest.raises(MapFormatError):
            map_from_document([1, 2, 3])

    def test_invalid_json(self) -> None:
        with pytest.raises(MapFormatError):
            MapLoader().loads(b"{not json")

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            MapLoader().load_from_json(tmp_path / "absent.json")

    def test_schema_collects_every_problem(self) -> None:
        document = valid_document()
        document["layers"].append(
            {"id": "second", "name": 3, "visible": "no", "tiles": [[None, None], [None, None]]}
        )
        errors = MapSchema.validate_map(document)
        assert len(errors) == 2
        assert all(error.startswith("Layer 1:") for error in errors)

    def test_valid_document_has_no_errors(self) -> None:
        assert MapSchema.validate_map(valid_document()) == []
        assert MapSchema.validate_map(orjson.loads(orjson.dumps(valid_document()))) == []
