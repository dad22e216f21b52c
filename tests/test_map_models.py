"""Tests for layers and the copy-on-write map model."""

import pytest

from tilemaped.errors import ConfigurationError, IndexOutOfRange
from tilemaped.maps.coord_transformer import Topology
from tilemaped.maps.models import BASE_LAYER_NAME, Layer, MapConfig, TileMap, TileRef
from tilemaped.maps.paint import paint_cell


def three_layer_map() -> TileMap:
    return TileMap.create("grid", 16, 4, 3).add_layer().add_layer()


class TestMapCreation:
    """Test new maps and configuration validation."""

    def test_defaults(self) -> None:
        tile_map = TileMap.create()
        assert tile_map.config == MapConfig(Topology.GRID, 16, 64, 64)
        assert tile_map.layer_count == 1
        assert tile_map.active_layer_index == 0

        base = tile_map.active_layer
        assert base.name == BASE_LAYER_NAME == "Layer 1 (Base)"
        assert base.visible
        assert (base.width, base.height) == (64, 64)
        assert base.count_filled() == 0

    def test_hex_topology_from_string(self) -> None:
        assert TileMap.create("hex", 24, 8, 6).config.topology is Topology.HEX

    @pytest.mark.parametrize("width,height", [(0, 5), (5, 0), (-3, 5)])
    def test_invalid_dimensions(self, width: int, height: int) -> None:
        with pytest.raises(ConfigurationError):
            TileMap.create("grid", 16, width, height)

    def test_invalid_tile_size(self) -> None:
        with pytest.raises(ConfigurationError):
            MapConfig(Topology.GRID, 0, 4, 4)

    def test_unknown_topology(self) -> None:
        with pytest.raises(ConfigurationError):
            TileMap.create("iso", 16, 4, 4)

    def test_map_needs_a_layer(self) -> None:
        with pytest.raises(ConfigurationError):
            TileMap(config=MapConfig(width=2, height=2), layers=())

    def test_layer_size_must_match_config(self) -> None:
        with pytest.raises(ConfigurationError):
            TileMap(config=MapConfig(width=2, height=2), layers=(Layer.create(3, 2, "wide"),))

    @pytest.mark.parametrize(
        "rows",
        [
            ((None, None), (None,)),
            ((None,), (None, None)),
            ((None, None), (None, None, None)),
        ],
    )
    def test_every_row_must_match_width(self, rows: tuple) -> None:
        with pytest.raises(ConfigurationError):
            TileMap(config=MapConfig(width=2, height=2), layers=(Layer(id="x", name="X", tiles=rows),))

    def test_active_index_must_be_valid(self) -> None:
        with pytest.raises(IndexOutOfRange):
            TileMap(config=MapConfig(width=2, height=2), layers=(Layer.create(2, 2, "a"),), active_layer_index=1)


class TestLayer:
    """Test layer grid access."""

    def test_get_outside_is_empty(self) -> None:
        layer = Layer.create(2, 2, "a")
        assert layer.get(5, 0) is None
        assert layer.get(-1, 0) is None

    def test_iter_cells_skips_empty(self) -> None:
        ref = TileRef(1, 0, 0)
        layer = paint_cell(Layer.create(3, 2, "a"), 2, 1, ref)
        assert list(layer.iter_cells()) == [(2, 1, ref)]
        assert layer.count_filled() == 1

    def test_layer_ids_are_unique(self) -> None:
        assert Layer.create(1, 1, "a").id != Layer.create(1, 1, "a").id


class TestLayerOperations:
    """Test layer list operations and their copy-on-write behaviour."""

    def test_add_layer(self) -> None:
        tile_map = TileMap.create("grid", 16, 4, 3)
        result = tile_map.add_layer()

        assert result.layer_count == 2
        assert result.active_layer_index == 1
        assert result.active_layer.name == "Layer 2"
        assert (result.active_layer.width, result.active_layer.height) == (4, 3)
        assert result.layers[0] is tile_map.layers[0]

        # Original snapshot untouched
        assert tile_map.layer_count == 1
        assert tile_map.active_layer_index == 0

    def test_add_named_layer(self) -> None:
        assert TileMap.create("grid", 16, 2, 2).add_layer("Props").active_layer.name == "Props"

    def test_remove_only_layer_is_noop(self) -> None:
        tile_map = TileMap.create("grid", 16, 2, 2)
        assert tile_map.remove_layer(0) is tile_map

    def test_remove_layer_out_of_range(self) -> None:
        tile_map = three_layer_map()
        with pytest.raises(IndexOutOfRange):
            tile_map.remove_layer(3)
        with pytest.raises(IndexOutOfRange):
            tile_map.remove_layer(-1)

    def test_remove_active_top_layer_clamps(self) -> None:
        tile_map = three_layer_map()
        assert tile_map.active_layer_index == 2

        result = tile_map.remove_layer(2)
        assert result.layer_count == 2
        assert result.active_layer_index == 1
        assert [layer.id for layer in result.layers] == [layer.id for layer in tile_map.layers[:2]]

    def test_remove_lower_layer_keeps_index_in_range(self) -> None:
        """The active index is clamped, not shifted, when a lower layer goes."""
        tile_map = three_layer_map().set_active_layer(1)
        result = tile_map.remove_layer(0)
        assert result.active_layer_index == 1
        assert result.active_layer is tile_map.layers[2]

    def test_set_active_layer(self) -> None:
        tile_map = three_layer_map()
        assert tile_map.set_active_layer(0).active_layer is tile_map.layers[0]
        with pytest.raises(IndexOutOfRange):
            tile_map.set_active_layer(3)
        with pytest.raises(IndexError):
            tile_map.set_active_layer(-1)

    def test_get_layer_out_of_range(self) -> None:
        with pytest.raises(IndexOutOfRange):
            TileMap.create("grid", 16, 2, 2).get_layer(1)

    def test_visibility(self) -> None:
        tile_map = three_layer_map()
        hidden = tile_map.toggle_layer_visibility(1)

        assert not hidden.layers[1].visible
        assert tile_map.layers[1].visible
        assert hidden.visible_layers() == [hidden.layers[0], hidden.layers[2]]
        assert hidden.set_layer_visibility(1, True).layers[1].visible

    def test_rename_layer(self) -> None:
        tile_map = three_layer_map()
        renamed = tile_map.rename_layer(0, "Ground")
        assert renamed.layers[0].name == "Ground"
        assert renamed.layers[0].id == tile_map.layers[0].id

    def test_replace_layer_rejects_wrong_size(self) -> None:
        tile_map = TileMap.create("grid", 16, 4, 3)
        with pytest.raises(ConfigurationError):
            tile_map.replace_layer(0, Layer.create(2, 2, "small"))


class TestMapConfiguration:
    """Test topology, tile size and resize."""

    def test_with_topology_keeps_layers(self) -> None:
        tile_map = three_layer_map()
        hexed = tile_map.with_topology("hex")
        assert hexed.config.topology is Topology.HEX
        assert hexed.layers == tile_map.layers
        assert hexed.active_layer_index == tile_map.active_layer_index

    def test_with_tile_size(self) -> None:
        tile_map = TileMap.create("grid", 16, 4, 3)
        assert tile_map.with_tile_size(32).config.tile_size == 32
        with pytest.raises(ConfigurationError):
            tile_map.with_tile_size(0)

    def test_resize_keeps_in_bounds_cells(self) -> None:
        ref = TileRef(1, 0, 0)
        tile_map = TileMap.create("grid", 16, 4, 4)
        layer = paint_cell(paint_cell(tile_map.active_layer, 1, 1, ref), 3, 3, ref)
        tile_map = tile_map.replace_layer(0, layer).add_layer()

        shrunk = tile_map.resize(2, 3)
        assert (shrunk.width, shrunk.height) == (2, 3)
        for resized in shrunk.layers:
            assert (resized.width, resized.height) == (2, 3)
        assert shrunk.layers[0].get(1, 1) == ref
        assert shrunk.layers[0].count_filled() == 1

        grown = shrunk.resize(5, 5)
        assert grown.layers[0].get(1, 1) == ref
        assert grown.layers[0].get(3, 3) is None
        assert grown.layers[0].get(4, 4) is None

    def test_shrink_then_grow(self) -> None:
        ref = TileRef(1, 0, 0)
        tile_map = TileMap.create("grid", 16, 4, 4)
        tile_map = tile_map.replace_layer(0, paint_cell(tile_map.active_layer, 1, 1, ref))

        small = tile_map.resize(2, 2)
        assert small.active_layer.get(1, 1) == ref

        large = small.resize(6, 6)
        assert large.active_layer.get(1, 1) == ref
        assert large.active_layer.count_filled() == 1

    def test_resize_rejects_invalid_size(self) -> None:
        tile_map = TileMap.create("grid", 16, 4, 4)
        with pytest.raises(ConfigurationError):
            tile_map.resize(0, 4)
        assert (tile_map.width, tile_map.height) == (4, 4)
