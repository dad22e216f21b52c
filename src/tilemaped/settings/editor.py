"""
Defaults for new maps and the canvas view.
"""

from ..maps.coord_transformer import Topology
from .store import SettingsSection

MIN_ZOOM = 50
MAX_ZOOM = 200
ZOOM_STEP = 25

DEFAULT_TILE_SIZE = 16
DEFAULT_MAP_SIZE = 64

_TOPOLOGIES = frozenset(t.value for t in Topology)


def clamp_zoom(value: int) -> int:
    """Clamp a zoom percentage into the supported range."""
    return max(MIN_ZOOM, min(MAX_ZOOM, value))


def _positive(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class EditorSettings(SettingsSection):
    """Topology, tile size and dimensions used by "new map", plus canvas zoom and grid."""

    prefix = "editor"

    @property
    def default_topology(self) -> str:
        return self._text("default_topology", Topology.GRID.value)

    @default_topology.setter
    def default_topology(self, value: str) -> None:
        self._store_checked(
            "default_topology", value, lambda v: v in _TOPOLOGIES, self.default_topology
        )

    @property
    def default_tile_size(self) -> int:
        """Edge length of one cell in pixels."""
        return self._number("default_tile_size", DEFAULT_TILE_SIZE)

    @default_tile_size.setter
    def default_tile_size(self, value: int) -> None:
        self._store_checked("default_tile_size", value, _positive, self.default_tile_size)

    @property
    def default_map_width(self) -> int:
        return self._number("default_map_width", DEFAULT_MAP_SIZE)

    @default_map_width.setter
    def default_map_width(self, value: int) -> None:
        self._store_checked("default_map_width", value, _positive, self.default_map_width)

    @property
    def default_map_height(self) -> int:
        return self._number("default_map_height", DEFAULT_MAP_SIZE)

    @default_map_height.setter
    def default_map_height(self, value: int) -> None:
        self._store_checked("default_map_height", value, _positive, self.default_map_height)

    @property
    def zoom_level(self) -> int:
        """Canvas zoom in percent, always within MIN_ZOOM..MAX_ZOOM."""
        return clamp_zoom(self._number("zoom_level", 100))

    @zoom_level.setter
    def zoom_level(self, value: int) -> None:
        self._store("zoom_level", clamp_zoom(value))

    @property
    def grid_visible(self) -> bool:
        return self._flag("grid_visible", True)

    @grid_visible.setter
    def grid_visible(self, value: bool) -> None:
        self._store("grid_visible", bool(value))
