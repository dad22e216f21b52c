"""Export of maps to PNG images and JSON snapshots.

Exports always reflect the map snapshot they are given: every layer, or
only the active layer when configured so. The JSON export uses the same
document shape as saved maps.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, TYPE_CHECKING

from ..maps.models import TileMap
from ..maps.serialization import MapWriter
from .renderer import MapRenderer

if TYPE_CHECKING:
    from ..settings import AppSettings


class ExportFormat(str, Enum):
    """Export targets."""

    PNG = "png"
    JSON = "json"
    BOTH = "both"


@dataclass
class ExportOptions:
    """Options for one export.

    Attributes:
        format: What to write
        include_grid_lines: Overlay grid lines in the PNG
        all_layers: Export every layer instead of only the active one
    """

    format: ExportFormat = ExportFormat.PNG
    include_grid_lines: bool = True
    all_layers: bool = True

    def __post_init__(self) -> None:
        self.format = ExportFormat(self.format)

    @classmethod
    def from_settings(cls, settings: "AppSettings", **overrides: Any) -> "ExportOptions":
        """Options whose grid overlay follows the editor's grid visibility."""
        overrides.setdefault("include_grid_lines", settings.editor.grid_visible)
        return cls(**overrides)

    @property
    def wants_png(self) -> bool:
        return self.format in (ExportFormat.PNG, ExportFormat.BOTH)

    @property
    def wants_json(self) -> bool:
        return self.format in (ExportFormat.JSON, ExportFormat.BOTH)


def default_export_name(tile_map: TileMap, extension: str) -> str:
    """Get the default file name, e.g. ``map-64x64.png``."""
    return f"map-{tile_map.width}x{tile_map.height}.{extension}"


class MapExporter:
    """Writes map snapshots to disk in the requested formats."""

    def __init__(self, renderer: MapRenderer):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.renderer = renderer
        self.writer = MapWriter(indent=True)

    def export_json(self, tile_map: TileMap, all_layers: bool = True) -> bytes:
        """Serialize the map (or only its active layer) as a JSON snapshot."""
        return self.writer.dumps(tile_map, only_active_layer=not all_layers)

    def export_png(self, tile_map: TileMap, path: Path, options: ExportOptions) -> Path:
        """Render the map and write it as a PNG file."""
        image = self.renderer.render(
            tile_map,
            include_grid=options.include_grid_lines,
            only_active_layer=not options.all_layers,
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        image.save(path, format="PNG")
        return path

    def export(self, tile_map: TileMap, directory: Path, options: ExportOptions) -> list[Path]:
        """Export a map into ``directory`` using the default file names.

        Returns:
            Paths of the written files
        """
        written: list[Path] = []

        if options.wants_png:
            png_path = directory / default_export_name(tile_map, "png")
            written.append(self.export_png(tile_map, png_path, options))

        if options.wants_json:
            json_path = directory / default_export_name(tile_map, "json")
            directory.mkdir(parents=True, exist_ok=True)
            json_path.write_bytes(self.export_json(tile_map, options.all_layers))
            written.append(json_path)

        self.logger.info(f"Exported map to {', '.join(str(p) for p in written)}")
        return written
