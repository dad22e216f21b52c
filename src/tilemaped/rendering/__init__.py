"""Rendering and export consumers of the map model."""

from .renderer import MapRenderer, GRID_COLOR
from .export import MapExporter, ExportOptions, ExportFormat, default_export_name

__all__ = [
    "MapRenderer",
    "GRID_COLOR",
    "MapExporter",
    "ExportOptions",
    "ExportFormat",
    "default_export_name",
]
