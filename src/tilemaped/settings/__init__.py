"""
Persistent editor settings backed by QSettings.

    from tilemaped.settings import AppSettings

    settings = AppSettings()
    settings.editor.zoom_level = 150
    result = settings.validate()
"""

from .core import AppSettings
from .editor import MAX_ZOOM, MIN_ZOOM, ZOOM_STEP, EditorSettings, clamp_zoom
from .logging import LoggingSettings
from .paths import PathSettings
from .store import ConfigVersion, ValidationResult

__all__ = [
    "AppSettings",
    "ConfigVersion",
    "ValidationResult",
    "EditorSettings",
    "LoggingSettings",
    "PathSettings",
    "MIN_ZOOM",
    "MAX_ZOOM",
    "ZOOM_STEP",
    "clamp_zoom",
]
