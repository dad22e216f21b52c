"""
Consistency checks over the stored settings.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, List

from ..maps.coord_transformer import Topology
from .logging import VALID_LEVELS
from .store import ValidationResult

if TYPE_CHECKING:
    from .core import AppSettings

logger = logging.getLogger(__name__)


def _check_editor(app: "AppSettings", errors: List[str]) -> None:
    editor = app.editor
    topology = editor.default_topology
    if topology not in {t.value for t in Topology}:
        errors.append(f"Stored default topology {topology!r} is not one of grid, hex")
    sizes = {
        "tile size": editor.default_tile_size,
        "map width": editor.default_map_width,
        "map height": editor.default_map_height,
    }
    errors.extend(
        f"Default {label} must be positive, got {value}"
        for label, value in sizes.items()
        if value <= 0
    )


def _check_catalog(app: "AppSettings", warnings: List[str]) -> None:
    catalog = app.paths.tileset_catalog
    if catalog is None:
        warnings.append("No tileset catalog configured")
    elif not catalog.is_file():
        warnings.append(f"Tileset catalog not found: {catalog}")


def _prune_recent_files(app: "AppSettings", warnings: List[str]) -> None:
    """Drop recent entries whose file is gone, warning once per entry."""
    recent = app.paths.recent_files
    kept = [entry for entry in recent if Path(entry).exists()]
    if len(kept) == len(recent):
        return
    for entry in recent:
        if entry not in kept:
            warnings.append(f"Removed missing recent map: {entry}")
    app.paths.set_recent_files(kept)
    logger.info(f"Pruned {len(recent) - len(kept)} missing entries from recent maps")


def validate_settings(app: "AppSettings") -> ValidationResult:
    """Check stored values, fixing what can be fixed in place.

    Errors are values the editor cannot start a map with; warnings cover
    missing optional files.
    """
    errors: List[str] = []
    warnings: List[str] = []

    _check_editor(app, errors)
    level = app.logging.console_log_level
    if level.upper() not in VALID_LEVELS:
        errors.append(f"Unknown console log level: {level}")
    _check_catalog(app, warnings)
    _prune_recent_files(app, warnings)

    for message in errors:
        logger.error(message)
    return ValidationResult(is_valid=not errors, errors=errors, warnings=warnings)
