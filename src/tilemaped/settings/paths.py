"""
Tileset catalog location and the recent map list.
"""

from pathlib import Path
from typing import List, Optional, Union

from .store import SettingsSection

MAX_RECENT_FILES = 10


class PathSettings(SettingsSection):
    """File locations remembered between sessions."""

    prefix = "paths"

    @property
    def tileset_catalog(self) -> Optional[Path]:
        """JSON file listing the available tilesets, or None when unset."""
        return self._optional_path("tileset_catalog")

    @tileset_catalog.setter
    def tileset_catalog(self, value: Optional[Path]) -> None:
        self._store("tileset_catalog", "" if value is None else str(value))

    @property
    def recent_files(self) -> List[str]:
        """Most recently opened map first."""
        return self._strings("recent_files")

    def set_recent_files(self, files: List[str]) -> None:
        self._store("recent_files", [str(f) for f in files][:MAX_RECENT_FILES])

    def add_recent_file(self, file_path: Union[str, Path]) -> None:
        """Move ``file_path`` to the front, dropping the oldest beyond the limit."""
        entry = str(file_path)
        self.set_recent_files([entry] + [f for f in self.recent_files if f != entry])

    def clear_recent_files(self) -> None:
        self.set_recent_files([])
