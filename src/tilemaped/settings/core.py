"""
Application settings entry point.
"""

import logging
from pathlib import Path
from typing import Any, Optional, Union

from PySide6.QtCore import QSettings

from .editor import EditorSettings
from .logging import LoggingSettings
from .paths import PathSettings
from .store import ConfigVersion, SettingsSection, ValidationResult
from .validation import validate_settings

logger = logging.getLogger(__name__)

ORGANIZATION = "tilemaped"
APPLICATION = "tilemaped"


def _logging_option(name: str) -> Any:
    """Read-only shortcut to ``LoggingSettings.<name>``."""

    def getter(self: "AppSettings") -> Any:
        return getattr(self.logging, name)

    getter.__doc__ = f"Same as ``logging.{name}``."
    return property(getter)


class _AppState(SettingsSection):
    """Bookkeeping keys under ``app/``."""

    prefix = "app"

    @property
    def version(self) -> str:
        return self._text("version")

    @version.setter
    def version(self, value: str) -> None:
        self._store("version", value)

    @property
    def first_run(self) -> bool:
        return self._flag("first_run", True)

    @first_run.setter
    def first_run(self, value: bool) -> None:
        self._store("first_run", value)


class AppSettings:
    """
    Settings for one profile, persisted through QSettings.

    Each profile is a top-level group in the store, so several profiles can
    share one file. Pass ``storage_path`` to use a specific INI file instead
    of the platform location.
    """

    def __init__(self, profile: str = "default", storage_path: Optional[Union[str, Path]] = None):
        if storage_path is None:
            self.settings = QSettings(ORGANIZATION, APPLICATION)
        else:
            self.settings = QSettings(str(storage_path), QSettings.Format.IniFormat)
        self.profile = profile
        self.settings.beginGroup(profile)

        self._state = _AppState(self.settings)
        self.paths = PathSettings(self.settings)
        self.editor = EditorSettings(self.settings)
        self.logging = LoggingSettings(self.settings)

        self._stamp_version()
        logger.debug(f"Loaded settings profile '{profile}' from {self.settings.fileName()}")

    def _stamp_version(self) -> None:
        stored = self._state.version
        current = ConfigVersion.CURRENT.value
        if not stored:
            self._state.version = current
            self._state.first_run = True
            logger.info(f"New settings profile '{self.profile}' created")
        elif stored != current:
            # Only one layout exists, so unknown versions are read as-is
            logger.warning(f"Settings version {stored} is not {current}, reading stored values unchanged")

    @property
    def is_first_run(self) -> bool:
        return self._state.first_run

    def set_first_run_complete(self) -> None:
        self._state.first_run = False

    @property
    def version(self) -> str:
        return self._state.version or ConfigVersion.CURRENT.value

    console_logging = _logging_option("console_logging")
    console_log_level = _logging_option("console_log_level")
    console_use_colors = _logging_option("console_use_colors")
    file_logging = _logging_option("file_logging")
    log_file_path = _logging_option("log_file_path")
    recent_max_lines = _logging_option("recent_max_lines")

    def validate(self) -> ValidationResult:
        """Check stored values; stale recent files are removed as a side effect."""
        return validate_settings(self)

    def get_settings_file_path(self) -> str:
        return self.settings.fileName()

    def sync(self) -> None:
        self.settings.sync()
