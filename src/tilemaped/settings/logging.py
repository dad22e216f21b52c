"""
Where log records go and how much of them the editor keeps in memory.
"""

from pathlib import Path

from .store import SettingsSection

LOG_FILE_PATH = "logs/tilemaped.csv"
RECENT_MAX_LINES = 1000

VALID_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class LoggingSettings(SettingsSection):
    """Console, CSV file and in-memory log options."""

    prefix = "logging"

    @property
    def console_logging(self) -> bool:
        return self._flag("console_enabled", True)

    @console_logging.setter
    def console_logging(self, value: bool) -> None:
        self._store("console_enabled", bool(value))

    @property
    def console_log_level(self) -> str:
        """Threshold level name for the console handler."""
        return self._text("console_level", "INFO")

    @console_log_level.setter
    def console_log_level(self, value: str) -> None:
        level = str(value).upper()
        self._store_checked("console_level", level, VALID_LEVELS.__contains__, self.console_log_level)

    @property
    def console_use_colors(self) -> bool:
        return self._flag("console_colors", True)

    @console_use_colors.setter
    def console_use_colors(self, value: bool) -> None:
        self._store("console_colors", bool(value))

    @property
    def file_logging(self) -> bool:
        return self._flag("file_enabled", False)

    @file_logging.setter
    def file_logging(self, value: bool) -> None:
        self._store("file_enabled", bool(value))

    @property
    def log_file_path(self) -> str:
        """CSV log location, relative paths resolve against the working directory."""
        return self._text("file_path", LOG_FILE_PATH)

    @log_file_path.setter
    def log_file_path(self, value: str) -> None:
        self._store("file_path", str(value))

    @property
    def log_file_absolute_path(self) -> Path:
        return Path(self.log_file_path).resolve()

    @property
    def recent_max_lines(self) -> int:
        """Capacity of the in-memory buffer shown by a log panel."""
        return self._number("recent_max_lines", RECENT_MAX_LINES)

    @recent_max_lines.setter
    def recent_max_lines(self, value: int) -> None:
        self._store_checked(
            "recent_max_lines", value, lambda v: isinstance(v, int) and v > 0, self.recent_max_lines
        )
