"""
Logging setup: coloured console output, a rotating CSV file and an
in-memory buffer of recent records for an embedding UI.
"""

import copy
import logging
import logging.handlers
from collections import deque
from pathlib import Path
from typing import Callable, List, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..settings import AppSettings

LogCallback = Callable[[logging.LogRecord, str], None]

CONSOLE_FORMAT = "%(asctime)s : %(levelname)s : %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
LEVEL_WIDTH = 8
FILE_MAX_BYTES = 10 * 1024 * 1024
FILE_BACKUPS = 5

# Third-party loggers that are too chatty at DEBUG
QUIET_LOGGERS = ("PIL", "PIL.PngImagePlugin")

_ANSI_RESET = "\033[0m"
_ANSI_LEVELS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[35m",
}


class ColoredFormatter(logging.Formatter):
    """Wrap the level name in an ANSI colour.

    ``level_width`` pads the name before colouring, since a ``%-8s`` style
    width would also count the escape codes.
    """

    def __init__(self, *args, level_width: int = 0, **kwargs):
        super().__init__(*args, **kwargs)
        self.level_width = level_width

    def format(self, record: logging.LogRecord) -> str:
        colour = _ANSI_LEVELS.get(record.levelno)
        if colour is None:
            return super().format(record)
        tinted = copy.copy(record)
        tinted.levelname = f"{colour}{record.levelname.ljust(self.level_width)}{_ANSI_RESET}"
        return super().format(tinted)


def _quoted(value: str) -> str:
    return '"' + value.replace('"', '""') + '"'


class CSVFormatter(logging.Formatter):
    """One ``;``-separated line per record: time, level, uptime, logger, line, message."""

    def format(self, record: logging.LogRecord) -> str:
        fields = [
            _quoted(self.formatTime(record, self.datefmt)),
            record.levelname.ljust(LEVEL_WIDTH),
            _quoted(f"{int(record.relativeCreated)} ms"),
            _quoted(record.name),
            _quoted(str(record.lineno)),
            _quoted(record.getMessage()),
        ]
        return ";".join(fields)


class RecentLogHandler(logging.Handler):
    """
    Keeps the last ``max_lines`` records so a status bar or log panel can
    show them, and forwards each one to optional callbacks.

    The handler itself accepts every level; consumers filter with
    ``get_messages(min_level)``.
    """

    def __init__(self, max_lines: int = 1000):
        super().__init__(level=logging.DEBUG)
        self.max_lines = max_lines
        self.buffer: deque[logging.LogRecord] = deque(maxlen=max_lines)
        self.log_callback: Optional[LogCallback] = None
        self.error_callback: Optional[LogCallback] = None

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = self.format(record)
        except Exception:
            self.handleError(record)
            return
        self.buffer.append(record)
        for callback in self._callbacks_for(record):
            try:
                callback(record, text)
            except Exception:
                self.handleError(record)

    def _callbacks_for(self, record: logging.LogRecord) -> List[LogCallback]:
        callbacks = [self.log_callback]
        if record.levelno >= logging.ERROR:
            callbacks.append(self.error_callback)
        return [cb for cb in callbacks if cb is not None]

    def get_buffer(self) -> List[logging.LogRecord]:
        return list(self.buffer)

    def get_messages(self, min_level: int = logging.DEBUG) -> List[str]:
        """Formatted text of buffered records at or above ``min_level``."""
        return [self.format(r) for r in self.buffer if r.levelno >= min_level]

    def clear_buffer(self) -> None:
        self.buffer.clear()

    def set_log_callback(self, callback: Optional[LogCallback]) -> None:
        """Called with ``(record, text)`` for every record."""
        self.log_callback = callback

    def set_error_callback(self, callback: Optional[LogCallback]) -> None:
        """Called with ``(record, text)`` for ERROR and above."""
        self.error_callback = callback


def _console_handler(level_name: str, colours: bool) -> logging.Handler:
    formatter: logging.Formatter
    if colours:
        formatter = ColoredFormatter(
            fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT, level_width=LEVEL_WIDTH
        )
    else:
        formatter = logging.Formatter(
            fmt=CONSOLE_FORMAT.replace("%(levelname)s", f"%(levelname)-{LEVEL_WIDTH}s"),
            datefmt=CONSOLE_DATEFMT,
        )
    handler = logging.StreamHandler()
    handler.setLevel(getattr(logging, level_name.upper(), logging.INFO))
    handler.setFormatter(formatter)
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=FILE_MAX_BYTES, backupCount=FILE_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(CSVFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(settings: "AppSettings") -> RecentLogHandler:
    """
    Replace the root logger's handlers with the ones ``settings`` asks for.

    The console handler honours the configured level, the CSV file (when
    enabled) always records DEBUG, and a `RecentLogHandler` is always
    attached.

    Returns:
        The attached RecentLogHandler
    """
    options = settings.logging
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    logging.getLogger("tilemaped").setLevel(logging.DEBUG)

    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()

    if options.console_logging:
        root.addHandler(_console_handler(options.console_log_level, options.console_use_colors))

    file_error: Optional[OSError] = None
    log_path: Optional[Path] = None
    if options.file_logging:
        log_path = Path(options.log_file_path)
        try:
            root.addHandler(_file_handler(log_path))
        except OSError as exc:
            file_error, log_path = exc, None

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO)

    recent = RecentLogHandler(max_lines=options.recent_max_lines)
    recent.setFormatter(
        logging.Formatter(fmt=CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT)
    )
    root.addHandler(recent)

    logger = logging.getLogger(__name__)
    logger.info("Logging initialized")
    if file_error is not None:
        logger.warning(f"File logging disabled, cannot open {options.log_file_path}: {file_error}")
    elif log_path is not None:
        logger.debug(f"Writing CSV log to {log_path.absolute()}")
    return recent
