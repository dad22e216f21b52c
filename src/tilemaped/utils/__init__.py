"""Utility helpers for tilemaped."""

from .logging_config import setup_logging, ColoredFormatter, CSVFormatter, RecentLogHandler

__all__ = [
    "setup_logging",
    "ColoredFormatter",
    "CSVFormatter",
    "RecentLogHandler",
]
