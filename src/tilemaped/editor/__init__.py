"""Editing session for tilemaped."""

from .session import EditorSession, DEFAULT_ZOOM

__all__ = [
    "EditorSession",
    "DEFAULT_ZOOM",
]
