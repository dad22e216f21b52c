"""
Typed access to a QSettings store shared by the settings sections.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, List, Optional, cast

if TYPE_CHECKING:
    from PySide6.QtCore import QSettings

logger = logging.getLogger(__name__)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})


class ConfigVersion(Enum):
    """Layout version written to ``app/version``."""
    V1_0 = "1.0"
    CURRENT = V1_0


@dataclass
class ValidationResult:
    """Outcome of ``AppSettings.validate``; warnings never make it invalid."""
    is_valid: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


class SettingsSection:
    """Base for a group of keys living under one prefix, e.g. ``editor/``.

    QSettings hands values back as strings when the backend is an INI file
    and as native types otherwise, so every read goes through a coercing
    accessor with a fallback.
    """

    prefix = ""

    def __init__(self, settings: "QSettings"):
        self.settings = settings

    def _key(self, name: str) -> str:
        return f"{self.prefix}/{name}" if self.prefix else name

    def _raw(self, name: str, default: Any) -> Any:
        return self.settings.value(self._key(name), default)

    def _store(self, name: str, value: Any) -> None:
        self.settings.setValue(self._key(name), value)
        self.settings.sync()

    def _text(self, name: str, default: str = "") -> str:
        value = self._raw(name, default)
        return default if value is None else str(value)

    def _flag(self, name: str, default: bool = False) -> bool:
        value = self._raw(name, default)
        if isinstance(value, str):
            return value.strip().lower() in _TRUE_STRINGS
        return default if value is None else bool(value)

    def _number(self, name: str, default: int = 0) -> int:
        value = self._raw(name, default)
        try:
            return int(cast(Any, value))
        except (TypeError, ValueError):
            return default

    def _optional_path(self, name: str) -> Optional[Path]:
        text = self._text(name)
        return Path(text) if text else None

    def _strings(self, name: str) -> List[str]:
        value = self._raw(name, [])
        if isinstance(value, (list, tuple)):
            return [str(item) for item in cast(List[Any], value) if item is not None]
        # A one-item list comes back from an INI file as a bare string
        if isinstance(value, str) and value:
            return [value]
        return []

    def _store_checked(
        self, name: str, value: Any, accept: Callable[[Any], bool], current: Any
    ) -> bool:
        """Write ``value`` if ``accept`` allows it, else log and keep ``current``."""
        if accept(value):
            self._store(name, value)
            return True
        logger.warning(f"Ignoring invalid {self._key(name)}={value!r}, keeping {current!r}")
        return False
