"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError as SchemaValidationError
from PySide6.QtCore import QObject, Signal

from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults

APP_DIR_NAME = "riseadmin"


def default_config_dir() -> Path:
    """Return the per-user configuration directory for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / APP_DIR_NAME
        return Path.home() / "AppData" / "Roaming" / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / APP_DIR_NAME
    return Path.home() / ".config" / APP_DIR_NAME


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    return default_config_dir() / "settings.json"


class SettingsManager(QObject):
    """Load, validate and persist the admin tool's settings."""

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, creating defaults if missing."""

        path = self.path
        self._path = path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"{path}: {exc}") from exc
        try:
            self._data = merge_with_defaults(payload)
        except SchemaValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target = self._data
        parts = key.split(".")
        for index, part in enumerate(parts):
            if not isinstance(target, dict) or part not in target:
                return default
            value = target[part]
            if index == len(parts) - 1:
                return value
            target = value
        return default

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value* and persist the change."""

        if isinstance(value, Path):
            value = str(value)
        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except SchemaValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        self._write()
        self.settingsChanged.emit(key, value)

    # ------------------------------------------------------------------
    # Derived locations
    # ------------------------------------------------------------------
    def database_path(self) -> Path:
        stored = self.get("database_path")
        if stored:
            return Path(stored)
        return self.path.parent / "content.db"

    def storage_root(self) -> Path:
        stored = self.get("storage.root")
        if stored:
            return Path(stored)
        return self.path.parent / "storage"

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _write(self) -> None:
        write_json(self.path, self._data)


__all__ = ["SettingsManager", "default_config_dir", "default_settings_path"]
