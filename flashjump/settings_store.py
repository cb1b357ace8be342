from __future__ import annotations

import json
import logging
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

from flashjump.keybindings import FLASH_SCOPE, default_keybindings, normalize_keybindings
from flashjump.settings_schema import FlashConfig, FlashJumpSettings, default_flash_settings, normalize_flash_settings

logger = logging.getLogger(__name__)

SETTINGS_DIR_NAME = ".flashjump"
SETTINGS_FILE_NAME = "settings.json"


class SettingsStoreError(RuntimeError):
    """Raised when the settings file cannot be written."""


def default_settings_path() -> Path:
    return Path.home() / SETTINGS_DIR_NAME / SETTINGS_FILE_NAME


def default_settings() -> FlashJumpSettings:
    return {
        "flash": default_flash_settings(),
        "keybindings": default_keybindings(),
    }


def _key_parts(key: str) -> list[str]:
    return [part.strip() for part in str(key or "").split(".") if part.strip()]


def deep_merge_defaults(data: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Fill keys missing from ``data`` with copies of ``defaults``; user values win."""
    result = {key: deepcopy(value) for key, value in data.items()}
    for key, fallback in defaults.items():
        own = result.get(key)
        if key not in result:
            result[key] = deepcopy(fallback)
        elif isinstance(own, dict) and isinstance(fallback, dict):
            result[key] = deep_merge_defaults(own, fallback)
    return result


def dot_get(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    node: Any = data
    for part in _key_parts(key):
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, default)
        if node is default:
            return default
    return node


def dot_set(data: dict[str, Any], key: str, value: Any) -> None:
    parts = _key_parts(key)
    if not parts:
        raise ValueError("Settings key cannot be empty.")
    *parents, leaf = parts
    node = data
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


class JsonSettingsStore:
    """Settings file for the jump commands: a ``flash`` section and a ``keybindings`` section.

    A file that cannot be parsed is never rewritten; the previous values stay
    in effect and the parse error is kept in ``last_error``.
    """

    def __init__(self, path: Path | None = None, *, persistent: bool = True) -> None:
        self.path = Path(path) if path is not None else default_settings_path()
        self.defaults: dict[str, Any] = dict(default_settings())
        self.data: dict[str, Any] = deep_merge_defaults({}, self.defaults)
        self.persistent = bool(persistent)
        self.dirty = False
        self.last_error: str | None = None

    def load(self) -> dict[str, Any]:
        self.last_error = None
        self.dirty = False
        if not self.persistent:
            self.data = deep_merge_defaults({}, self.defaults)
            return self.data
        if not self.path.is_file():
            # First run: defaults in memory, written on the next save.
            self.data = deep_merge_defaults({}, self.defaults)
            self.dirty = True
            return self.data

        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.last_error = f"Could not read settings file '{self.path}': {exc}"
            logger.warning("%s", self.last_error)
            return self.data
        if not isinstance(raw, dict):
            self.last_error = f"Settings root in '{self.path}' must be a JSON object, found {type(raw).__name__}."
            logger.warning("%s", self.last_error)
            return self.data

        self.data = deep_merge_defaults(raw, self.defaults)
        return self.data

    def save(self) -> None:
        if self.persistent:
            payload = json.dumps(self.data, indent=2, sort_keys=True)
            try:
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.write_text(payload, encoding="utf-8")
            except OSError as exc:
                raise SettingsStoreError(f"Could not write settings file '{self.path}': {exc}") from exc
        self.dirty = False
        self.last_error = None

    def get(self, key: str, default: Any = None) -> Any:
        return dot_get(self.data, key, default)

    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under a dotted key; returns whether anything changed."""
        if self.get(key) == value:
            return False
        dot_set(self.data, key, value)
        self.dirty = True
        return True

    def update_flash(self, **values: Any) -> FlashConfig:
        """Apply several ``flash`` values at once, normalized, and return the new config."""
        merged = {**self.get("flash", {}), **values}
        normalized = dict(normalize_flash_settings(merged))
        if normalized != self.get("flash"):
            self.data["flash"] = normalized
            self.dirty = True
        return FlashConfig.from_mapping(normalized)

    def bind(self, action_id: str, sequence: list[str]) -> bool:
        # Action ids contain dots, so the scope map is addressed directly.
        keybindings = self.data.setdefault("keybindings", {})
        scope = keybindings.setdefault(FLASH_SCOPE, {})
        value = list(sequence)
        if scope.get(action_id) == value:
            return False
        scope[action_id] = value
        self.dirty = True
        return True

    def flash_config(self) -> FlashConfig:
        return FlashConfig.from_mapping(self.get("flash", {}))

    def keybindings(self) -> dict[str, dict[str, list[str]]]:
        return normalize_keybindings(self.get("keybindings", {}))


__all__ = [
    "SETTINGS_DIR_NAME",
    "SETTINGS_FILE_NAME",
    "SettingsStoreError",
    "default_settings_path",
    "default_settings",
    "deep_merge_defaults",
    "dot_get",
    "dot_set",
    "JsonSettingsStore",
]
