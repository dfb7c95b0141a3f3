"""
JSON-backed config file with bindable entries.

Values live under sections ({"General": {"PingMapDisabled": false}}). Each
entry is bound with a default whose type is enforced on every read and write.
Listeners are told when the whole file is reloaded or when one value changes.
"""

import json
import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import TypeAdapter, ValidationError

from common.events import EventChannel
from common.exceptions import ConfigFileError, SettingTypeError, UnknownSettingError
from common.types import SettingDefinition

logger = logging.getLogger(__name__)

SUPPORTED_TYPES = (bool, int, float, str)

_MISSING = object()


@dataclass
class ConfigEntry:
    """
    A bound setting and its current effective value.
    """
    definition: SettingDefinition
    value: Any

    @property
    def section(self) -> str:
        return self.definition.section

    @property
    def key(self) -> str:
        return self.definition.key


class ConfigFile:
    """
    Thread-safe JSON config file.

    Notifications are fired while holding the file lock, so listeners are
    delivered serially even when edits arrive from the watcher thread and
    the HTTP layer at the same time.
    """

    def __init__(self, path: str):
        """
        Initialize and read the config file.

        Args:
            path: Path to the JSON file; created on first bind if missing
        """
        self.path = Path(path)
        self._lock = threading.RLock()
        self._entries: Dict[Tuple[str, str], ConfigEntry] = {}
        self._adapters: Dict[type, TypeAdapter] = {}
        self._known_mtime: Optional[float] = None

        self.reloaded = EventChannel("config_reloaded")
        self.value_changed = EventChannel("config_value_changed")

        self._data = self._read_file()

        logger.info(f"Config file opened [path={self.path}]")

    def bind(self, section: str, key: str, default: Any, description: str) -> ConfigEntry:
        """
        Bind a setting and read back its effective value.

        Binding the same section/key again returns the existing entry with its
        value refreshed from the in-memory file contents.

        Args:
            section: Section name
            key: Setting name
            default: Default value, also fixes the expected type
            description: Operator facing description

        Returns:
            The bound ConfigEntry

        Raises:
            SettingTypeError: If the default has an unsupported type or the
                persisted value does not match the default's type
        """
        if type(default) not in SUPPORTED_TYPES:
            raise SettingTypeError(
                f"Unsupported type {type(default).__name__} for {section}.{key}"
            )

        with self._lock:
            existing = self._entries.get((section, key))
            definition = existing.definition if existing else SettingDefinition(
                section=section, key=key, default=default, description=description
            )

            stored = self._data.get(section, {}).get(key, _MISSING)
            if stored is _MISSING:
                value = default
                self._data.setdefault(section, {})[key] = default
                self._save()
            else:
                value = self._validate(definition, stored)

            if existing:
                existing.value = value
                return existing

            entry = ConfigEntry(definition=definition, value=value)
            self._entries[(section, key)] = entry
            logger.debug(f"Bound {section}.{key} = {value!r} [default={default!r}]")
            return entry

    def get_entry(self, section: str, key: str) -> ConfigEntry:
        with self._lock:
            entry = self._entries.get((section, key))
        if entry is None:
            raise UnknownSettingError(f"Setting {section}.{key} is not bound")
        return entry

    def entries(self) -> List[ConfigEntry]:
        with self._lock:
            return list(self._entries.values())

    def set(self, section: str, key: str, value: Any) -> ConfigEntry:
        """
        Change a bound setting, persist it and notify value_changed listeners.

        Args:
            section: Section name
            key: Setting name
            value: New value, must match the type of the bound default

        Returns:
            The updated ConfigEntry

        Raises:
            UnknownSettingError: If the setting was never bound
            SettingTypeError: If the value has the wrong type
        """
        with self._lock:
            entry = self.get_entry(section, key)
            validated = self._validate(entry.definition, value)

            if validated == entry.value:
                return entry

            entry.value = validated
            self._data.setdefault(section, {})[key] = validated
            self._save()

            logger.info(f"Setting changed: {section}.{key} = {validated!r}")
            self.value_changed.fire(entry)
            return entry

    def reload(self) -> None:
        """
        Re-read the file and refresh every bound entry, then notify reloaded listeners.

        Either every entry is refreshed or none is.

        Raises:
            ConfigFileError: If the file cannot be parsed
            SettingTypeError: If a persisted value does not match its setting's type
        """
        with self._lock:
            data = self._read_file()

            refreshed = {}
            for (section, key), entry in self._entries.items():
                stored = data.get(section, {}).get(key, _MISSING)
                if stored is _MISSING:
                    refreshed[(section, key)] = entry.definition.default
                else:
                    refreshed[(section, key)] = self._validate(entry.definition, stored)

            self._data = data
            for entry_key, value in refreshed.items():
                self._entries[entry_key].value = value

            logger.info(f"Config file reloaded [path={self.path}, entries={len(refreshed)}]")
            self.reloaded.fire()

    def reload_if_changed(self) -> bool:
        """
        Reload when the file was modified by someone other than this instance.

        Returns:
            True if a reload happened
        """
        with self._lock:
            if self._current_mtime() == self._known_mtime:
                return False
            self.reload()
            return True

    def _validate(self, definition: SettingDefinition, value: Any) -> Any:
        expected = type(definition.default)
        adapter = self._adapters.get(expected)
        if adapter is None:
            adapter = TypeAdapter(expected)
            self._adapters[expected] = adapter

        try:
            return adapter.validate_python(value, strict=True)
        except ValidationError as e:
            raise SettingTypeError(
                f"Setting {definition.section}.{definition.key} expects "
                f"{expected.__name__}, got {type(value).__name__} ({value!r})"
            ) from e

    def _current_mtime(self) -> Optional[float]:
        try:
            return self.path.stat().st_mtime
        except OSError:
            return None

    def _read_file(self) -> Dict[str, Dict[str, Any]]:
        """
        Load the JSON document.

        Returns:
            Section mapping, empty if the file does not exist

        Raises:
            ConfigFileError: If the file is not valid JSON or not a mapping of sections
        """
        self._known_mtime = self._current_mtime()

        if not self.path.exists():
            logger.debug(f"Config file not found at {self.path}, using defaults")
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigFileError(f"Invalid JSON in config file {self.path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Cannot read config file {self.path}: {e}") from e

        if not isinstance(data, dict) or not all(isinstance(v, dict) for v in data.values()):
            raise ConfigFileError(
                f"Config file {self.path} must map section names to objects"
            )
        return data

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(self._data, f, indent=2)
        except OSError as e:
            raise ConfigFileError(f"Cannot write config file {self.path}: {e}") from e

        self._known_mtime = self._current_mtime()
        logger.debug(f"Config file saved to {self.path}")
