"""Backing store access for the node's local settings."""

from sync_node.settings_store.config_file import ConfigEntry, ConfigFile
from sync_node.settings_store.store import BOUND_SETTINGS, SettingsStore, TRACKED_SETTINGS
from sync_node.settings_store.watcher import ConfigFileWatcher

__all__ = [
    "BOUND_SETTINGS",
    "ConfigEntry",
    "ConfigFile",
    "ConfigFileWatcher",
    "SettingsStore",
    "TRACKED_SETTINGS",
]
