"""
Settings store: binds the tracked settings against a backing store and
materializes them as ConfigSettings snapshots.
"""

import logging
from typing import Any, Optional, Protocol, Tuple

from common.constants import (
    GENERAL_SECTION,
    PING_MAP_DISABLED,
    DISPLAY_PORTAL_COLOUR,
    DOUBLE_PORTAL_COSTS,
    NEXUS_ID,
    NEXUS_MOD_ID,
)
from common.events import EventChannel
from common.exceptions import StoreError
from common.types import ConfigSettings, SettingDefinition

logger = logging.getLogger(__name__)


class BackingStore(Protocol):
    """Persistent storage the settings are bound against."""

    reloaded: EventChannel
    value_changed: EventChannel

    def bind(self, section: str, key: str, default: Any, description: str):
        """Register a setting and return an entry exposing `.value`."""


TRACKED_SETTINGS: Tuple[SettingDefinition, ...] = (
    SettingDefinition(
        section=GENERAL_SECTION,
        key=PING_MAP_DISABLED,
        default=False,
        description=(
            "Disable the Ping Map button completely. For players who wish to play "
            "without a map. This setting is enforced (but not overwritten) by the server."
        ),
        field="ping_map_disabled",
    ),
    SettingDefinition(
        section=GENERAL_SECTION,
        key=DISPLAY_PORTAL_COLOUR,
        default=False,
        description=(
            "Show a \">>\" tag in the list of portals that has the same colour as the "
            "light that the portal emits."
        ),
        field="display_portal_colour",
    ),
    SettingDefinition(
        section=GENERAL_SECTION,
        key=DOUBLE_PORTAL_COSTS,
        default=False,
        description=(
            "Double the build costs of portals to compensate for needing only half "
            "as many. This setting is enforced (but not overwritten) by the server."
        ),
        field="double_portal_costs",
    ),
)

# Bound next to the tracked settings for the mod manager's update check; never snapshotted.
BOUND_SETTINGS: Tuple[SettingDefinition, ...] = TRACKED_SETTINGS + (
    SettingDefinition(
        section=GENERAL_SECTION,
        key=NEXUS_ID,
        default=NEXUS_MOD_ID,
        description="Nexus mod ID for updates (do not change)",
    ),
)


class SettingsStore:
    """
    Tracks the known settings in a backing store.

    Every reload or single value change reported by the backing store is
    re-published on the `changed` channel as a zero-argument notification.
    """

    def __init__(self, definitions: Tuple[SettingDefinition, ...] = BOUND_SETTINGS):
        self.definitions = definitions
        self.changed = EventChannel("settings_changed")
        self._backing: Optional[BackingStore] = None
        self._unsubscribers = []

    def load(self, backing: BackingStore) -> ConfigSettings:
        """
        Bind every definition against the backing store and start listening to it.

        Calling load again with the same backing store only re-reads values.

        Args:
            backing: Store to bind against

        Returns:
            Snapshot of the effective values
        """
        if backing is not self._backing:
            self._detach()
            self._backing = backing
            self._unsubscribers = [
                backing.reloaded.subscribe(self._on_backing_changed),
                backing.value_changed.subscribe(self._on_backing_changed),
            ]
            logger.info(f"Settings store attached [settings={len(self.definitions)}]")

        return self.reload()

    def reload(self) -> ConfigSettings:
        """
        Re-bind every definition and build a fresh snapshot.

        Raises:
            StoreError: If no backing store is loaded, or a bind fails
        """
        if self._backing is None:
            raise StoreError("Settings store has no backing store loaded")

        values = {}
        for definition in self.definitions:
            entry = self._backing.bind(
                definition.section,
                definition.key,
                definition.default,
                definition.description,
            )
            if definition.field is not None:
                values[definition.field] = entry.value

        return ConfigSettings(**values)

    def _on_backing_changed(self, *args) -> None:
        self.changed.fire()

    def _detach(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
