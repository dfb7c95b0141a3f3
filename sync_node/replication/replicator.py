"""
Config replicator: owns the Local and Server snapshots of one process.
"""

import dataclasses
import logging
import threading
from typing import Callable, Optional

from common.events import EventChannel
from common.protocol import SHARED_FIELDS, decode_config, encode_config
from common.types import ConfigSettings, Role
from sync_node.replication.roles import AuthorityRole, ParticipantRole, RoleBehavior
from sync_node.replication.transport import Transport
from sync_node.settings_store.store import SettingsStore, TRACKED_SETTINGS

logger = logging.getLogger(__name__)

_SETTING_NAMES = {d.field: d.key for d in TRACKED_SETTINGS if d.field}


def build_role_behavior(role: Role, transport: Optional[Transport]) -> RoleBehavior:
    """
    Create the strategy for a role.

    Raises:
        ValueError: If the authority role is requested without a transport
    """
    if role is Role.AUTHORITY:
        if transport is None:
            raise ValueError("The authority role requires a transport")
        return AuthorityRole(transport)
    return ParticipantRole()


class ConfigReplicator:
    """
    Keeps the Local and Server views of the settings consistent.

    Local is replaced on every store reload. On the authority Server is a copy
    of Local after every reload, and each reload is broadcast. On a participant
    Server is replaced only by payloads received from the authority.

    Reloads, incoming payloads and participant syncs are serialized by one
    lock held across the transport call, so payloads reach a participant in
    the order Local changed.
    """

    def __init__(self, role: Role, transport: Optional[Transport] = None):
        self.role = role
        self._behavior = build_role_behavior(role, transport)
        self._store: Optional[SettingsStore] = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._lock = threading.RLock()

        self.local = ConfigSettings()
        self.server = ConfigSettings()

        self.on_local_config_changed = EventChannel("local_config_changed")
        self.on_server_config_changed = EventChannel("server_config_changed")

    @property
    def is_authority(self) -> bool:
        return self.role is Role.AUTHORITY

    def initialize(self, store: SettingsStore) -> None:
        """
        Attach to a loaded settings store and take the initial Local snapshot.

        Args:
            store: Store whose change notifications drive Local reloads
        """
        if self._unsubscribe is not None:
            self._unsubscribe()

        self._store = store
        self._unsubscribe = store.changed.subscribe(self.on_local_settings_changed)

        self.local = store.reload()
        self._behavior.on_initialized(self)

        logger.info(f"Config replicator initialized [role={self.role.value}, local={self.local}]")

    def on_local_settings_changed(self) -> None:
        """
        Reload Local after a store notification and run the role's follow-up.

        The authority has already broadcast the new payload by the time
        on_local_config_changed listeners run.
        """
        with self._lock:
            self.local = self._store.reload()
            self._behavior.on_local_reloaded(self)
            self.on_local_config_changed.fire()

    def serialize_local(self) -> bytes:
        return encode_config(self.local)

    def receive_server_config(self, payload: bytes) -> None:
        """
        Handle a payload broadcast by the authority.

        Raises:
            PayloadDecodeError: If the payload is malformed; Server is left untouched
            RoleViolationError: If called on the authority
        """
        with self._lock:
            self._behavior.accept_server_config(self, payload)

    def sync_participant(self, participant: str) -> None:
        """
        Send the current Local payload to one participant (authority only).
        """
        with self._lock:
            self._behavior.sync_participant(self, participant)

    def mirror_local_to_server(self) -> None:
        self.server = dataclasses.replace(self.local)

    def apply_server_payload(self, payload: bytes) -> None:
        self.server = decode_config(payload, self.server)

        for name in SHARED_FIELDS:
            logger.debug(
                f"{_SETTING_NAMES.get(name, name)} {{ Local: {getattr(self.local, name)}, "
                f"Server: {getattr(self.server, name)} }}"
            )

        self.on_server_config_changed.fire()
