"""
Role strategies for the config replicator.

The role is chosen once when the replicator is built. Each strategy decides
what happens after a local reload, on an incoming payload and when a
participant joins.
"""

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from common.exceptions import RoleViolationError
from common.types import Role
from sync_node.replication.transport import Transport

if TYPE_CHECKING:
    from sync_node.replication.replicator import ConfigReplicator

logger = logging.getLogger(__name__)


class RoleBehavior(ABC):
    """Shared interface of the authority and participant strategies."""

    role: Role

    @abstractmethod
    def on_initialized(self, replicator: "ConfigReplicator") -> None:
        """Called once the first Local snapshot has been loaded."""

    @abstractmethod
    def on_local_reloaded(self, replicator: "ConfigReplicator") -> None:
        """Called after every Local reload, before listeners are notified."""

    @abstractmethod
    def accept_server_config(self, replicator: "ConfigReplicator", payload: bytes) -> None:
        """Handle a payload received from the authority."""

    @abstractmethod
    def sync_participant(self, replicator: "ConfigReplicator", participant: str) -> None:
        """Bring a newly connected participant up to date."""


class AuthorityRole(RoleBehavior):
    """
    The authority's config is canonical: Server always mirrors Local and every
    Local change is broadcast.
    """

    role = Role.AUTHORITY

    def __init__(self, transport: Transport):
        self.transport = transport

    def on_initialized(self, replicator: "ConfigReplicator") -> None:
        replicator.mirror_local_to_server()

    def on_local_reloaded(self, replicator: "ConfigReplicator") -> None:
        replicator.mirror_local_to_server()
        logger.debug("The config was changed, propagating to participants..")
        self.transport.broadcast_to_participants(replicator.serialize_local())

    def accept_server_config(self, replicator: "ConfigReplicator", payload: bytes) -> None:
        raise RoleViolationError("The authority does not accept server config from peers")

    def sync_participant(self, replicator: "ConfigReplicator", participant: str) -> None:
        logger.info(f"Sending current config to participant {participant}")
        self.transport.send_to(participant, replicator.serialize_local())


class ParticipantRole(RoleBehavior):
    """
    Participants never author the shared config; Server only changes when a
    payload arrives from the authority.
    """

    role = Role.PARTICIPANT

    def on_initialized(self, replicator: "ConfigReplicator") -> None:
        pass

    def on_local_reloaded(self, replicator: "ConfigReplicator") -> None:
        pass

    def accept_server_config(self, replicator: "ConfigReplicator", payload: bytes) -> None:
        replicator.apply_server_payload(payload)

    def sync_participant(self, replicator: "ConfigReplicator", participant: str) -> None:
        raise RoleViolationError("Only the authority can sync participants")
