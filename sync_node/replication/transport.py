"""
Transport interface consumed by the replicator, plus an in-process hub.
"""

import logging
from typing import Callable, Dict, List, Protocol

from common.exceptions import TransportError

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Reliable, ordered channel from the authority to its participants."""

    def broadcast_to_participants(self, payload: bytes) -> None:
        """Deliver payload to every connected participant."""

    def send_to(self, participant: str, payload: bytes) -> None:
        """Deliver payload to a single participant."""

    def register(self, address: str) -> bool:
        """Make a participant reachable; True if it was not known yet."""


class InMemoryHub:
    """
    In-process transport delivering payloads synchronously.

    Participants connect with a receive callback (normally a replicator's
    receive_server_config). Delivery follows connection order, and an
    exception raised by a receiver reaches the sender.
    """

    def __init__(self):
        self._receivers: Dict[str, Callable[[bytes], None]] = {}

    def connect(self, participant: str, on_receive: Callable[[bytes], None]) -> None:
        self._receivers[participant] = on_receive
        logger.debug(f"Participant connected to hub [participant={participant}]")

    def register(self, address: str) -> bool:
        """
        Accept a registration for a participant that is already connected.

        Returns:
            False, since a connected participant is already known

        Raises:
            TransportError: If no receiver is connected under that name
        """
        if address not in self._receivers:
            raise TransportError(f"Participant {address} is not connected")
        return False

    def disconnect(self, participant: str) -> None:
        self._receivers.pop(participant, None)

    def participants(self) -> List[str]:
        return list(self._receivers)

    def broadcast_to_participants(self, payload: bytes) -> None:
        for participant, on_receive in list(self._receivers.items()):
            logger.debug(f"Delivering {len(payload)} byte(s) to {participant}")
            on_receive(bytes(payload))

    def send_to(self, participant: str, payload: bytes) -> None:
        on_receive = self._receivers.get(participant)
        if on_receive is None:
            raise TransportError(f"Participant {participant} is not connected")
        on_receive(bytes(payload))
