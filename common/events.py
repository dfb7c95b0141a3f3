"""Synchronous in-process publish/subscribe channel."""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)


class EventChannel:
    """
    Ordered list of listeners notified synchronously on fire().

    Listeners run on the caller's thread in subscription order. A listener
    that raises aborts delivery to the remaining listeners and the exception
    reaches the caller. Late subscribers do not see earlier events.
    """

    def __init__(self, name: str):
        self.name = name
        self._listeners: List[Callable[..., None]] = []

    def subscribe(self, listener: Callable[..., None]) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Callable invoked with the arguments passed to fire()

        Returns:
            Zero-argument callable that unsubscribes this listener
        """
        self._listeners.append(listener)
        logger.debug(f"Listener subscribed to {self.name} [count={len(self._listeners)}]")
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Callable[..., None]) -> bool:
        """
        Remove a listener.

        Returns:
            True if the listener was registered, False otherwise
        """
        try:
            self._listeners.remove(listener)
        except ValueError:
            return False
        return True

    def fire(self, *args) -> None:
        for listener in list(self._listeners):
            listener(*args)

    def __len__(self) -> int:
        return len(self._listeners)
