"""
Background watcher that reloads the config file when it is edited on disk.
"""

import logging
import threading
from typing import Optional

from sync_node.settings_store.config_file import ConfigFile

logger = logging.getLogger(__name__)


class ConfigFileWatcher:
    """
    Polls the config file's modification time and triggers ConfigFile.reload().

    Changes written by the ConfigFile itself are not reported again.
    """

    def __init__(self, config_file: ConfigFile, interval: float = 2.0):
        """
        Initialize the watcher.

        Args:
            config_file: File to watch
            interval: Seconds between polls
        """
        self.config_file = config_file
        self.interval = interval
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._start_lock = threading.Lock()

    def start(self) -> None:
        """
        Start the polling thread. Subsequent calls while running are no-ops.
        """
        with self._start_lock:
            if self._thread is not None and self._thread.is_alive():
                return

            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._watch_loop,
                daemon=True,
                name="ConfigFileWatcher"
            )
            self._thread.start()

            logger.info(
                f"Config file watcher started [path={self.config_file.path}, interval={self.interval}s]"
            )

    def stop(self) -> None:
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)
            logger.info("Config file watcher stopped")

    def poll(self) -> bool:
        """
        Check the file once.

        Returns:
            True if the file changed and was reloaded
        """
        changed = self.config_file.reload_if_changed()
        if changed:
            logger.info(f"Detected edit of {self.config_file.path}, reloaded")
        return changed

    def _watch_loop(self) -> None:
        while not self._stop_event.wait(timeout=self.interval):
            try:
                self.poll()
            except Exception as e:
                logger.error(f"Error reloading config file: {e}", exc_info=True)
