# vasco_travel/api/protection/sweeper.py
"""Background cleanup of expired protection entries."""

import logging
import threading
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class StoreSweeper:
    """Periodically calls ``sweep()`` on each target from a daemon thread.

    Targets are anything with a ``sweep() -> int`` method (the rate limiter
    and the idempotency cache).
    """

    def __init__(self, targets: Iterable, interval_seconds: float = 3600):
        self.targets = list(targets)
        self.interval_seconds = interval_seconds
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        if self._thread and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._cleanup_loop,
            name="store-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info(f"StoreSweeper started (every {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = None):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout)

    def run_once(self) -> int:
        """Sweep every target once and return the total number removed."""
        return sum(target.sweep() for target in self.targets)

    def _cleanup_loop(self):
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.run_once()
            except Exception:
                logger.exception("Error in store sweep")
