"""
Periodic auto-save timer.

Runs a callback every N seconds on a daemon thread until stopped. A failing
callback is logged and the next tick still happens.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class AutoSaveScheduler:
    """
    Owned, stoppable interval timer.

    Usage:
        scheduler = AutoSaveScheduler(300, manager.auto_save)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(self, interval_seconds: float, callback: Callable[[], object], name: str = "auto-save"):
        if interval_seconds <= 0:
            raise ValueError("Auto-save interval must be positive")
        self.interval_seconds = interval_seconds
        self.callback = callback
        self.name = name
        self.tick_count = 0

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        thread = self._thread
        return thread is not None and thread.is_alive()

    def start(self) -> None:
        """Start ticking. No-op if already running."""
        with self._lock:
            if self.is_running:
                return
            self._stop = threading.Event()
            self._thread = threading.Thread(
                target=self._run, args=(self._stop,), name=self.name, daemon=True
            )
            self._thread.start()
        logger.info(f"Auto-save scheduler started (interval: {self.interval_seconds}s)")

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        """Stop ticking and wait for an in-flight tick to finish."""
        with self._lock:
            thread = self._thread
            self._stop.set()
            self._thread = None

        if thread is None:
            return
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Auto-save scheduler stopped")

    def tick(self) -> None:
        """Run the callback once, logging any failure."""
        self.tick_count += 1
        try:
            self.callback()
        except Exception:
            logger.exception("Error during auto-save")

    def _run(self, stop: threading.Event) -> None:
        while not stop.wait(self.interval_seconds):
            self.tick()
