"""
Cooperative cancellation for blocking I/O work.

A token is handed to store operations; they check it at file boundaries
(before reading, before committing a write) so a cancelled save never
replaces a slot's files with partial data.
"""

from __future__ import annotations

import threading
from typing import Callable, Optional


class CancellationToken:
    """
    Thread-safe cancellation flag.

    Usage:
        token = CancellationToken()
        worker = threading.Thread(target=manager.save, args=("slot1",),
                                  kwargs={"cancel": token})
        worker.start()
        token.cancel()
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        """Request cancellation."""
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self, error_factory: Callable[[], Exception]) -> None:
        """Raise the exception built by error_factory if cancellation was requested."""
        if self._event.is_set():
            raise error_factory()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout; returns True if cancelled."""
        return self._event.wait(timeout)
