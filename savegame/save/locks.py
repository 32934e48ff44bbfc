"""
Per-slot advisory locks.

Serializes save/load/delete/import on the same slot within one process.
Different slots never block each other. There is no cross-process locking.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator

from savegame.save.store import sanitize_slot_id


class SlotLockRegistry:
    """
    Hands out one re-entrant lock per sanitized slot id.

    Ids that sanitize to the same file name share a lock, since they
    address the same files.

    Usage:
        locks = SlotLockRegistry()
        with locks.lock("slot1"):
            store.write("slot1", payload, metadata)
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}

    def get(self, slot_id: str) -> threading.RLock:
        """Lock for a slot, created on first use."""
        key = sanitize_slot_id(slot_id)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock(self, slot_id: str) -> Iterator[None]:
        """Hold a slot's lock for the duration of the block."""
        slot_lock = self.get(slot_id)
        with slot_lock:
            yield

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
