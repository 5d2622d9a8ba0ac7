"""Per-key mutual exclusion for the admission unit of work."""

import threading
from collections.abc import Hashable
from dataclasses import dataclass, field


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class KeyedLocks:
    """One lock per key, held in memory only while a thread holds or waits on it.

    The map is bounded by the number of keys under contention at any moment,
    not by the number of keys ever seen.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)

    def acquire(self, key: Hashable, timeout: float) -> bool:
        """Return False when the lock for ``key`` is not acquired within timeout."""
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.users += 1
        if entry.lock.acquire(timeout=timeout):
            return True
        self._leave(key, entry)
        return False

    def release(self, key: Hashable) -> None:
        with self._guard:
            entry = self._entries[key]
        entry.lock.release()
        self._leave(key, entry)

    def _leave(self, key: Hashable, entry: _Entry) -> None:
        with self._guard:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]
