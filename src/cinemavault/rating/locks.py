"""Per-key mutual exclusion for read-modify-write sequences.

One lock exists per key (movie id or review id) while at least one thread
holds or waits on it; the entry is dropped when the last holder leaves, so
the table does not grow with the catalogue.

Locks are re-entrant: a thread already holding a movie's lock may take it
again, which lets the lifecycle facade hold the lock across a whole
operation while the aggregator takes it for its own update.
"""

import threading
from contextlib import contextmanager


class KeyedLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    @contextmanager
    def hold(self, key):
        key = str(key)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.RLock()
            self._holders[key] = self._holders.get(key, 0) + 1

        lock.acquire()
        try:
            yield
        finally:
            lock.release()
            with self._guard:
                self._holders[key] -= 1
                if self._holders[key] == 0:
                    del self._holders[key]
                    del self._locks[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
