"""Keyed in-process locks.

Package creation and settlement for the same order, and mutations of the
same wallet, are serialized through these registries.
"""

import threading
from collections import defaultdict
from contextlib import contextmanager


class KeyedLocks:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = defaultdict(threading.RLock)

    def lock_for(self, key: str) -> threading.RLock:
        with self._guard:
            return self._locks[str(key)]

    @contextmanager
    def hold(self, key: str):
        with self.lock_for(key):
            yield


order_locks = KeyedLocks()
wallet_locks = KeyedLocks()
