"""Per-user mutual exclusion for the purchase check-then-commit sequence.

Notes:
- Per-process only: running multiple workers needs a shared lock or a
  serializable transaction instead.
- Thread-safe: the registry itself is guarded by a lock.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator


class UserLockRegistry:
    """Hands out one ``threading.Lock`` per user id.

    Two purchases by the same user run their limit check and order commit one
    after the other; purchases by different users don't wait on each other.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[int, threading.Lock] = {}

    def _lock_for(self, user_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(user_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[user_id] = lock
            return lock

    @contextmanager
    def hold(self, user_id: int) -> Iterator[None]:
        lock = self._lock_for(user_id)
        with lock:
            yield
