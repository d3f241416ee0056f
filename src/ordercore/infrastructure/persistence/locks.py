"""Per-record exclusive locks with bounded waits.

Keys are ``(kind, id)`` tuples such as ``("order", 7)`` or
``("product", 3)``.  ``acquire_all`` always takes keys in sorted order
(orders before products, ascending IDs), so two callers that need the
same pair of records can never wait on each other in a cycle.

A key's lock exists only while someone holds or waits on it, so the
table does not grow with every record ever touched.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from ordercore.domain.exceptions import BusyError

logger = logging.getLogger(__name__)

LockKey = tuple[str, int]

DEFAULT_LOCK_TIMEOUT = 5.0


class _KeyLock:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        # Callers holding or waiting on ``lock``; the entry is dropped at zero.
        self.users = 0


class LockManager:

    def __init__(self, timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        if timeout < 0:
            raise ValueError(f"Lock timeout cannot be negative, got {timeout}")
        self.timeout = timeout
        self._locks: dict[LockKey, _KeyLock] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._locks)

    def acquire_all(self, keys: Iterable[LockKey]) -> list[LockKey]:
        """Acquire every key or none of them.

        Returns the keys in the order they were taken.  If any lock is
        still held elsewhere after ``timeout`` seconds, the locks taken so
        far are released and BusyError is raised.
        """
        acquired: list[LockKey] = []
        for key in sorted(set(keys)):
            entry = self._check_out(key)
            if not entry.lock.acquire(timeout=self.timeout):
                self._check_in(key, entry)
                self.release(acquired)
                kind, record_id = key
                logger.warning(
                    "Timed out after %.2fs waiting for %s %s", self.timeout, kind, record_id
                )
                raise BusyError(
                    f"{kind.capitalize()} {record_id} is locked by another "
                    f"operation; try again"
                )
            acquired.append(key)
        return acquired

    def release(self, keys: Iterable[LockKey]) -> None:
        with self._guard:
            for key in reversed(list(keys)):
                entry = self._locks[key]
                entry.lock.release()
                self._drop_user(key, entry)

    def _check_out(self, key: LockKey) -> _KeyLock:
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = _KeyLock()
            entry.users += 1
            return entry

    def _check_in(self, key: LockKey, entry: _KeyLock) -> None:
        with self._guard:
            self._drop_user(key, entry)

    def _drop_user(self, key: LockKey, entry: _KeyLock) -> None:
        entry.users -= 1
        if entry.users == 0:
            del self._locks[key]
