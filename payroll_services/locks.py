"""
In-process keyed locks.

Serializes work per key (a machine type for rate replacement, an employee
for advance allocation) across threads sharing one process.  Cross-process
serialization comes from the database: advance rows are read
``FOR UPDATE`` and rate tables carry unique constraints.

A key's lock lives only while some thread holds or waits on it, so the
table stays as small as the number of keys in use.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self.users = 0


class KeyedLock:
    """One ``threading.RLock`` per key in use; re-entrant per thread."""

    def __init__(self, name: str):
        self.name = name
        self._guard = threading.Lock()
        self._entries: dict[Hashable, _Entry] = {}

    def __len__(self) -> int:
        """Number of keys currently held or waited on."""
        with self._guard:
            return len(self._entries)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]


rate_table_locks = KeyedLock("rate_table")
employee_allocation_locks = KeyedLock("employee_allocation")
