"""Per-player serialization of mutations."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class _LockEntry:
    lock: threading.RLock = field(default_factory=threading.RLock)
    users: int = 0


class PlayerLockRegistry:
    """Hands out one re-entrant lock per player id.

    Mutations of the same player run one at a time; different players never
    contend with each other. An entry lives only while a thread holds or waits
    for it, so the registry does not grow with every player ever touched.
    """

    def __init__(self) -> None:
        self._locks: dict[int, _LockEntry] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, player_id: int) -> Iterator[None]:
        with self._guard:
            entry = self._locks.get(player_id)
            if entry is None:
                entry = self._locks[player_id] = _LockEntry()
            entry.users += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._locks[player_id]


player_locks = PlayerLockRegistry()
