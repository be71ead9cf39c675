"""Progress storage contract and an in-memory implementation.

Updates to one (learner, content) record are read-modify-write and must
be applied in submission order.  :meth:`ProgressStore.update` expresses
that contract: the store holds the record's lock while *fn* runs.
Records for different keys are never coordinated.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol, TypeVar

from .models import ShadowProgress

T = TypeVar("T")

ProgressKey = tuple[str, str]


class ProgressStore(Protocol):
    def get(self, learner_id: str, content_id: str) -> ShadowProgress | None: ...

    def update(
        self,
        learner_id: str,
        content_id: str,
        fn: Callable[[ShadowProgress | None], tuple[ShadowProgress, T]],
    ) -> T: ...


class InMemoryProgressStore:
    """Dictionary-backed store with one lock per (learner, content) key."""

    def __init__(self) -> None:
        self._records: dict[ProgressKey, ShadowProgress] = {}
        self._locks: dict[ProgressKey, threading.Lock] = {}
        self._guard = threading.Lock()

    def _lock_for(self, key: ProgressKey) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def get(self, learner_id: str, content_id: str) -> ShadowProgress | None:
        return self._records.get((learner_id, content_id))

    def update(
        self,
        learner_id: str,
        content_id: str,
        fn: Callable[[ShadowProgress | None], tuple[ShadowProgress, T]],
    ) -> T:
        """Run *fn* on the current record under its lock and store the new one."""
        key = (learner_id, content_id)
        with self._lock_for(key):
            progress, value = fn(self._records.get(key))
            self._records[key] = progress
            return value

    def for_learner(self, learner_id: str) -> list[ShadowProgress]:
        return [p for (learner, _), p in self._records.items() if learner == learner_id]

    def __len__(self) -> int:
        return len(self._records)
