from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterator
from contextlib import contextmanager
from threading import Lock


class TimetableLockRegistry:
    """One lock per timetable id; runs for different timetables never contend."""

    def __init__(self) -> None:
        self._locks: dict[str, Lock] = defaultdict(Lock)
        self._guard = Lock()

    def lock_for(self, timetable_id: str) -> Lock:
        with self._guard:
            return self._locks[timetable_id]

    @contextmanager
    def hold(self, timetable_id: str) -> Iterator[None]:
        lock = self.lock_for(timetable_id)
        with lock:
            yield

    def discard(self, timetable_id: str) -> None:
        with self._guard:
            lock = self._locks.get(timetable_id)
            if lock is not None and not lock.locked():
                del self._locks[timetable_id]

    def clear(self) -> None:
        with self._guard:
            self._locks.clear()


_registry = TimetableLockRegistry()


def timetable_lock(timetable_id: str):
    return _registry.hold(timetable_id)


def forget_timetable_lock(timetable_id: str) -> None:
    _registry.discard(timetable_id)


def clear_timetable_locks() -> None:
    _registry.clear()
