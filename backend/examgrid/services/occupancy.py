from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from datetime import date

from examgrid.models.timetable import TimeSlot


@dataclass(frozen=True, order=True)
class DepartmentLevelKey:
    """A cohort (department, level) whose exams must not clash."""

    department_id: str
    level: int

    def __str__(self) -> str:
        return f"{self.department_id}-{self.level}"


@dataclass(frozen=True)
class ExistingSlot:
    date: date
    time_slot: TimeSlot
    department_id: str
    level: int

    @property
    def key(self) -> DepartmentLevelKey:
        return DepartmentLevelKey(self.department_id, self.level)


class OccupancyTracker:
    """Per-run index of exams already placed, keyed by (day, department-level).

    Lookups for unknown days or cohorts return zero / an empty set. ``record``
    is not idempotent: each (day, key, slot) must be recorded at most once.
    """

    def __init__(self) -> None:
        self._counts: dict[tuple[date, DepartmentLevelKey], int] = defaultdict(int)
        self._used_slots: dict[tuple[date, DepartmentLevelKey], set[TimeSlot]] = defaultdict(set)

    @classmethod
    def build(cls, existing_slots: Iterable[ExistingSlot]) -> "OccupancyTracker":
        tracker = cls()
        for slot in existing_slots:
            tracker.record(slot.date, slot.key, slot.time_slot)
        return tracker

    def count_for(self, day: date, key: DepartmentLevelKey) -> int:
        return self._counts.get((day, key), 0)

    def used_slots_for(self, day: date, key: DepartmentLevelKey) -> set[TimeSlot]:
        return set(self._used_slots.get((day, key), ()))

    def record(self, day: date, key: DepartmentLevelKey, slot: TimeSlot) -> int:
        self._counts[(day, key)] += 1
        self._used_slots[(day, key)].add(slot)
        return self._counts[(day, key)]

    def days_with_count_at_least(self, threshold: int) -> Iterator[tuple[date, DepartmentLevelKey]]:
        for (day, key), count in sorted(self._counts.items()):
            if count >= threshold:
                yield day, key
