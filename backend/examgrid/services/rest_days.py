from __future__ import annotations

from collections.abc import Sequence
from datetime import date

from examgrid.services.exam_calendar import next_scheduling_day
from examgrid.services.occupancy import DepartmentLevelKey, OccupancyTracker

# Two exams on one day force the cohort's next scheduling day to be exam-free.
REST_DAY_TRIGGER_COUNT = 2


class RestDayPropagator:
    """Single-use markers for days a department-level must skip.

    A marker is consumed by ``unblock_once`` when a scan actually passes over
    the day because of it, so a later independent scan is not starved.
    """

    def __init__(self) -> None:
        self._blocked: set[tuple[DepartmentLevelKey, date]] = set()

    @classmethod
    def seed(cls, tracker: OccupancyTracker, days: Sequence[date]) -> "RestDayPropagator":
        propagator = cls()
        for day, key in tracker.days_with_count_at_least(REST_DAY_TRIGGER_COUNT):
            propagator.block_following(key, day, days)
        return propagator

    def is_blocked(self, key: DepartmentLevelKey, day: date) -> bool:
        return (key, day) in self._blocked

    def block(self, key: DepartmentLevelKey, day: date) -> None:
        self._blocked.add((key, day))

    def unblock_once(self, key: DepartmentLevelKey, day: date) -> None:
        self._blocked.discard((key, day))

    def block_following(self, key: DepartmentLevelKey, day: date, days: Sequence[date]) -> date | None:
        following = next_scheduling_day(days, day)
        if following is not None:
            self.block(key, following)
        return following

    def __len__(self) -> int:
        return len(self._blocked)
