from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
import logging
import random

from examgrid.core.config import Settings
from examgrid.core.exceptions import ConfigurationError, SchedulerError
from examgrid.models.course import VALID_LEVELS
from examgrid.models.timetable import TimeSlot
from examgrid.services.exam_calendar import validate_horizon
from examgrid.services.occupancy import DepartmentLevelKey, ExistingSlot, OccupancyTracker
from examgrid.services.rest_days import REST_DAY_TRIGGER_COUNT, RestDayPropagator

logger = logging.getLogger(__name__)

DEFAULT_PREFERRED_CAP = 2
DEFAULT_FALLBACK_CAP = 3


@dataclass(frozen=True)
class CandidateCourse:
    id: str
    code: str
    title: str
    department_id: str
    level: int

    @property
    def key(self) -> DepartmentLevelKey:
        return DepartmentLevelKey(self.department_id, self.level)


@dataclass(frozen=True)
class Placement:
    course_id: str
    date: date
    time_slot: TimeSlot


@dataclass(frozen=True)
class UnscheduledCourse:
    course_id: str
    code: str
    title: str
    department_id: str
    level: int


@dataclass
class SchedulingResult:
    placements: list[Placement] = field(default_factory=list)
    unscheduled: list[UnscheduledCourse] = field(default_factory=list)

    @property
    def scheduled_count(self) -> int:
        return len(self.placements)

    @property
    def unscheduled_count(self) -> int:
        return len(self.unscheduled)


class ExamAutoScheduler:
    """Greedy, randomized placement of exams into (day, time slot) pairs.

    Courses are handled one department-level at a time. Phase 1 walks the
    horizon round-robin with a cap of ``preferred_cap`` exams per day; courses
    it cannot place get a chronological second pass with ``fallback_cap``.
    Failing both phases is reported in ``SchedulingResult.unscheduled``, never
    raised.

    State is built fresh for every ``schedule`` call, so one instance may be
    reused, but runs against the same timetable must be serialized by the
    caller.
    """

    def __init__(
        self,
        days: Sequence[date],
        existing_slots: Iterable[ExistingSlot] = (),
        *,
        preferred_cap: int = DEFAULT_PREFERRED_CAP,
        fallback_cap: int = DEFAULT_FALLBACK_CAP,
        rng: random.Random | None = None,
    ) -> None:
        if preferred_cap < 1:
            raise SchedulerError(message="preferred_cap must be at least 1", details={"preferred_cap": preferred_cap})
        if fallback_cap < preferred_cap:
            raise SchedulerError(
                message="fallback_cap cannot be lower than preferred_cap",
                details={"preferred_cap": preferred_cap, "fallback_cap": fallback_cap},
            )
        self.days = list(days)
        self.existing_slots = list(existing_slots)
        self.preferred_cap = preferred_cap
        self.fallback_cap = fallback_cap
        self.random = rng or random.Random()
        self._day_index = {day: index for index, day in enumerate(self.days)}
        self.tracker = OccupancyTracker()
        self.rest_days = RestDayPropagator()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        days: Sequence[date],
        existing_slots: Iterable[ExistingSlot] = (),
    ) -> "ExamAutoScheduler":
        preferred = settings.exam_preferred_daily_cap
        fallback = settings.exam_fallback_daily_cap
        if preferred < 1 or fallback < preferred:
            raise ConfigurationError(
                f"Invalid exam daily caps: preferred={preferred}, fallback={fallback}"
            )
        return cls(
            days,
            existing_slots,
            preferred_cap=preferred,
            fallback_cap=fallback,
            rng=random.Random(settings.exam_scheduler_random_seed),
        )

    def schedule(self, courses: Sequence[CandidateCourse]) -> SchedulingResult:
        self._validate_courses(courses)
        validate_horizon(self.days)

        self.tracker = OccupancyTracker.build(self.existing_slots)
        self.rest_days = RestDayPropagator.seed(self.tracker, self.days)

        result = SchedulingResult()
        for key, group in self._group_by_department_level(courses).items():
            placements, unscheduled = self._schedule_group(key, group)
            result.placements.extend(placements)
            result.unscheduled.extend(unscheduled)

        logger.info(
            "EXAM AUTO SCHEDULE DONE | courses=%s | days=%s | existing=%s | placed=%s | unscheduled=%s",
            len(courses),
            len(self.days),
            len(self.existing_slots),
            result.scheduled_count,
            result.unscheduled_count,
        )
        return result

    def _validate_courses(self, courses: Sequence[CandidateCourse]) -> None:
        if not courses:
            raise SchedulerError(message="At least one course is required for auto-scheduling")
        invalid = sorted({course.level for course in courses if course.level not in VALID_LEVELS})
        if invalid:
            raise SchedulerError(
                message="Levels must be 100, 200, 300, or 400",
                details={"invalid_levels": invalid},
            )
        duplicates = sorted(course_id for course_id, n in Counter(c.id for c in courses).items() if n > 1)
        if duplicates:
            raise SchedulerError(message="Duplicate candidate courses", details={"course_ids": duplicates})

    @staticmethod
    def _group_by_department_level(
        courses: Sequence[CandidateCourse],
    ) -> dict[DepartmentLevelKey, list[CandidateCourse]]:
        groups: dict[DepartmentLevelKey, list[CandidateCourse]] = {}
        for course in courses:
            groups.setdefault(course.key, []).append(course)
        return groups

    def _schedule_group(
        self,
        key: DepartmentLevelKey,
        group: list[CandidateCourse],
    ) -> tuple[list[Placement], list[UnscheduledCourse]]:
        ordered = list(group)
        self.random.shuffle(ordered)
        placements: list[Placement] = []
        deferred: list[CandidateCourse] = []

        # Phase 1: the pointer is shared by the whole group and only advances
        # past days that were rejected.
        pointer = 0
        day_count = len(self.days)
        for course in ordered:
            placement = None
            for _ in range(day_count):
                day = self.days[pointer % day_count]
                placement = self._try_place(course, key, day, cap=self.preferred_cap)
                if placement is not None:
                    break
                pointer += 1
            if placement is None:
                deferred.append(course)
            else:
                placements.append(placement)

        # Phase 2: chronological rescan with the relaxed cap.
        unscheduled: list[UnscheduledCourse] = []
        for course in deferred:
            placement = None
            for day in self.days:
                placement = self._try_place(course, key, day, cap=self.fallback_cap)
                if placement is not None:
                    break
            if placement is None:
                logger.warning(
                    "EXAM AUTO SCHEDULE UNPLACEABLE | course_id=%s | code=%s | cohort=%s",
                    course.id,
                    course.code,
                    key,
                )
                unscheduled.append(
                    UnscheduledCourse(
                        course_id=course.id,
                        code=course.code,
                        title=course.title,
                        department_id=course.department_id,
                        level=course.level,
                    )
                )
            else:
                placements.append(placement)

        logger.debug(
            "EXAM AUTO SCHEDULE GROUP | cohort=%s | courses=%s | placed=%s | fallback=%s | unscheduled=%s",
            key,
            len(group),
            len(placements),
            len(deferred) - len(unscheduled),
            len(unscheduled),
        )
        return placements, unscheduled

    def _try_place(self, course: CandidateCourse, key: DepartmentLevelKey, day: date, *, cap: int) -> Placement | None:
        if self.rest_days.is_blocked(key, day):
            self.rest_days.unblock_once(key, day)
            return None
        count = self.tracker.count_for(day, key)
        if count >= cap:
            return None
        if self._violates_rest_day(key, day, count + 1):
            return None
        used = self.tracker.used_slots_for(day, key)
        free_slots = [slot for slot in TimeSlot if slot not in used]
        if not free_slots:
            return None

        slot = self.random.choice(free_slots)
        new_count = self.tracker.record(day, key, slot)
        if new_count == REST_DAY_TRIGGER_COUNT:
            self.rest_days.block_following(key, day, self.days)
        return Placement(course_id=course.id, date=day, time_slot=slot)

    def _violates_rest_day(self, key: DepartmentLevelKey, day: date, new_count: int) -> bool:
        # Markers are consumed on skip, so a day already passed over can be
        # revisited; the occupancy counts remain authoritative.
        index = self._day_index[day]
        if index > 0 and self.tracker.count_for(self.days[index - 1], key) >= REST_DAY_TRIGGER_COUNT:
            return True
        if new_count >= REST_DAY_TRIGGER_COUNT and index + 1 < len(self.days):
            return self.tracker.count_for(self.days[index + 1], key) > 0
        return False


def schedule_exams(
    days: Sequence[date],
    courses: Sequence[CandidateCourse],
    existing_slots: Iterable[ExistingSlot] = (),
    *,
    preferred_cap: int = DEFAULT_PREFERRED_CAP,
    fallback_cap: int = DEFAULT_FALLBACK_CAP,
    seed: int | None = None,
) -> SchedulingResult:
    scheduler = ExamAutoScheduler(
        days,
        existing_slots,
        preferred_cap=preferred_cap,
        fallback_cap=fallback_cap,
        rng=random.Random(seed),
    )
    return scheduler.schedule(courses)
