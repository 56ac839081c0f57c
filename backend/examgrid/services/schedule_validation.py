from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from typing import Literal

from examgrid.models.timetable import TimeSlot
from examgrid.services.occupancy import DepartmentLevelKey, ExistingSlot
from examgrid.services.rest_days import REST_DAY_TRIGGER_COUNT

MAX_EXAMS_PER_DAY = 3

ViolationType = Literal["daily_capacity", "rest_day", "slot_clash"]


@dataclass(frozen=True)
class ScheduleViolation:
    violation_type: ViolationType
    date: date
    key: DepartmentLevelKey
    description: str


def find_violations(
    slots: Iterable[ExistingSlot],
    days: Sequence[date],
    *,
    daily_cap: int = MAX_EXAMS_PER_DAY,
) -> list[ScheduleViolation]:
    """Check capacity, forced rest days and slot exclusivity over a set of exam slots."""
    counts: Counter[tuple[date, DepartmentLevelKey]] = Counter()
    slot_usage: dict[tuple[date, DepartmentLevelKey], Counter[TimeSlot]] = defaultdict(Counter)
    for slot in slots:
        counts[(slot.date, slot.key)] += 1
        slot_usage[(slot.date, slot.key)][slot.time_slot] += 1

    violations: list[ScheduleViolation] = []
    for (day, key), count in sorted(counts.items()):
        if count > daily_cap:
            violations.append(
                ScheduleViolation(
                    violation_type="daily_capacity",
                    date=day,
                    key=key,
                    description=f"{key} has {count} exams on {day.isoformat()} (max {daily_cap})",
                )
            )
        for time_slot, used in slot_usage[(day, key)].items():
            if used > 1:
                violations.append(
                    ScheduleViolation(
                        violation_type="slot_clash",
                        date=day,
                        key=key,
                        description=f"{key} has {used} exams in {time_slot.value} on {day.isoformat()}",
                    )
                )

    day_index = {day: index for index, day in enumerate(days)}
    for (day, key), count in sorted(counts.items()):
        index = day_index.get(day)
        if count < REST_DAY_TRIGGER_COUNT or index is None or index + 1 >= len(days):
            continue
        following = days[index + 1]
        if counts.get((following, key), 0) > 0:
            violations.append(
                ScheduleViolation(
                    violation_type="rest_day",
                    date=following,
                    key=key,
                    description=(
                        f"{key} has exams on {following.isoformat()} after "
                        f"{count} exams on {day.isoformat()}"
                    ),
                )
            )
    return violations


def check_manual_placement(
    slots: Iterable[ExistingSlot],
    candidate: ExistingSlot,
    *,
    daily_cap: int = MAX_EXAMS_PER_DAY,
) -> str | None:
    """Return why ``candidate`` cannot be added next to ``slots``, or ``None``.

    Manual placement follows the drag-and-drop rules: the hard daily cap and
    slot exclusivity for the cohort. Forced rest days are left to staff.
    """
    same_day = [slot for slot in slots if slot.date == candidate.date and slot.key == candidate.key]
    if len(same_day) >= daily_cap:
        return (
            f"Maximum number of exams ({daily_cap}) for this department-level "
            "on this date has been reached"
        )
    if any(slot.time_slot == candidate.time_slot for slot in same_day):
        return "This time slot is already taken for this department-level"
    return None
