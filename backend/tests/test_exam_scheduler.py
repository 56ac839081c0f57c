from collections import Counter
from datetime import date
import logging
import random

import pytest

from examgrid.core.config import Settings
from examgrid.core.exceptions import ConfigurationError, SchedulerError
from examgrid.models.timetable import TimeSlot
from examgrid.services.exam_calendar import weekdays_between
from examgrid.services.exam_scheduler import CandidateCourse, ExamAutoScheduler, schedule_exams
from examgrid.services.occupancy import ExistingSlot
from examgrid.services.schedule_validation import find_violations

# 2026-03-02 is a Monday
MONDAY = date(2026, 3, 2)
ONE_WEEK = weekdays_between(MONDAY, date(2026, 3, 6))
TWO_WEEKS = weekdays_between(MONDAY, date(2026, 3, 13))


def make_courses(department_id, level, count, prefix=None):
    prefix = prefix or f"{department_id.upper()}{level // 100}"
    return [
        CandidateCourse(
            id=f"{department_id}-{level}-{index}",
            code=f"{prefix}{index:02d}",
            title=f"Course {index}",
            department_id=department_id,
            level=level,
        )
        for index in range(count)
    ]


def as_existing(result, courses):
    by_id = {course.id: course for course in courses}
    return [
        ExistingSlot(
            date=placement.date,
            time_slot=placement.time_slot,
            department_id=by_id[placement.course_id].department_id,
            level=by_id[placement.course_id].level,
        )
        for placement in result.placements
    ]


def test_three_courses_spread_with_rest_day():
    courses = make_courses("cs", 100, 3)
    result = schedule_exams(ONE_WEEK, courses, seed=1)

    assert result.unscheduled == []
    assert result.scheduled_count == 3
    per_day = Counter(placement.date for placement in result.placements)
    assert per_day[ONE_WEEK[0]] == 2
    assert per_day[ONE_WEEK[1]] == 0
    assert sum(per_day[day] for day in ONE_WEEK[2:]) == 1


def test_single_day_uses_fallback_cap_then_reports_unscheduled(caplog):
    courses = make_courses("cs", 100, 5)
    with caplog.at_level(logging.WARNING, logger="examgrid.services.exam_scheduler"):
        result = schedule_exams([MONDAY], courses, seed=3)

    assert result.scheduled_count == 3
    assert result.unscheduled_count == 2
    assert len({placement.time_slot for placement in result.placements}) == 3
    assert {item.course_id for item in result.unscheduled}.isdisjoint(
        {placement.course_id for placement in result.placements}
    )
    assert sum("UNPLACEABLE" in record.message for record in caplog.records) == 2


def test_existing_double_day_blocks_following_day():
    existing = [
        ExistingSlot(ONE_WEEK[0], TimeSlot.SLOT_8_10, "cs", 100),
        ExistingSlot(ONE_WEEK[0], TimeSlot.SLOT_10_12, "cs", 100),
    ]
    courses = make_courses("cs", 100, 5) + make_courses("ee", 100, 2)

    for seed in range(20):
        result = schedule_exams(ONE_WEEK, courses, existing, seed=seed)
        cs_days = {
            placement.date for placement in result.placements if placement.course_id.startswith("cs-")
        }
        assert ONE_WEEK[1] not in cs_days
        assert find_violations([*existing, *as_existing(result, courses)], ONE_WEEK) == []


def test_different_cohorts_may_share_a_slot():
    # Only SLOT_3_5 is left for both cohorts, so they must share it.
    existing = [
        ExistingSlot(MONDAY, slot, department_id, 100)
        for department_id in ("cs", "ee")
        for slot in (TimeSlot.SLOT_8_10, TimeSlot.SLOT_10_12, TimeSlot.SLOT_1_3)
    ]
    courses = make_courses("cs", 100, 1) + make_courses("ee", 100, 1)
    scheduler = ExamAutoScheduler([MONDAY], existing, preferred_cap=4, fallback_cap=4, rng=random.Random(0))

    result = scheduler.schedule(courses)

    assert result.unscheduled == []
    assert [placement.time_slot for placement in result.placements] == [TimeSlot.SLOT_3_5, TimeSlot.SLOT_3_5]


def test_empty_course_list_is_rejected_before_horizon():
    with pytest.raises(SchedulerError, match="At least one course"):
        schedule_exams([], [])


def test_invalid_level_and_duplicate_courses_are_rejected():
    bad_level = make_courses("cs", 500, 1)
    with pytest.raises(SchedulerError) as exc:
        schedule_exams(ONE_WEEK, bad_level)
    assert exc.value.details == {"invalid_levels": [500]}

    course = make_courses("cs", 100, 1)[0]
    with pytest.raises(SchedulerError, match="Duplicate"):
        schedule_exams(ONE_WEEK, [course, course])


def test_empty_horizon_is_rejected():
    with pytest.raises(SchedulerError, match="No weekdays available"):
        schedule_exams([], make_courses("cs", 100, 1))


def test_phase_one_alternates_double_days_with_rest_days():
    result = schedule_exams(ONE_WEEK, make_courses("cs", 100, 4), seed=11)
    per_day = Counter(placement.date for placement in result.placements)
    assert per_day == {ONE_WEEK[0]: 2, ONE_WEEK[2]: 2}


def test_same_seed_gives_same_schedule():
    courses = make_courses("cs", 100, 6) + make_courses("cs", 200, 4) + make_courses("ee", 300, 5)
    first = schedule_exams(TWO_WEEKS, courses, seed=42)
    second = schedule_exams(TWO_WEEKS, courses, seed=42)
    assert first.placements == second.placements
    assert first.unscheduled == second.unscheduled


@pytest.mark.parametrize("seed", range(30))
def test_invariants_hold_for_random_runs(seed):
    rng = random.Random(seed)
    courses = []
    for department_id in ("cs", "ee", "me"):
        for level in (100, 200):
            courses.extend(make_courses(department_id, level, rng.randint(1, 12)))
    horizon = TWO_WEEKS[: rng.randint(1, len(TWO_WEEKS))]
    existing = [ExistingSlot(horizon[0], TimeSlot.SLOT_8_10, "cs", 100)]

    result = schedule_exams(horizon, courses, existing, seed=seed)

    placed_ids = [placement.course_id for placement in result.placements]
    unscheduled_ids = [item.course_id for item in result.unscheduled]
    assert len(placed_ids) == len(set(placed_ids))
    assert sorted(placed_ids + unscheduled_ids) == sorted(course.id for course in courses)
    assert all(placement.date in horizon for placement in result.placements)
    assert find_violations([*existing, *as_existing(result, courses)], horizon) == []


def test_unlimited_horizon_places_everything():
    courses = make_courses("cs", 100, 8)
    result = schedule_exams(TWO_WEEKS, courses, seed=5)
    assert result.unscheduled_count == 0
    assert max(Counter(placement.date for placement in result.placements).values()) <= 2


def test_scheduler_rejects_inconsistent_caps():
    with pytest.raises(SchedulerError):
        ExamAutoScheduler(ONE_WEEK, preferred_cap=0)
    with pytest.raises(SchedulerError):
        ExamAutoScheduler(ONE_WEEK, preferred_cap=3, fallback_cap=2)


def test_from_settings_validates_caps():
    settings = Settings(exam_preferred_daily_cap=3, exam_fallback_daily_cap=2)
    with pytest.raises(ConfigurationError):
        ExamAutoScheduler.from_settings(settings, ONE_WEEK)


def test_from_settings_uses_seed():
    settings = Settings(exam_scheduler_random_seed=9)
    courses = make_courses("cs", 100, 5)
    first = ExamAutoScheduler.from_settings(settings, ONE_WEEK).schedule(courses)
    second = ExamAutoScheduler.from_settings(settings, ONE_WEEK).schedule(courses)
    assert first.placements == second.placements
