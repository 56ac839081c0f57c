from datetime import date

import pytest

from examgrid.core.exceptions import ScheduleIntegrityError
from examgrid.models.timetable import TimeSlot
from examgrid.services.auto_schedule import _verify_run
from examgrid.services.exam_scheduler import CandidateCourse, Placement, SchedulingResult
from examgrid.services.occupancy import ExistingSlot

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
WEDNESDAY = date(2026, 3, 4)
DAYS = [MONDAY, TUESDAY, WEDNESDAY]

COURSE = CandidateCourse(id="c1", code="CSC101", title="Intro", department_id="cs", level=100)


def test_verify_run_rejects_introduced_rest_day_break():
    existing = [
        ExistingSlot(MONDAY, TimeSlot.SLOT_8_10, "cs", 100),
        ExistingSlot(MONDAY, TimeSlot.SLOT_1_3, "cs", 100),
    ]
    result = SchedulingResult(placements=[Placement("c1", TUESDAY, TimeSlot.SLOT_8_10)])

    with pytest.raises(ScheduleIntegrityError) as excinfo:
        _verify_run(existing, result, [COURSE], DAYS)
    violations = excinfo.value.details["violations"]
    assert len(violations) == 1
    assert "2026-03-03" in violations[0]


def test_verify_run_rejects_introduced_slot_clash():
    existing = [ExistingSlot(WEDNESDAY, TimeSlot.SLOT_10_12, "cs", 100)]
    result = SchedulingResult(placements=[Placement("c1", WEDNESDAY, TimeSlot.SLOT_10_12)])

    with pytest.raises(ScheduleIntegrityError):
        _verify_run(existing, result, [COURSE], DAYS)


def test_verify_run_ignores_violations_already_present():
    existing = [
        ExistingSlot(MONDAY, TimeSlot.SLOT_8_10, "cs", 100),
        ExistingSlot(MONDAY, TimeSlot.SLOT_1_3, "cs", 100),
        ExistingSlot(TUESDAY, TimeSlot.SLOT_8_10, "cs", 100),
    ]
    result = SchedulingResult(placements=[Placement("c1", WEDNESDAY, TimeSlot.SLOT_3_5)])

    _verify_run(existing, result, [COURSE], DAYS)


def test_verify_run_accepts_empty_result():
    _verify_run([], SchedulingResult(), [COURSE], DAYS)
