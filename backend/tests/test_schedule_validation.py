from datetime import date

from examgrid.models.timetable import TimeSlot
from examgrid.services.occupancy import ExistingSlot
from examgrid.services.schedule_validation import check_manual_placement, find_violations

MONDAY = date(2026, 3, 2)
TUESDAY = date(2026, 3, 3)
FRIDAY = date(2026, 3, 6)
NEXT_MONDAY = date(2026, 3, 9)


def slot(day, time_slot, department_id="cs", level=100):
    return ExistingSlot(day, time_slot, department_id, level)


def test_clean_schedule_has_no_violations():
    slots = [
        slot(MONDAY, TimeSlot.SLOT_8_10),
        slot(MONDAY, TimeSlot.SLOT_1_3),
        slot(MONDAY, TimeSlot.SLOT_8_10, "ee"),
        slot(date(2026, 3, 4), TimeSlot.SLOT_3_5),
    ]
    assert find_violations(slots, [MONDAY, TUESDAY, date(2026, 3, 4)]) == []


def test_capacity_and_clash_are_reported():
    slots = [
        slot(MONDAY, TimeSlot.SLOT_8_10),
        slot(MONDAY, TimeSlot.SLOT_8_10),
        slot(MONDAY, TimeSlot.SLOT_1_3),
        slot(MONDAY, TimeSlot.SLOT_3_5),
    ]
    kinds = sorted(item.violation_type for item in find_violations(slots, [MONDAY]))
    assert kinds == ["daily_capacity", "slot_clash"]


def test_rest_day_follows_the_horizon_across_weekends():
    slots = [
        slot(FRIDAY, TimeSlot.SLOT_8_10),
        slot(FRIDAY, TimeSlot.SLOT_10_12),
        slot(NEXT_MONDAY, TimeSlot.SLOT_8_10),
    ]
    violations = find_violations(slots, [FRIDAY, NEXT_MONDAY])
    assert len(violations) == 1
    assert violations[0].violation_type == "rest_day"
    assert violations[0].date == NEXT_MONDAY
    assert str(violations[0].key) == "cs-100"


def test_manual_placement_rules():
    slots = [slot(MONDAY, TimeSlot.SLOT_8_10), slot(MONDAY, TimeSlot.SLOT_10_12)]

    assert check_manual_placement(slots, slot(MONDAY, TimeSlot.SLOT_8_10)) == (
        "This time slot is already taken for this department-level"
    )
    assert check_manual_placement(slots, slot(MONDAY, TimeSlot.SLOT_8_10, "ee")) is None
    assert check_manual_placement(slots, slot(MONDAY, TimeSlot.SLOT_1_3)) is None

    full = [*slots, slot(MONDAY, TimeSlot.SLOT_1_3)]
    reason = check_manual_placement(full, slot(MONDAY, TimeSlot.SLOT_3_5))
    assert reason.startswith("Maximum number of exams (3)")
