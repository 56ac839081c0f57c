from datetime import date

from examgrid.models.timetable import TimeSlot
from examgrid.services.exam_scheduler import Placement, SchedulingResult, UnscheduledCourse
from examgrid.services.schedule_results import exam_slot_requests, summary_message, unscheduled_summary


def test_requests_are_ordered_by_date_then_slot():
    result = SchedulingResult(
        placements=[
            Placement("c3", date(2026, 3, 4), TimeSlot.SLOT_8_10),
            Placement("c2", date(2026, 3, 2), TimeSlot.SLOT_3_5),
            Placement("c1", date(2026, 3, 2), TimeSlot.SLOT_10_12),
        ]
    )
    requests = exam_slot_requests(result, "tt-1")
    assert [request.course_id for request in requests] == ["c1", "c2", "c3"]
    assert {request.timetable_id for request in requests} == {"tt-1"}


def test_unscheduled_summary_shape():
    result = SchedulingResult(
        unscheduled=[UnscheduledCourse("c9", "CSC401", "Compilers", "cs", 400)],
    )
    assert unscheduled_summary(result) == [
        {"id": "c9", "code": "CSC401", "title": "Compilers", "department_id": "cs", "level": 400}
    ]
    assert exam_slot_requests(result, "tt-1") == []


def test_summary_message():
    assert summary_message(0).startswith("No exams could be scheduled")
    assert summary_message(4) == "Successfully scheduled 4 exams."
