from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from examgrid.models.timetable import TimeSlot
from examgrid.services.exam_scheduler import SchedulingResult

SLOT_ORDER = {slot: index for index, slot in enumerate(TimeSlot)}


@dataclass(frozen=True)
class ExamSlotCreateRequest:
    timetable_id: str
    course_id: str
    date: date
    time_slot: TimeSlot


def exam_slot_requests(result: SchedulingResult, timetable_id: str) -> list[ExamSlotCreateRequest]:
    ordered = sorted(result.placements, key=lambda item: (item.date, SLOT_ORDER[item.time_slot], item.course_id))
    return [
        ExamSlotCreateRequest(
            timetable_id=timetable_id,
            course_id=placement.course_id,
            date=placement.date,
            time_slot=placement.time_slot,
        )
        for placement in ordered
    ]


def unscheduled_summary(result: SchedulingResult) -> list[dict]:
    return [
        {
            "id": course.course_id,
            "code": course.code,
            "title": course.title,
            "department_id": course.department_id,
            "level": course.level,
        }
        for course in result.unscheduled
    ]


def summary_message(scheduled_count: int) -> str:
    if scheduled_count == 0:
        return "No exams could be scheduled (all date/time slot combinations are full)."
    return f"Successfully scheduled {scheduled_count} exams."
