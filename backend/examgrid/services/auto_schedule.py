from __future__ import annotations

from datetime import date
import logging
from time import perf_counter

from fastapi import HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload

from examgrid.core.config import Settings
from examgrid.core.exceptions import ScheduleIntegrityError
from examgrid.models.course import Course
from examgrid.models.timetable import ExamSlot, Timetable
from examgrid.schemas.timetable import AutoScheduleResponse, ExamSlotOut, UnscheduledCourseOut
from examgrid.services.exam_calendar import weekdays_between
from examgrid.services.exam_scheduler import CandidateCourse, ExamAutoScheduler, SchedulingResult
from examgrid.services.occupancy import ExistingSlot
from examgrid.services.schedule_results import (
    SLOT_ORDER,
    exam_slot_requests,
    summary_message,
    unscheduled_summary,
)
from examgrid.services.schedule_validation import find_violations
from examgrid.services.timetable_locks import timetable_lock

logger = logging.getLogger(__name__)

ALL_PLACED_MESSAGE = "All selected courses already have exam slots in this timetable."


def ensure_editable(timetable: Timetable) -> None:
    if timetable.is_published:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot update a published timetable")


def load_existing_slots(db: Session, timetable_id: str) -> list[ExistingSlot]:
    rows = db.execute(
        select(ExamSlot.date, ExamSlot.time_slot, Course.department_id, Course.level)
        .join(Course, ExamSlot.course_id == Course.id)
        .where(ExamSlot.timetable_id == timetable_id)
    ).all()
    return [
        ExistingSlot(date=row.date, time_slot=row.time_slot, department_id=row.department_id, level=row.level)
        for row in rows
    ]


def _load_candidate_courses(db: Session, department_ids: list[str], levels: list[int]) -> list[CandidateCourse]:
    courses = db.execute(
        select(Course)
        .where(Course.department_id.in_(department_ids), Course.level.in_(levels))
        .order_by(Course.department_id, Course.level, Course.code)
    ).scalars()
    return [
        CandidateCourse(
            id=course.id,
            code=course.code,
            title=course.title,
            department_id=course.department_id,
            level=course.level,
        )
        for course in courses
    ]


def _verify_run(
    existing: list[ExistingSlot],
    result: SchedulingResult,
    courses: list[CandidateCourse],
    days: list[date],
) -> None:
    by_id = {course.id: course for course in courses}
    new_slots = [
        ExistingSlot(
            date=placement.date,
            time_slot=placement.time_slot,
            department_id=by_id[placement.course_id].department_id,
            level=by_id[placement.course_id].level,
        )
        for placement in result.placements
    ]
    # Manual placements may already break the rest-day rule; only fail on
    # violations this run introduced.
    before = {(item.violation_type, item.date, item.key) for item in find_violations(existing, days)}
    introduced = [
        item
        for item in find_violations([*existing, *new_slots], days)
        if (item.violation_type, item.date, item.key) not in before
    ]
    if introduced:
        raise ScheduleIntegrityError([item.description for item in introduced])


def auto_schedule_timetable(
    db: Session,
    *,
    timetable_id: str,
    department_ids: list[str],
    levels: list[int],
    settings: Settings,
) -> AutoScheduleResponse:
    started = perf_counter()
    logger.info(
        "AUTO SCHEDULE START | timetable_id=%s | departments=%s | levels=%s",
        timetable_id,
        len(department_ids),
        levels,
    )
    with timetable_lock(timetable_id):
        timetable = db.get(Timetable, timetable_id)
        if timetable is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable not found")
        ensure_editable(timetable)

        courses = _load_candidate_courses(db, department_ids, levels)
        if not courses:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No courses found for the specified departments and levels",
            )
        already_placed = set(
            db.execute(select(ExamSlot.course_id).where(ExamSlot.timetable_id == timetable_id)).scalars()
        )
        courses = [course for course in courses if course.id not in already_placed]
        if not courses:
            logger.info("AUTO SCHEDULE SKIPPED | timetable_id=%s | reason=all_courses_placed", timetable_id)
            return AutoScheduleResponse(message=ALL_PLACED_MESSAGE, scheduled_count=0, unscheduled_count=0)

        days = weekdays_between(timetable.start_date, timetable.end_date)
        if not days:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No weekdays available in the timetable date range",
            )
        existing = load_existing_slots(db, timetable_id)

        scheduler = ExamAutoScheduler.from_settings(settings, days, existing)
        result = scheduler.schedule(courses)
        _verify_run(existing, result, courses, days)

        requests = exam_slot_requests(result, timetable_id)
        created: list[ExamSlot] = []
        if requests:
            try:
                for request in requests:
                    slot = ExamSlot(
                        timetable_id=request.timetable_id,
                        course_id=request.course_id,
                        date=request.date,
                        time_slot=request.time_slot,
                    )
                    db.add(slot)
                    created.append(slot)
                db.commit()
            except Exception:
                db.rollback()
                logger.exception(
                    "AUTO SCHEDULE FAILED | timetable_id=%s | stage=persist | placements=%s",
                    timetable_id,
                    len(requests),
                )
                raise

        ids = [slot.id for slot in created]
        hydrated = []
        if ids:
            hydrated = list(
                db.execute(
                    select(ExamSlot)
                    .options(joinedload(ExamSlot.course).joinedload(Course.department))
                    .where(ExamSlot.id.in_(ids))
                ).scalars()
            )
            hydrated.sort(key=lambda slot: (slot.date, SLOT_ORDER[slot.time_slot]))

    logger.info(
        "AUTO SCHEDULE COMPLETE | timetable_id=%s | scheduled=%s | unscheduled=%s | wall_ms=%s",
        timetable_id,
        result.scheduled_count,
        result.unscheduled_count,
        int((perf_counter() - started) * 1000),
    )
    return AutoScheduleResponse(
        message=summary_message(result.scheduled_count),
        scheduled_count=result.scheduled_count,
        unscheduled_count=result.unscheduled_count,
        exam_slots=[ExamSlotOut.model_validate(slot) for slot in hydrated],
        unscheduled=[UnscheduledCourseOut(**item) for item in unscheduled_summary(result)],
    )
