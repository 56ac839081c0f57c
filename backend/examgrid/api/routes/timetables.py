import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload, selectinload

from examgrid.api.deps import get_app_settings, get_db
from examgrid.core.config import Settings
from examgrid.models.course import VALID_LEVELS, Course
from examgrid.models.department import Department
from examgrid.models.timetable import ExamSlot, Timetable
from examgrid.schemas.timetable import (
    AutoScheduleRequest,
    AutoScheduleResponse,
    ExamSlotCreate,
    ExamSlotOut,
    TimetableCreate,
    TimetableDetailOut,
    TimetableOut,
    TimetableUpdate,
)
from examgrid.services.auto_schedule import auto_schedule_timetable, ensure_editable, load_existing_slots
from examgrid.services.exam_calendar import is_weekday
from examgrid.services.occupancy import ExistingSlot
from examgrid.services.schedule_results import SLOT_ORDER
from examgrid.services.schedule_validation import check_manual_placement
from examgrid.services.timetable_locks import forget_timetable_lock, timetable_lock

router = APIRouter()

logger = logging.getLogger(__name__)


def _slot_options():
    return joinedload(ExamSlot.course).joinedload(Course.department)


def _get_timetable_or_404(db: Session, timetable_id: str) -> Timetable:
    timetable = db.get(Timetable, timetable_id)
    if timetable is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable not found")
    return timetable


def _ordered_slots(slots: list[ExamSlot]) -> list[ExamSlot]:
    return sorted(slots, key=lambda slot: (slot.date, SLOT_ORDER[slot.time_slot]))


def _load_detail(db: Session, timetable_id: str) -> Timetable:
    timetable = db.execute(
        select(Timetable)
        .options(selectinload(Timetable.exam_slots).joinedload(ExamSlot.course).joinedload(Course.department))
        .where(Timetable.id == timetable_id)
    ).scalar_one_or_none()
    if timetable is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Timetable not found")
    return timetable


def _detail_out(timetable: Timetable, slots: list[ExamSlot]) -> TimetableDetailOut:
    base = TimetableOut.model_validate(timetable)
    return TimetableDetailOut(
        **base.model_dump(),
        exam_slots=[ExamSlotOut.model_validate(slot) for slot in _ordered_slots(slots)],
    )


@router.get("/", response_model=list[TimetableOut])
def list_timetables(db: Session = Depends(get_db)) -> list[TimetableOut]:
    return list(db.execute(select(Timetable).order_by(Timetable.created_at.desc(), Timetable.title)).scalars())


@router.post("/", response_model=TimetableOut, status_code=status.HTTP_201_CREATED)
def create_timetable(payload: TimetableCreate, db: Session = Depends(get_db)) -> TimetableOut:
    timetable = Timetable(**payload.model_dump())
    db.add(timetable)
    db.commit()
    db.refresh(timetable)
    logger.info(
        "Timetable created | timetable_id=%s | start=%s | end=%s",
        timetable.id,
        timetable.start_date,
        timetable.end_date,
    )
    return timetable


@router.get("/department/{department_id}/level/{level}", response_model=TimetableDetailOut)
def get_published_timetable_for_cohort(
    department_id: str,
    level: int,
    db: Session = Depends(get_db),
) -> TimetableDetailOut:
    if level not in VALID_LEVELS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Level must be 100, 200, 300, or 400")
    if db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")

    timetable = db.execute(
        select(Timetable)
        .where(Timetable.is_published.is_(True))
        .order_by(Timetable.created_at.desc())
        .limit(1)
    ).scalar_one_or_none()
    if timetable is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No published timetable found")

    slots = list(
        db.execute(
            select(ExamSlot)
            .join(Course, ExamSlot.course_id == Course.id)
            .options(_slot_options())
            .where(
                ExamSlot.timetable_id == timetable.id,
                Course.department_id == department_id,
                Course.level == level,
            )
        ).scalars()
    )
    return _detail_out(timetable, slots)


@router.get("/{timetable_id}", response_model=TimetableDetailOut)
def get_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableDetailOut:
    timetable = _load_detail(db, timetable_id)
    return _detail_out(timetable, timetable.exam_slots)


@router.put("/{timetable_id}", response_model=TimetableOut)
def update_timetable(timetable_id: str, payload: TimetableUpdate, db: Session = Depends(get_db)) -> TimetableOut:
    timetable = _get_timetable_or_404(db, timetable_id)
    ensure_editable(timetable)

    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    start_date = data.get("start_date", timetable.start_date)
    end_date = data.get("end_date", timetable.end_date)
    if start_date >= end_date:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Start date must be before end date")

    for key, value in data.items():
        setattr(timetable, key, value)
    db.commit()
    db.refresh(timetable)
    return timetable


@router.delete("/{timetable_id}")
def delete_timetable(timetable_id: str, db: Session = Depends(get_db)) -> dict:
    timetable = _get_timetable_or_404(db, timetable_id)
    db.delete(timetable)
    db.commit()
    forget_timetable_lock(timetable_id)
    logger.info("Timetable deleted | timetable_id=%s", timetable_id)
    return {"success": True}


@router.put("/{timetable_id}/publish", response_model=TimetableOut)
def publish_timetable(timetable_id: str, db: Session = Depends(get_db)) -> TimetableOut:
    with timetable_lock(timetable_id):
        timetable = _get_timetable_or_404(db, timetable_id)
        has_slots = db.execute(
            select(ExamSlot.id).where(ExamSlot.timetable_id == timetable_id).limit(1)
        ).scalar_one_or_none()
        if has_slots is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot publish an empty timetable")
        timetable.is_published = True
        db.commit()
        db.refresh(timetable)
    logger.info("Timetable published | timetable_id=%s", timetable_id)
    return timetable


@router.get("/{timetable_id}/exam-slots", response_model=list[ExamSlotOut])
def list_exam_slots(timetable_id: str, db: Session = Depends(get_db)) -> list[ExamSlotOut]:
    _get_timetable_or_404(db, timetable_id)
    slots = list(
        db.execute(select(ExamSlot).options(_slot_options()).where(ExamSlot.timetable_id == timetable_id)).scalars()
    )
    return [ExamSlotOut.model_validate(slot) for slot in _ordered_slots(slots)]


@router.post("/{timetable_id}/exam-slots", response_model=ExamSlotOut, status_code=status.HTTP_201_CREATED)
def add_exam_slot(timetable_id: str, payload: ExamSlotCreate, db: Session = Depends(get_db)) -> ExamSlotOut:
    with timetable_lock(timetable_id):
        timetable = _get_timetable_or_404(db, timetable_id)
        ensure_editable(timetable)

        course = db.get(Course, payload.course_id)
        if course is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
        if payload.date < timetable.start_date or payload.date > timetable.end_date:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Date must be within timetable start and end dates",
            )
        if not is_weekday(payload.date):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Exams can only be scheduled on weekdays",
            )

        candidate = ExistingSlot(
            date=payload.date,
            time_slot=payload.time_slot,
            department_id=course.department_id,
            level=course.level,
        )
        reason = check_manual_placement(load_existing_slots(db, timetable_id), candidate)
        if reason is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=reason)

        slot = ExamSlot(
            timetable_id=timetable_id,
            course_id=course.id,
            date=payload.date,
            time_slot=payload.time_slot,
        )
        db.add(slot)
        db.commit()
        slot_id = slot.id

    logger.info(
        "Exam slot added | timetable_id=%s | course=%s | date=%s | slot=%s",
        timetable_id,
        course.code,
        payload.date,
        payload.time_slot.value,
    )
    created = db.execute(select(ExamSlot).options(_slot_options()).where(ExamSlot.id == slot_id)).scalar_one()
    return ExamSlotOut.model_validate(created)


@router.delete("/{timetable_id}/exam-slots/{slot_id}")
def remove_exam_slot(timetable_id: str, slot_id: str, db: Session = Depends(get_db)) -> dict:
    with timetable_lock(timetable_id):
        timetable = _get_timetable_or_404(db, timetable_id)
        ensure_editable(timetable)
        slot = db.get(ExamSlot, slot_id)
        if slot is None or slot.timetable_id != timetable_id:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Exam slot not found")
        db.delete(slot)
        db.commit()
    return {"success": True}


@router.post("/{timetable_id}/auto-schedule", response_model=AutoScheduleResponse)
def auto_schedule(
    timetable_id: str,
    payload: AutoScheduleRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> AutoScheduleResponse:
    return auto_schedule_timetable(
        db,
        timetable_id=timetable_id,
        department_ids=payload.department_ids,
        levels=payload.levels,
        settings=settings,
    )
