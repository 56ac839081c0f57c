from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examgrid.api.deps import get_db
from examgrid.models.course import VALID_LEVELS, Course
from examgrid.models.department import Department
from examgrid.schemas.course import CourseCreate, CourseOut, CourseUpdate

router = APIRouter()


def _get_course_or_404(db: Session, course_id: str) -> Course:
    course = db.get(Course, course_id)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")
    return course


def _ensure_department_exists(db: Session, department_id: str) -> None:
    if db.get(Department, department_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")


def _ensure_code_available(db: Session, code: str, course_id: str | None = None) -> None:
    query = select(Course).where(Course.code == code)
    if course_id is not None:
        query = query.where(Course.id != course_id)
    if db.execute(query).scalar_one_or_none():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Course code already exists")


@router.get("/", response_model=list[CourseOut])
def list_courses(db: Session = Depends(get_db)) -> list[CourseOut]:
    return list(db.execute(select(Course).order_by(Course.code)).scalars())


@router.get("/department/{department_id}/level/{level}", response_model=list[CourseOut])
def list_courses_for_cohort(department_id: str, level: int, db: Session = Depends(get_db)) -> list[CourseOut]:
    if level not in VALID_LEVELS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Level must be 100, 200, 300, or 400")
    _ensure_department_exists(db, department_id)
    return list(
        db.execute(
            select(Course)
            .where(Course.department_id == department_id, Course.level == level)
            .order_by(Course.code)
        ).scalars()
    )


@router.post("/", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
def create_course(payload: CourseCreate, db: Session = Depends(get_db)) -> CourseOut:
    _ensure_department_exists(db, payload.department_id)
    _ensure_code_available(db, payload.code)
    course = Course(**payload.model_dump())
    db.add(course)
    db.commit()
    db.refresh(course)
    return course


@router.get("/{course_id}", response_model=CourseOut)
def get_course(course_id: str, db: Session = Depends(get_db)) -> CourseOut:
    return _get_course_or_404(db, course_id)


@router.put("/{course_id}", response_model=CourseOut)
def update_course(course_id: str, payload: CourseUpdate, db: Session = Depends(get_db)) -> CourseOut:
    course = _get_course_or_404(db, course_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "department_id" in data:
        _ensure_department_exists(db, data["department_id"])
    if "code" in data:
        _ensure_code_available(db, data["code"], course_id)
    for key, value in data.items():
        setattr(course, key, value)
    db.commit()
    db.refresh(course)
    return course


@router.delete("/{course_id}")
def delete_course(course_id: str, db: Session = Depends(get_db)) -> dict:
    course = _get_course_or_404(db, course_id)
    db.delete(course)
    db.commit()
    return {"success": True}
