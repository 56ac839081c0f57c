import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examgrid.api.deps import get_db
from examgrid.models.faculty import Faculty
from examgrid.schemas.faculty import FacultyCreate, FacultyOut, FacultyUpdate

router = APIRouter()

logger = logging.getLogger(__name__)


def _get_faculty_or_404(db: Session, faculty_id: str) -> Faculty:
    faculty = db.get(Faculty, faculty_id)
    if faculty is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")
    return faculty


@router.get("/", response_model=list[FacultyOut])
def list_faculties(db: Session = Depends(get_db)) -> list[FacultyOut]:
    return list(db.execute(select(Faculty).order_by(Faculty.name)).scalars())


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(payload: FacultyCreate, db: Session = Depends(get_db)) -> FacultyOut:
    existing = db.execute(select(Faculty).where(Faculty.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty with this name already exists")
    faculty = Faculty(**payload.model_dump())
    db.add(faculty)
    db.commit()
    db.refresh(faculty)
    logger.info("Faculty created | faculty_id=%s | name=%s", faculty.id, faculty.name)
    return faculty


@router.get("/{faculty_id}", response_model=FacultyOut)
def get_faculty(faculty_id: str, db: Session = Depends(get_db)) -> FacultyOut:
    return _get_faculty_or_404(db, faculty_id)


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(faculty_id: str, payload: FacultyUpdate, db: Session = Depends(get_db)) -> FacultyOut:
    faculty = _get_faculty_or_404(db, faculty_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in data:
        existing = db.execute(
            select(Faculty).where(Faculty.name == data["name"], Faculty.id != faculty_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Faculty with this name already exists")
    for key, value in data.items():
        setattr(faculty, key, value)
    db.commit()
    db.refresh(faculty)
    return faculty


@router.delete("/{faculty_id}")
def delete_faculty(faculty_id: str, db: Session = Depends(get_db)) -> dict:
    faculty = _get_faculty_or_404(db, faculty_id)
    db.delete(faculty)
    db.commit()
    logger.info("Faculty deleted | faculty_id=%s", faculty_id)
    return {"success": True}
