import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from examgrid.api.deps import get_db
from examgrid.models.department import Department
from examgrid.models.faculty import Faculty
from examgrid.schemas.department import DepartmentCreate, DepartmentOut, DepartmentUpdate

router = APIRouter()

logger = logging.getLogger(__name__)


def _get_department_or_404(db: Session, department_id: str) -> Department:
    department = db.get(Department, department_id)
    if department is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Department not found")
    return department


def _ensure_faculty_exists(db: Session, faculty_id: str) -> None:
    if db.get(Faculty, faculty_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Faculty not found")


@router.get("/", response_model=list[DepartmentOut])
def list_departments(faculty_id: str | None = None, db: Session = Depends(get_db)) -> list[DepartmentOut]:
    query = select(Department).order_by(Department.name)
    if faculty_id:
        query = query.where(Department.faculty_id == faculty_id)
    return list(db.execute(query).scalars())


@router.post("/", response_model=DepartmentOut, status_code=status.HTTP_201_CREATED)
def create_department(payload: DepartmentCreate, db: Session = Depends(get_db)) -> DepartmentOut:
    _ensure_faculty_exists(db, payload.faculty_id)
    existing = db.execute(select(Department).where(Department.name == payload.name)).scalar_one_or_none()
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department with this name already exists")
    department = Department(**payload.model_dump())
    db.add(department)
    db.commit()
    db.refresh(department)
    logger.info("Department created | department_id=%s | name=%s", department.id, department.name)
    return department


@router.get("/{department_id}", response_model=DepartmentOut)
def get_department(department_id: str, db: Session = Depends(get_db)) -> DepartmentOut:
    return _get_department_or_404(db, department_id)


@router.put("/{department_id}", response_model=DepartmentOut)
def update_department(department_id: str, payload: DepartmentUpdate, db: Session = Depends(get_db)) -> DepartmentOut:
    department = _get_department_or_404(db, department_id)
    data = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "faculty_id" in data:
        _ensure_faculty_exists(db, data["faculty_id"])
    if "name" in data:
        existing = db.execute(
            select(Department).where(Department.name == data["name"], Department.id != department_id)
        ).scalar_one_or_none()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Department with this name already exists")
    for key, value in data.items():
        setattr(department, key, value)
    db.commit()
    db.refresh(department)
    return department


@router.delete("/{department_id}")
def delete_department(department_id: str, db: Session = Depends(get_db)) -> dict:
    department = _get_department_or_404(db, department_id)
    db.delete(department)
    db.commit()
    logger.info("Department deleted | department_id=%s", department_id)
    return {"success": True}
