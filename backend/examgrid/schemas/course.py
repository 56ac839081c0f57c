from pydantic import BaseModel, Field, field_validator

from examgrid.models.course import VALID_LEVELS
from examgrid.schemas.department import DepartmentSummary


def validate_level(value: int) -> int:
    if value not in VALID_LEVELS:
        raise ValueError("Level must be 100, 200, 300, or 400")
    return value


class CourseBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    title: str = Field(min_length=1, max_length=200)
    level: int
    department_id: str = Field(min_length=1, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Course code cannot be blank")
        return code

    @field_validator("level")
    @classmethod
    def check_level(cls, value: int) -> int:
        return validate_level(value)


class CourseCreate(CourseBase):
    pass


class CourseUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    title: str | None = Field(default=None, min_length=1, max_length=200)
    level: int | None = None
    department_id: str | None = Field(default=None, min_length=1, max_length=36)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        if value is None:
            return value
        code = value.strip().upper()
        if not code:
            raise ValueError("Course code cannot be blank")
        return code

    @field_validator("level")
    @classmethod
    def check_level(cls, value: int | None) -> int | None:
        if value is None:
            return value
        return validate_level(value)


class CourseOut(CourseBase):
    id: str

    model_config = {"from_attributes": True}


class CourseDetailOut(CourseOut):
    department: DepartmentSummary
