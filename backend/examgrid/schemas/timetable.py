from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, Field, field_validator, model_validator

from examgrid.models.timetable import TimeSlot
from examgrid.schemas.course import CourseDetailOut, validate_level


class TimetableBase(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    start_date: dt.date
    end_date: dt.date

    @model_validator(mode="after")
    def validate_date_order(self) -> "TimetableBase":
        if self.start_date >= self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class TimetableCreate(TimetableBase):
    pass


class TimetableUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    start_date: dt.date | None = None
    end_date: dt.date | None = None

    @model_validator(mode="after")
    def validate_update(self) -> "TimetableUpdate":
        if self.title is None and self.start_date is None and self.end_date is None:
            raise ValueError("At least one field to update is required")
        if self.start_date and self.end_date and self.start_date >= self.end_date:
            raise ValueError("Start date must be before end date")
        return self


class TimetableOut(TimetableBase):
    id: str
    is_published: bool

    model_config = {"from_attributes": True}


class ExamSlotCreate(BaseModel):
    course_id: str = Field(min_length=1, max_length=36)
    date: dt.date
    time_slot: TimeSlot


class ExamSlotOut(BaseModel):
    id: str
    timetable_id: str
    course_id: str
    date: dt.date
    time_slot: TimeSlot
    course: CourseDetailOut

    model_config = {"from_attributes": True}


class TimetableDetailOut(TimetableOut):
    exam_slots: list[ExamSlotOut] = Field(default_factory=list)


class AutoScheduleRequest(BaseModel):
    department_ids: list[str] = Field(min_length=1)
    levels: list[int] = Field(min_length=1)

    @field_validator("department_ids")
    @classmethod
    def dedupe_departments(cls, value: list[str]) -> list[str]:
        cleaned = list(dict.fromkeys(item.strip() for item in value if item and item.strip()))
        if not cleaned:
            raise ValueError("At least one department ID is required")
        return cleaned

    @field_validator("levels")
    @classmethod
    def check_levels(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(validate_level(item) for item in value))


class UnscheduledCourseOut(BaseModel):
    id: str
    code: str
    title: str
    department_id: str
    level: int


class AutoScheduleResponse(BaseModel):
    message: str
    scheduled_count: int
    unscheduled_count: int
    exam_slots: list[ExamSlotOut] = Field(default_factory=list)
    unscheduled: list[UnscheduledCourseOut] = Field(default_factory=list)
