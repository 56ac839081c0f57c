import uuid
import datetime as dt
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from examgrid.db.base import Base


class TimeSlot(str, Enum):
    SLOT_8_10 = "SLOT_8_10"
    SLOT_10_12 = "SLOT_10_12"
    SLOT_1_3 = "SLOT_1_3"
    SLOT_3_5 = "SLOT_3_5"

    @property
    def label(self) -> str:
        return TIME_SLOT_LABELS[self]


TIME_SLOT_LABELS: dict[TimeSlot, str] = {
    TimeSlot.SLOT_8_10: "08:00 - 10:00",
    TimeSlot.SLOT_10_12: "10:00 - 12:00",
    TimeSlot.SLOT_1_3: "13:00 - 15:00",
    TimeSlot.SLOT_3_5: "15:00 - 17:00",
}


class Timetable(Base):
    __tablename__ = "timetables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    start_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    end_date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    exam_slots: Mapped[list["ExamSlot"]] = relationship(
        back_populates="timetable",
        cascade="all, delete-orphan",
        order_by="ExamSlot.date",
    )


class ExamSlot(Base):
    __tablename__ = "exam_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    timetable_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("timetables.id", ondelete="CASCADE"), index=True, nullable=False
    )
    course_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, index=True, nullable=False)
    time_slot: Mapped[TimeSlot] = mapped_column(SAEnum(TimeSlot, name="time_slot"), nullable=False)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    timetable: Mapped[Timetable] = relationship(back_populates="exam_slots")
    course: Mapped["Course"] = relationship(back_populates="exam_slots")  # noqa: F821
