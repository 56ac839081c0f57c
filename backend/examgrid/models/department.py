import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from examgrid.db.base import Base


class Department(Base):
    __tablename__ = "departments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), unique=True, index=True, nullable=False)
    faculty_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("faculties.id", ondelete="CASCADE"), index=True, nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    faculty: Mapped["Faculty"] = relationship(back_populates="departments")  # noqa: F821
    courses: Mapped[list["Course"]] = relationship(  # noqa: F821
        back_populates="department",
        cascade="all, delete-orphan",
    )
