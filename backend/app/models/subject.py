import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base

LAB_HOURS_PER_UNIT = 3
LAB_SESSIONS_PER_WEEK = 2


def default_units(has_lab: bool) -> tuple[int, int]:
    return (2, 1) if has_lab else (3, 0)


def default_required_hours(lecture_units: int, lab_units: int) -> int:
    return int(lecture_units or 0) + int(lab_units or 0) * LAB_HOURS_PER_UNIT


class Subject(Base):
    __tablename__ = "subjects"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    code: Mapped[str] = mapped_column(String(50), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    has_lab: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    lecture_units: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    lab_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    required_hours: Mapped[int] = mapped_column(Integer, nullable=False, default=3)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def total_units(self) -> int:
        return int(self.lecture_units or 0) + int(self.lab_units or 0)

    def required_sessions(self) -> dict:
        """Weekly contact requirement per session type.

        One lecture unit is one hour a week in a single session; one lab unit
        is three hours a week split over two sessions. The ``lab`` entry is
        ``None`` when the subject has no lab units.
        """
        lab_units = int(self.lab_units or 0)
        return {
            "lecture": {"hours": int(self.lecture_units or 0), "sessions": 1},
            "lab": (
                {"hours": lab_units * LAB_HOURS_PER_UNIT, "sessions": LAB_SESSIONS_PER_WEEK}
                if lab_units > 0
                else None
            ),
        }

    def matches_required_hours(self, scheduled_hours: float) -> bool:
        return scheduled_hours == float(self.required_hours)
