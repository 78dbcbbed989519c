import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base


class SessionType(str, Enum):
    lecture = "lecture"
    lab = "lab"


class Schedule(Base):
    __tablename__ = "schedules"
    __table_args__ = (
        Index("ix_schedules_context", "course_id", "year_level", "semester", "academic_year"),
        Index("ix_schedules_term", "academic_year", "semester"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    course_id: Mapped[str] = mapped_column(String(36), nullable=False)
    course_name: Mapped[str] = mapped_column(String(200), nullable=False)
    course_abbreviation: Mapped[str] = mapped_column(String(10), nullable=False)
    year_level: Mapped[str] = mapped_column(String(1), nullable=False)
    semester: Mapped[str] = mapped_column(String(10), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_by: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    events: Mapped[list["ScheduleEvent"]] = relationship(
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleEvent.position",
        lazy="selectin",
    )

    @property
    def summary(self) -> dict:
        return {
            "total_events": len(self.events),
            "lecture_events": sum(1 for event in self.events if event.session_type == SessionType.lecture.value),
            "lab_events": sum(1 for event in self.events if event.session_type == SessionType.lab.value),
            "unique_subjects": len({event.subject_id for event in self.events}),
        }


class ScheduleEvent(Base):
    __tablename__ = "schedule_events"
    __table_args__ = (Index("ix_schedule_events_slot", "day", "start_time"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("schedules.id", ondelete="CASCADE"), index=True, nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    day: Mapped[str] = mapped_column(String(10), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    # Either a Subject id or a SubjectOffering id.
    subject_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    subject_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    subject_code: Mapped[str | None] = mapped_column(String(50), nullable=True)
    session_type: Mapped[str] = mapped_column(String(10), nullable=False, default=SessionType.lecture.value)
    room: Mapped[str | None] = mapped_column(String(100), nullable=True)
    teacher_id: Mapped[str | None] = mapped_column(String(36), index=True, nullable=True)
    teacher_name: Mapped[str | None] = mapped_column(String(200), nullable=True)

    schedule: Mapped[Schedule] = relationship(back_populates="events")
