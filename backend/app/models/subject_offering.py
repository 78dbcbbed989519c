import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class SubjectOffering(Base):
    """A subject bound to one or more courses for a single term.

    ``course_ids`` holds several ids for combined (cross-listed) sections.
    ``assigned_teachers`` entries look like
    ``{"teacherId": ..., "teacherName": ..., "type": ...}``.
    """

    __tablename__ = "subject_offerings"
    __table_args__ = (
        Index("ix_subject_offerings_term", "subject_id", "year_level", "semester", "academic_year"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    subject_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    course_ids: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    year_level: Mapped[int] = mapped_column(Integer, nullable=False)
    semester: Mapped[str] = mapped_column(String(10), nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    assigned_teachers: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    preferred_rooms: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
