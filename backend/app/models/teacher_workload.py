import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class TeacherWorkload(Base):
    """Materialized per-term workload view; always rebuilt, never patched."""

    __tablename__ = "teacher_workloads"
    __table_args__ = (
        UniqueConstraint("teacher_id", "academic_year", "semester", name="uq_teacher_workloads_teacher_term"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(String(36), index=True, nullable=False)
    academic_year: Mapped[str] = mapped_column(String(9), nullable=False)
    semester: Mapped[str] = mapped_column(String(10), nullable=False)
    teacher_name: Mapped[str] = mapped_column(String(200), nullable=False)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    employment_type: Mapped[str] = mapped_column(String(20), nullable=False, default="full-time")
    is_overloaded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    max_unit_limit: Mapped[int] = mapped_column(Integer, nullable=False, default=24)
    teaching_assignments: Mapped[list[dict]] = mapped_column(JSON, nullable=False, default=list)
    total_assignment_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_schedule_units: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_courses: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    summary: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def exceeds_limit(self) -> bool:
        return self.total_assignment_units > self.max_unit_limit

    @property
    def remaining_units(self) -> int:
        return max(0, self.max_unit_limit - self.total_assignment_units)
