import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class UserRole(str, Enum):
    student = "student"
    teacher = "teacher"
    admin = "admin"


class UserStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class EmploymentType(str, Enum):
    full_time = "full-time"
    part_time = "part-time"


class User(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(SAEnum(UserRole, name="user_role"), nullable=False)
    status: Mapped[UserStatus] = mapped_column(
        SAEnum(UserStatus, name="user_status"), nullable=False, default=UserStatus.active
    )
    honorific: Mapped[str | None] = mapped_column(String(10), nullable=True)
    employee_id: Mapped[str | None] = mapped_column(String(50), unique=True, nullable=True)
    employment_type: Mapped[EmploymentType | None] = mapped_column(
        SAEnum(
            EmploymentType,
            name="employment_type",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=True,
    )
    is_overloaded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def display_name(self) -> str:
        if self.role == UserRole.teacher and self.honorific:
            return f"{self.honorific} {self.full_name}"
        return self.full_name
