from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, Field, field_validator

ACADEMIC_YEAR_PATTERN = re.compile(r"^\d{4}-\d{4}$")
SemesterValue = Literal["1", "2", "summer"]


def validate_academic_year(value: str) -> str:
    year = value.strip()
    if not ACADEMIC_YEAR_PATTERN.match(year):
        raise ValueError("Academic year must look like 2024-2025")
    return year


class AssignedTeacher(BaseModel):
    teacher_id: str = Field(alias="teacherId", min_length=1, max_length=36)
    teacher_name: str | None = Field(default=None, alias="teacherName", max_length=200)
    type: str | None = Field(default=None, max_length=50)

    model_config = {"populate_by_name": True}


class PreferredRoom(BaseModel):
    room_id: str | None = Field(default=None, alias="roomId", max_length=36)
    room_name: str | None = Field(default=None, alias="roomName", max_length=100)
    room_type: str | None = Field(default=None, alias="roomType", max_length=50)
    capacity: int | None = Field(default=None, ge=0)

    model_config = {"populate_by_name": True}


class OfferingCreate(BaseModel):
    subject_id: str = Field(alias="subjectId", min_length=1, max_length=36)
    course_ids: list[str] = Field(alias="courseIds", min_length=1, max_length=20)
    year_level: int = Field(alias="yearLevel", ge=1, le=4)
    semester: SemesterValue
    academic_year: str = Field(alias="academicYear")
    assigned_teachers: list[AssignedTeacher] = Field(default_factory=list, alias="assignedTeachers")
    preferred_rooms: list[PreferredRoom] = Field(default_factory=list, alias="preferredRooms")
    capacity: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=2000)

    model_config = {"populate_by_name": True}

    @field_validator("course_ids", mode="before")
    @classmethod
    def coerce_course_ids(cls, value):
        # A single course id is accepted for single-course offerings.
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("course_ids")
    @classmethod
    def dedupe_course_ids(cls, value: list[str]) -> list[str]:
        seen: list[str] = []
        for item in value:
            course_id = item.strip()
            if course_id and course_id not in seen:
                seen.append(course_id)
        if not seen:
            raise ValueError("At least one course is required")
        return seen

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class OfferingUpdate(BaseModel):
    course_ids: list[str] | None = Field(default=None, alias="courseIds", min_length=1, max_length=20)
    year_level: int | None = Field(default=None, alias="yearLevel", ge=1, le=4)
    semester: SemesterValue | None = None
    academic_year: str | None = Field(default=None, alias="academicYear")
    assigned_teachers: list[AssignedTeacher] | None = Field(default=None, alias="assignedTeachers")
    preferred_rooms: list[PreferredRoom] | None = Field(default=None, alias="preferredRooms")
    capacity: int | None = Field(default=None, ge=0)
    notes: str | None = Field(default=None, max_length=2000)

    model_config = {"populate_by_name": True}

    @field_validator("academic_year")
    @classmethod
    def check_optional_academic_year(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_academic_year(value)


class OfferingOut(BaseModel):
    id: str
    subject_id: str
    course_ids: list[str]
    year_level: int
    semester: str
    academic_year: str
    assigned_teachers: list[dict]
    preferred_rooms: list[dict]
    capacity: int | None = None
    notes: str | None = None
    is_active: bool

    model_config = {"from_attributes": True}
