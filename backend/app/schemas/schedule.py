from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.offering import SemesterValue, validate_academic_year
from app.services.time_window import DAY_VALUES, TIME_PATTERN, to_minutes

YearLevelValue = Literal["1", "2", "3", "4"]


def _coerce_year_level(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class EventTeacher(BaseModel):
    teacher_id: str | None = Field(default=None, alias="teacherId", max_length=36)
    teacher_name: str | None = Field(default=None, alias="teacherName", max_length=200)

    model_config = {"populate_by_name": True}


class ScheduleEventIn(BaseModel):
    day: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")
    subject_id: str = Field(alias="subjectId", min_length=1, max_length=36)
    subject_name: str | None = Field(default=None, alias="subjectName", max_length=200)
    subject_code: str | None = Field(default=None, alias="subjectCode", max_length=50)
    session_type: Literal["lecture", "lab"] = Field(default="lecture", alias="sessionType")
    room: str | None = Field(default=None, max_length=100)
    assigned_teacher: EventTeacher | None = Field(default=None, alias="assignedTeacher")

    model_config = {"populate_by_name": True}

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        day = value.strip()
        if day not in DAY_VALUES:
            raise ValueError("Invalid day value")
        return day

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        if not TIME_PATTERN.match(value):
            raise ValueError("Invalid time format. Use HH:MM format (e.g., 08:30)")
        return value

    @field_validator("room")
    @classmethod
    def strip_room(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def validate_time_order(self) -> "ScheduleEventIn":
        if to_minutes(self.end_time) <= to_minutes(self.start_time):
            raise ValueError("End time must be after start time")
        return self

    @property
    def teacher_id(self) -> str | None:
        return self.assigned_teacher.teacher_id if self.assigned_teacher else None

    @property
    def teacher_name(self) -> str | None:
        return self.assigned_teacher.teacher_name if self.assigned_teacher else None


class ScheduleContextIn(BaseModel):
    course_id: str = Field(alias="courseId", min_length=1, max_length=36)
    year_level: YearLevelValue = Field(alias="yearLevel")
    semester: SemesterValue
    academic_year: str = Field(alias="academicYear")

    model_config = {"populate_by_name": True}

    @field_validator("year_level", mode="before")
    @classmethod
    def coerce_year_level(cls, value):
        return _coerce_year_level(value)

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class ScheduleCreate(ScheduleContextIn):
    name: str = Field(min_length=1, max_length=200)
    course_name: str | None = Field(default=None, alias="courseName", max_length=200)
    course_abbreviation: str | None = Field(default=None, alias="courseAbbreviation", max_length=10)
    events: list[ScheduleEventIn] = Field(min_length=1)


class ScheduleUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    course_id: str | None = Field(default=None, alias="courseId", min_length=1, max_length=36)
    course_name: str | None = Field(default=None, alias="courseName", max_length=200)
    course_abbreviation: str | None = Field(default=None, alias="courseAbbreviation", max_length=10)
    year_level: YearLevelValue | None = Field(default=None, alias="yearLevel")
    semester: SemesterValue | None = None
    academic_year: str | None = Field(default=None, alias="academicYear")
    events: list[ScheduleEventIn] | None = Field(default=None, min_length=1)

    model_config = {"populate_by_name": True}

    @field_validator("year_level", mode="before")
    @classmethod
    def coerce_year_level(cls, value):
        return _coerce_year_level(value)

    @field_validator("academic_year")
    @classmethod
    def check_optional_academic_year(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return validate_academic_year(value)


class ScheduleValidateRequest(ScheduleContextIn):
    events: list[ScheduleEventIn] = Field(min_length=1)
    exclude_schedule_id: str | None = Field(default=None, alias="excludeScheduleId")


class ScheduleEventOut(BaseModel):
    id: str
    day: str
    start_time: str
    end_time: str
    subject_id: str
    subject_name: str | None = None
    subject_code: str | None = None
    session_type: str
    room: str | None = None
    teacher_id: str | None = None
    teacher_name: str | None = None

    model_config = {"from_attributes": True}


class ScheduleOut(BaseModel):
    id: str
    name: str
    academic_year: str
    course_id: str
    course_name: str
    course_abbreviation: str
    year_level: str
    semester: str
    is_active: bool
    events: list[ScheduleEventOut]
    summary: dict[str, int]

    model_config = {"from_attributes": True}


class TeacherMapping(BaseModel):
    offering_id: str = Field(alias="offeringId", min_length=1, max_length=36)
    assignment_index: int = Field(alias="assignmentIndex", ge=0)
    new_teacher_id: str = Field(alias="newTeacherId", min_length=1, max_length=36)
    new_teacher_name: str | None = Field(default=None, alias="newTeacherName", max_length=200)
    assignment_type: str | None = Field(default=None, alias="assignmentType", max_length=50)

    model_config = {"populate_by_name": True}


class RecycleScheduleRequest(BaseModel):
    source_schedule_id: str = Field(alias="sourceScheduleId", min_length=1, max_length=36)
    target_academic_year: str = Field(alias="targetAcademicYear")
    target_semester: SemesterValue = Field(alias="targetSemester")
    teacher_mappings: list[TeacherMapping] = Field(default_factory=list, alias="teacherMappings")

    model_config = {"populate_by_name": True}

    @field_validator("target_academic_year")
    @classmethod
    def check_target_year(cls, value: str) -> str:
        return validate_academic_year(value)


class RecycleScheduleResult(BaseModel):
    new_schedule_id: str
    subjects_copied: int
    teachers_updated: int
    message: str = "Schedule recycled successfully"
