from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from app.core.config import get_settings
from app.schemas.offering import SemesterValue, validate_academic_year


class AssignmentEvent(BaseModel):
    day: str
    start_time: str
    end_time: str
    room: str = "TBD"


class TeachingAssignment(BaseModel):
    offering_id: str
    subject_id: str
    subject_code: str
    subject_name: str
    course_id: str
    course_name: str | None = None
    course_abbreviation: str | None = None
    schedule_id: str | None = None
    lecture_units: int
    lab_units: int
    subject_total_units: int
    assignment_units: int
    schedule_units: int
    event_count: int
    year_level: str
    semester: str
    academic_year: str
    events: list[AssignmentEvent] = Field(default_factory=list)
    has_schedule: bool


class TeacherWorkloadOut(BaseModel):
    id: str
    teacher_id: str
    teacher_name: str
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    academic_year: str
    semester: str
    employment_type: str
    is_overloaded: bool
    max_unit_limit: int
    teaching_assignments: list[TeachingAssignment]
    total_assignment_units: int
    total_schedule_units: int
    total_courses: int
    summary: dict
    remaining_units: int
    exceeds_limit: bool

    model_config = {"from_attributes": True}


class WorkloadReportLine(BaseModel):
    subject: str
    course: str | None = None
    subject_total_units: int
    event_count: int
    assignment_units: int
    schedule_units: int
    events: list[AssignmentEvent] = Field(default_factory=list)
    policy: str


class WorkloadReport(BaseModel):
    teacher_id: str
    teacher_name: str | None = None
    email: str | None = None
    academic_year: str
    semester: str
    total_assignment_units: int = 0
    total_schedule_units: int = 0
    total_courses: int = 0
    summary: dict = Field(default_factory=dict)
    assignments: list[WorkloadReportLine] = Field(default_factory=list)
    message: str | None = None


class FormattedBreakdownLine(BaseModel):
    subject: str
    course: str | None = None
    schedule: str
    calculation: str


class FormattedWorkload(BaseModel):
    teacher: str
    email: str | None = None
    semester: str
    total_assignment_units: int
    total_schedule_units: int
    max_unit_limit: int
    breakdown: list[FormattedBreakdownLine] = Field(default_factory=list)


class WorkloadSummaryEntry(BaseModel):
    teacher_id: str
    teacher_name: str
    email: str | None = None
    employment_type: str
    total_assignment_units: int
    total_schedule_units: int
    total_courses: int
    average_units_per_course: float
    assignment_count: int


class WorkloadSummary(BaseModel):
    academic_year: str
    semester: str
    total_teachers: int
    summary: list[WorkloadSummaryEntry] = Field(default_factory=list)
    total_units_assigned: int
    average_units_per_teacher: float


class ConstraintStatus(BaseModel):
    teacher_id: str
    teacher_name: str
    email: str | None = None
    employment_type: str
    is_overloaded: bool
    max_unit_limit: int
    total_assignment_units: int
    total_schedule_units: int
    remaining_units: int
    exceeds_limit: bool
    overload_units: int
    status: Literal["OK", "OVERLOAD"]
    message: str


class FleetConstraintStatus(BaseModel):
    academic_year: str
    semester: str
    total_teachers: int
    ok_teachers: int
    overloaded_teachers: int
    constraint_limits: dict[str, int]
    teachers: list[ConstraintStatus] = Field(default_factory=list)


class TermQuery(BaseModel):
    academic_year: str = Field(
        default_factory=lambda: get_settings().default_academic_year, alias="academicYear"
    )
    semester: SemesterValue = Field(default_factory=lambda: get_settings().default_semester)

    model_config = {"populate_by_name": True}

    @field_validator("academic_year")
    @classmethod
    def check_academic_year(cls, value: str) -> str:
        return validate_academic_year(value)


class UnitLimitRequest(TermQuery):
    teacher_id: str = Field(alias="teacherId", min_length=1, max_length=36)
    subject_id: str = Field(alias="subjectId", min_length=1, max_length=36)


class UnitLimitDecision(BaseModel):
    valid: bool
    requires_overload: bool = False
    reason: str
    current_assignment_units: int
    max_unit_limit: int
    subject_units: int
    new_total: int
    employment_type: str
    is_overloaded: bool
    teacher_name: str | None = None


class OverloadUpdate(BaseModel):
    is_overloaded: bool = Field(alias="isOverloaded", strict=True)

    model_config = {"populate_by_name": True}


class OverloadResult(BaseModel):
    teacher_id: str
    is_overloaded: bool
    max_unit_limit: int
    workloads_updated: int


class RecalculateRequest(TermQuery):
    fail_fast: bool | None = Field(default=None, alias="failFast")


class WorkloadFailure(BaseModel):
    teacher_id: str
    error: str


class WorkloadBatchOut(BaseModel):
    academic_year: str
    semester: str
    fail_fast: bool
    recalculated: list[TeacherWorkloadOut] = Field(default_factory=list)
    failures: list[WorkloadFailure] = Field(default_factory=list)


class SubjectUnitsOut(BaseModel):
    schedule_id: str
    ref_id: str
    subject_id: str
    subject_total_units: int
    event_count: int
    unit_count: int
    policy: str
