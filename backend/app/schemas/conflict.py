from pydantic import BaseModel, Field
from typing import Literal, Optional, List

class InternalConflict(BaseModel):
    event1: str
    event2: str
    message: str = "Time overlap detected"

class ScheduleConflict(BaseModel):
    type: Literal["STUDENT", "TEACHER", "ROOM"]
    existing_schedule: str
    existing_schedule_id: Optional[str] = None
    existing_event: str  # "Monday 09:00-10:00"
    new_event: str
    teacher_name: Optional[str] = None
    room: Optional[str] = None
    message: str

class HoursViolation(BaseModel):
    subject_id: str
    subject_name: str
    subject_code: str
    session_type: Literal["lecture", "lab"]
    kind: Literal["lab_not_offered", "over_scheduled", "under_scheduled"]
    scheduled_hours: float
    required_hours: Optional[float] = None
    excess_hours: Optional[float] = None
    message: str

class HoursValidationResult(BaseModel):
    is_valid: bool
    violations: List[HoursViolation] = Field(default_factory=list)

class ScheduleValidationReport(BaseModel):
    is_valid: bool
    internal_conflicts: List[InternalConflict] = Field(default_factory=list)
    conflicts: List[ScheduleConflict] = Field(default_factory=list)
    violations: List[HoursViolation] = Field(default_factory=list)
