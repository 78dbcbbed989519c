from typing import Literal

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from app.models.user import EmploymentType, UserRole, UserStatus


class UserCreate(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    role: UserRole
    status: UserStatus = UserStatus.active
    honorific: Literal["Mr.", "Ms.", "Mrs.", "Prof.", "Dr."] | None = None
    employee_id: str | None = Field(default=None, max_length=50)
    employment_type: EmploymentType | None = None
    is_overloaded: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()

    @model_validator(mode="after")
    def clean_role_fields(self) -> "UserCreate":
        if self.role == UserRole.teacher:
            if self.honorific is None:
                raise ValueError("Honorific is required for teachers")
            if self.employment_type is None:
                self.employment_type = EmploymentType.full_time
        else:
            self.employment_type = None
            self.honorific = None if self.role == UserRole.student else self.honorific
        if self.role in {UserRole.teacher, UserRole.admin} and not (self.employee_id or "").strip():
            raise ValueError("Employee ID is required for teachers and admins")
        if self.role == UserRole.student:
            self.employee_id = None
        if not (self.role == UserRole.teacher and self.employment_type == EmploymentType.full_time):
            self.is_overloaded = False
        return self


class UserOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole
    status: UserStatus
    honorific: str | None = None
    employee_id: str | None = None
    employment_type: EmploymentType | None = None
    is_overloaded: bool
    display_name: str

    model_config = {"from_attributes": True}
