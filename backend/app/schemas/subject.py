from pydantic import BaseModel, Field, field_validator, model_validator

from app.models.subject import default_required_hours, default_units


class SubjectBase(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    has_lab: bool = False

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        code = value.strip().upper()
        if not code:
            raise ValueError("Subject code cannot be blank")
        return code


class SubjectCreate(SubjectBase):
    lecture_units: int | None = Field(default=None, ge=0, le=12)
    lab_units: int | None = Field(default=None, ge=0, le=12)
    required_hours: int | None = Field(default=None, ge=0, le=60)

    @model_validator(mode="after")
    def fill_unit_defaults(self) -> "SubjectCreate":
        default_lecture, default_lab = default_units(self.has_lab)
        if self.lecture_units is None:
            self.lecture_units = default_lecture
        if self.lab_units is None:
            self.lab_units = default_lab
        if self.required_hours is None:
            self.required_hours = default_required_hours(self.lecture_units, self.lab_units)
        return self


class SubjectUpdate(BaseModel):
    code: str | None = Field(default=None, min_length=1, max_length=50)
    name: str | None = Field(default=None, min_length=1, max_length=200)
    department: str | None = Field(default=None, max_length=200)
    description: str | None = Field(default=None, max_length=2000)
    has_lab: bool | None = None
    lecture_units: int | None = Field(default=None, ge=0, le=12)
    lab_units: int | None = Field(default=None, ge=0, le=12)
    required_hours: int | None = Field(default=None, ge=0, le=60)

    @field_validator("code")
    @classmethod
    def normalize_optional_code(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip().upper()


class SubjectOut(SubjectBase):
    id: str
    lecture_units: int
    lab_units: int
    required_hours: int
    total_units: int
    is_active: bool

    model_config = {"from_attributes": True}
