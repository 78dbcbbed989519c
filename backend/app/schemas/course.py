from pydantic import BaseModel, Field, field_validator


class CourseBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    abbreviation: str = Field(min_length=1, max_length=10)
    description: str = Field(default="", max_length=2000)

    @field_validator("name", "description")
    @classmethod
    def strip_text(cls, value: str) -> str:
        return value.strip()

    @field_validator("abbreviation")
    @classmethod
    def normalize_abbreviation(cls, value: str) -> str:
        abbreviation = value.strip().upper()
        if not abbreviation:
            raise ValueError("Abbreviation cannot be blank")
        return abbreviation


class CourseCreate(CourseBase):
    pass


class CourseOut(CourseBase):
    id: str

    model_config = {"from_attributes": True}
