from pydantic import BaseModel, Field, field_validator


class SubjectBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=50)
    credits: int = Field(default=3, ge=0, le=30)
    hours_per_week: int = Field(default=3, ge=0, le=60)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class SubjectCreate(SubjectBase):
    grade_id: int = Field(ge=1)


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=50)
    credits: int | None = Field(default=None, ge=0, le=30)
    hours_per_week: int | None = Field(default=None, ge=0, le=60)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class SubjectOut(SubjectBase):
    id: int
    grade_id: int

    model_config = {"from_attributes": True}
