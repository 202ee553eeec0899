from pydantic import BaseModel, Field


class SectionBase(BaseModel):
    name: str = Field(min_length=1, max_length=50)
    capacity: int = Field(default=30, ge=1, le=1000)


class SectionCreate(SectionBase):
    grade_id: int = Field(ge=1)


class SectionUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=50)
    capacity: int | None = Field(default=None, ge=1, le=1000)


class SectionOut(SectionBase):
    id: int
    grade_id: int

    model_config = {"from_attributes": True}
