from pydantic import BaseModel, Field


class GradeBase(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    level: int = Field(ge=1, le=12)


class GradeCreate(GradeBase):
    department_id: int = Field(ge=1)


class GradeUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    level: int | None = Field(default=None, ge=1, le=12)


class GradeOut(GradeBase):
    id: int
    department_id: int

    model_config = {"from_attributes": True}
