from pydantic import BaseModel, Field, field_validator

from app.models.user import UserRole


class DepartmentBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    code: str = Field(min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str) -> str:
        return value.strip().upper()


class DepartmentCreate(DepartmentBase):
    pass


class DepartmentUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=200)
    code: str | None = Field(default=None, min_length=1, max_length=20)
    description: str | None = Field(default=None, max_length=2000)

    @field_validator("code")
    @classmethod
    def normalize_code(cls, value: str | None) -> str | None:
        return value.strip().upper() if value is not None else None


class DepartmentOut(DepartmentBase):
    id: int

    model_config = {"from_attributes": True}


class DepartmentStaffOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    role: UserRole

    model_config = {"from_attributes": True}


class DepartmentGradeOut(BaseModel):
    id: int
    name: str
    level: int
    sections_count: int = 0


class DepartmentDetailOut(DepartmentOut):
    staff_count: int = 0
    grades_count: int = 0
    staff: list[DepartmentStaffOut] = Field(default_factory=list)
    grades: list[DepartmentGradeOut] = Field(default_factory=list)
