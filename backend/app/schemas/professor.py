from pydantic import BaseModel, EmailStr, Field, field_validator


class ProfessorBase(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=50)
    specialization: str | None = Field(default=None, max_length=200)
    max_hours_per_week: int = Field(default=20, ge=1, le=80)
    department_id: int = Field(ge=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class ProfessorCreate(ProfessorBase):
    pass


class ProfessorUpdate(BaseModel):
    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=50)
    specialization: str | None = Field(default=None, max_length=200)
    max_hours_per_week: int | None = Field(default=None, ge=1, le=80)
    department_id: int | None = Field(default=None, ge=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None


class ProfessorOut(ProfessorBase):
    id: int

    model_config = {"from_attributes": True}
