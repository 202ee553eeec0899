from datetime import time

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from app.models.timetable_entry import DayOfWeek
from app.services.conflict_checker import ConflictAxis, EntrySlot


class TimetableEntryBase(BaseModel):
    subject_id: int = Field(ge=1)
    section_id: int = Field(ge=1)
    professor_id: int = Field(ge=1)
    room_id: int = Field(ge=1)
    day_of_week: DayOfWeek
    start_time: time
    end_time: time

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_wall_clock(cls, value: time) -> time:
        if value.tzinfo is not None:
            raise ValueError("Time must be a local wall-clock value without timezone")
        if value.second or value.microsecond:
            raise ValueError("Time must be in whole minutes (HH:MM)")
        return value

    @model_validator(mode="after")
    def validate_order(self) -> "TimetableEntryBase":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.isoformat(timespec="minutes")

    def to_slot(self) -> EntrySlot:
        return EntrySlot(
            subject_id=self.subject_id,
            section_id=self.section_id,
            professor_id=self.professor_id,
            room_id=self.room_id,
            day_of_week=self.day_of_week,
            start_time=self.start_time,
            end_time=self.end_time,
        )


class TimetableEntryCreate(TimetableEntryBase):
    pass


class TimetableEntryUpdate(TimetableEntryBase):
    """Full replacement of an entry's resources, day and times."""


class TimetableEntryOut(BaseModel):
    """Stored entry as listed in weekly views, with the names of the resources it books."""

    id: int
    subject_id: int
    section_id: int
    professor_id: int
    room_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    subject_name: str | None = None
    section_name: str | None = None
    professor_first_name: str | None = None
    professor_last_name: str | None = None
    room_name: str | None = None

    model_config = {"from_attributes": True}

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.isoformat(timespec="seconds" if value.second else "minutes")


class ConflictCheckRequest(TimetableEntryBase):
    exclude_id: int | None = Field(default=None, ge=1)


class ConflictOut(BaseModel):
    axis: ConflictAxis
    entry_id: int


class ConflictCheckOut(BaseModel):
    has_conflict: bool
    conflicts: list[ConflictOut] = Field(default_factory=list)


class ConflictPairOut(BaseModel):
    axis: ConflictAxis
    day_of_week: DayOfWeek
    first_entry_id: int
    second_entry_id: int

    model_config = {"from_attributes": True}


class OccupiedSlotOut(BaseModel):
    entry_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time

    @field_serializer("start_time", "end_time")
    def serialize_time(self, value: time) -> str:
        return value.isoformat(timespec="minutes")


class AvailabilityOut(BaseModel):
    resource: str
    resource_id: int
    day_of_week: DayOfWeek | None = None
    occupied: list[OccupiedSlotOut] = Field(default_factory=list)
    occupied_minutes: int = 0
