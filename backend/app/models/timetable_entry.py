from __future__ import annotations

from datetime import datetime, time
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, Index, Integer, Time
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from app.db.base import Base

if TYPE_CHECKING:
    from app.models.professor import Professor
    from app.models.room import Room
    from app.models.section import Section
    from app.models.subject import Subject


class DayOfWeek(str, Enum):
    Monday = "Monday"
    Tuesday = "Tuesday"
    Wednesday = "Wednesday"
    Thursday = "Thursday"
    Friday = "Friday"
    Saturday = "Saturday"
    Sunday = "Sunday"


WEEKDAY_ORDER: dict[DayOfWeek, int] = {day: position for position, day in enumerate(DayOfWeek)}


class TimetableEntry(Base):
    __tablename__ = "timetable_entries"
    __table_args__ = (
        Index("ix_timetable_entries_day_start", "day_of_week", "start_time"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    subject_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("subjects.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    section_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("sections.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    professor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("professors.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    room_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("rooms.id", ondelete="RESTRICT"), index=True, nullable=False
    )
    day_of_week: Mapped[DayOfWeek] = mapped_column(SAEnum(DayOfWeek, name="day_of_week"), nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    subject: Mapped[Subject] = relationship()
    section: Mapped[Section] = relationship()
    professor: Mapped[Professor] = relationship()
    room: Mapped[Room] = relationship()

    @property
    def subject_name(self) -> str | None:
        return self.subject.name if self.subject is not None else None

    @property
    def section_name(self) -> str | None:
        return self.section.name if self.section is not None else None

    @property
    def professor_first_name(self) -> str | None:
        return self.professor.first_name if self.professor is not None else None

    @property
    def professor_last_name(self) -> str | None:
        return self.professor.last_name if self.professor is not None else None

    @property
    def room_name(self) -> str | None:
        return self.room.name if self.room is not None else None
