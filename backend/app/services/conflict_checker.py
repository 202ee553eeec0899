from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from datetime import time
from enum import Enum
from typing import Protocol

from app.core.exceptions import ValidationError
from app.models.timetable_entry import DayOfWeek, TimetableEntry, WEEKDAY_ORDER
from app.services.intervals import overlaps


class ConflictAxis(str, Enum):
    section = "section"
    professor = "professor"
    room = "room"


# Report order for conflicts against the same entry.
AXIS_ATTRIBUTES: tuple[tuple[ConflictAxis, str], ...] = (
    (ConflictAxis.section, "section_id"),
    (ConflictAxis.professor, "professor_id"),
    (ConflictAxis.room, "room_id"),
)
AXIS_RANK = {axis: rank for rank, (axis, _) in enumerate(AXIS_ATTRIBUTES)}


class ScheduledSlot(Protocol):
    section_id: int
    professor_id: int
    room_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time


@dataclass(frozen=True)
class EntrySlot:
    """A proposed placement: who meets, where, and when."""

    subject_id: int
    section_id: int
    professor_id: int
    room_id: int
    day_of_week: DayOfWeek
    start_time: time
    end_time: time

    @classmethod
    def from_entry(cls, entry: TimetableEntry) -> "EntrySlot":
        return cls(
            subject_id=entry.subject_id,
            section_id=entry.section_id,
            professor_id=entry.professor_id,
            room_id=entry.room_id,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
        )

    def validate(self) -> None:
        if not isinstance(self.day_of_week, DayOfWeek):
            raise ValidationError("Unknown day_of_week", details={"day_of_week": str(self.day_of_week)})
        if self.start_time.tzinfo is not None or self.end_time.tzinfo is not None:
            raise ValidationError("Times must be local wall-clock values without a timezone")
        if self.start_time >= self.end_time:
            raise ValidationError(
                "start_time must be before end_time",
                details={
                    "start_time": self.start_time.isoformat(timespec="minutes"),
                    "end_time": self.end_time.isoformat(timespec="minutes"),
                },
            )

    def as_columns(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class Conflict:
    axis: ConflictAxis
    entry_id: int

    def as_dict(self) -> dict:
        return {"axis": self.axis.value, "entry_id": self.entry_id}


@dataclass(frozen=True)
class ConflictResult:
    conflicts: tuple[Conflict, ...] = ()

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts)

    @property
    def first(self) -> Conflict | None:
        return self.conflicts[0] if self.conflicts else None


@dataclass(frozen=True)
class ConflictPair:
    axis: ConflictAxis
    first_entry_id: int
    second_entry_id: int
    day_of_week: DayOfWeek


def shared_axes(left: ScheduledSlot, right: ScheduledSlot) -> list[ConflictAxis]:
    return [axis for axis, attribute in AXIS_ATTRIBUTES if getattr(left, attribute) == getattr(right, attribute)]


def collides(left: ScheduledSlot, right: ScheduledSlot) -> bool:
    return left.day_of_week == right.day_of_week and overlaps(
        left.start_time, left.end_time, right.start_time, right.end_time
    )


def collect_conflicts(
    candidate: ScheduledSlot,
    entries: Iterable[TimetableEntry],
    exclude_id: int | None = None,
) -> ConflictResult:
    """Every stored entry that shares an axis with ``candidate`` and overlaps it in time.

    Results are ordered by entry id, then section < professor < room.
    """
    found: list[Conflict] = []
    for entry in entries:
        if exclude_id is not None and entry.id == exclude_id:
            continue
        if not collides(candidate, entry):
            continue
        found.extend(Conflict(axis=axis, entry_id=entry.id) for axis in shared_axes(candidate, entry))
    found.sort(key=lambda item: (item.entry_id, AXIS_RANK[item.axis]))
    return ConflictResult(conflicts=tuple(found))


def find_conflicting_pairs(entries: Iterable[TimetableEntry]) -> list[ConflictPair]:
    """Audit a whole timetable: every pair of stored entries that violates the no-double-booking rule."""
    by_day: dict[DayOfWeek, list[TimetableEntry]] = defaultdict(list)
    for entry in entries:
        by_day[entry.day_of_week].append(entry)

    pairs: list[ConflictPair] = []
    for day in sorted(by_day, key=WEEKDAY_ORDER.__getitem__):
        day_entries = sorted(by_day[day], key=lambda item: item.id)
        for index, left in enumerate(day_entries):
            for right in day_entries[index + 1:]:
                if not overlaps(left.start_time, left.end_time, right.start_time, right.end_time):
                    continue
                pairs.extend(
                    ConflictPair(axis=axis, first_entry_id=left.id, second_entry_id=right.id, day_of_week=day)
                    for axis in shared_axes(left, right)
                )
    return pairs


class ConflictChecker:
    """Read-only decision: would this placement double-book anything already stored?"""

    def __init__(self, store) -> None:
        self._store = store

    def find_conflict(self, candidate: EntrySlot, exclude_id: int | None = None) -> ConflictResult:
        entries = self._store.get_entries_for_day(candidate.day_of_week)
        return collect_conflicts(candidate, entries, exclude_id=exclude_id)
