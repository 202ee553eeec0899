from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
import logging
from typing import Protocol

from sqlalchemy import case, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import PersistenceError
from app.models.professor import Professor
from app.models.room import Room
from app.models.section import Section
from app.models.subject import Subject
from app.models.timetable_entry import DayOfWeek, TimetableEntry, WEEKDAY_ORDER
from app.models.user import User
from app.services.audit import record_audit
from app.services.conflict_checker import EntrySlot

logger = logging.getLogger(__name__)

# First key of the two-int advisory lock; the second key is the weekday position.
TIMETABLE_DAY_LOCK_NAMESPACE = 7301


@dataclass(frozen=True)
class EntryQuery:
    """Optional filters for listing timetable entries; unset fields do not constrain."""

    section_id: int | None = None
    professor_id: int | None = None
    room_id: int | None = None
    subject_id: int | None = None
    day_of_week: DayOfWeek | None = None


class TimetableStore(Protocol):
    def get_entries_for_day(self, day: DayOfWeek) -> Sequence[TimetableEntry]: ...

    def get_entry(self, entry_id: int) -> TimetableEntry | None: ...

    def entry_exists(self, entry_id: int) -> bool: ...

    def save_entry(self, entry: TimetableEntry) -> TimetableEntry: ...

    def delete_entry(self, entry: TimetableEntry) -> None: ...

    def list_entries(self, query: EntryQuery) -> Sequence[TimetableEntry]: ...

    def missing_references(self, slot: EntrySlot) -> list[tuple[str, int]]: ...

    def lock_days(self, days: Iterable[DayOfWeek]) -> None: ...

    def record_activity(
        self, actor: User | None, action: str, entry_id: int | None, details: dict
    ) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


def weekday_ordering():
    return case(
        {day.value: position for day, position in WEEKDAY_ORDER.items()},
        value=TimetableEntry.day_of_week,
    )


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Timetable store failure during %s", operation)
        raise PersistenceError() from exc


class SqlAlchemyTimetableStore:
    """TimetableStore over a caller-owned SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def get_entries_for_day(self, day: DayOfWeek) -> list[TimetableEntry]:
        statement = select(TimetableEntry).where(TimetableEntry.day_of_week == day).order_by(TimetableEntry.id)
        with _store_errors("get_entries_for_day"):
            return list(self._db.execute(statement).scalars())

    def get_entry(self, entry_id: int) -> TimetableEntry | None:
        """Read the committed row, bypassing whatever the identity map holds."""
        with _store_errors("get_entry"):
            return self._db.get(TimetableEntry, entry_id, populate_existing=True)

    def entry_exists(self, entry_id: int) -> bool:
        return self.get_entry(entry_id) is not None

    def save_entry(self, entry: TimetableEntry) -> TimetableEntry:
        with _store_errors("save_entry"):
            self._db.add(entry)
            self._db.flush()
        return entry

    def delete_entry(self, entry: TimetableEntry) -> None:
        with _store_errors("delete_entry"):
            self._db.delete(entry)
            self._db.flush()

    def list_entries(self, query: EntryQuery) -> list[TimetableEntry]:
        statement = select(TimetableEntry).options(
            selectinload(TimetableEntry.subject),
            selectinload(TimetableEntry.section),
            selectinload(TimetableEntry.professor),
            selectinload(TimetableEntry.room),
        )
        if query.section_id is not None:
            statement = statement.where(TimetableEntry.section_id == query.section_id)
        if query.professor_id is not None:
            statement = statement.where(TimetableEntry.professor_id == query.professor_id)
        if query.room_id is not None:
            statement = statement.where(TimetableEntry.room_id == query.room_id)
        if query.subject_id is not None:
            statement = statement.where(TimetableEntry.subject_id == query.subject_id)
        if query.day_of_week is not None:
            statement = statement.where(TimetableEntry.day_of_week == query.day_of_week)
        statement = statement.order_by(weekday_ordering(), TimetableEntry.start_time, TimetableEntry.id)
        with _store_errors("list_entries"):
            return list(self._db.execute(statement).scalars())

    def missing_references(self, slot: EntrySlot) -> list[tuple[str, int]]:
        references = (
            ("subject", Subject, slot.subject_id),
            ("section", Section, slot.section_id),
            ("professor", Professor, slot.professor_id),
            ("room", Room, slot.room_id),
        )
        missing: list[tuple[str, int]] = []
        with _store_errors("missing_references"):
            for label, model, identifier in references:
                if self._db.get(model, identifier) is None:
                    missing.append((label, identifier))
        return missing

    def lock_days(self, days: Iterable[DayOfWeek]) -> None:
        """Take transaction-scoped locks per day so concurrent writers on other processes serialize.

        Only PostgreSQL has advisory locks; other dialects rely on the in-process gate.
        """
        bind = self._db.get_bind()
        if bind.dialect.name != "postgresql":
            return
        with _store_errors("lock_days"):
            for day in sorted(set(days), key=WEEKDAY_ORDER.__getitem__):
                self._db.execute(
                    text("SELECT pg_advisory_xact_lock(:namespace, :day)"),
                    {"namespace": TIMETABLE_DAY_LOCK_NAMESPACE, "day": WEEKDAY_ORDER[day]},
                )

    def record_activity(self, actor: User | None, action: str, entry_id: int | None, details: dict) -> None:
        record_audit(
            self._db,
            actor=actor,
            action=action,
            entity_type="timetable_entry",
            entity_id=entry_id,
            details=details,
        )

    def commit(self) -> None:
        with _store_errors("commit"):
            self._db.commit()

    def rollback(self) -> None:
        with _store_errors("rollback"):
            self._db.rollback()
