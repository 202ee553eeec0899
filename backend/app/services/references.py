from __future__ import annotations

from typing import TypeVar

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import InstrumentedAttribute, Session

from app.core.exceptions import IntegrityViolationError, ResourceNotFoundError
from app.db.base import Base
from app.schemas.timetable import AvailabilityOut, OccupiedSlotOut
from app.services.intervals import duration_minutes
from app.services.timetable_store import EntryQuery, SqlAlchemyTimetableStore

ModelT = TypeVar("ModelT", bound=Base)


def get_or_404(db: Session, model: type[ModelT], identifier: int, label: str) -> ModelT:
    record = db.get(model, identifier)
    if record is None:
        raise ResourceNotFoundError(label, identifier)
    return record


def count_where(db: Session, column: InstrumentedAttribute, value) -> int:
    return db.execute(select(func.count()).where(column == value)).scalar_one()


def ensure_no_dependents(db: Session, message: str, *checks: tuple[InstrumentedAttribute, int]) -> None:
    """Refuse a delete while any child row still points at the record."""
    if any(count_where(db, column, value) for column, value in checks):
        raise IntegrityViolationError(message)


def commit_or_conflict(db: Session, message: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise IntegrityViolationError(message) from exc


def build_availability(
    db: Session,
    *,
    resource: str,
    resource_id: int,
    query: EntryQuery,
) -> AvailabilityOut:
    entries = SqlAlchemyTimetableStore(db).list_entries(query)
    occupied = [
        OccupiedSlotOut(
            entry_id=entry.id,
            day_of_week=entry.day_of_week,
            start_time=entry.start_time,
            end_time=entry.end_time,
        )
        for entry in entries
    ]
    return AvailabilityOut(
        resource=resource,
        resource_id=resource_id,
        day_of_week=query.day_of_week,
        occupied=occupied,
        occupied_minutes=sum(duration_minutes(item.start_time, item.end_time) for item in occupied),
    )
