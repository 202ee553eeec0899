from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
import logging

from app.core.exceptions import ConflictError, EntityReferenceError, ResourceNotFoundError
from app.models.timetable_entry import DayOfWeek, TimetableEntry
from app.models.user import User
from app.services.conflict_checker import (
    ConflictChecker,
    ConflictPair,
    ConflictResult,
    EntrySlot,
    find_conflicting_pairs,
)
from app.services.timetable_store import EntryQuery, TimetableStore
from app.services.write_gate import DayWriteGate, get_write_gate

logger = logging.getLogger(__name__)


def _slot_details(slot: EntrySlot) -> dict:
    return {
        "subject_id": slot.subject_id,
        "section_id": slot.section_id,
        "professor_id": slot.professor_id,
        "room_id": slot.room_id,
        "day_of_week": slot.day_of_week.value,
        "start_time": slot.start_time.isoformat(timespec="minutes"),
        "end_time": slot.end_time.isoformat(timespec="minutes"),
    }


class TimetableService:
    """Create, move and delete timetable entries without ever double-booking a section, professor or room.

    Each write holds the day gate for every weekday it touches, re-runs the conflict
    check against the committed entries of those days and commits in the same
    critical section. Any failure rolls the session back, so the store is unchanged.
    """

    def __init__(
        self,
        store: TimetableStore,
        *,
        gate: DayWriteGate | None = None,
        checker: ConflictChecker | None = None,
    ) -> None:
        self._store = store
        self._gate = gate or get_write_gate()
        self._checker = checker or ConflictChecker(store)

    @contextmanager
    def _write(self, days: Iterable[DayOfWeek]) -> Iterator[None]:
        with self._gate.hold(days) as held:
            try:
                self._store.lock_days(held)
                yield
                self._store.commit()
            except Exception:
                self._store.rollback()
                raise

    def _ensure_references(self, candidate: EntrySlot) -> None:
        missing = self._store.missing_references(candidate)
        if missing:
            raise EntityReferenceError(missing)

    def _reject_conflicts(self, candidate: EntrySlot, exclude_id: int | None) -> None:
        result = self._checker.find_conflict(candidate, exclude_id=exclude_id)
        if not result.has_conflict:
            return
        first = result.first
        logger.warning(
            "Rejected timetable placement on %s %s-%s: %s conflict with entry %s",
            candidate.day_of_week.value,
            candidate.start_time.isoformat(timespec="minutes"),
            candidate.end_time.isoformat(timespec="minutes"),
            first.axis.value,
            first.entry_id,
        )
        raise ConflictError(
            axis=first.axis.value,
            entry_id=first.entry_id,
            conflicts=[conflict.as_dict() for conflict in result.conflicts],
        )

    def check(self, candidate: EntrySlot, exclude_id: int | None = None) -> ConflictResult:
        """Dry run of ``create``/``update``: validation and conflict report, no write."""
        candidate.validate()
        self._ensure_references(candidate)
        return self._checker.find_conflict(candidate, exclude_id=exclude_id)

    def get(self, entry_id: int) -> TimetableEntry:
        entry = self._store.get_entry(entry_id)
        if entry is None:
            raise ResourceNotFoundError("Timetable entry", entry_id)
        return entry

    def create(self, candidate: EntrySlot, *, actor: User | None = None) -> TimetableEntry:
        candidate.validate()
        with self._write([candidate.day_of_week]):
            self._ensure_references(candidate)
            self._reject_conflicts(candidate, exclude_id=None)
            entry = self._store.save_entry(TimetableEntry(**candidate.as_columns()))
            self._store.record_activity(actor, "timetable.create", entry.id, _slot_details(candidate))
        logger.info("Created timetable entry %s", entry.id)
        return entry

    def _locked_entry(self, entry_id: int, held: set[DayOfWeek]) -> TimetableEntry | None:
        """Re-read the entry once its days are held; None if another writer moved it off them."""
        entry = self.get(entry_id)
        return entry if entry.day_of_week in held else None

    def update(self, entry_id: int, candidate: EntrySlot, *, actor: User | None = None) -> TimetableEntry:
        candidate.validate()
        while True:
            held = {self.get(entry_id).day_of_week, candidate.day_of_week}
            with self._write(held):
                entry = self._locked_entry(entry_id, held)
                if entry is None:
                    continue
                previous = EntrySlot.from_entry(entry)
                self._ensure_references(candidate)
                # Check before touching the instance: the day scan shares the session's identity map.
                self._reject_conflicts(candidate, exclude_id=entry_id)
                for field, value in candidate.as_columns().items():
                    setattr(entry, field, value)
                self._store.save_entry(entry)
                self._store.record_activity(
                    actor,
                    "timetable.update",
                    entry_id,
                    {"before": _slot_details(previous), "after": _slot_details(candidate)},
                )
            break
        logger.info("Updated timetable entry %s", entry_id)
        return entry

    def delete(self, entry_id: int, *, actor: User | None = None) -> None:
        while True:
            held = {self.get(entry_id).day_of_week}
            with self._write(held):
                entry = self._locked_entry(entry_id, held)
                if entry is None:
                    continue
                previous = EntrySlot.from_entry(entry)
                self._store.delete_entry(entry)
                self._store.record_activity(actor, "timetable.delete", entry_id, _slot_details(previous))
            break
        logger.info("Deleted timetable entry %s", entry_id)

    def list_entries(self, query: EntryQuery) -> list[TimetableEntry]:
        return list(self._store.list_entries(query))

    def list_by_section(self, section_id: int) -> list[TimetableEntry]:
        return self.list_entries(EntryQuery(section_id=section_id))

    def list_by_professor(self, professor_id: int) -> list[TimetableEntry]:
        return self.list_entries(EntryQuery(professor_id=professor_id))

    def list_by_room(self, room_id: int) -> list[TimetableEntry]:
        return self.list_entries(EntryQuery(room_id=room_id))

    def audit(self) -> list[ConflictPair]:
        return find_conflicting_pairs(self._store.list_entries(EntryQuery()))
