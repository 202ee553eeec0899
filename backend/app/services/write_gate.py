from __future__ import annotations

from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from threading import Lock

from app.models.timetable_entry import DayOfWeek, WEEKDAY_ORDER


class DayWriteGate:
    """One writer per weekday: conflict checks and the writes they guard never interleave on a day."""

    def __init__(self) -> None:
        self._locks: dict[DayOfWeek, Lock] = {day: Lock() for day in DayOfWeek}

    @contextmanager
    def hold(self, days: Iterable[DayOfWeek]) -> Iterator[list[DayOfWeek]]:
        # Weekday order keeps two multi-day writers from deadlocking.
        ordered = sorted(set(days), key=WEEKDAY_ORDER.__getitem__)
        acquired: list[Lock] = []
        try:
            for day in ordered:
                lock = self._locks[day]
                lock.acquire()
                acquired.append(lock)
            yield ordered
        finally:
            for lock in reversed(acquired):
                lock.release()

    def is_held(self, day: DayOfWeek) -> bool:
        return self._locks[day].locked()


_gate = DayWriteGate()


def get_write_gate() -> DayWriteGate:
    return _gate
