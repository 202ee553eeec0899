from datetime import time
import threading
import time as clock

from app.core.exceptions import ConflictError
from app.models.timetable_entry import DayOfWeek
from app.services.conflict_checker import EntrySlot
from app.services.timetable_service import TimetableService
from app.services.write_gate import DayWriteGate


class SharedTimetable:
    """Committed rows shared by every InMemoryStore, like a database table."""

    def __init__(self):
        self.rows = {}
        self.next_id = 1
        self.lock = threading.Lock()


class InMemoryStore:
    """Session-like store: staged writes become visible to others only on commit."""

    def __init__(self, shared, write_delay=0.0):
        self.shared = shared
        self.write_delay = write_delay
        self.staged = []
        self.locked_days = []

    def get_entries_for_day(self, day):
        with self.shared.lock:
            return [entry for entry in self.shared.rows.values() if entry.day_of_week == day]

    def get_entry(self, entry_id):
        return self.shared.rows.get(entry_id)

    def entry_exists(self, entry_id):
        return entry_id in self.shared.rows

    def save_entry(self, entry):
        # Widen the window between the conflict check and commit.
        clock.sleep(self.write_delay)
        if entry.id is None:
            with self.shared.lock:
                entry.id = self.shared.next_id
                self.shared.next_id += 1
        self.staged.append(entry)
        return entry

    def delete_entry(self, entry):
        with self.shared.lock:
            self.shared.rows.pop(entry.id, None)

    def list_entries(self, query):
        return sorted(self.shared.rows.values(), key=lambda entry: entry.id)

    def missing_references(self, slot):
        return []

    def lock_days(self, days):
        self.locked_days.append(list(days))

    def record_activity(self, actor, action, entry_id, details):
        pass

    def commit(self):
        with self.shared.lock:
            for entry in self.staged:
                self.shared.rows[entry.id] = entry
        self.staged = []

    def rollback(self):
        self.staged = []


def make_slot(section, professor, room, day=DayOfWeek.Monday):
    return EntrySlot(
        subject_id=1,
        section_id=section,
        professor_id=professor,
        room_id=room,
        day_of_week=day,
        start_time=time(9, 0),
        end_time=time(10, 0),
    )


def run_concurrently(targets):
    barrier = threading.Barrier(len(targets))
    outcomes = [None] * len(targets)

    def runner(index, target):
        barrier.wait()
        try:
            outcomes[index] = target()
        except ConflictError as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=runner, args=(index, target)) for index, target in enumerate(targets)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=10)
    return outcomes


def test_hold_returns_days_in_weekday_order_and_releases():
    gate = DayWriteGate()
    with gate.hold([DayOfWeek.Friday, DayOfWeek.Monday, DayOfWeek.Friday]) as held:
        assert held == [DayOfWeek.Monday, DayOfWeek.Friday]
        assert gate.is_held(DayOfWeek.Monday)
        assert gate.is_held(DayOfWeek.Friday)
        assert not gate.is_held(DayOfWeek.Tuesday)
    assert not gate.is_held(DayOfWeek.Monday)
    assert not gate.is_held(DayOfWeek.Friday)


def test_hold_releases_after_an_exception():
    gate = DayWriteGate()
    try:
        with gate.hold([DayOfWeek.Sunday]):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert not gate.is_held(DayOfWeek.Sunday)


def test_other_days_are_not_blocked_by_a_held_day():
    gate = DayWriteGate()
    entered = threading.Event()
    with gate.hold([DayOfWeek.Monday]):

        def other_day_writer():
            with gate.hold([DayOfWeek.Tuesday]):
                entered.set()

        thread = threading.Thread(target=other_day_writer)
        thread.start()
        assert entered.wait(timeout=5)
        thread.join(timeout=5)


def test_concurrent_creates_for_the_same_room_admit_exactly_one():
    shared = SharedTimetable()
    gate = DayWriteGate()
    candidates = [make_slot(section=index + 1, professor=index + 1, room=1) for index in range(4)]
    targets = [
        (lambda candidate=candidate: TimetableService(InMemoryStore(shared, write_delay=0.02), gate=gate).create(candidate))
        for candidate in candidates
    ]

    outcomes = run_concurrently(targets)

    created = [outcome for outcome in outcomes if not isinstance(outcome, ConflictError)]
    rejected = [outcome for outcome in outcomes if isinstance(outcome, ConflictError)]
    assert len(created) == 1
    assert len(rejected) == 3
    assert {error.axis for error in rejected} == {"room"}
    assert list(shared.rows) == [created[0].id]


def test_concurrent_creates_on_different_days_all_succeed():
    shared = SharedTimetable()
    gate = DayWriteGate()
    days = [DayOfWeek.Monday, DayOfWeek.Tuesday, DayOfWeek.Wednesday]
    targets = [
        (lambda day=day: TimetableService(InMemoryStore(shared, write_delay=0.01), gate=gate).create(make_slot(1, 1, 1, day)))
        for day in days
    ]

    outcomes = run_concurrently(targets)

    assert not any(isinstance(outcome, ConflictError) for outcome in outcomes)
    assert sorted(entry.day_of_week for entry in shared.rows.values()) == sorted(days)


def test_moving_an_entry_locks_both_days():
    shared = SharedTimetable()
    store = InMemoryStore(shared)
    service = TimetableService(store, gate=DayWriteGate())
    entry = service.create(make_slot(1, 1, 1, DayOfWeek.Thursday))

    service.update(entry.id, make_slot(1, 1, 1, DayOfWeek.Tuesday))

    assert store.locked_days[-1] == [DayOfWeek.Tuesday, DayOfWeek.Thursday]
    assert shared.rows[entry.id].day_of_week == DayOfWeek.Tuesday
