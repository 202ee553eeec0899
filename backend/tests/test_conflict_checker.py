from datetime import time, timezone

import pytest

from app.core.exceptions import ValidationError
from app.models.timetable_entry import DayOfWeek, TimetableEntry
from app.services.conflict_checker import (
    ConflictAxis,
    ConflictChecker,
    EntrySlot,
    collect_conflicts,
    find_conflicting_pairs,
)


def make_entry(entry_id, *, section=1, professor=1, room=1, day=DayOfWeek.Monday, start=(9, 0), end=(10, 0)):
    return TimetableEntry(
        id=entry_id,
        subject_id=1,
        section_id=section,
        professor_id=professor,
        room_id=room,
        day_of_week=day,
        start_time=time(*start),
        end_time=time(*end),
    )


def make_slot(*, section=1, professor=1, room=1, day=DayOfWeek.Monday, start=(9, 0), end=(10, 0)):
    return EntrySlot(
        subject_id=1,
        section_id=section,
        professor_id=professor,
        room_id=room,
        day_of_week=day,
        start_time=time(*start),
        end_time=time(*end),
    )


class DayStore:
    def __init__(self, entries):
        self.entries = entries
        self.requested_days = []

    def get_entries_for_day(self, day):
        self.requested_days.append(day)
        return [entry for entry in self.entries if entry.day_of_week == day]


@pytest.mark.parametrize(
    ("axis", "overrides"),
    [
        (ConflictAxis.section, {"professor": 2, "room": 2}),
        (ConflictAxis.professor, {"section": 2, "room": 2}),
        (ConflictAxis.room, {"section": 2, "professor": 2}),
    ],
)
def test_each_axis_is_detected_for_any_time_intersection(axis, overrides):
    existing = [make_entry(1)]
    for start, end in [((8, 0), (9, 30)), ((9, 30), (10, 30)), ((9, 15), (9, 45)), ((8, 0), (11, 0))]:
        result = collect_conflicts(make_slot(start=start, end=end, **overrides), existing)
        assert result.has_conflict
        assert [(item.axis, item.entry_id) for item in result.conflicts] == [(axis, 1)]


def test_no_conflict_without_shared_axis():
    existing = [make_entry(1)]
    result = collect_conflicts(make_slot(section=2, professor=2, room=2), existing)
    assert not result.has_conflict
    assert result.first is None


def test_no_conflict_on_a_different_day():
    existing = [make_entry(1)]
    result = collect_conflicts(make_slot(day=DayOfWeek.Tuesday), existing)
    assert not result.has_conflict


@pytest.mark.parametrize(("start", "end"), [((10, 0), (11, 0)), ((7, 0), (9, 0)), ((13, 0), (14, 0))])
def test_no_conflict_for_disjoint_or_touching_intervals(start, end):
    existing = [make_entry(1)]
    assert not collect_conflicts(make_slot(start=start, end=end), existing).has_conflict


def test_all_conflicts_are_reported_in_entry_then_axis_order():
    existing = [
        make_entry(7, section=2, professor=1, room=1),
        make_entry(3, section=1, professor=9, room=9, start=(9, 30), end=(10, 30)),
    ]
    result = collect_conflicts(make_slot(), existing)
    assert [(item.entry_id, item.axis) for item in result.conflicts] == [
        (3, ConflictAxis.section),
        (7, ConflictAxis.professor),
        (7, ConflictAxis.room),
    ]
    assert result.first.entry_id == 3
    assert result.first.as_dict() == {"axis": "section", "entry_id": 3}


def test_excluded_entry_never_conflicts_with_itself():
    existing = [make_entry(1), make_entry(2, section=2, professor=2, room=2)]
    slot = EntrySlot.from_entry(existing[0])
    assert collect_conflicts(slot, existing, exclude_id=1).has_conflict is False
    assert collect_conflicts(slot, existing).first.entry_id == 1


def test_checker_only_reads_the_candidate_day():
    store = DayStore([make_entry(1), make_entry(2, day=DayOfWeek.Friday)])
    result = ConflictChecker(store).find_conflict(make_slot(day=DayOfWeek.Friday))
    assert store.requested_days == [DayOfWeek.Friday]
    assert [item.entry_id for item in result.conflicts] == [2, 2, 2]


def test_find_conflicting_pairs_audits_every_day():
    entries = [
        make_entry(1),
        make_entry(2, section=2, professor=2, room=1, start=(9, 30), end=(11, 0)),
        make_entry(3, section=2, professor=2, room=2, start=(11, 0), end=(12, 0)),
        make_entry(4, day=DayOfWeek.Wednesday, section=3, professor=3, room=3),
        make_entry(5, day=DayOfWeek.Wednesday, section=3, professor=4, room=4, start=(9, 45), end=(10, 15)),
    ]
    pairs = find_conflicting_pairs(entries)
    assert [(pair.day_of_week, pair.axis, pair.first_entry_id, pair.second_entry_id) for pair in pairs] == [
        (DayOfWeek.Monday, ConflictAxis.room, 1, 2),
        (DayOfWeek.Wednesday, ConflictAxis.section, 4, 5),
    ]


def test_slot_validation_rejects_empty_or_inverted_ranges():
    with pytest.raises(ValidationError) as exc_info:
        make_slot(start=(10, 0), end=(10, 0)).validate()
    assert exc_info.value.status_code == 422
    assert exc_info.value.details == {"start_time": "10:00", "end_time": "10:00"}

    with pytest.raises(ValidationError):
        make_slot(start=(11, 0), end=(10, 0)).validate()


def test_slot_validation_rejects_unknown_day_and_timezone():
    with pytest.raises(ValidationError):
        make_slot(day="Funday").validate()

    aware = EntrySlot(
        subject_id=1,
        section_id=1,
        professor_id=1,
        room_id=1,
        day_of_week=DayOfWeek.Monday,
        start_time=time(9, 0, tzinfo=timezone.utc),
        end_time=time(10, 0, tzinfo=timezone.utc),
    )
    with pytest.raises(ValidationError):
        aware.validate()
