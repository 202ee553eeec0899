from __future__ import annotations

from datetime import time


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    """Return True when the half-open intervals ``[a_start, a_end)`` and ``[b_start, b_end)`` intersect.

    Covers every arrangement of the four endpoints: one interval starting or ending
    inside the other, or either one containing the other. Intervals that only touch
    (``a_end == b_start``) do not overlap, so back-to-back sessions are allowed.
    """
    return a_start < b_end and b_start < a_end


def duration_minutes(start: time, end: time) -> int:
    return (end.hour * 60 + end.minute) - (start.hour * 60 + start.minute)
