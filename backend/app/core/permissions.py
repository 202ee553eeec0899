from __future__ import annotations

from app.core.config import get_settings
from app.models.user import User, UserRole


def timetable_writer_roles() -> set[UserRole]:
    return {UserRole(value) for value in get_settings().timetable_writer_roles}


def can_mutate_timetable(actor: User | None) -> bool:
    """Whether ``actor`` may create, move or delete timetable entries and the records they reference."""
    if actor is None or not actor.is_active:
        return False
    return actor.role in timetable_writer_roles()


def can_manage_departments(actor: User | None) -> bool:
    return actor is not None and actor.is_active and actor.role == UserRole.admin
