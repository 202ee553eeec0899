from app.models.audit_log import AuditLog  # noqa: F401
from app.models.department import Department  # noqa: F401
from app.models.grade import Grade  # noqa: F401
from app.models.professor import Professor  # noqa: F401
from app.models.room import Room, RoomType  # noqa: F401
from app.models.section import Section  # noqa: F401
from app.models.subject import Subject  # noqa: F401
from app.models.timetable_entry import DayOfWeek, TimetableEntry, WEEKDAY_ORDER  # noqa: F401
from app.models.user import User, UserRole  # noqa: F401
