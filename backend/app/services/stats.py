from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.department import Department
from app.models.grade import Grade
from app.models.professor import Professor
from app.models.section import Section
from app.models.subject import Subject
from app.models.timetable_entry import TimetableEntry
from app.models.user import User
from app.schemas.department import DepartmentDetailOut, DepartmentGradeOut, DepartmentStaffOut
from app.schemas.stats import DepartmentStatsOut, GradeStatsOut, TimetableStatsOut
from app.services.intervals import duration_minutes
from app.services.references import count_where
from app.services.timetable_store import EntryQuery, SqlAlchemyTimetableStore


def timetable_stats(db: Session, query: EntryQuery | None = None) -> TimetableStatsOut:
    """Usage of the timetable, optionally narrowed to one section, professor, room or subject."""
    entries = SqlAlchemyTimetableStore(db).list_entries(query or EntryQuery())
    return TimetableStatsOut(
        entries_count=len(entries),
        subjects_count=len({entry.subject_id for entry in entries}),
        sections_count=len({entry.section_id for entry in entries}),
        professors_count=len({entry.professor_id for entry in entries}),
        rooms_count=len({entry.room_id for entry in entries}),
        total_minutes=sum(duration_minutes(entry.start_time, entry.end_time) for entry in entries),
    )


def department_stats(db: Session, department_id: int) -> DepartmentStatsOut:
    sections = select(func.count()).select_from(Section).join(Grade, Section.grade_id == Grade.id)
    subjects = select(func.count()).select_from(Subject).join(Grade, Subject.grade_id == Grade.id)
    return DepartmentStatsOut(
        staff_count=count_where(db, User.department_id, department_id),
        professors_count=count_where(db, Professor.department_id, department_id),
        grades_count=count_where(db, Grade.department_id, department_id),
        sections_count=db.execute(sections.where(Grade.department_id == department_id)).scalar_one(),
        subjects_count=db.execute(subjects.where(Grade.department_id == department_id)).scalar_one(),
    )


def grade_stats(db: Session, grade_id: int) -> GradeStatsOut:
    entries = (
        select(func.count())
        .select_from(TimetableEntry)
        .join(Section, TimetableEntry.section_id == Section.id)
        .where(Section.grade_id == grade_id)
    )
    return GradeStatsOut(
        sections_count=count_where(db, Section.grade_id, grade_id),
        subjects_count=count_where(db, Subject.grade_id, grade_id),
        entries_count=db.execute(entries).scalar_one(),
    )


def department_detail(db: Session, department: Department) -> DepartmentDetailOut:
    """Department with its staff and its grades, each grade carrying its section count."""
    staff = db.execute(
        select(User).where(User.department_id == department.id).order_by(User.role, User.last_name)
    ).scalars()
    sections_count = (
        select(func.count()).select_from(Section).where(Section.grade_id == Grade.id).correlate(Grade).scalar_subquery()
    )
    grades = db.execute(
        select(Grade, sections_count).where(Grade.department_id == department.id).order_by(Grade.level, Grade.id)
    ).all()
    detail = DepartmentDetailOut.model_validate(department)
    detail.staff = [DepartmentStaffOut.model_validate(user) for user in staff]
    detail.grades = [
        DepartmentGradeOut(id=grade.id, name=grade.name, level=grade.level, sections_count=count)
        for grade, count in grades
    ]
    detail.staff_count = len(detail.staff)
    detail.grades_count = len(detail.grades)
    return detail
