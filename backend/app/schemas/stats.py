from pydantic import BaseModel


class TimetableStatsOut(BaseModel):
    entries_count: int = 0
    subjects_count: int = 0
    sections_count: int = 0
    professors_count: int = 0
    rooms_count: int = 0
    total_minutes: int = 0


class DepartmentStatsOut(BaseModel):
    staff_count: int = 0
    professors_count: int = 0
    grades_count: int = 0
    sections_count: int = 0
    subjects_count: int = 0


class GradeStatsOut(BaseModel):
    sections_count: int = 0
    subjects_count: int = 0
    entries_count: int = 0
