from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_writer
from app.models.department import Department
from app.models.grade import Grade
from app.models.section import Section
from app.models.subject import Subject
from app.models.user import User
from app.schemas.grade import GradeCreate, GradeOut, GradeUpdate
from app.schemas.stats import GradeStatsOut
from app.services.references import commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import grade_stats

router = APIRouter()

DUPLICATE_MESSAGE = "Grade with this name already exists in this department"
IN_USE_MESSAGE = "Cannot delete grade with associated sections or subjects"


@router.get("/department/{department_id}", response_model=list[GradeOut])
def list_department_grades(
    department_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[GradeOut]:
    statement = select(Grade).where(Grade.department_id == department_id).order_by(Grade.level, Grade.name)
    return list(db.execute(statement).scalars())


@router.get("/{grade_id}", response_model=GradeOut)
def get_grade(grade_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> GradeOut:
    return get_or_404(db, Grade, grade_id, "Grade")


@router.get("/{grade_id}/stats", response_model=GradeStatsOut)
def get_grade_stats(
    grade_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GradeStatsOut:
    get_or_404(db, Grade, grade_id, "Grade")
    return grade_stats(db, grade_id)


@router.post("/", response_model=GradeOut, status_code=status.HTTP_201_CREATED)
def create_grade(
    payload: GradeCreate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> GradeOut:
    get_or_404(db, Department, payload.department_id, "Department")
    grade = Grade(**payload.model_dump())
    db.add(grade)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(grade)
    return grade


@router.put("/{grade_id}", response_model=GradeOut)
def update_grade(
    grade_id: int,
    payload: GradeUpdate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> GradeOut:
    grade = get_or_404(db, Grade, grade_id, "Grade")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(grade, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(grade)
    return grade


@router.delete("/{grade_id}")
def delete_grade(
    grade_id: int,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> dict:
    grade = get_or_404(db, Grade, grade_id, "Grade")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (Section.grade_id, grade_id),
        (Subject.grade_id, grade_id),
    )
    db.delete(grade)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
