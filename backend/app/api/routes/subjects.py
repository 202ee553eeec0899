from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_writer
from app.models.grade import Grade
from app.models.subject import Subject
from app.models.timetable_entry import TimetableEntry
from app.models.user import User
from app.schemas.subject import SubjectCreate, SubjectOut, SubjectUpdate
from app.schemas.stats import TimetableStatsOut
from app.services.references import commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import timetable_stats
from app.services.timetable_store import EntryQuery

router = APIRouter()

DUPLICATE_MESSAGE = "Subject with this code already exists in this grade"
IN_USE_MESSAGE = "Cannot delete subject with associated timetable entries"


@router.get("/grade/{grade_id}", response_model=list[SubjectOut])
def list_grade_subjects(
    grade_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SubjectOut]:
    statement = select(Subject).where(Subject.grade_id == grade_id).order_by(Subject.name)
    return list(db.execute(statement).scalars())


@router.get("/{subject_id}", response_model=SubjectOut)
def get_subject(
    subject_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SubjectOut:
    return get_or_404(db, Subject, subject_id, "Subject")


@router.get("/{subject_id}/stats", response_model=TimetableStatsOut)
def get_subject_stats(
    subject_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatsOut:
    get_or_404(db, Subject, subject_id, "Subject")
    return timetable_stats(db, EntryQuery(subject_id=subject_id))


@router.post("/", response_model=SubjectOut, status_code=status.HTTP_201_CREATED)
def create_subject(
    payload: SubjectCreate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> SubjectOut:
    get_or_404(db, Grade, payload.grade_id, "Grade")
    subject = Subject(**payload.model_dump())
    db.add(subject)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(subject)
    return subject


@router.put("/{subject_id}", response_model=SubjectOut)
def update_subject(
    subject_id: int,
    payload: SubjectUpdate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> SubjectOut:
    subject = get_or_404(db, Subject, subject_id, "Subject")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(subject, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(subject)
    return subject


@router.delete("/{subject_id}")
def delete_subject(
    subject_id: int,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> dict:
    subject = get_or_404(db, Subject, subject_id, "Subject")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (TimetableEntry.subject_id, subject_id),
    )
    db.delete(subject)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
