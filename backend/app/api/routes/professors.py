from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_writer
from app.models.department import Department
from app.models.professor import Professor
from app.models.timetable_entry import DayOfWeek, TimetableEntry
from app.models.user import User
from app.schemas.professor import ProfessorCreate, ProfessorOut, ProfessorUpdate
from app.schemas.stats import TimetableStatsOut
from app.schemas.timetable import AvailabilityOut
from app.services.references import build_availability, commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import timetable_stats
from app.services.timetable_store import EntryQuery

router = APIRouter()

DUPLICATE_MESSAGE = "Professor with this email already exists"
IN_USE_MESSAGE = "Cannot delete professor with associated timetable entries"


@router.get("/", response_model=list[ProfessorOut])
def list_professors(
    department_id: int | None = Query(default=None, ge=1),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ProfessorOut]:
    statement = select(Professor).order_by(Professor.last_name, Professor.first_name)
    if department_id is not None:
        statement = statement.where(Professor.department_id == department_id)
    return list(db.execute(statement).scalars())


@router.get("/{professor_id}", response_model=ProfessorOut)
def get_professor(
    professor_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProfessorOut:
    return get_or_404(db, Professor, professor_id, "Professor")


@router.get("/{professor_id}/stats", response_model=TimetableStatsOut)
def get_professor_stats(
    professor_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatsOut:
    get_or_404(db, Professor, professor_id, "Professor")
    return timetable_stats(db, EntryQuery(professor_id=professor_id))


@router.get("/{professor_id}/availability", response_model=AvailabilityOut)
def get_professor_availability(
    professor_id: int,
    day_of_week: DayOfWeek | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AvailabilityOut:
    get_or_404(db, Professor, professor_id, "Professor")
    return build_availability(
        db,
        resource="professor",
        resource_id=professor_id,
        query=EntryQuery(professor_id=professor_id, day_of_week=day_of_week),
    )


@router.post("/", response_model=ProfessorOut, status_code=status.HTTP_201_CREATED)
def create_professor(
    payload: ProfessorCreate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> ProfessorOut:
    get_or_404(db, Department, payload.department_id, "Department")
    professor = Professor(**payload.model_dump())
    db.add(professor)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(professor)
    return professor


@router.put("/{professor_id}", response_model=ProfessorOut)
def update_professor(
    professor_id: int,
    payload: ProfessorUpdate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> ProfessorOut:
    professor = get_or_404(db, Professor, professor_id, "Professor")
    data = payload.model_dump(exclude_unset=True)
    if data.get("department_id") is not None:
        get_or_404(db, Department, data["department_id"], "Department")
    for key, value in data.items():
        setattr(professor, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(professor)
    return professor


@router.delete("/{professor_id}")
def delete_professor(
    professor_id: int,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> dict:
    professor = get_or_404(db, Professor, professor_id, "Professor")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (TimetableEntry.professor_id, professor_id),
    )
    db.delete(professor)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
