from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_writer
from app.models.grade import Grade
from app.models.section import Section
from app.models.timetable_entry import TimetableEntry
from app.models.user import User
from app.schemas.section import SectionCreate, SectionOut, SectionUpdate
from app.schemas.stats import TimetableStatsOut
from app.services.references import commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import timetable_stats
from app.services.timetable_store import EntryQuery

router = APIRouter()

DUPLICATE_MESSAGE = "Section with this name already exists in this grade"
IN_USE_MESSAGE = "Cannot delete section with associated timetable entries"


@router.get("/grade/{grade_id}", response_model=list[SectionOut])
def list_grade_sections(
    grade_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[SectionOut]:
    statement = select(Section).where(Section.grade_id == grade_id).order_by(Section.name)
    return list(db.execute(statement).scalars())


@router.get("/{section_id}", response_model=SectionOut)
def get_section(
    section_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> SectionOut:
    return get_or_404(db, Section, section_id, "Section")


@router.get("/{section_id}/stats", response_model=TimetableStatsOut)
def get_section_stats(
    section_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatsOut:
    get_or_404(db, Section, section_id, "Section")
    return timetable_stats(db, EntryQuery(section_id=section_id))


@router.post("/", response_model=SectionOut, status_code=status.HTTP_201_CREATED)
def create_section(
    payload: SectionCreate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> SectionOut:
    get_or_404(db, Grade, payload.grade_id, "Grade")
    section = Section(**payload.model_dump())
    db.add(section)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(section)
    return section


@router.put("/{section_id}", response_model=SectionOut)
def update_section(
    section_id: int,
    payload: SectionUpdate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> SectionOut:
    section = get_or_404(db, Section, section_id, "Section")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(section, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(section)
    return section


@router.delete("/{section_id}")
def delete_section(
    section_id: int,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> dict:
    section = get_or_404(db, Section, section_id, "Section")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (TimetableEntry.section_id, section_id),
    )
    db.delete(section)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
