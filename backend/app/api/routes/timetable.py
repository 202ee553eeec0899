from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, get_timetable_service, require_timetable_writer
from app.models.user import User
from app.schemas.stats import TimetableStatsOut
from app.schemas.timetable import (
    ConflictCheckOut,
    ConflictCheckRequest,
    ConflictOut,
    ConflictPairOut,
    TimetableEntryCreate,
    TimetableEntryOut,
    TimetableEntryUpdate,
)
from app.services.stats import timetable_stats
from app.services.timetable_service import TimetableService

router = APIRouter()


@router.get("/section/{section_id}", response_model=list[TimetableEntryOut])
def list_section_entries(
    section_id: int,
    current_user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntryOut]:
    return service.list_by_section(section_id)


@router.get("/professor/{professor_id}", response_model=list[TimetableEntryOut])
def list_professor_entries(
    professor_id: int,
    current_user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntryOut]:
    return service.list_by_professor(professor_id)


@router.get("/room/{room_id}", response_model=list[TimetableEntryOut])
def list_room_entries(
    room_id: int,
    current_user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
) -> list[TimetableEntryOut]:
    return service.list_by_room(room_id)


@router.get("/conflicts", response_model=list[ConflictPairOut])
def audit_conflicts(
    current_user: User = Depends(require_timetable_writer),
    service: TimetableService = Depends(get_timetable_service),
) -> list[ConflictPairOut]:
    return service.audit()


@router.get("/stats", response_model=TimetableStatsOut)
def get_timetable_stats(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatsOut:
    return timetable_stats(db)


@router.post("/check", response_model=ConflictCheckOut)
def check_entry(
    payload: ConflictCheckRequest,
    current_user: User = Depends(require_timetable_writer),
    service: TimetableService = Depends(get_timetable_service),
) -> ConflictCheckOut:
    result = service.check(payload.to_slot(), exclude_id=payload.exclude_id)
    return ConflictCheckOut(
        has_conflict=result.has_conflict,
        conflicts=[ConflictOut(axis=item.axis, entry_id=item.entry_id) for item in result.conflicts],
    )


@router.get("/{entry_id}", response_model=TimetableEntryOut)
def get_entry(
    entry_id: int,
    current_user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntryOut:
    return service.get(entry_id)


@router.post("/", response_model=TimetableEntryOut, status_code=status.HTTP_201_CREATED)
def create_entry(
    payload: TimetableEntryCreate,
    current_user: User = Depends(require_timetable_writer),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntryOut:
    return service.create(payload.to_slot(), actor=current_user)


@router.put("/{entry_id}", response_model=TimetableEntryOut)
def update_entry(
    entry_id: int,
    payload: TimetableEntryUpdate,
    current_user: User = Depends(require_timetable_writer),
    service: TimetableService = Depends(get_timetable_service),
) -> TimetableEntryOut:
    return service.update(entry_id, payload.to_slot(), actor=current_user)


@router.delete("/{entry_id}")
def delete_entry(
    entry_id: int,
    current_user: User = Depends(require_timetable_writer),
    service: TimetableService = Depends(get_timetable_service),
) -> dict:
    service.delete(entry_id, actor=current_user)
    return {"success": True}
