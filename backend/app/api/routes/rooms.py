from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db, require_timetable_writer
from app.models.room import Room
from app.models.timetable_entry import DayOfWeek, TimetableEntry
from app.models.user import User
from app.schemas.room import RoomCreate, RoomOut, RoomUpdate
from app.schemas.stats import TimetableStatsOut
from app.schemas.timetable import AvailabilityOut
from app.services.references import build_availability, commit_or_conflict, ensure_no_dependents, get_or_404
from app.services.stats import timetable_stats
from app.services.timetable_store import EntryQuery

router = APIRouter()

DUPLICATE_MESSAGE = "Room name already exists"
IN_USE_MESSAGE = "Cannot delete room with associated timetable entries"


@router.get("/", response_model=list[RoomOut])
def list_rooms(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[RoomOut]:
    return list(db.execute(select(Room).order_by(Room.name)).scalars())


@router.get("/{room_id}", response_model=RoomOut)
def get_room(room_id: int, current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> RoomOut:
    return get_or_404(db, Room, room_id, "Room")


@router.get("/{room_id}/stats", response_model=TimetableStatsOut)
def get_room_stats(
    room_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TimetableStatsOut:
    get_or_404(db, Room, room_id, "Room")
    return timetable_stats(db, EntryQuery(room_id=room_id))


@router.get("/{room_id}/availability", response_model=AvailabilityOut)
def get_room_availability(
    room_id: int,
    day_of_week: DayOfWeek | None = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> AvailabilityOut:
    get_or_404(db, Room, room_id, "Room")
    return build_availability(
        db,
        resource="room",
        resource_id=room_id,
        query=EntryQuery(room_id=room_id, day_of_week=day_of_week),
    )


@router.post("/", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = Room(**payload.model_dump())
    db.add(room)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(room)
    return room


@router.put("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = get_or_404(db, Room, room_id, "Room")
    for key, value in payload.model_dump(exclude_unset=True).items():
        setattr(room, key, value)
    commit_or_conflict(db, DUPLICATE_MESSAGE)
    db.refresh(room)
    return room


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    current_user: User = Depends(require_timetable_writer),
    db: Session = Depends(get_db),
) -> dict:
    room = get_or_404(db, Room, room_id, "Room")
    ensure_no_dependents(
        db,
        IN_USE_MESSAGE,
        (TimetableEntry.room_id, room_id),
    )
    db.delete(room)
    commit_or_conflict(db, IN_USE_MESSAGE)
    return {"success": True}
