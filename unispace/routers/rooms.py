from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from datetime import date, datetime
from typing import List, Optional
from unispace.db import get_db
from unispace.engine.availability import AvailabilityEngine
from unispace.engine.intervals import to_utc_naive
from unispace.errors import BadRequestError, ConflictError, NotFoundError, ValidationError
from unispace.models.booking import Booking
from unispace.models.campus import Campus
from unispace.models.enums import ACTIVE_BOOKING_STATUSES, RoomType
from unispace.models.room import Room
from unispace.repository import BookingRepository
from unispace.schemas.booking import BookingResponse
from unispace.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from unispace.schemas.schedule import ScheduleResponse
from unispace.services.bookings import BookingService
from unispace.services.schedules import ScheduleService
from unispace.utils.auth import CurrentActor, get_current_actor, require_admin
from unispace.utils.clock import system_clock
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
)


def _get_room(db: Session, room_id: int) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise NotFoundError("Room not found")
    return room


def _ensure_unique_name(db: Session, campus_id: int, name: str, exclude_id: int = None):
    query = db.query(Room).filter(Room.campus_id == campus_id, Room.name == name)
    if exclude_id is not None:
        query = query.filter(Room.id != exclude_id)
    if query.first():
        raise ConflictError(f"Room '{name}' already exists in this campus")


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    room: RoomCreate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Create a new room in a campus.
    Admin only.
    """
    if not db.query(Campus).filter(Campus.id == room.campus_id).first():
        raise NotFoundError("Campus not found")
    room_data = room.model_dump()
    room_data["name"] = room_data["name"].strip()
    _ensure_unique_name(db, room.campus_id, room_data["name"])

    db_room = Room(**room_data, created_at=system_clock.now(), created_by=actor.user_id)
    db.add(db_room)
    db.commit()
    db.refresh(db_room)
    logger.info(f"Room created: {db_room.id}")
    return db_room


@router.get("/", response_model=List[RoomResponse])
def get_rooms(
    skip: int = 0,
    limit: int = 100,
    campus_id: Optional[int] = None,
    type: Optional[RoomType] = None,
    min_capacity: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    Retrieve a list of rooms, optionally filtered by campus, type and capacity.
    """
    query = db.query(Room)
    if campus_id is not None:
        query = query.filter(Room.campus_id == campus_id)
    if type is not None:
        query = query.filter(Room.type == type)
    if min_capacity is not None:
        query = query.filter(Room.capacity >= min_capacity)
    return query.order_by(Room.id).offset(skip).limit(limit).all()


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, db: Session = Depends(get_db)):
    """
    Retrieve a specific room by ID.
    """
    return _get_room(db, room_id)


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    room_update: RoomUpdate,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Update a room's details.
    Admin only.
    """
    db_room = _get_room(db, room_id)
    update_data = room_update.model_dump(exclude_unset=True)
    if update_data.get("name"):
        update_data["name"] = update_data["name"].strip()
        _ensure_unique_name(db, db_room.campus_id, update_data["name"], exclude_id=room_id)

    for key, value in update_data.items():
        setattr(db_room, key, value)
    db_room.touch(actor.user_id, system_clock.now())
    db.commit()
    db.refresh(db_room)
    return db_room


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
):
    """
    Soft delete a room without pending or approved bookings.
    Admin only.
    """
    db_room = _get_room(db, room_id)
    active = (
        db.query(Booking)
        .filter(Booking.room_id == room_id, Booking.status.in_(ACTIVE_BOOKING_STATUSES))
        .count()
    )
    if active:
        raise BadRequestError("Cannot delete a room with pending or approved bookings")

    db_room.soft_delete(actor.user_id, system_clock.now())
    db.commit()
    logger.info(f"Room soft deleted: {room_id}")
    return None


@router.get("/{room_id}/availability", summary="Check room availability")
def check_availability(
    room_id: int,
    start_time: datetime,
    end_time: datetime,
    db: Session = Depends(get_db),
    _: CurrentActor = Depends(get_current_actor),
):
    """
    Check whether a room is free for an interval, break time included.

    Returns **available** and the list of blocking bookings or schedules.
    """
    start_time, end_time = to_utc_naive(start_time), to_utc_naive(end_time)
    if start_time >= end_time:
        raise ValidationError("End time must be after start time")
    engine = AvailabilityEngine(BookingRepository(db))
    result = engine.is_room_available(room_id, start_time, end_time)
    return {
        "available": result.available,
        "conflicts": [conflict.describe() for conflict in result.conflicts],
    }


@router.get("/{room_id}/bookings", response_model=List[BookingResponse])
def get_room_bookings(
    room_id: int,
    from_time: Optional[datetime] = None,
    to_time: Optional[datetime] = None,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(get_current_actor),
):
    """
    Bookings of a room, ordered by start time.
    """
    _get_room(db, room_id)
    return BookingService(db, actor).list_room_bookings(room_id, from_time, to_time)


@router.get("/{room_id}/schedules", response_model=List[ScheduleResponse])
def get_room_schedules(
    room_id: int,
    on: Optional[date] = None,
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(get_current_actor),
):
    """
    Schedules of a room. With **on**, only the ones in effect on that date.
    """
    _get_room(db, room_id)
    service = ScheduleService(db, actor)
    if on is not None:
        return service.list_schedules_for_room_on(room_id, on)
    return service.list_schedules(room_id=room_id, limit=1000)
