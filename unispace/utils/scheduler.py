from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional
from sqlalchemy.orm import Session
from unispace.engine.availability import AvailabilityEngine, booking_conflicts, schedule_conflicts
from unispace.engine.intervals import TimeInterval
from unispace.errors import ValidationError
from unispace.models.enums import BookingStatus, RoomStatus
from unispace.models.room import Room


def find_free_slots(
    engine: AvailabilityEngine, room_id: int, day: date, duration_minutes: int = 60
) -> List[Dict[str, datetime]]:
    """
    List back-to-back slots of the given length inside the opening hours
    of ``day`` that are free (break time included).

    The room's bookings and schedules are loaded once and every candidate
    slot is checked against them in memory.
    """
    if duration_minutes <= 0:
        raise ValidationError("Duration must be positive")

    settings = engine.settings
    engine.get_bookable_room(room_id)

    day_start = datetime.combine(day, time.min) + timedelta(hours=settings.day_start_hour)
    day_end = datetime.combine(day, time.min) + timedelta(hours=settings.day_end_hour)
    step = timedelta(minutes=duration_minutes)
    buffer = timedelta(minutes=settings.break_time_minutes)
    bookings = engine.repository.list_active_bookings(room_id)
    schedules = engine.repository.list_schedules(room_id)

    slots = []
    current = day_start
    while current + step <= day_end:
        slot_end = current + step
        slot = TimeInterval(current, slot_end)
        if not booking_conflicts(slot, bookings, buffer) and not schedule_conflicts(slot, schedules):
            slots.append({"start_time": current, "end_time": slot_end})
        current = slot_end
    return slots


def find_optimal_room(
    db: Session,
    engine: AvailabilityEngine,
    start_time: datetime,
    end_time: datetime,
    required_capacity: int,
    campus_id: Optional[int] = None,
) -> Optional[Room]:
    """
    Find the smallest bookable room that meets the capacity requirement and
    is free for the whole interval.
    """
    query = db.query(Room).filter(
        Room.capacity >= required_capacity,
        Room.room_status == RoomStatus.ACTIVE,
        Room.approval_status == BookingStatus.APPROVED,
    )
    if campus_id is not None:
        query = query.filter(Room.campus_id == campus_id)

    for room in query.order_by(Room.capacity, Room.id).all():
        if engine.is_room_available(room.id, start_time, end_time).available:
            return room
    return None
