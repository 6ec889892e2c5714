"""Repository - database operations the engine and the lifecycle services rely on"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from unispace.errors import InternalError
from unispace.models.booking import Booking
from unispace.models.enums import ACTIVE_BOOKING_STATUSES, BookingStatus
from unispace.models.room import Room
from unispace.models.schedule import Schedule

logger = logging.getLogger(__name__)

class BookingRepository:
    """Queries for rooms, bookings and schedules bound to one session.

    Soft-deleted rows are filtered out by the session-wide criteria in
    ``unispace.models.base``, so none of these queries repeat that check.
    """

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def guard(self, action: str):
        """Roll back and raise ``InternalError`` on any database failure."""
        try:
            yield
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error while {action}: {e}")
            raise InternalError(f"Database error while {action}") from e

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        return self.db.query(Booking).filter(Booking.id == booking_id).first()

    def get_schedule(self, schedule_id: int) -> Optional[Schedule]:
        return self.db.query(Schedule).filter(Schedule.id == schedule_id).first()

    def list_active_bookings(
        self, room_id: int, exclude_id: Optional[int] = None
    ) -> List[Booking]:
        """Pending and approved bookings that still hold the room."""
        query = self.db.query(Booking).filter(
            Booking.room_id == room_id,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        if exclude_id is not None:
            query = query.filter(Booking.id != exclude_id)
        return query.order_by(Booking.start_time).all()

    def list_schedules(
        self,
        room_id: int,
        exclude_id: Optional[int] = None,
        day_of_week: Optional[int] = None,
    ) -> List[Schedule]:
        query = self.db.query(Schedule).filter(Schedule.room_id == room_id)
        if exclude_id is not None:
            query = query.filter(Schedule.id != exclude_id)
        if day_of_week is not None:
            query = query.filter(Schedule.day_of_week == day_of_week)
        return query.order_by(Schedule.day_of_week, Schedule.start_time).all()

    def list_expired_approved(self, now: datetime) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.status == BookingStatus.APPROVED, Booking.end_time <= now)
            .order_by(Booking.end_time)
            .all()
        )

    def insert_booking(self, booking: Booking) -> Booking:
        self.db.add(booking)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def update_booking_status(
        self,
        booking: Booking,
        status: BookingStatus,
        note: Optional[str] = None,
        actor_id: Optional[int] = None,
        when: Optional[datetime] = None,
    ) -> Booking:
        booking.status = status
        if note is not None:
            booking.admin_note = note
        booking.touch(actor_id, when)
        self.db.commit()
        self.db.refresh(booking)
        return booking

    def insert_schedule(self, schedule: Schedule) -> Schedule:
        self.db.add(schedule)
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def update_schedule(self, schedule: Schedule) -> Schedule:
        self.db.commit()
        self.db.refresh(schedule)
        return schedule

    def save(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity
