"""
Booking lifecycle: request, update, decide, cancel, complete, delete.

Every write that could take room time (create, update) runs the
availability check and the commit while holding the room's lock, so the
check-then-insert sequence is atomic per room within a process.
"""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from sqlalchemy.orm import Session

from unispace.config import Settings, settings as default_settings
from unispace.engine.availability import AvailabilityEngine
from unispace.engine.intervals import to_utc_naive
from unispace.errors import (
    BadRequestError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from unispace.models.booking import Booking
from unispace.models.enums import BookingStatus
from unispace.notifications import Notifier, default_notifier
from unispace.repository import BookingRepository
from unispace.services.lifecycle import BookingDecision, can_transition, ensure_transition
from unispace.utils.auth import CurrentActor
from unispace.utils.clock import Clock, system_clock
from unispace.utils.locks import RoomLockRegistry, room_locks

logger = logging.getLogger(__name__)


class BookingService:
    def __init__(
        self,
        db: Session,
        actor: CurrentActor,
        clock: Clock = system_clock,
        notifier: Notifier = default_notifier,
        settings: Optional[Settings] = None,
        locks: RoomLockRegistry = room_locks,
    ):
        self.db = db
        self.actor = actor
        self.clock = clock
        self.notifier = notifier
        self.settings = settings or default_settings
        self.locks = locks
        self.repository = BookingRepository(db)
        self.engine = AvailabilityEngine(self.repository, self.settings)

    # -- validation -------------------------------------------------------

    def validate_interval(
        self, start: datetime, end: datetime, purpose: Optional[str]
    ) -> Tuple[datetime, datetime, str]:
        """Check a requested interval against the booking policy.

        Returns the interval as naive UTC and the trimmed purpose.
        """
        start = to_utc_naive(start)
        end = to_utc_naive(end)
        purpose = (purpose or "").strip()
        policy = self.settings

        if not purpose:
            raise ValidationError("Purpose is required")
        if len(purpose) > policy.purpose_max_length:
            raise ValidationError(
                f"Purpose cannot exceed {policy.purpose_max_length} characters"
            )
        if start >= end:
            raise ValidationError("End time must be after start time")

        duration = end - start
        if duration < timedelta(minutes=policy.min_duration_minutes):
            raise ValidationError(
                f"Booking must last at least {policy.min_duration_minutes} minutes"
            )
        if duration > timedelta(hours=policy.max_duration_hours):
            raise ValidationError(
                f"Booking cannot last longer than {policy.max_duration_hours} hours"
            )

        now = self.clock.now()
        if start < now + timedelta(minutes=policy.min_advance_minutes):
            raise ValidationError(
                f"Bookings must be made at least {policy.min_advance_minutes} minutes in advance"
            )
        if start > now + timedelta(days=policy.max_advance_days):
            raise ValidationError(
                f"Bookings can only be made up to {policy.max_advance_days} days in advance"
            )
        return start, end, purpose

    def _ensure_available(
        self, room_id: int, start: datetime, end: datetime, exclude_booking_id: Optional[int] = None
    ) -> None:
        result = self.engine.is_room_available(
            room_id, start, end, exclude_booking_id=exclude_booking_id
        )
        if result.available:
            return
        logger.warning(
            f"Conflict for room {room_id} at {start} - {end}: {result.describe()}"
        )
        if result.conflicting_schedules and not result.conflicting_bookings:
            reason = "The selected time conflicts with the room's schedule (classes or maintenance)"
        else:
            reason = "Room is not available for the selected time period"
        raise ConflictError(f"{reason}. Conflicts with: {result.describe()}", result.conflicts)

    # -- reads ------------------------------------------------------------

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repository.get_booking(booking_id)
        if booking is None:
            logger.warning(f"Booking not found: {booking_id}")
            raise NotFoundError(f"Booking with ID '{booking_id}' not found")
        return booking

    def list_bookings(
        self,
        skip: int = 0,
        limit: int = 100,
        user_id: Optional[int] = None,
        room_id: Optional[int] = None,
        status: Optional[BookingStatus] = None,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking)
        if user_id is not None:
            query = query.filter(Booking.user_id == user_id)
        if room_id is not None:
            query = query.filter(Booking.room_id == room_id)
        if status is not None:
            query = query.filter(Booking.status == status)
        if from_time is not None:
            query = query.filter(Booking.start_time >= to_utc_naive(from_time))
        if to_time is not None:
            query = query.filter(Booking.end_time <= to_utc_naive(to_time))
        bookings = (
            query.order_by(Booking.created_at.desc(), Booking.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        logger.debug(f"Retrieved {len(bookings)} bookings")
        return bookings

    def list_user_bookings(self, user_id: int) -> List[Booking]:
        return (
            self.db.query(Booking)
            .filter(Booking.user_id == user_id)
            .order_by(Booking.start_time.desc())
            .all()
        )

    def list_room_bookings(
        self,
        room_id: int,
        from_time: Optional[datetime] = None,
        to_time: Optional[datetime] = None,
    ) -> List[Booking]:
        query = self.db.query(Booking).filter(Booking.room_id == room_id)
        if from_time is not None and to_time is not None:
            query = query.filter(
                Booking.start_time >= to_utc_naive(from_time),
                Booking.end_time <= to_utc_naive(to_time),
            )
        return query.order_by(Booking.start_time).all()

    def count_pending(self) -> int:
        return self.db.query(Booking).filter(Booking.status == BookingStatus.PENDING).count()

    # -- writes -----------------------------------------------------------

    def request_booking(
        self, room_id: int, start: datetime, end: datetime, purpose: str
    ) -> Booking:
        """Create a Pending booking once the room is free for the interval."""
        logger.info(f"User {self.actor.user_id} is creating a booking for room {room_id}")
        start, end, purpose = self.validate_interval(start, end, purpose)

        with self.locks.hold(room_id):
            self._ensure_available(room_id, start, end)
            now = self.clock.now()
            booking = Booking(
                room_id=room_id,
                user_id=self.actor.user_id,
                start_time=start,
                end_time=end,
                purpose=purpose,
                status=BookingStatus.PENDING,
                admin_note="",
                created_at=now,
                created_by=self.actor.user_id,
            )
            with self.repository.guard("creating booking"):
                booking = self.repository.insert_booking(booking)

        logger.info(f"Booking created successfully: {booking.id}")
        return booking

    def update_booking(
        self, booking_id: int, start: datetime, end: datetime, purpose: str
    ) -> Booking:
        logger.info(f"User {self.actor.user_id} is updating booking: {booking_id}")
        booking = self.get_booking(booking_id)

        if booking.user_id != self.actor.user_id:
            raise ForbiddenError("You can only update your own bookings")
        if booking.status != BookingStatus.PENDING:
            raise BadRequestError(f"Cannot update booking with status: {booking.status.value}")
        if booking.start_time <= self.clock.now():
            raise BadRequestError("Cannot update a booking that has already started")

        start, end, purpose = self.validate_interval(start, end, purpose)

        with self.locks.hold(booking.room_id):
            self._ensure_available(booking.room_id, start, end, exclude_booking_id=booking.id)
            booking.start_time = start
            booking.end_time = end
            booking.purpose = purpose
            booking.touch(self.actor.user_id, self.clock.now())
            with self.repository.guard("updating booking"):
                booking = self.repository.save(booking)

        logger.info(f"Booking updated successfully: {booking.id}")
        return booking

    def decide_booking(
        self, booking_id: int, decision: BookingDecision, note: Optional[str] = None
    ) -> Booking:
        """Approve or reject a pending booking and tell the requester."""
        if not self.actor.is_admin:
            raise ForbiddenError("Only administrators can approve or reject bookings")
        decision = BookingDecision(decision)
        logger.info(
            f"Admin {self.actor.user_id} is confirming booking {booking_id} with decision: {decision.value}"
        )

        booking = self.get_booking(booking_id)
        target = decision.target_status
        if booking.status != BookingStatus.PENDING:
            raise BadRequestError(
                f"Can only confirm pending bookings. Current status: {booking.status.value}"
            )
        ensure_transition(booking.status, target)

        note = (note or "").strip()
        if target == BookingStatus.REJECTED and not note:
            raise ValidationError("Admin note is required when rejecting a booking")

        with self.repository.guard("confirming booking"):
            booking = self.repository.update_booking_status(
                booking, target, note, self.actor.user_id, self.clock.now()
            )
        logger.info(f"Booking {booking_id} {target.value.lower()} successfully")

        room_name = booking.room.name if booking.room else "Unknown Room"
        if target == BookingStatus.APPROVED:
            message = f"Your booking for '{room_name}' has been approved!"
            if note:
                message = f"Your booking for '{room_name}' has been approved. Note: {note}"
        else:
            message = f"Your booking for '{room_name}' has been rejected. Reason: {note}"
        self._notify(booking, message)
        return booking

    def cancel_booking(self, booking_id: int) -> bool:
        logger.info(f"User {self.actor.user_id} is cancelling booking: {booking_id}")
        booking = self.get_booking(booking_id)

        if booking.user_id != self.actor.user_id:
            raise ForbiddenError("You can only cancel your own bookings")
        if not can_transition(booking.status, BookingStatus.CANCELLED):
            raise BadRequestError(f"Cannot cancel booking with status: {booking.status.value}")
        if booking.start_time <= self.clock.now():
            raise BadRequestError("Cannot cancel a booking that has already started")

        with self.repository.guard("cancelling booking"):
            self.repository.update_booking_status(
                booking, BookingStatus.CANCELLED, None, self.actor.user_id, self.clock.now()
            )
        logger.info(f"Booking cancelled successfully: {booking_id}")
        return True

    def complete_booking(self, booking_id: int) -> Booking:
        booking = self.get_booking(booking_id)
        return self._complete(booking, self.clock.now())

    def _complete(self, booking: Booking, now: datetime) -> Booking:
        if booking.status != BookingStatus.APPROVED:
            raise BadRequestError("Can only complete approved bookings")
        if booking.end_time > now:
            raise BadRequestError("Cannot complete a booking that has not ended yet")
        ensure_transition(booking.status, BookingStatus.COMPLETED)

        with self.repository.guard("completing booking"):
            booking = self.repository.update_booking_status(
                booking, BookingStatus.COMPLETED, None, self.actor.user_id, now
            )
        logger.info(f"Booking completed successfully: {booking.id}")

        room_name = booking.room.name if booking.room else "Unknown Room"
        self._notify(booking, f"Your booking for '{room_name}' has been completed.")
        return booking

    def complete_expired_bookings(
        self, should_stop: Optional[Callable[[], bool]] = None
    ) -> int:
        """Complete every approved booking whose end time has passed.

        A failure on one booking is logged and the sweep moves on.
        ``should_stop`` is polled between bookings so a shutdown can cut
        the batch short.
        """
        logger.info("Checking for bookings to complete...")
        now = self.clock.now()
        expired = self.repository.list_expired_approved(now)
        if not expired:
            logger.debug("No expired bookings to complete.")
            return 0

        completed = 0
        for booking in expired:
            if should_stop is not None and should_stop():
                logger.info("Stop requested, abandoning the rest of the batch")
                break
            booking_id = booking.id
            try:
                self._complete(booking, now)
                completed += 1
            except Exception:
                self.db.rollback()
                logger.exception(f"Failed to complete booking {booking_id}")

        if completed:
            logger.info(f"Completed {completed} expired booking(s)")
        return completed

    def delete_booking(self, booking_id: int) -> bool:
        """Soft delete; only the requester (or an admin) may do it."""
        booking = self.get_booking(booking_id)
        if booking.user_id != self.actor.user_id and not self.actor.is_admin:
            raise ForbiddenError("You can only delete your own bookings")

        booking.soft_delete(self.actor.user_id, self.clock.now())
        with self.repository.guard("deleting booking"):
            self.repository.save(booking)
        logger.info(f"Booking soft deleted successfully: {booking_id}")
        return True

    def _notify(self, booking: Booking, message: str) -> None:
        try:
            self.notifier.notify(booking.user_id, booking.id, booking.status.value, message)
        except Exception as e:
            # the status change is already committed
            logger.warning(f"Failed to send notification for booking {booking.id}: {e}")
