"""
Availability engine: the authoritative answer to "is this room free?".

The engine only reads. It compares a candidate interval against the room's
pending/approved bookings (with the break-time buffer) and against the
room's recurring schedules (without a buffer: schedules are fixed and
bookings must fit strictly outside them). Callers that go on to write
must hold the room lock from ``unispace.utils.locks`` across the check and
the write.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional, Union

from unispace.config import Settings, settings as default_settings
from unispace.engine.intervals import (
    RecurringInterval,
    TimeInterval,
    expand_across_days,
    overlaps,
    recurring_intervals_conflict,
    slice_conflicts_with,
)
from unispace.errors import BadRequestError, NotFoundError
from unispace.models.booking import Booking
from unispace.models.room import Room
from unispace.models.schedule import Schedule
from unispace.repository import BookingRepository

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    available: bool
    conflicts: List[Union[Booking, Schedule]] = field(default_factory=list)

    @property
    def conflicting_bookings(self) -> List[Booking]:
        return [c for c in self.conflicts if isinstance(c, Booking)]

    @property
    def conflicting_schedules(self) -> List[Schedule]:
        return [c for c in self.conflicts if isinstance(c, Schedule)]

    def describe(self) -> str:
        return ", ".join(c.describe() for c in self.conflicts)


def schedule_pattern(schedule: Schedule) -> RecurringInterval:
    return RecurringInterval(
        day_of_week=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        valid_from=schedule.start_date,
        valid_to=schedule.end_date,
    )


def booking_conflicts(
    interval: TimeInterval, bookings: List[Booking], buffer: timedelta
) -> List[Booking]:
    return [
        booking
        for booking in bookings
        if overlaps(interval.start, interval.end, booking.start_time, booking.end_time, buffer)
    ]


def schedule_conflicts(interval: TimeInterval, schedules: List[Schedule]) -> List[Schedule]:
    """Schedules hit by any calendar day the interval covers."""
    pieces = expand_across_days(interval)
    clashing = []
    for schedule in schedules:
        pattern = schedule_pattern(schedule)
        if any(slice_conflicts_with(piece, pattern) for piece in pieces):
            clashing.append(schedule)
    return clashing


class AvailabilityEngine:
    def __init__(self, repository: BookingRepository, settings: Optional[Settings] = None):
        self.repository = repository
        self.settings = settings or default_settings

    def _buffer(self, buffer_minutes: Optional[int]) -> timedelta:
        if buffer_minutes is None:
            buffer_minutes = self.settings.break_time_minutes
        return timedelta(minutes=buffer_minutes)

    def get_bookable_room(self, room_id: int) -> Room:
        room = self.repository.get_room(room_id)
        if room is None:
            logger.warning(f"Room not found: {room_id}")
            raise NotFoundError(f"Room with ID '{room_id}' not found")
        self.ensure_bookable(room)
        return room

    @staticmethod
    def ensure_bookable(room: Room) -> None:
        if not room.is_bookable:
            logger.warning(
                f"Room {room.id} is not bookable: status={room.room_status.value}, "
                f"approval={room.approval_status.value}"
            )
            raise BadRequestError(
                f"Room is not available for booking. Current status: {room.room_status.value}"
            )

    def find_booking_conflicts(
        self,
        room_id: int,
        start: datetime,
        end: datetime,
        buffer_minutes: Optional[int] = None,
        exclude_booking_id: Optional[int] = None,
    ) -> List[Booking]:
        bookings = self.repository.list_active_bookings(room_id, exclude_booking_id)
        return booking_conflicts(TimeInterval(start, end), bookings, self._buffer(buffer_minutes))

    def find_schedule_conflicts(self, room_id: int, start: datetime, end: datetime) -> List[Schedule]:
        schedules = self.repository.list_schedules(room_id)
        return schedule_conflicts(TimeInterval(start, end), schedules)

    def is_room_available(
        self,
        room_id: int,
        start: datetime,
        end: datetime,
        buffer_minutes: Optional[int] = None,
        exclude_booking_id: Optional[int] = None,
    ) -> AvailabilityResult:
        """Check a one-shot interval against bookings and schedules of a room.

        Raises ``NotFoundError`` for an unknown room and ``BadRequestError``
        for a room that is not bookable.
        """
        self.get_bookable_room(room_id)
        conflicts = []
        conflicts.extend(
            self.find_booking_conflicts(room_id, start, end, buffer_minutes, exclude_booking_id)
        )
        conflicts.extend(self.find_schedule_conflicts(room_id, start, end))
        if conflicts:
            logger.debug(
                f"Room {room_id} unavailable for {start} - {end}: {len(conflicts)} conflict(s)"
            )
        return AvailabilityResult(available=not conflicts, conflicts=conflicts)

    def find_schedule_slot_conflicts(
        self,
        room_id: int,
        pattern: RecurringInterval,
        buffer_minutes: Optional[int] = None,
        exclude_schedule_id: Optional[int] = None,
    ) -> List[Schedule]:
        """Schedules on the room that clash with a weekly pattern, break time included."""
        if buffer_minutes is None:
            buffer_minutes = self.settings.schedule_break_time_minutes
        buffer = timedelta(minutes=buffer_minutes)
        candidates = self.repository.list_schedules(
            room_id, exclude_id=exclude_schedule_id, day_of_week=pattern.day_of_week
        )
        return [
            schedule
            for schedule in candidates
            if recurring_intervals_conflict(pattern, schedule_pattern(schedule), buffer)
        ]
