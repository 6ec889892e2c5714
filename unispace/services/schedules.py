"""
Schedule lifecycle: create, update, delete and bulk create recurring
weekly schedules.

Schedules are only checked against other schedules of the same room.
Bookings yield to schedules, so they are checked at booking time instead.
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from datetime import date, time
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from unispace.config import Settings, settings as default_settings
from unispace.engine.availability import AvailabilityEngine
from unispace.engine.intervals import RecurringInterval, day_of_week
from unispace.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from unispace.models.enums import ScheduleType
from unispace.models.room import Room
from unispace.models.schedule import Schedule
from unispace.repository import BookingRepository
from unispace.utils.auth import CurrentActor
from unispace.utils.clock import Clock, system_clock
from unispace.utils.locks import RoomLockRegistry, room_locks

logger = logging.getLogger(__name__)


@dataclass
class BulkScheduleError:
    room_id: int
    room_name: str
    day_of_week: Optional[int]
    message: str


@dataclass
class BulkScheduleResult:
    total_rooms_processed: int = 0
    successful_schedules: int = 0
    failed_schedules: int = 0
    created: List[Schedule] = field(default_factory=list)
    errors: List[BulkScheduleError] = field(default_factory=list)


def conflict_message(conflicts: List[Schedule], break_time_minutes: int) -> str:
    details = ", ".join(schedule.describe() for schedule in conflicts)
    return (
        f"Schedule conflicts with existing schedule(s): {details}. "
        f"Please ensure there is at least {break_time_minutes} minutes break time between schedules."
    )


class ScheduleService:
    def __init__(
        self,
        db: Session,
        actor: CurrentActor,
        clock: Clock = system_clock,
        settings: Optional[Settings] = None,
        locks: RoomLockRegistry = room_locks,
    ):
        self.db = db
        self.actor = actor
        self.clock = clock
        self.settings = settings or default_settings
        self.locks = locks
        self.repository = BookingRepository(db)
        self.engine = AvailabilityEngine(self.repository, self.settings)

    def _require_admin(self) -> None:
        if not self.actor.is_admin:
            raise ForbiddenError("Only administrators can manage schedules")

    def _break_time(self, break_time_minutes: Optional[int]) -> int:
        if break_time_minutes is None:
            return self.settings.schedule_break_time_minutes
        limit = self.settings.max_schedule_break_time_minutes
        if not 0 <= break_time_minutes <= limit:
            raise ValidationError(f"Break time must be between 0 and {limit} minutes")
        return break_time_minutes

    def _get_room(self, room_id: int) -> Room:
        room = self.repository.get_room(room_id)
        if room is None:
            raise NotFoundError(f"Room with ID '{room_id}' not found")
        return room

    def validate_pattern(
        self,
        title: Optional[str],
        day: int,
        start_time: time,
        end_time: time,
        start_date: date,
        end_date: date,
    ) -> str:
        """Check the field invariants of a schedule and return the trimmed title."""
        title = (title or "").strip()
        max_length = self.settings.schedule_title_max_length
        if not title:
            raise ValidationError("Schedule title is required")
        if len(title) > max_length:
            raise ValidationError(f"Title cannot exceed {max_length} characters")
        if not 0 <= day <= 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")
        if start_date > end_date:
            raise ValidationError("Start date must not be after end date")
        # one-time schedule
        if start_date == end_date and day_of_week(start_date) != day:
            raise ValidationError(
                "A one-time schedule must fall on the day of week of its date"
            )
        return title

    # -- reads ------------------------------------------------------------

    def get_schedule(self, schedule_id: int) -> Schedule:
        schedule = self.repository.get_schedule(schedule_id)
        if schedule is None:
            logger.warning(f"Schedule not found: {schedule_id}")
            raise NotFoundError(f"Schedule with ID '{schedule_id}' not found")
        return schedule

    def list_schedules(
        self,
        skip: int = 0,
        limit: int = 100,
        room_id: Optional[int] = None,
        schedule_type: Optional[ScheduleType] = None,
        day: Optional[int] = None,
    ) -> List[Schedule]:
        if day is not None and not 0 <= day <= 6:
            raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        query = self.db.query(Schedule)
        if room_id is not None:
            query = query.filter(Schedule.room_id == room_id)
        if schedule_type is not None:
            query = query.filter(Schedule.schedule_type == schedule_type)
        if day is not None:
            query = query.filter(Schedule.day_of_week == day)
        return (
            query.order_by(Schedule.day_of_week, Schedule.start_time, Schedule.id)
            .offset(skip)
            .limit(limit)
            .all()
        )

    def list_schedules_for_room_on(self, room_id: int, on: date) -> List[Schedule]:
        """Schedules that take effect in the room on the given date."""
        return (
            self.db.query(Schedule)
            .filter(
                Schedule.room_id == room_id,
                Schedule.day_of_week == day_of_week(on),
                Schedule.start_date <= on,
                Schedule.end_date >= on,
            )
            .order_by(Schedule.start_time)
            .all()
        )

    # -- writes -----------------------------------------------------------

    def create_schedule(
        self,
        room_id: int,
        schedule_type: ScheduleType,
        title: str,
        day: int,
        start_time: time,
        end_time: time,
        start_date: date,
        end_date: date,
        break_time_minutes: Optional[int] = None,
    ) -> Schedule:
        self._require_admin()
        logger.info(f"Creating new schedule: {title} for room: {room_id}")
        title = self.validate_pattern(title, day, start_time, end_time, start_date, end_date)
        break_time = self._break_time(break_time_minutes)
        self._get_room(room_id)

        pattern = RecurringInterval(day, start_time, end_time, start_date, end_date)
        with self.locks.hold(room_id):
            conflicts = self.engine.find_schedule_slot_conflicts(room_id, pattern, break_time)
            if conflicts:
                logger.warning(f"Schedule '{title}' conflicts with {len(conflicts)} schedule(s)")
                raise ConflictError(conflict_message(conflicts, break_time), conflicts)

            schedule = self._build(
                room_id, schedule_type, title, day, start_time, end_time, start_date, end_date
            )
            with self.repository.guard("creating schedule"):
                schedule = self.repository.insert_schedule(schedule)

        logger.info(f"Schedule created successfully: {schedule.id}")
        return schedule

    def update_schedule(
        self,
        schedule_id: int,
        room_id: int,
        schedule_type: ScheduleType,
        title: str,
        day: int,
        start_time: time,
        end_time: time,
        start_date: date,
        end_date: date,
        break_time_minutes: Optional[int] = None,
    ) -> Schedule:
        self._require_admin()
        logger.info(f"Updating schedule: {schedule_id}")
        schedule = self.get_schedule(schedule_id)
        title = self.validate_pattern(title, day, start_time, end_time, start_date, end_date)
        break_time = self._break_time(break_time_minutes)
        self._get_room(room_id)

        pattern = RecurringInterval(day, start_time, end_time, start_date, end_date)
        with self.locks.hold(room_id):
            conflicts = self.engine.find_schedule_slot_conflicts(
                room_id, pattern, break_time, exclude_schedule_id=schedule.id
            )
            if conflicts:
                logger.warning(f"Schedule {schedule_id} update conflicts with {len(conflicts)} schedule(s)")
                raise ConflictError(conflict_message(conflicts, break_time), conflicts)

            schedule.room_id = room_id
            schedule.schedule_type = schedule_type
            schedule.title = title
            schedule.day_of_week = day
            schedule.start_time = start_time
            schedule.end_time = end_time
            schedule.start_date = start_date
            schedule.end_date = end_date
            schedule.touch(self.actor.user_id, self.clock.now())
            with self.repository.guard("updating schedule"):
                schedule = self.repository.update_schedule(schedule)

        logger.info(f"Schedule updated successfully: {schedule.id}")
        return schedule

    def delete_schedule(self, schedule_id: int) -> bool:
        """Soft delete. Bookings made around the schedule are left alone."""
        self._require_admin()
        schedule = self.get_schedule(schedule_id)
        schedule.soft_delete(self.actor.user_id, self.clock.now())
        with self.repository.guard("deleting schedule"):
            self.repository.save(schedule)
        logger.info(f"Schedule soft deleted successfully: {schedule_id}")
        return True

    def bulk_create_schedules(
        self,
        room_ids: Iterable[int],
        days_of_week: Iterable[int],
        schedule_type: ScheduleType,
        title: str,
        start_time: time,
        end_time: time,
        start_date: date,
        end_date: date,
        break_time_minutes: Optional[int] = None,
        skip_conflicts: bool = False,
    ) -> BulkScheduleResult:
        """Create one schedule per (room, day of week) pair.

        Without ``skip_conflicts`` the first problem aborts the whole batch
        and nothing is written. With it, failing pairs are reported in the
        result and the others are created.
        """
        self._require_admin()
        room_ids = list(dict.fromkeys(room_ids))
        days = sorted(set(days_of_week))
        if not room_ids:
            raise ValidationError("Please select at least one room")
        if not days:
            raise ValidationError("Please select at least one day of week")
        for day in days:
            if not 0 <= day <= 6:
                raise ValidationError("Day of week must be between 0 (Sunday) and 6 (Saturday)")
        if start_date == end_date and len(days) > 1:
            raise ValidationError("A one-time schedule can only use a single day of week")
        title = self.validate_pattern(title, days[0], start_time, end_time, start_date, end_date)
        break_time = self._break_time(break_time_minutes)

        logger.info(f"Bulk creating '{title}' for {len(room_ids)} room(s) on {len(days)} day(s)")
        result = BulkScheduleResult(total_rooms_processed=len(room_ids))
        pending: List[Schedule] = []

        # room locks are taken in ascending id order
        with ExitStack() as held:
            for room_id in sorted(room_ids):
                held.enter_context(self.locks.hold(room_id))

            for room_id in room_ids:
                room = self.repository.get_room(room_id)
                if room is None:
                    message = f"Room with ID '{room_id}' not found"
                    if not skip_conflicts:
                        raise NotFoundError(message)
                    result.errors.append(BulkScheduleError(room_id, "Unknown", None, message))
                    result.failed_schedules += len(days)
                    continue

                for day in days:
                    pattern = RecurringInterval(day, start_time, end_time, start_date, end_date)
                    conflicts = self.engine.find_schedule_slot_conflicts(room_id, pattern, break_time)
                    if conflicts:
                        message = conflict_message(conflicts, break_time)
                        if not skip_conflicts:
                            raise ConflictError(f"{room.name}: {message}", conflicts)
                        result.errors.append(BulkScheduleError(room_id, room.name, day, message))
                        result.failed_schedules += 1
                        continue
                    pending.append(
                        self._build(
                            room_id, schedule_type, title, day, start_time, end_time, start_date, end_date
                        )
                    )

            if pending:
                with self.repository.guard("bulk creating schedules"):
                    self.db.add_all(pending)
                    self.db.commit()
                    for schedule in pending:
                        self.db.refresh(schedule)

        result.created = pending
        result.successful_schedules = len(pending)
        logger.info(
            f"Bulk create finished: {result.successful_schedules} created, "
            f"{result.failed_schedules} failed"
        )
        return result

    def _build(
        self,
        room_id: int,
        schedule_type: ScheduleType,
        title: str,
        day: int,
        start_time: time,
        end_time: time,
        start_date: date,
        end_date: date,
    ) -> Schedule:
        return Schedule(
            room_id=room_id,
            schedule_type=schedule_type,
            title=title,
            day_of_week=day,
            start_time=start_time,
            end_time=end_time,
            start_date=start_date,
            end_date=end_date,
            created_at=self.clock.now(),
            created_by=self.actor.user_id,
        )
