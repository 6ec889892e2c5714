"""
Half-open interval arithmetic used by the availability engine.

All intervals are ``[start, end)``. Absolute intervals use naive UTC
datetimes; recurring intervals use a Sunday-based day of week, a
time-of-day range and an inclusive date range.

Buffers are applied as a minimum gap: two intervals conflict when they
overlap, or when the space between them is shorter than the buffer.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Optional

ZERO = timedelta(0)
END_OF_DAY = time(23, 59, 59)


@dataclass(frozen=True)
class TimeInterval:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class RecurringInterval:
    day_of_week: int
    start_time: time
    end_time: time
    valid_from: date
    valid_to: date

    def occurs_on(self, day: date) -> bool:
        return (
            day_of_week(day) == self.day_of_week
            and self.valid_from <= day <= self.valid_to
        )


@dataclass(frozen=True)
class DaySlice:
    """The part of an absolute interval that falls on one calendar day."""

    day: date
    day_of_week: int
    start_time: time
    end_time: time


def day_of_week(day: date) -> int:
    """Sunday = 0 .. Saturday = 6."""
    return (day.weekday() + 1) % 7


def time_offset(value: time) -> timedelta:
    """Distance from midnight, so time-of-day ranges can take a buffer."""
    return timedelta(
        hours=value.hour,
        minutes=value.minute,
        seconds=value.second,
        microseconds=value.microsecond,
    )


def overlaps(a_start, a_end, b_start, b_end, buffer: timedelta = ZERO) -> bool:
    """Canonical half-open overlap test with an optional buffer.

    Works for datetimes and for ``timedelta`` offsets. With a zero buffer,
    intervals that only touch (``a_end == b_start``) do not overlap.
    """
    return max(a_start, b_start - buffer) < min(a_end, b_end + buffer)


def time_ranges_overlap(
    a_start: time, a_end: time, b_start: time, b_end: time, buffer: timedelta = ZERO
) -> bool:
    return overlaps(
        time_offset(a_start),
        time_offset(a_end),
        time_offset(b_start),
        time_offset(b_end),
        buffer,
    )


def date_ranges_overlap(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    """Inclusive date-range intersection."""
    return start_a <= end_b and start_b <= end_a


def expand_across_days(interval: TimeInterval) -> List[DaySlice]:
    """Split an absolute interval into one slice per calendar day it covers.

    The first and last day are clipped to the real start and end time of
    day; days in between span the whole day. A slice that would be empty
    (an interval ending exactly at midnight) is dropped.
    """
    slices = []
    current = interval.start.date()
    last = interval.end.date()
    while current <= last:
        start_time = interval.start.time() if current == interval.start.date() else time.min
        end_time = interval.end.time() if current == last else END_OF_DAY
        if start_time < end_time:
            slices.append(DaySlice(current, day_of_week(current), start_time, end_time))
        current += timedelta(days=1)
    return slices


def recurring_intervals_conflict(
    a: RecurringInterval, b: RecurringInterval, buffer: timedelta = ZERO
) -> bool:
    """Two weekly patterns clash when they share a weekday, their validity
    ranges intersect and their time-of-day ranges overlap."""
    return (
        a.day_of_week == b.day_of_week
        and date_ranges_overlap(a.valid_from, a.valid_to, b.valid_from, b.valid_to)
        and time_ranges_overlap(a.start_time, a.end_time, b.start_time, b.end_time, buffer)
    )


def slice_conflicts_with(
    piece: DaySlice, recurring: RecurringInterval, buffer: Optional[timedelta] = None
) -> bool:
    if not recurring.occurs_on(piece.day):
        return False
    return time_ranges_overlap(
        piece.start_time,
        piece.end_time,
        recurring.start_time,
        recurring.end_time,
        buffer or ZERO,
    )


def to_utc_naive(value: datetime) -> datetime:
    """Normalise an aware datetime to naive UTC; naive values are taken as UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
