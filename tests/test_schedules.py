from datetime import date, time
import pytest

from unispace.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from unispace.models.enums import ScheduleType
from unispace.models.room import Room
from unispace.models.schedule import Schedule
from unispace.services.schedules import ScheduleService

from tests.conf_tests import (
    actor_for,
    clear_db,
    clock,
    test_db,
    test_user,
    admin_user,
    test_campus,
    test_room,
)

TERM = dict(start_date=date(2025, 9, 1), end_date=date(2025, 12, 20))


@pytest.fixture
def service(test_db, admin_user, clock):
    return ScheduleService(test_db, actor_for(admin_user), clock=clock)


@pytest.fixture
def second_room(test_db, test_campus):
    room = Room(campus_id=test_campus.id, name="Room 102", capacity=20)
    test_db.add(room)
    test_db.commit()
    test_db.refresh(room)
    return room


def create(service, room_id, title="Algorithms", day=1, start=time(9), end=time(10), **kwargs):
    values = dict(TERM)
    values.update(kwargs)
    return service.create_schedule(
        room_id=room_id,
        schedule_type=ScheduleType.ACADEMIC_COURSE,
        title=title,
        day=day,
        start_time=start,
        end_time=end,
        **values,
    )


def test_create_schedule(service, test_room):
    schedule = create(service, test_room.id, title="  Algorithms ")
    assert schedule.id is not None
    assert schedule.title == "Algorithms"
    assert schedule.day_name == "Monday"
    assert schedule.describe() == "Algorithms (09:00 - 10:00)"


def test_non_admin_cannot_create(test_db, test_user, test_room, clock):
    service = ScheduleService(test_db, actor_for(test_user), clock=clock)
    with pytest.raises(ForbiddenError):
        create(service, test_room.id)


def test_unknown_room(service):
    with pytest.raises(NotFoundError):
        create(service, 999)


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(title="   "),
        dict(title="x" * 201),
        dict(start=time(10), end=time(9)),
        dict(day=7),
        dict(start_date=date(2025, 12, 21), end_date=date(2025, 12, 20)),
        dict(break_time_minutes=121),
    ],
)
def test_invalid_schedule(service, test_room, kwargs):
    with pytest.raises(ValidationError):
        create(service, test_room.id, **kwargs)


def test_one_time_schedule_must_match_weekday(service, test_room):
    # 2025-09-01 is a Monday
    create(service, test_room.id, day=1, start_date=date(2025, 9, 1), end_date=date(2025, 9, 1))
    with pytest.raises(ValidationError):
        create(service, test_room.id, day=2, start=time(14), end=time(15),
               start_date=date(2025, 9, 1), end_date=date(2025, 9, 1))


def test_conflict_lists_clashing_schedules(service, test_room):
    create(service, test_room.id)
    with pytest.raises(ConflictError) as exc_info:
        create(service, test_room.id, title="Databases", start=time(10, 10), end=time(11))
    message = exc_info.value.message
    assert "Algorithms (09:00 - 10:00)" in message
    assert "at least 15 minutes break time" in message
    assert len(exc_info.value.conflicts) == 1


def test_touching_schedules_conflict_with_break_time(service, test_room):
    create(service, test_room.id)
    with pytest.raises(ConflictError):
        create(service, test_room.id, title="Databases", start=time(10), end=time(11))


def test_touching_schedules_allowed_without_break_time(service, test_room):
    create(service, test_room.id)
    schedule = create(service, test_room.id, title="Databases", start=time(10), end=time(11),
                      break_time_minutes=0)
    assert schedule.start_time == time(10)


def test_schedule_after_break_time(service, test_room):
    create(service, test_room.id)
    create(service, test_room.id, title="Databases", start=time(10, 15), end=time(11))


def test_other_day_or_term_does_not_conflict(service, test_room):
    create(service, test_room.id)
    create(service, test_room.id, title="Tuesday", day=2)
    create(service, test_room.id, title="Spring", start_date=date(2026, 1, 5), end_date=date(2026, 5, 4))


def test_other_room_does_not_conflict(service, test_room, second_room):
    create(service, test_room.id)
    create(service, second_room.id)


def test_update_excludes_itself(service, test_room):
    schedule = create(service, test_room.id)
    updated = service.update_schedule(
        schedule.id,
        room_id=test_room.id,
        schedule_type=ScheduleType.ACADEMIC_COURSE,
        title="Algorithms II",
        day=1,
        start_time=time(9, 30),
        end_time=time(10, 30),
        **TERM,
    )
    assert updated.title == "Algorithms II"
    assert updated.start_time == time(9, 30)


def test_update_into_conflict(service, test_room):
    create(service, test_room.id)
    other = create(service, test_room.id, title="Databases", start=time(13), end=time(14))
    with pytest.raises(ConflictError):
        service.update_schedule(
            other.id,
            room_id=test_room.id,
            schedule_type=ScheduleType.ACADEMIC_COURSE,
            title="Databases",
            day=1,
            start_time=time(9, 30),
            end_time=time(11),
            **TERM,
        )


def test_deleted_schedule_frees_the_slot(service, test_room):
    schedule = create(service, test_room.id)
    assert service.delete_schedule(schedule.id) is True
    with pytest.raises(NotFoundError):
        service.get_schedule(schedule.id)
    create(service, test_room.id, title="Replacement")


def test_list_and_filter(service, test_room, second_room):
    create(service, test_room.id, day=3)
    create(service, test_room.id, title="Early", day=1)
    maintenance = service.create_schedule(
        room_id=second_room.id,
        schedule_type=ScheduleType.RECURRING_MAINTENANCE,
        title="Cleaning",
        day=1,
        start_time=time(6),
        end_time=time(7),
        **TERM,
    )
    assert [s.day_of_week for s in service.list_schedules(room_id=test_room.id)] == [1, 3]
    assert [s.id for s in service.list_schedules(schedule_type=ScheduleType.RECURRING_MAINTENANCE)] == [maintenance.id]
    assert len(service.list_schedules(day=1)) == 2
    with pytest.raises(ValidationError):
        service.list_schedules(day=9)


def test_schedules_for_room_on_date(service, test_room):
    create(service, test_room.id)
    assert len(service.list_schedules_for_room_on(test_room.id, date(2025, 9, 8))) == 1
    assert service.list_schedules_for_room_on(test_room.id, date(2025, 9, 9)) == []
    assert service.list_schedules_for_room_on(test_room.id, date(2025, 12, 22)) == []


# Bulk creation

def bulk(service, room_ids, days, skip_conflicts=False):
    return service.bulk_create_schedules(
        room_ids=room_ids,
        days_of_week=days,
        schedule_type=ScheduleType.ACADEMIC_COURSE,
        title="Lecture",
        start_time=time(9),
        end_time=time(10),
        skip_conflicts=skip_conflicts,
        **TERM,
    )


def test_bulk_creates_every_pair(service, test_room, second_room):
    result = bulk(service, [test_room.id, second_room.id], [1, 3])
    assert result.total_rooms_processed == 2
    assert result.successful_schedules == 4
    assert result.failed_schedules == 0
    assert len(service.list_schedules()) == 4


def test_bulk_aborts_on_conflict(service, test_db, test_room, second_room):
    create(service, second_room.id, day=3)
    with pytest.raises(ConflictError):
        bulk(service, [test_room.id, second_room.id], [1, 3])
    assert test_db.query(Schedule).count() == 1


def test_bulk_skips_conflicts(service, test_room, second_room):
    create(service, second_room.id, day=3)
    result = bulk(service, [test_room.id, second_room.id], [1, 3], skip_conflicts=True)
    assert result.successful_schedules == 3
    assert result.failed_schedules == 1
    assert result.errors[0].room_id == second_room.id
    assert result.errors[0].day_of_week == 3


def test_bulk_reports_unknown_room_when_skipping(service, test_room):
    result = bulk(service, [test_room.id, 999], [1], skip_conflicts=True)
    assert result.successful_schedules == 1
    assert result.errors[0].room_id == 999


def test_bulk_requires_days(service, test_room):
    with pytest.raises(ValidationError):
        bulk(service, [test_room.id], [])
