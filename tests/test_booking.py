import pytest
from datetime import datetime, timedelta, time
from fastapi import status
from dataclasses import dataclass

from unispace.models.booking import Booking
from unispace.models.enums import BookingStatus
from unispace.models.room import Room
from unispace.utils.clock import system_clock

from tests.conf_tests import (
    client,
    clear_db,
    test_db,
    test_user,
    other_user,
    admin_user,
    auth_headers,
    admin_headers,
    login_headers,
    test_campus,
    test_room,
)

DAY_AFTER_TOMORROW = (system_clock.now() + timedelta(days=2)).date()


@dataclass
class BookingInfo:
    start_time: datetime
    end_time: datetime
    purpose: str


TEST_BOOKING_DATA = BookingInfo(
    start_time=datetime.combine(DAY_AFTER_TOMORROW, time(10)),
    end_time=datetime.combine(DAY_AFTER_TOMORROW, time(11)),
    purpose="Team Meeting",
)


def booking_payload(room_id, start=None, end=None, purpose=None):
    return {
        "room_id": room_id,
        "start_time": (start or TEST_BOOKING_DATA.start_time).isoformat(),
        "end_time": (end or TEST_BOOKING_DATA.end_time).isoformat(),
        "purpose": purpose or TEST_BOOKING_DATA.purpose,
    }


# Fixtures
@pytest.fixture
def test_booking(test_db, test_room, test_user): # pylint: disable=redefined-outer-name
    booking = Booking(
        room_id=test_room.id,
        user_id=test_user.id,
        start_time=TEST_BOOKING_DATA.start_time,
        end_time=TEST_BOOKING_DATA.end_time,
        purpose=TEST_BOOKING_DATA.purpose,
    )
    test_db.add(booking)
    test_db.commit()
    test_db.refresh(booking)
    return booking


# Tests
# pylint: disable-next=redefined-outer-name
def test_create_booking_success(auth_headers, test_room):
    response = client.post("/bookings/", json=booking_payload(test_room.id), headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["room_id"] == test_room.id
    assert data["purpose"] == TEST_BOOKING_DATA.purpose
    assert data["status"] == BookingStatus.PENDING.value
    assert data["start_time"] == TEST_BOOKING_DATA.start_time.isoformat()


# pylint: disable-next=redefined-outer-name
def test_create_booking_unauthorized(test_room):
    response = client.post("/bookings/", json=booking_payload(test_room.id))
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


# pylint: disable-next=redefined-outer-name
def test_create_booking_too_soon(auth_headers, test_room):
    start = system_clock.now() + timedelta(minutes=10)
    response = client.post(
        "/bookings/",
        json=booking_payload(test_room.id, start=start, end=start + timedelta(hours=1)),
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert "in advance" in response.json()["detail"]


# pylint: disable-next=redefined-outer-name
def test_create_booking_end_before_start(auth_headers, test_room):
    response = client.post(
        "/bookings/",
        json=booking_payload(test_room.id, start=TEST_BOOKING_DATA.end_time, end=TEST_BOOKING_DATA.start_time),
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST


# pylint: disable-next=redefined-outer-name
def test_create_booking_room_not_found(auth_headers):
    response = client.post("/bookings/", json=booking_payload(999), headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_create_booking_overlapping(auth_headers, test_room, test_booking):
    response = client.post(
        "/bookings/",
        json=booking_payload(
            test_room.id,
            start=TEST_BOOKING_DATA.end_time + timedelta(minutes=5),
            end=TEST_BOOKING_DATA.end_time + timedelta(hours=1),
        ),
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_409_CONFLICT
    data = response.json()
    assert "Room is not available" in data["detail"]
    assert len(data["conflicts"]) == 1


# pylint: disable-next=redefined-outer-name
def test_get_bookings_only_own(auth_headers, test_booking, other_user):
    response = client.get("/bookings/", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == test_booking.id

    response = client.get("/bookings/", headers=login_headers(other_user))
    assert response.json() == []


# pylint: disable-next=redefined-outer-name
def test_get_bookings_as_admin(admin_headers, test_booking):
    response = client.get("/bookings/?booking_status=Pending", headers=admin_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()] == [test_booking.id]


# pylint: disable-next=redefined-outer-name
def test_get_my_bookings(auth_headers, test_booking):
    response = client.get("/bookings/me", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert [b["id"] for b in response.json()] == [test_booking.id]


# pylint: disable-next=redefined-outer-name
def test_get_booking(auth_headers, test_booking):
    response = client.get(f"/bookings/{test_booking.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == test_booking.id


# pylint: disable-next=redefined-outer-name
def test_get_booking_of_other_user_is_forbidden(test_booking, other_user):
    response = client.get(f"/bookings/{test_booking.id}", headers=login_headers(other_user))
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_get_booking_not_found(auth_headers):
    response = client.get("/bookings/999", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_update_booking_unauthorized(test_booking):
    response = client.put(
        f"/bookings/{test_booking.id}", json=booking_payload(test_booking.room_id, purpose="Should Fail")
    )
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


# pylint: disable-next=redefined-outer-name
def test_update_booking(auth_headers, test_booking):
    new_start = TEST_BOOKING_DATA.start_time + timedelta(hours=2)
    response = client.put(
        f"/bookings/{test_booking.id}",
        json=booking_payload(test_booking.room_id, start=new_start, end=new_start + timedelta(hours=1), purpose="Moved"),
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["start_time"] == new_start.isoformat()
    assert data["purpose"] == "Moved"


# pylint: disable-next=redefined-outer-name
def test_update_booking_of_other_user(test_booking, other_user):
    response = client.put(
        f"/bookings/{test_booking.id}",
        json=booking_payload(test_booking.room_id, purpose="Mine now"),
        headers=login_headers(other_user),
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_cancel_booking_twice(auth_headers, test_booking):
    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == BookingStatus.CANCELLED.value

    response = client.post(f"/bookings/{test_booking.id}/cancel", headers=auth_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["detail"] == "Cannot cancel booking with status: Cancelled"


# pylint: disable-next=redefined-outer-name
def test_approve_booking(admin_headers, test_booking):
    response = client.post(
        f"/bookings/{test_booking.id}/decision", json={"decision": "Approve"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    assert response.json()["status"] == BookingStatus.APPROVED.value


# pylint: disable-next=redefined-outer-name
def test_reject_booking_needs_reason(admin_headers, test_booking):
    response = client.post(
        f"/bookings/{test_booking.id}/decision",
        json={"decision": "Reject", "admin_note": "No"},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    response = client.post(
        f"/bookings/{test_booking.id}/decision",
        json={"decision": "Reject", "admin_note": "Reserved for exams"},
        headers=admin_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == BookingStatus.REJECTED.value
    assert data["admin_note"] == "Reserved for exams"


# pylint: disable-next=redefined-outer-name
def test_decision_requires_admin(auth_headers, test_booking):
    response = client.post(
        f"/bookings/{test_booking.id}/decision", json={"decision": "Approve"}, headers=auth_headers
    )
    assert response.status_code == status.HTTP_403_FORBIDDEN


# pylint: disable-next=redefined-outer-name
def test_count_pending(admin_headers, test_booking):
    response = client.get("/bookings/pending/count", headers=admin_headers)
    assert response.json() == {"pending": 1}


# pylint: disable-next=redefined-outer-name
def test_delete_booking(auth_headers, test_booking, test_db):
    response = client.delete(f"/bookings/{test_booking.id}", headers=auth_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    test_db.expire_all()
    assert test_db.query(Booking).filter(Booking.id == test_booking.id).first() is None
    hidden = (
        test_db.query(Booking)
        .execution_options(include_deleted=True)
        .filter(Booking.id == test_booking.id)
        .first()
    )
    assert hidden is not None and hidden.is_deleted


# pylint: disable-next=redefined-outer-name
def test_optimize_booking_picks_smallest_room(auth_headers, test_db, test_campus, test_room):
    small = Room(campus_id=test_campus.id, name="Room 5", capacity=8)
    tiny = Room(campus_id=test_campus.id, name="Room 2", capacity=2)
    test_db.add_all([small, tiny])
    test_db.commit()
    optimize_request = {
        "start_time": TEST_BOOKING_DATA.start_time.isoformat(),
        "end_time": TEST_BOOKING_DATA.end_time.isoformat(),
        "purpose": "Optimized Meeting",
        "required_capacity": 5,
    }
    response = client.post("/bookings/optimize", json=optimize_request, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["room_id"] == small.id
    assert data["purpose"] == "Optimized Meeting"

    # the small room is taken now, so the next request falls back to the larger one
    response = client.post("/bookings/optimize", json=optimize_request, headers=auth_headers)
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["room_id"] == test_room.id

    response = client.post("/bookings/optimize", json=optimize_request, headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


# pylint: disable-next=redefined-outer-name
def test_get_available_slots(auth_headers, test_room, test_booking):
    response = client.get(
        f"/bookings/available_slots/?room_id={test_room.id}&date={DAY_AFTER_TOMORROW}",
        headers=auth_headers,
    )
    assert response.status_code == status.HTTP_200_OK
    slots = response.json()
    starts = [slot["start_time"] for slot in slots]
    # opening hours 07:00-22:00 in one hour steps; the 10:00 booking blocks
    # 09:00, 10:00 and 11:00 once the break time is applied
    assert len(slots) == 12
    assert TEST_BOOKING_DATA.start_time.isoformat() not in starts
    assert datetime.combine(DAY_AFTER_TOMORROW, time(12)).isoformat() in starts
