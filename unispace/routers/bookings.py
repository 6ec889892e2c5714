from typing import List, Optional
from fastapi import APIRouter, Depends, status
from datetime import datetime, date
from sqlalchemy.orm import Session
from unispace.db import get_db
from unispace.errors import ForbiddenError, NotFoundError
from unispace.models.enums import BookingStatus
from unispace.schemas.booking import (
    AvailableSlot,
    BookingCreate,
    BookingDecisionRequest,
    BookingOptimizeRequest,
    BookingResponse,
    BookingUpdate,
)
from unispace.services.bookings import BookingService
from unispace.utils.auth import CurrentActor, get_current_actor, require_admin
from unispace.utils.scheduler import find_free_slots, find_optimal_room
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


def get_booking_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(get_current_actor),
) -> BookingService:
    return BookingService(db, actor)


def get_admin_booking_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
) -> BookingService:
    return BookingService(db, actor)


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Request a room for an interval. The booking starts as Pending. Requires authentication."
)
def create_booking(
    booking: BookingCreate,
    service: BookingService = Depends(get_booking_service),
):
    """
    Request a room for an interval.
    Requires authentication.

    - **room_id**: ID of the room to book.
    - **start_time**: Start of the booking, at least 30 minutes and at most 30 days ahead.
    - **end_time**: End of the booking; 30 minutes to 24 hours after the start.
    - **purpose**: Purpose of the booking.

    Returns the created Pending booking. Responds 409 with the blocking
    bookings or schedules when the room is taken.
    """
    return service.request_booking(
        booking.room_id, booking.start_time, booking.end_time, booking.purpose
    )


@router.get(
    "/",
    response_model=List[BookingResponse],
    summary="List bookings",
    description="Retrieve a paginated list of bookings. Non-admins only see their own."
)
def get_bookings(
    skip: int = 0,
    limit: int = 100,
    user_id: Optional[int] = None,
    room_id: Optional[int] = None,
    booking_status: Optional[BookingStatus] = None,
    from_time: Optional[datetime] = None,
    to_time: Optional[datetime] = None,
    service: BookingService = Depends(get_booking_service),
):
    """
    Retrieve a list of bookings, newest first.

    - **skip**: Number of bookings to skip.
    - **limit**: Maximum number of bookings to return.
    - **user_id**, **room_id**, **booking_status**, **from_time**, **to_time**: optional filters.
    """
    if not service.actor.is_admin:
        user_id = service.actor.user_id
    return service.list_bookings(
        skip=skip,
        limit=limit,
        user_id=user_id,
        room_id=room_id,
        status=booking_status,
        from_time=from_time,
        to_time=to_time,
    )


@router.get(
    "/me",
    response_model=List[BookingResponse],
    summary="List my bookings",
)
def get_my_bookings(service: BookingService = Depends(get_booking_service)):
    return service.list_user_bookings(service.actor.user_id)


@router.get("/pending/count", summary="Count pending bookings")
def count_pending_bookings(service: BookingService = Depends(get_admin_booking_service)):
    """
    Number of bookings waiting for an admin decision.
    Admin only.
    """
    return {"pending": service.count_pending()}


@router.get(
    "/available_slots/",
    response_model=List[AvailableSlot],
    summary="List available time slots",
    description="Retrieve free time slots for a room on a specific date. Requires authentication."
)
def get_available_slots(
    room_id: int,
    date: date,
    duration: int = 60,
    service: BookingService = Depends(get_booking_service),
):
    """
    List available time slots for a room inside the opening hours.

    - **room_id**: ID of the room to check availability for.
    - **date**: Date to check availability (e.g., 2025-05-04).
    - **duration**: Duration of each slot in minutes (default: 60).

    Returns a list of available slots with start_time and end_time.
    """
    logger.debug(f"Fetching available slots for room_id: {room_id}, date: {date}, duration: {duration} minutes")
    slots = find_free_slots(service.engine, room_id, date, duration)
    logger.debug(f"Found {len(slots)} available slots for room_id: {room_id}")
    return slots


@router.post(
    "/optimize",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Optimize booking",
    description="Find and book the smallest free room with enough capacity. Requires authentication."
)
def optimize_booking(
    booking: BookingOptimizeRequest,
    service: BookingService = Depends(get_booking_service),
):
    """
    Find and book the optimal room for an interval.
    Requires authentication.

    - **start_time**, **end_time**: The interval to book.
    - **required_capacity**: Required room capacity.
    - **campus_id**: (Optional) Restrict the search to one campus.
    - **purpose**: Purpose of the booking.

    Returns the created booking.
    """
    start, end, _ = service.validate_interval(booking.start_time, booking.end_time, booking.purpose)
    optimal_room = find_optimal_room(
        service.db, service.engine, start, end, booking.required_capacity, booking.campus_id
    )
    if not optimal_room:
        logger.warning(f"No suitable room for {start} - {end}, capacity: {booking.required_capacity}")
        raise NotFoundError("No suitable room available")
    return service.request_booking(optimal_room.id, start, end, booking.purpose)


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
)
def get_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    """
    Retrieve a specific booking by ID. Non-admins can only see their own.
    """
    booking = service.get_booking(booking_id)
    if booking.user_id != service.actor.user_id and not service.actor.is_admin:
        raise ForbiddenError("You can only view your own bookings")
    return booking


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Update a booking",
    description="Move or rename a pending booking. Requires ownership."
)
def update_booking(
    booking_id: int,
    booking_update: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    """
    Update a pending booking that has not started yet.
    Requires ownership.
    """
    return service.update_booking(
        booking_id, booking_update.start_time, booking_update.end_time, booking_update.purpose
    )


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    summary="Cancel a booking",
)
def cancel_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    """
    Cancel a pending or approved booking before it starts.
    Requires ownership.
    """
    service.cancel_booking(booking_id)
    return service.get_booking(booking_id)


@router.post(
    "/{booking_id}/decision",
    response_model=BookingResponse,
    summary="Approve or reject a booking",
)
def decide_booking(
    booking_id: int,
    decision: BookingDecisionRequest,
    service: BookingService = Depends(get_admin_booking_service),
):
    """
    Approve or reject a pending booking. A rejection needs a reason.
    Admin only.
    """
    return service.decide_booking(booking_id, decision.decision, decision.admin_note)


@router.post(
    "/{booking_id}/complete",
    response_model=BookingResponse,
    summary="Complete a booking",
)
def complete_booking(
    booking_id: int,
    service: BookingService = Depends(get_admin_booking_service),
):
    """
    Mark an approved booking that has ended as completed.
    Admin only.
    """
    return service.complete_booking(booking_id)


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a booking",
)
def delete_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    """
    Soft delete a booking.
    Requires ownership.
    """
    service.delete_booking(booking_id)
    return None
