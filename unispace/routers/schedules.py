from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from unispace.db import get_db
from unispace.models.enums import ScheduleType
from unispace.schemas.schedule import (
    BulkScheduleResultResponse,
    ScheduleBulkCreate,
    ScheduleCreate,
    ScheduleResponse,
    ScheduleUpdate,
)
from unispace.services.schedules import ScheduleService
from unispace.utils.auth import CurrentActor, get_current_actor, require_admin

router = APIRouter(
    prefix="/schedules",
    tags=["schedules"],
)


def get_schedule_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(get_current_actor),
) -> ScheduleService:
    return ScheduleService(db, actor)


def get_admin_schedule_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
) -> ScheduleService:
    return ScheduleService(db, actor)


@router.post(
    "/",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a recurring schedule",
)
def create_schedule(
    schedule: ScheduleCreate,
    service: ScheduleService = Depends(get_admin_schedule_service),
):
    """
    Create a weekly schedule (course or maintenance) for a room.
    Admin only.

    Responds 409 with the clashing schedules when another schedule of the
    room is closer than the break time on the same day of week.
    """
    return service.create_schedule(
        room_id=schedule.room_id,
        schedule_type=schedule.schedule_type,
        title=schedule.title,
        day=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        start_date=schedule.start_date,
        end_date=schedule.end_date,
        break_time_minutes=schedule.break_time_minutes,
    )


@router.post(
    "/bulk",
    response_model=BulkScheduleResultResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create schedules for several rooms and days",
)
def bulk_create_schedules(
    request: ScheduleBulkCreate,
    service: ScheduleService = Depends(get_admin_schedule_service),
):
    """
    Create one schedule per selected room and day of week.
    Admin only.

    - **skip_conflicts**: when false any conflict aborts the whole batch;
      when true conflicting pairs are reported and the rest are created.
    """
    result = service.bulk_create_schedules(
        room_ids=request.room_ids,
        days_of_week=request.days_of_week,
        schedule_type=request.schedule_type,
        title=request.title,
        start_time=request.start_time,
        end_time=request.end_time,
        start_date=request.start_date,
        end_date=request.end_date,
        break_time_minutes=request.break_time_minutes,
        skip_conflicts=request.skip_conflicts,
    )
    return BulkScheduleResultResponse.model_validate(result)


@router.get("/", response_model=List[ScheduleResponse], summary="List schedules")
def get_schedules(
    skip: int = 0,
    limit: int = 100,
    room_id: Optional[int] = None,
    schedule_type: Optional[ScheduleType] = None,
    day_of_week: Optional[int] = None,
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Retrieve schedules ordered by day of week and start time.
    """
    return service.list_schedules(
        skip=skip, limit=limit, room_id=room_id, schedule_type=schedule_type, day=day_of_week
    )


@router.get("/{schedule_id}", response_model=ScheduleResponse, summary="Get a schedule by ID")
def get_schedule(schedule_id: int, service: ScheduleService = Depends(get_schedule_service)):
    return service.get_schedule(schedule_id)


@router.put("/{schedule_id}", response_model=ScheduleResponse, summary="Update a schedule")
def update_schedule(
    schedule_id: int,
    schedule: ScheduleUpdate,
    service: ScheduleService = Depends(get_admin_schedule_service),
):
    """
    Replace a schedule. The same conflict rules as creation apply.
    Admin only.
    """
    return service.update_schedule(
        schedule_id,
        room_id=schedule.room_id,
        schedule_type=schedule.schedule_type,
        title=schedule.title,
        day=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        start_date=schedule.start_date,
        end_date=schedule.end_date,
        break_time_minutes=schedule.break_time_minutes,
    )


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a schedule")
def delete_schedule(
    schedule_id: int,
    service: ScheduleService = Depends(get_admin_schedule_service),
):
    """
    Soft delete a schedule.
    Admin only.
    """
    service.delete_schedule(schedule_id)
    return None
