from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime, time
from typing import List, Optional
from unispace.models.enums import ScheduleType


class ScheduleBase(BaseModel):
    schedule_type: ScheduleType
    title: str = Field(..., max_length=200)
    start_time: time
    end_time: time
    start_date: date
    end_date: date


class ScheduleCreate(ScheduleBase):
    room_id: int
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday .. 6 = Saturday")
    break_time_minutes: Optional[int] = Field(None, ge=0, le=120)


class ScheduleUpdate(ScheduleCreate):
    pass


class ScheduleBulkCreate(ScheduleBase):
    room_ids: List[int] = Field(..., min_length=1)
    days_of_week: List[int] = Field(..., min_length=1)
    break_time_minutes: Optional[int] = Field(None, ge=0, le=120)
    skip_conflicts: bool = False


class ScheduleResponse(ScheduleBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: int
    day_of_week: int
    day_name: str
    created_at: datetime


class BulkScheduleErrorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    room_id: int
    room_name: str
    day_of_week: Optional[int] = None
    message: str


class BulkScheduleResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    total_rooms_processed: int
    successful_schedules: int
    failed_schedules: int
    created: List[ScheduleResponse]
    errors: List[BulkScheduleErrorResponse]
