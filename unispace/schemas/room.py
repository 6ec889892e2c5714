from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from unispace.models.enums import ROOM_APPROVAL_STATUSES, BookingStatus, RoomStatus, RoomType


def check_approval_status(value):
    if value is not None and value not in ROOM_APPROVAL_STATUSES:
        allowed = ", ".join(status.value for status in ROOM_APPROVAL_STATUSES)
        raise ValueError(f"Room approval status must be one of: {allowed}")
    return value


class RoomBase(BaseModel):
    campus_id: int
    name: str = Field(..., min_length=1)
    type: RoomType = RoomType.CLASSROOM
    capacity: int = Field(..., gt=0)
    description: Optional[str] = None


class RoomCreate(RoomBase):
    room_status: RoomStatus = RoomStatus.ACTIVE
    approval_status: BookingStatus = BookingStatus.APPROVED

    @field_validator("approval_status")
    @classmethod
    def room_approval_status(cls, value):
        return check_approval_status(value)


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    type: Optional[RoomType] = None
    capacity: Optional[int] = Field(None, gt=0)
    description: Optional[str] = None
    room_status: Optional[RoomStatus] = None
    approval_status: Optional[BookingStatus] = None

    @field_validator("approval_status")
    @classmethod
    def room_approval_status(cls, value):
        return check_approval_status(value)


class RoomResponse(RoomBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_status: RoomStatus
    approval_status: BookingStatus
