from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import datetime
from typing import Optional
from unispace.config import settings
from unispace.models.enums import BookingStatus
from unispace.services.lifecycle import BookingDecision


class BookingBase(BaseModel):
    start_time: datetime
    end_time: datetime
    purpose: str = Field(..., max_length=settings.purpose_max_length)


class BookingCreate(BookingBase):
    room_id: int


class BookingUpdate(BookingBase):
    pass


class BookingDecisionRequest(BaseModel):
    decision: BookingDecision
    admin_note: Optional[str] = None

    @model_validator(mode="after")
    def check_reject_note(self):
        note = (self.admin_note or "").strip()
        if self.decision == BookingDecision.REJECT and len(note) < settings.reject_note_min_length:
            raise ValueError(
                f"Please provide a reason for rejection (at least {settings.reject_note_min_length} characters)"
            )
        return self


class BookingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    room_id: int
    user_id: int
    start_time: datetime
    end_time: datetime
    status: BookingStatus
    purpose: str
    admin_note: str
    created_at: datetime


class BookingOptimizeRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    purpose: str
    required_capacity: int = Field(..., gt=0)
    campus_id: Optional[int] = None


class AvailableSlot(BaseModel):
    start_time: datetime
    end_time: datetime
