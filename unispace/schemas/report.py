from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional
from unispace.config import settings
from unispace.models.enums import ReportStatus


class RoomReportContent(BaseModel):
    issue_type: str = Field(..., min_length=1, max_length=settings.report_issue_type_max_length)
    description: str = Field(
        ...,
        min_length=settings.report_description_min_length,
        max_length=settings.report_description_max_length,
    )


class RoomReportCreate(RoomReportContent):
    booking_id: int


class RoomReportUpdate(RoomReportContent):
    pass


class RoomReportStatusUpdate(BaseModel):
    status: ReportStatus
    admin_response: Optional[str] = Field(None, max_length=settings.report_description_max_length)


class RoomReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    room_id: int
    room_name: str
    booking_id: int
    issue_type: str
    description: str
    status: ReportStatus
    admin_response: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
