from typing import List, Optional
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from unispace.db import get_db
from unispace.models.enums import ReportStatus
from unispace.schemas.report import (
    RoomReportCreate,
    RoomReportResponse,
    RoomReportStatusUpdate,
    RoomReportUpdate,
)
from unispace.services.reports import RoomReportService
from unispace.utils.auth import CurrentActor, get_current_actor, require_admin

router = APIRouter(
    prefix="/reports",
    tags=["reports"],
)


def get_report_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(get_current_actor),
) -> RoomReportService:
    return RoomReportService(db, actor)


def get_admin_report_service(
    db: Session = Depends(get_db),
    actor: CurrentActor = Depends(require_admin),
) -> RoomReportService:
    return RoomReportService(db, actor)


@router.post(
    "/",
    response_model=RoomReportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Report a room issue",
)
def create_report(
    report: RoomReportCreate,
    service: RoomReportService = Depends(get_report_service),
):
    """
    Report an issue with the room of one of your bookings.

    - **booking_id**: An approved or completed booking of yours.
    - **issue_type**: Short category, e.g. "Projector".
    - **description**: What is wrong (10 to 1000 characters).

    Each booking can be reported once; a second report responds 409.
    """
    return service.create_report(report.booking_id, report.issue_type, report.description)


@router.get(
    "/",
    response_model=List[RoomReportResponse],
    summary="List room reports",
    description="Newest first. Non-admins only see their own reports."
)
def get_reports(
    skip: int = 0,
    limit: int = 100,
    search: Optional[str] = None,
    user_id: Optional[int] = None,
    room_id: Optional[int] = None,
    booking_id: Optional[int] = None,
    report_status: Optional[ReportStatus] = None,
    service: RoomReportService = Depends(get_report_service),
):
    if not service.actor.is_admin:
        user_id = service.actor.user_id
    return service.list_reports(
        skip=skip,
        limit=limit,
        search=search,
        user_id=user_id,
        room_id=room_id,
        booking_id=booking_id,
        status=report_status,
    )


@router.get("/me", response_model=List[RoomReportResponse], summary="List my reports")
def get_my_reports(service: RoomReportService = Depends(get_report_service)):
    return service.list_user_reports(service.actor.user_id)


@router.get("/open/count", summary="Count open reports")
def count_open_reports(service: RoomReportService = Depends(get_admin_report_service)):
    """
    Number of reports still waiting for an admin.
    Admin only.
    """
    return {"open": service.count_open_reports()}


@router.get("/eligibility/{booking_id}", summary="Check whether a booking can be reported")
def check_report_eligibility(booking_id: int, service: RoomReportService = Depends(get_report_service)):
    return {"booking_id": booking_id, "can_report": service.can_report_booking(booking_id)}


@router.get("/{report_id}", response_model=RoomReportResponse, summary="Get a report by ID")
def get_report(report_id: int, service: RoomReportService = Depends(get_report_service)):
    """
    Retrieve a report. Non-admins can only see their own.
    """
    return service.get_visible_report(report_id)


@router.put("/{report_id}", response_model=RoomReportResponse, summary="Edit a report")
def update_report(
    report_id: int,
    report_update: RoomReportUpdate,
    service: RoomReportService = Depends(get_report_service),
):
    """
    Edit the issue type and description of an open report.
    Requires ownership.
    """
    return service.update_report(report_id, report_update.issue_type, report_update.description)


@router.post("/{report_id}/status", response_model=RoomReportResponse, summary="Resolve or reopen a report")
def update_report_status(
    report_id: int,
    status_update: RoomReportStatusUpdate,
    service: RoomReportService = Depends(get_admin_report_service),
):
    """
    Move a report to Open or Resolved, optionally with a response.
    Admin only.
    """
    return service.update_report_status(report_id, status_update.status, status_update.admin_response)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete a report")
def delete_report(report_id: int, service: RoomReportService = Depends(get_report_service)):
    """
    Soft delete a report.
    Requires ownership.
    """
    service.delete_report(report_id)
    return None
