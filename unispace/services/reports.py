"""
Room issue reports.

A requester may report one issue per booking, and only for their own
bookings that were approved or have completed. Admins move a report
between Open and Resolved and can attach a response.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session

from unispace.config import Settings, settings as default_settings
from unispace.errors import BadRequestError, ConflictError, ForbiddenError, NotFoundError, ValidationError
from unispace.models.enums import REPORTABLE_BOOKING_STATUSES, ReportStatus
from unispace.models.report import RoomReport
from unispace.models.room import Room
from unispace.models.user import User
from unispace.repository import BookingRepository
from unispace.utils.auth import CurrentActor
from unispace.utils.clock import Clock, system_clock
from unispace.utils.locks import RoomLockRegistry, room_locks

logger = logging.getLogger(__name__)


class RoomReportService:
    def __init__(
        self,
        db: Session,
        actor: CurrentActor,
        clock: Clock = system_clock,
        settings: Optional[Settings] = None,
        locks: RoomLockRegistry = room_locks,
    ):
        self.db = db
        self.actor = actor
        self.clock = clock
        self.settings = settings or default_settings
        self.locks = locks
        self.repository = BookingRepository(db)

    def _require_admin(self) -> None:
        if not self.actor.is_admin:
            raise ForbiddenError("Only administrators can manage room reports")

    def validate_content(self, issue_type: Optional[str], description: Optional[str]) -> Tuple[str, str]:
        issue_type = (issue_type or "").strip()
        description = (description or "").strip()
        policy = self.settings
        if not issue_type:
            raise ValidationError("Issue type is required")
        if len(issue_type) > policy.report_issue_type_max_length:
            raise ValidationError(
                f"Issue type cannot exceed {policy.report_issue_type_max_length} characters"
            )
        if not description:
            raise ValidationError("Description is required")
        if not (
            policy.report_description_min_length
            <= len(description)
            <= policy.report_description_max_length
        ):
            raise ValidationError(
                f"Description must be between {policy.report_description_min_length} "
                f"and {policy.report_description_max_length} characters"
            )
        return issue_type, description

    # -- reads ------------------------------------------------------------

    def get_report(self, report_id: int) -> RoomReport:
        report = self.db.query(RoomReport).filter(RoomReport.id == report_id).first()
        if report is None:
            logger.warning(f"Room report not found: {report_id}")
            raise NotFoundError(f"Room report with ID '{report_id}' not found")
        return report

    def get_visible_report(self, report_id: int) -> RoomReport:
        """The report, if the actor filed it or is an admin."""
        report = self.get_report(report_id)
        if report.user_id != self.actor.user_id and not self.actor.is_admin:
            raise ForbiddenError("You can only view your own reports")
        return report

    def list_reports(
        self,
        skip: int = 0,
        limit: int = 100,
        search: Optional[str] = None,
        user_id: Optional[int] = None,
        room_id: Optional[int] = None,
        booking_id: Optional[int] = None,
        status: Optional[ReportStatus] = None,
    ) -> List[RoomReport]:
        query = self.db.query(RoomReport)
        if search:
            pattern = f"%{search.strip()}%"
            query = (
                query.join(RoomReport.room)
                .join(RoomReport.user)
                .filter(
                    or_(
                        RoomReport.issue_type.ilike(pattern),
                        RoomReport.description.ilike(pattern),
                        Room.name.ilike(pattern),
                        User.full_name.ilike(pattern),
                    )
                )
            )
        if user_id is not None:
            query = query.filter(RoomReport.user_id == user_id)
        if room_id is not None:
            query = query.filter(RoomReport.room_id == room_id)
        if booking_id is not None:
            query = query.filter(RoomReport.booking_id == booking_id)
        if status is not None:
            query = query.filter(RoomReport.status == status)
        reports = (
            query.order_by(RoomReport.created_at.desc(), RoomReport.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )
        logger.debug(f"Retrieved {len(reports)} room reports")
        return reports

    def list_user_reports(self, user_id: int) -> List[RoomReport]:
        return self.list_reports(limit=None, user_id=user_id)

    def list_room_reports(self, room_id: int) -> List[RoomReport]:
        return self.list_reports(limit=None, room_id=room_id)

    def get_report_for_booking(self, booking_id: int) -> Optional[RoomReport]:
        return self.db.query(RoomReport).filter(RoomReport.booking_id == booking_id).first()

    def count_open_reports(self) -> int:
        return self.db.query(RoomReport).filter(RoomReport.status == ReportStatus.OPEN).count()

    def can_report_booking(self, booking_id: int) -> bool:
        booking = self.repository.get_booking(booking_id)
        return (
            booking is not None
            and booking.user_id == self.actor.user_id
            and booking.status in REPORTABLE_BOOKING_STATUSES
            and self.get_report_for_booking(booking_id) is None
        )

    # -- writes -----------------------------------------------------------

    def create_report(self, booking_id: int, issue_type: str, description: str) -> RoomReport:
        logger.info(f"User {self.actor.user_id} is creating a room report for booking {booking_id}")
        issue_type, description = self.validate_content(issue_type, description)

        booking = self.repository.get_booking(booking_id)
        if booking is None:
            raise NotFoundError(f"Booking with ID '{booking_id}' not found")
        if booking.user_id != self.actor.user_id:
            raise ForbiddenError("You can only report issues for your own bookings")
        if booking.status not in REPORTABLE_BOOKING_STATUSES:
            raise BadRequestError("You can only report issues for completed or approved bookings")

        with self.locks.hold(booking.room_id):
            existing = self.get_report_for_booking(booking_id)
            if existing is not None:
                raise ConflictError(
                    "This booking has already been reported. Each booking can only be reported once.",
                    [existing],
                )
            report = RoomReport(
                user_id=self.actor.user_id,
                room_id=booking.room_id,
                booking_id=booking_id,
                issue_type=issue_type,
                description=description,
                status=ReportStatus.OPEN,
                created_at=self.clock.now(),
                created_by=self.actor.user_id,
            )
            with self.repository.guard("creating room report"):
                report = self.repository.save(report)

        logger.info(f"Room report created successfully: {report.id}")
        return report

    def update_report(self, report_id: int, issue_type: str, description: str) -> RoomReport:
        """Edit the text of an open report; only the reporter may do it."""
        report = self.get_report(report_id)
        if report.user_id != self.actor.user_id:
            raise ForbiddenError("You can only update your own reports")
        if report.status != ReportStatus.OPEN:
            raise BadRequestError(f"Cannot update report with status: {report.status.value}")
        report.issue_type, report.description = self.validate_content(issue_type, description)
        report.touch(self.actor.user_id, self.clock.now())
        with self.repository.guard("updating room report"):
            report = self.repository.save(report)
        logger.info(f"Room report updated successfully: {report_id}")
        return report

    def update_report_status(
        self, report_id: int, status: ReportStatus, admin_response: Optional[str] = None
    ) -> RoomReport:
        self._require_admin()
        status = ReportStatus(status)
        logger.info(f"Updating report status: {report_id} to {status.value}")
        report = self.get_report(report_id)

        response = (admin_response or "").strip()
        if len(response) > self.settings.report_description_max_length:
            raise ValidationError(
                f"Admin response cannot exceed {self.settings.report_description_max_length} characters"
            )
        report.status = status
        if response:
            report.admin_response = response
        report.touch(self.actor.user_id, self.clock.now())
        with self.repository.guard("updating report status"):
            report = self.repository.save(report)
        logger.info(f"Report status updated successfully: {report_id}")
        return report

    def delete_report(self, report_id: int) -> bool:
        """Soft delete; the reporter or an admin. The booking can be reported again."""
        report = self.get_report(report_id)
        if report.user_id != self.actor.user_id and not self.actor.is_admin:
            raise ForbiddenError("You can only delete your own reports")
        report.soft_delete(self.actor.user_id, self.clock.now())
        with self.repository.guard("deleting room report"):
            self.repository.save(report)
        logger.info(f"Room report soft deleted successfully: {report_id}")
        return True
