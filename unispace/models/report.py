from sqlalchemy import Column, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin
from unispace.models.enums import ReportStatus


class RoomReport(SoftDeleteMixin, Base):
    """An issue a requester reports about a room they used or will use."""

    __tablename__ = "room_reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    # one live report per booking
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    issue_type = Column(String(100), nullable=False)
    description = Column(String, nullable=False)
    status = Column(Enum(ReportStatus), nullable=False, default=ReportStatus.OPEN)
    admin_response = Column(String, nullable=True)

    user = relationship("User")
    room = relationship("Room", lazy="joined")
    booking = relationship("Booking")

    @property
    def room_name(self):
        return self.room.name if self.room else "Unknown"

    def describe(self):
        return f"report #{self.id} for booking #{self.booking_id} ({self.status.value})"
