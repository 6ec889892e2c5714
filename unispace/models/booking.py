from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin
from unispace.models.enums import BookingStatus


class Booking(SoftDeleteMixin, Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    # naive UTC, half-open [start_time, end_time)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    status = Column(Enum(BookingStatus), nullable=False, default=BookingStatus.PENDING)
    purpose = Column(String, nullable=False)
    admin_note = Column(String, nullable=False, default="")

    room = relationship("Room", back_populates="bookings")
    user = relationship("User", back_populates="bookings")

    def describe(self):
        return f"booking #{self.id} ({self.start_time:%Y-%m-%d %H:%M} - {self.end_time:%Y-%m-%d %H:%M})"
