from sqlalchemy.orm import relationship
from sqlalchemy import Column, Enum, ForeignKey, Integer, String
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin
from unispace.models.enums import BookingStatus, RoomStatus, RoomType


class Room(SoftDeleteMixin, Base):
    __tablename__ = "rooms"

    id = Column(Integer, primary_key=True, index=True)
    campus_id = Column(Integer, ForeignKey("campuses.id"), nullable=False)
    name = Column(String, index=True, nullable=False)
    type = Column(Enum(RoomType), nullable=False, default=RoomType.CLASSROOM)
    capacity = Column(Integer, nullable=False)
    description = Column(String, nullable=True)
    room_status = Column(Enum(RoomStatus), nullable=False, default=RoomStatus.ACTIVE)
    # Approved doubles as "currently bookable"
    approval_status = Column(
        Enum(BookingStatus), nullable=False, default=BookingStatus.APPROVED
    )

    campus = relationship("Campus", back_populates="rooms")
    bookings = relationship("Booking", back_populates="room")
    schedules = relationship("Schedule", back_populates="room")

    @property
    def is_bookable(self):
        return (
            self.room_status == RoomStatus.ACTIVE
            and self.approval_status == BookingStatus.APPROVED
        )
