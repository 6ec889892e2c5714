from sqlalchemy import Column, Date, Enum, ForeignKey, Integer, String, Time
from sqlalchemy.orm import relationship
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin
from unispace.models.enums import DAY_NAMES, ScheduleType


class Schedule(SoftDeleteMixin, Base):
    __tablename__ = "schedules"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(Integer, ForeignKey("rooms.id"), nullable=False, index=True)
    schedule_type = Column(Enum(ScheduleType), nullable=False)
    title = Column(String, nullable=False)
    # 0 = Sunday .. 6 = Saturday
    day_of_week = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    # inclusive validity range
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    room = relationship("Room", back_populates="schedules")

    @property
    def day_name(self):
        return DAY_NAMES[self.day_of_week]

    def describe(self):
        return f"{self.title} ({self.start_time:%H:%M} - {self.end_time:%H:%M})"
