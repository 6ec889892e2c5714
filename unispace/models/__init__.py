from unispace.models.campus import Campus
from unispace.models.room import Room
from unispace.models.user import User
from unispace.models.booking import Booking
from unispace.models.schedule import Schedule
from unispace.models.report import RoomReport

__all__ = ["Campus", "Room", "User", "Booking", "Schedule", "RoomReport"]
