from sqlalchemy import Column, Enum, Integer, String
from sqlalchemy.orm import relationship
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin
from unispace.models.enums import RoleType


class User(SoftDeleteMixin, Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    role = Column(Enum(RoleType), nullable=False, default=RoleType.STUDENT)

    bookings = relationship("Booking", back_populates="user")
