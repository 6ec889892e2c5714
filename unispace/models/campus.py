from sqlalchemy.orm import relationship
from sqlalchemy import Column, Integer, String
from unispace.db import Base
from unispace.models.base import SoftDeleteMixin


class Campus(SoftDeleteMixin, Base):
    __tablename__ = "campuses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, index=True, nullable=False)
    address = Column(String, nullable=True)

    rooms = relationship("Room", back_populates="campus")
