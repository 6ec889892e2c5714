from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class CampusBase(BaseModel):
    name: str = Field(..., min_length=1)
    address: Optional[str] = None


class CampusCreate(CampusBase):
    pass


class CampusUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None


class CampusResponse(CampusBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
