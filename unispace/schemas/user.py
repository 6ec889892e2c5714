from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from unispace.models.enums import RoleType


class UserCreate(BaseModel):
    full_name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)
    role: RoleType = RoleType.STUDENT

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value):
        return value.lower()

    @field_validator("role")
    @classmethod
    def forbid_admin(cls, value):
        if value == RoleType.ADMIN:
            raise ValueError("Administrator accounts cannot be self-registered")
        return value


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    email: str
    role: RoleType


class Token(BaseModel):
    access_token: str
    token_type: str
