from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class CreateUserRequest(BaseModel):
    username: str = Field(
        ..., min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_-]+$"
    )
    email: EmailStr
    timezone: str = Field("UTC", description="IANA timezone name")


class UpdateUserRequest(BaseModel):
    timezone: str = Field(..., description="IANA timezone name")


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    username: str
    email: str
    timezone: str
    created_at: datetime
