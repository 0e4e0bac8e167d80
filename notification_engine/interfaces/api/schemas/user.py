"""User schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class RoleRead(BaseModel):
    id: int
    name: str
    alias: str

    model_config = ConfigDict(from_attributes=True)


class UserBase(BaseModel):
    name: str = Field(..., max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)
    role: str = Field(default="member", description="Role alias: admin or member")
    language_preference: str = "both"
    email_notifications: bool = True


class UserRead(BaseModel):
    id: int
    name: str
    email: EmailStr
    is_active: bool
    language_preference: str
    email_notifications: bool
    last_login: datetime | None
    created_at: datetime | None
    updated_at: datetime | None
    role: RoleRead

    model_config = ConfigDict(from_attributes=True)


class NotificationPreferencesRead(BaseModel):
    email_notifications: bool
    language_preference: str

    model_config = ConfigDict(from_attributes=True)


class NotificationPreferencesUpdate(BaseModel):
    email_notifications: bool | None = None
    language_preference: str | None = None

    model_config = ConfigDict(extra="forbid")
