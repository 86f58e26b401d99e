"""User schemas used for registration, responses and the therapist profile."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr


class UserCreate(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None


class UserRead(BaseModel):
    id: int
    email: EmailStr
    display_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfileBase(BaseModel):
    display_name: Optional[str] = None
    registration_number: Optional[str] = None
    address: Optional[str] = None


class UserProfileUpdate(UserProfileBase):
    pass


class UserProfileRead(UserProfileBase):
    id: int
    email: EmailStr
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
