"""
Pydantic models for user data.

Defines schemas for registration, login, profile updates and password
changes, plus the ``UserRead`` representation returned by the API.
Password hashes never leave the service layer.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserRegister(BaseModel):
    email: EmailStr = Field(..., example="demo@linkleaf.com")
    password: str = Field(..., min_length=6, example="password123")
    first_name: str = Field(..., alias="firstName", min_length=1, max_length=100, example="Demo")
    last_name: str = Field(..., alias="lastName", min_length=1, max_length=100, example="User")

    model_config = {"populate_by_name": True}

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def strip_names(cls, v):
        return v.strip() if isinstance(v, str) else v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UserRead(BaseModel):
    """Schema for reading a user from the API."""

    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_active: bool = True
    is_verified: bool = False
    last_login: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ProfileUpdate(BaseModel):
    """Profile fields a user may change.  Omitted or null fields keep their value."""

    first_name: Optional[str] = Field(None, alias="firstName", min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, alias="lastName", min_length=1, max_length=100)
    avatar_url: Optional[str] = Field(None, alias="avatarUrl", max_length=2048)

    model_config = {"populate_by_name": True}


class PasswordChange(BaseModel):
    current_password: str = Field(..., alias="currentPassword", min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)

    model_config = {"populate_by_name": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
