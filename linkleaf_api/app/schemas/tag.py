"""
Pydantic models for tags.

Tags form a dictionary shared by every user: a name is unique across
the whole system.  ``TagRead`` is the compact form embedded in
contacts; ``TagDetail`` is returned by the tag endpoints and carries
the number of the caller's contacts linked to the tag.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

TAG_NAME_MAX_LENGTH = 100


class TagRead(BaseModel):
    id: str
    name: str
    color: Optional[str] = None


class TagCreate(BaseModel):
    """Schema for creating a tag explicitly."""

    name: str = Field(..., min_length=1, max_length=TAG_NAME_MAX_LENGTH, example="Client")
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$", example="#10B981")
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class TagUpdate(BaseModel):
    """Schema for updating a tag; only provided fields are changed."""

    name: Optional[str] = Field(None, min_length=1, max_length=TAG_NAME_MAX_LENGTH)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            raise ValueError("Tag name cannot be null")
        return v.strip() if isinstance(v, str) else v


class TagDetail(TagRead):
    description: Optional[str] = None
    created_at: datetime
    contact_count: int = 0


class TagCount(BaseModel):
    name: str
    contact_count: int
