"""
Pydantic models for contact data.

``ContactCreate`` and ``ContactUpdate`` describe request bodies and
enforce the field limits of the address book (string lengths, email
and URL formats, ISO dates).  ``ContactRead`` is the hydrated contact
returned by every endpoint, with its tags embedded.  Listing returns a
``ContactPage`` and the statistics endpoint a ``ContactStats``.
"""

from datetime import date, datetime
from typing import List, Optional

from pydantic import (
    BaseModel,
    EmailStr,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from .tag import TAG_NAME_MAX_LENGTH, TagCount, TagRead

_http_url = TypeAdapter(HttpUrl)


def _check_website(v: Optional[str]) -> Optional[str]:
    # Validate the format but keep the value exactly as submitted.
    if v is not None:
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError("Please provide a valid website URL") from None
    return v


def _check_tags(v: Optional[List[str]]) -> Optional[List[str]]:
    if v is None:
        return v
    for name in v:
        if len(name.strip()) > TAG_NAME_MAX_LENGTH:
            raise ValueError(f"Tag names must be at most {TAG_NAME_MAX_LENGTH} characters")
    return v


class ContactCreate(BaseModel):
    """Schema for creating a contact.

    ``tags`` lists tag names; unknown names are created on the fly and
    repeated names collapse to a single link.
    """

    name: str = Field(..., min_length=1, max_length=255, example="Ada Lovelace")
    email: Optional[EmailStr] = Field(None, example="ada@example.com")
    phone: Optional[str] = Field(None, max_length=50, example="+1 (555) 123-4567")
    company: Optional[str] = Field(None, max_length=255)
    job_title: Optional[str] = Field(None, alias="jobTitle", max_length=255)
    avatar_url: Optional[str] = Field(None, alias="avatarUrl", max_length=2048)
    notes: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(None, max_length=2048)
    address: Optional[str] = Field(None, max_length=1000)
    birthday: Optional[date] = Field(None, example="1815-12-10")
    is_favorite: bool = Field(False, alias="isFavorite")
    tags: List[str] = Field(default_factory=list, example=["Engineer"])

    model_config = {"populate_by_name": True}

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _check_tags(v)


class ContactUpdate(BaseModel):
    """Schema for updating a contact.

    All fields are optional and only the keys present in the request
    body are written.  Sending ``tags`` (even ``[]``) replaces the whole
    tag set; omitting it leaves the current tags alone.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    company: Optional[str] = Field(None, max_length=255)
    job_title: Optional[str] = Field(None, alias="jobTitle", max_length=255)
    avatar_url: Optional[str] = Field(None, alias="avatarUrl", max_length=2048)
    notes: Optional[str] = Field(None, max_length=5000)
    website: Optional[str] = Field(None, max_length=2048)
    address: Optional[str] = Field(None, max_length=1000)
    birthday: Optional[date] = None
    is_favorite: Optional[bool] = Field(None, alias="isFavorite")
    tags: Optional[List[str]] = None

    model_config = {"populate_by_name": True}

    @field_validator("name", "is_favorite", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("website")
    @classmethod
    def validate_website(cls, v):
        return _check_website(v)

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v):
        return _check_tags(v)


class ContactRead(BaseModel):
    """Schema for reading a contact from the API."""

    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    company: Optional[str] = None
    job_title: Optional[str] = None
    avatar_url: Optional[str] = None
    notes: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    birthday: Optional[date] = None
    is_favorite: bool = False
    created_at: datetime
    updated_at: datetime
    tags: List[TagRead] = Field(default_factory=list)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ContactPage(BaseModel):
    contacts: List[ContactRead]
    pagination: Pagination


class ContactCounts(BaseModel):
    total_contacts: int
    favorite_contacts: int
    recent_contacts: int
    this_week_contacts: int


class ContactStats(BaseModel):
    stats: ContactCounts
    top_tags: List[TagCount] = Field(default_factory=list, alias="topTags")

    model_config = {"populate_by_name": True}
