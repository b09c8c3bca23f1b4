"""
Contact endpoints for API v1.

CRUD and statistics for the address book of the authenticated user.
Every route requires a bearer token; the user id from the token
scopes all queries, so contacts of other users answer with 404.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from linkleaf_api.app.core.security import get_current_user
from linkleaf_api.app.schemas.contact import (
    ContactCreate,
    ContactPage,
    ContactRead,
    ContactStats,
    ContactUpdate,
)
from linkleaf_api.app.services.contact_service import ContactService

router = APIRouter()

# Keeps the row offset within SQLite's 64-bit integer range.
MAX_PAGE = 1_000_000_000


@router.get("/", response_model=ContactPage)
async def list_contacts(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: int = Query(10, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=255),
    tag: Optional[str] = Query(None, max_length=100),
    sort_by: str = Query("created_at", alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    current_user: dict = Depends(get_current_user),
) -> ContactPage:
    """List contacts with search, tag filter, sorting and pagination.

    - **search**: case-insensitive match on name, email, company and notes.
    - **tag**: only contacts carrying the tag with exactly this name.
    - **sortBy**: `name`, `email`, `company`, `created_at` or `updated_at`;
      anything else sorts by `created_at`.
    - **sortOrder**: `asc` or `desc` (default).
    """
    return await ContactService.list_contacts(
        current_user["user_id"],
        page=page,
        limit=limit,
        search=search,
        tag=tag,
        sort_by=sort_by,
        sort_order=sort_order,
    )


@router.get("/stats", response_model=ContactStats)
async def contact_stats(current_user: dict = Depends(get_current_user)) -> ContactStats:
    """Totals, favorites, recently added contacts and the ten most used tags."""
    return await ContactService.contact_stats(current_user["user_id"])


@router.get("/{contact_id}", response_model=ContactRead)
async def get_contact(contact_id: UUID, current_user: dict = Depends(get_current_user)) -> ContactRead:
    return await ContactService.get_contact(current_user["user_id"], str(contact_id))


@router.post("/", response_model=ContactRead, status_code=status.HTTP_201_CREATED)
async def create_contact(
    contact: ContactCreate,
    current_user: dict = Depends(get_current_user),
) -> ContactRead:
    """Create a contact.  Unknown tag names are added to the tag dictionary."""
    return await ContactService.create_contact(current_user["user_id"], contact)


@router.put("/{contact_id}", response_model=ContactRead)
async def update_contact(
    contact_id: UUID,
    updates: ContactUpdate,
    current_user: dict = Depends(get_current_user),
) -> ContactRead:
    """Update a contact.

    Partial updates are supported; fields missing from the body remain
    unchanged.  Sending `tags` replaces the tag set, `[]` clears it.
    """
    return await ContactService.update_contact(current_user["user_id"], str(contact_id), updates)


@router.delete("/{contact_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(contact_id: UUID, current_user: dict = Depends(get_current_user)) -> None:
    await ContactService.delete_contact(current_user["user_id"], str(contact_id))
    return None
