"""
Tag endpoints for API v1.

Tags are shared by all users, so any authenticated user may list,
create, rename, recolor or delete them.  Contact counts in the
responses only include the caller's own contacts.  Deleting a tag
unlinks it from every contact but keeps the contacts.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status

from linkleaf_api.app.core.security import get_current_user
from linkleaf_api.app.schemas.tag import TagCreate, TagDetail, TagUpdate
from linkleaf_api.app.services.tag_service import TagService

router = APIRouter()


@router.get("/", response_model=List[TagDetail])
async def list_tags(current_user: dict = Depends(get_current_user)) -> List[TagDetail]:
    return await TagService.list_tags(current_user["user_id"])


@router.post("/", response_model=TagDetail, status_code=status.HTTP_201_CREATED)
async def create_tag(tag_in: TagCreate, current_user: dict = Depends(get_current_user)) -> TagDetail:
    """Create a tag.  Returns 409 if a tag with this name exists."""
    return await TagService.create_tag(tag_in, current_user["user_id"])


@router.put("/{tag_id}", response_model=TagDetail)
async def update_tag(
    tag_id: UUID,
    tag_in: TagUpdate,
    current_user: dict = Depends(get_current_user),
) -> TagDetail:
    return await TagService.update_tag(str(tag_id), tag_in, current_user["user_id"])


@router.delete("/{tag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tag(tag_id: UUID, current_user: dict = Depends(get_current_user)) -> None:
    await TagService.delete_tag(str(tag_id), current_user["user_id"])
    return None
