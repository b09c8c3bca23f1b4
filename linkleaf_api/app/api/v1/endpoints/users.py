"""
User profile endpoints for API v1.

The authenticated user can read and update their profile and delete
their account.  Account deletion also removes all of the user's
contacts.
"""

from fastapi import APIRouter, Depends, status

from linkleaf_api.app.core.security import get_current_user
from linkleaf_api.app.schemas.user import ProfileUpdate, UserRead
from linkleaf_api.app.services.user_service import UserService

router = APIRouter()


@router.get("/profile", response_model=UserRead)
async def get_profile(current_user: dict = Depends(get_current_user)) -> UserRead:
    return await UserService.get_user(current_user["user_id"])


@router.put("/profile", response_model=UserRead)
async def update_profile(
    updates: ProfileUpdate,
    current_user: dict = Depends(get_current_user),
) -> UserRead:
    """Update first name, last name or avatar URL; omitted fields stay as they are."""
    return await UserService.update_profile(current_user["user_id"], updates)


@router.delete("/account", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(current_user: dict = Depends(get_current_user)) -> None:
    await UserService.delete_user(current_user["user_id"])
    return None
