"""
Authentication endpoints for API v1.

Registration and login return a bearer token whose subject is the
user id, together with the user record.  ``/me`` and
``/change-password`` require a valid token.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from linkleaf_api.app.core.security import create_access_token, get_current_user
from linkleaf_api.app.schemas.user import (
    PasswordChange,
    TokenResponse,
    UserLogin,
    UserRead,
    UserRegister,
)
from linkleaf_api.app.services.user_service import UserService

router = APIRouter()


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def register(user: UserRegister) -> TokenResponse:
    """Зарегистрировать нового пользователя и сразу выдать токен."""
    db_user = await UserService.create_user(user)
    token = create_access_token({"sub": db_user.id})
    return TokenResponse(access_token=token, user=db_user)


@router.post("/login", response_model=TokenResponse)
async def login(credentials: UserLogin) -> TokenResponse:
    """Аутентифицировать пользователя по e‑mail и паролю и вернуть токен."""
    db_user = await UserService.authenticate(credentials.email, credentials.password)
    if not db_user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    token = create_access_token({"sub": db_user.id})
    return TokenResponse(access_token=token, user=db_user)


@router.get("/me", response_model=UserRead)
async def me(current_user: dict = Depends(get_current_user)) -> UserRead:
    return await UserService.get_user(current_user["user_id"])


@router.put("/change-password")
async def change_password(
    payload: PasswordChange,
    current_user: dict = Depends(get_current_user),
) -> dict:
    await UserService.change_password(current_user["user_id"], payload)
    return {"message": "Password updated successfully"}
