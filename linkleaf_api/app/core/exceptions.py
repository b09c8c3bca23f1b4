"""
Application error types.

Services raise these instead of ``HTTPException`` so that they stay
independent of the web layer.  ``main.create_app`` registers handlers
that translate each class into its HTTP status code.
"""

from fastapi import status


class AppError(Exception):
    """Base class for errors reported to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(AppError):
    """Resource is missing or owned by another user."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(AppError):
    """Write clashes with existing data (duplicate email, tag name)."""

    status_code = status.HTTP_409_CONFLICT


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
