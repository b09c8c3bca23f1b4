"""
Top‑level router for version 1 of the API.

Aggregates the domain routers under a unified prefix.  When a new
domain is introduced, include its router here.
"""

from fastapi import APIRouter

from .endpoints import auth, contacts, tags, users

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(contacts.router, prefix="/contacts", tags=["contacts"])
router.include_router(tags.router, prefix="/tags", tags=["tags"])
