"""
Application package initializer.

The backend is organised into a few small layers: ``core`` holds
configuration, logging, security and database plumbing, ``schemas``
the pydantic request/response models, ``services`` the SQL-backed
business logic and ``api`` the versioned FastAPI routers.
"""

from .main import app  # noqa: F401
