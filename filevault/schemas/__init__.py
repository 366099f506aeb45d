# ==============================================================================
# SCHEMAS PACKAGE INITIALIZATION
# ==============================================================================

"""
Pydantic Schemas
================

Request/Response validation schemas for API endpoints:
- Base: Common schemas and pagination
- User: Authentication and profile schemas
- Folder / File / Share: storage schemas
"""

from filevault.schemas.base import (
    APIResponse,
    BaseSchema,
    HealthResponse,
    PaginatedResponse,
    TimestampSchema,
)
from filevault.schemas.user import (
    LoginResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from filevault.schemas.folder import (
    FolderCreate,
    FolderResponse,
    FolderUpdate,
)
from filevault.schemas.file import (
    FileResponse,
    FileVersionResponse,
)
from filevault.schemas.share import (
    ShareCreate,
    ShareResolution,
    ShareResponse,
)

__all__ = [
    # Base
    "APIResponse",
    "BaseSchema",
    "HealthResponse",
    "PaginatedResponse",
    "TimestampSchema",
    # User
    "LoginResponse",
    "TokenResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    "UserUpdate",
    # Folder
    "FolderCreate",
    "FolderResponse",
    "FolderUpdate",
    # File
    "FileResponse",
    "FileVersionResponse",
    # Share
    "ShareCreate",
    "ShareResolution",
    "ShareResponse",
]
