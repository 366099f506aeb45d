# ==============================================================================
# API DEPENDENCIES - Dependency Injection
# ==============================================================================
# FastAPI dependencies for authentication, the record store and services
# ==============================================================================

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import OAuth2PasswordBearer

from filevault.core.constants import APIConstants, ErrorMessages
from filevault.core.exceptions import InvalidTokenError, TokenExpiredError
from filevault.core.security import verify_access_token
from filevault.core.settings import Settings, settings
from filevault.database import RecordStore
from filevault.services import FileService, FolderService, ShareService, UserService
from filevault.storage import LocalBlobStore

# OAuth2 scheme for JWT tokens
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_PREFIX}/auth/login",
    auto_error=False,
)


# ==============================================================================
# APPLICATION STATE DEPENDENCIES
# ==============================================================================

def get_store(request: Request) -> RecordStore:
    """Record store created by the application lifespan."""
    return request.app.state.store


def get_blob_store(request: Request) -> LocalBlobStore:
    """Blob store created by the application factory."""
    return request.app.state.blobs


def get_app_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


StoreDep = Annotated[RecordStore, Depends(get_store)]
BlobStoreDep = Annotated[LocalBlobStore, Depends(get_blob_store)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


# ==============================================================================
# AUTHENTICATION DEPENDENCIES
# ==============================================================================

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> str:
    """
    Extract user ID from JWT token.

    Args:
        token: JWT access token from Authorization header

    Returns:
        User ID string

    Raises:
        HTTPException: If token invalid or missing
    """
    if not token:
        raise _unauthorized(ErrorMessages.UNAUTHORIZED)

    try:
        payload = verify_access_token(token)
    except TokenExpiredError:
        raise _unauthorized("Token has expired")
    except InvalidTokenError as e:
        raise _unauthorized(e.message)

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token payload")
    return user_id


async def get_optional_user_id(
    token: Annotated[Optional[str], Depends(oauth2_scheme)],
) -> Optional[str]:
    """
    Extract user ID if a valid token is provided, otherwise None.

    Used by endpoints that also serve anonymous callers.
    """
    if not token:
        return None

    try:
        return await get_current_user_id(token)
    except HTTPException:
        return None


# Annotated types
CurrentUserID = Annotated[str, Depends(get_current_user_id)]
OptionalUserID = Annotated[Optional[str], Depends(get_optional_user_id)]


# ==============================================================================
# PAGINATION
# ==============================================================================

PageDep = Annotated[int, Query(ge=1, description="Page number (1-indexed)")]
PerPageDep = Annotated[
    int,
    Query(
        ge=1,
        le=APIConstants.MAX_PAGE_SIZE,
        description="Items per page",
    ),
]


# ==============================================================================
# SERVICE DEPENDENCIES
# ==============================================================================

async def get_user_service(store: StoreDep, app_settings: SettingsDep) -> UserService:
    """Get user service instance."""
    return UserService(store, app_settings)


async def get_folder_service(store: StoreDep, blobs: BlobStoreDep) -> FolderService:
    """Get folder service instance."""
    return FolderService(store, blobs)


async def get_file_service(store: StoreDep, blobs: BlobStoreDep) -> FileService:
    """Get file service instance."""
    return FileService(store, blobs)


async def get_share_service(store: StoreDep) -> ShareService:
    """Get share service instance."""
    return ShareService(store)


# Annotated service types
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FolderServiceDep = Annotated[FolderService, Depends(get_folder_service)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]
ShareServiceDep = Annotated[ShareService, Depends(get_share_service)]
