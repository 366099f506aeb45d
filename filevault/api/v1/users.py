# ==============================================================================
# USERS ENDPOINTS - User Profile Routes
# ==============================================================================
# User profile management endpoints
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from filevault.api.dependencies import CurrentUserID, UserServiceDep
from filevault.core.constants import ErrorMessages, SuccessMessages
from filevault.core.exceptions import NotFoundError
from filevault.schemas.base import APIResponse
from filevault.schemas.user import UserResponse, UserUpdate

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Get current user",
    description="Get the profile of the currently authenticated user.",
)
async def get_current_user(
    user_id: CurrentUserID,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    """Get current user profile, including storage usage."""
    try:
        user = await service.get_profile(user_id)
        return APIResponse.ok(data=user)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorMessages.USER_NOT_FOUND,
        )


@router.patch(
    "/me",
    response_model=APIResponse[UserResponse],
    summary="Update current user",
    description="Update the profile of the currently authenticated user.",
)
async def update_current_user(
    user_id: CurrentUserID,
    schema: UserUpdate,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    """Update current user profile."""
    try:
        user = await service.update_profile(user_id, schema)
        return APIResponse.ok(data=user, message=SuccessMessages.PROFILE_UPDATED)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=ErrorMessages.USER_NOT_FOUND,
        )
