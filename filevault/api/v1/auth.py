# ==============================================================================
# AUTH ENDPOINTS - Authentication Routes
# ==============================================================================
# Login, register, token refresh endpoints
# ==============================================================================

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Body, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from filevault.api.dependencies import UserServiceDep
from filevault.core.constants import SuccessMessages
from filevault.schemas.base import APIResponse
from filevault.schemas.user import (
    LoginResponse,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=APIResponse[UserResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register new user",
    description="Create a new user account with email and password.",
)
async def register(
    schema: UserCreate,
    service: UserServiceDep,
) -> APIResponse[UserResponse]:
    """Register a new user."""
    user = await service.register(schema)
    return APIResponse.ok(data=user, message=SuccessMessages.USER_REGISTERED)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="User login",
    description="OAuth2 password flow: the form's username field carries the email.",
)
async def login(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
    service: UserServiceDep,
) -> TokenResponse:
    """Authenticate user and return tokens."""
    result = await service.authenticate(
        email=form_data.username,
        password=form_data.password,
    )
    return result.tokens


@router.post(
    "/login/json",
    response_model=APIResponse[LoginResponse],
    summary="User login (JSON)",
    description="Authenticate with JSON payload instead of form data.",
)
async def login_json(
    credentials: UserLogin,
    service: UserServiceDep,
) -> APIResponse[LoginResponse]:
    """Authenticate user with JSON credentials."""
    result = await service.authenticate(
        email=credentials.email,
        password=credentials.password,
    )
    return APIResponse.ok(data=result, message=SuccessMessages.LOGIN_SUCCESS)


@router.post(
    "/refresh",
    response_model=TokenResponse,
    summary="Refresh tokens",
    description="Exchange a refresh token for a new token pair.",
)
async def refresh(
    refresh_token: Annotated[str, Body(embed=True)],
    service: UserServiceDep,
) -> TokenResponse:
    return await service.refresh(refresh_token)
