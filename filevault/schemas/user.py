# ==============================================================================
# USER SCHEMAS - Authentication & Profile
# ==============================================================================
# Request/Response schemas for user management
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator

from filevault.schemas.base import BaseSchema, TimestampSchema


class UserCreate(BaseSchema):
    """Schema for user registration."""

    email: EmailStr = Field(
        ...,
        description="User email address",
        examples=["user@example.com"],
    )
    password: str = Field(
        ...,
        min_length=8,
        max_length=128,
        description="User password (min 8 chars)",
    )
    name: Optional[str] = Field(
        None,
        max_length=255,
        description="Display name",
    )

    @field_validator("password")
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        """Ensure password meets security requirements."""
        if not any(c.isalpha() for c in v):
            raise ValueError("Password must contain at least one letter")
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v


class UserUpdate(BaseSchema):
    """Schema for updating the current user's profile."""

    name: Optional[str] = Field(
        None,
        max_length=255,
        description="Display name",
    )


class UserResponse(TimestampSchema):
    """Schema for user response (own profile)."""

    id: str = Field(
        ...,
        description="User unique identifier",
    )
    email: EmailStr = Field(
        ...,
        description="User email address",
    )
    name: Optional[str] = Field(
        None,
        description="Display name",
    )
    storage_quota: int = Field(
        ...,
        description="Storage quota in bytes",
    )
    storage_used: int = Field(
        ...,
        description="Bytes used by current file versions",
    )
    last_login: Optional[datetime] = Field(
        None,
        description="Time of the last successful login",
    )


class UserLogin(BaseSchema):
    """Schema for user login request."""

    email: EmailStr = Field(
        ...,
        description="User email address",
    )
    password: str = Field(
        ...,
        description="User password",
    )


class TokenResponse(BaseSchema):
    """Schema for authentication token response."""

    access_token: str = Field(
        ...,
        description="JWT access token",
    )
    refresh_token: str = Field(
        ...,
        description="JWT refresh token",
    )
    token_type: str = Field(
        "bearer",
        description="Token type",
    )
    expires_in: int = Field(
        ...,
        description="Token expiry in seconds",
    )


class LoginResponse(BaseSchema):
    """Tokens plus the authenticated user's profile."""

    user: UserResponse
    tokens: TokenResponse
