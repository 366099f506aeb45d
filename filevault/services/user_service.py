# ==============================================================================
# USER SERVICE - Authentication & User Management
# ==============================================================================
# Business logic for user operations and authentication
# ==============================================================================

from __future__ import annotations

import logging

from filevault.core.constants import ErrorMessages
from filevault.core.exceptions import (
    AlreadyExistsError,
    AuthenticationError,
    InvalidTokenError,
)
from filevault.core.security import (
    create_token_pair,
    hash_password,
    verify_password,
    verify_refresh_token,
)
from filevault.core.settings import Settings
from filevault.database import RecordStore, Table
from filevault.schemas.user import (
    LoginResponse,
    TokenResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from filevault.services.base_service import BaseService
from filevault.utils.helpers import utc_now

logger = logging.getLogger(__name__)


class UserService(BaseService[UserResponse]):
    """
    User service for authentication and profile management.

    Provides user registration, authentication and profile updates.
    """

    table = Table.USER
    response_schema = UserResponse
    not_found_message = ErrorMessages.USER_NOT_FOUND

    def __init__(self, store: RecordStore, settings: Settings) -> None:
        """Initialize user service."""
        super().__init__(store)
        self._settings = settings

    # ==========================================================================
    # AUTHENTICATION
    # ==========================================================================

    async def register(self, schema: UserCreate) -> UserResponse:
        """
        Register a new user.

        Args:
            schema: User registration data

        Returns:
            Created user response

        Raises:
            AlreadyExistsError: If email already registered
        """
        email = schema.email.lower()
        existing = await self._store.find_unique(
            self.table,
            where={"email": email},
            select={"id": True},
        )
        if existing:
            raise AlreadyExistsError(
                message=ErrorMessages.EMAIL_TAKEN,
                resource_type="user",
            )

        user = await self._store.insert(
            self.table,
            {
                "email": email,
                "name": schema.name,
                "hashed_password": hash_password(schema.password),
                "storage_quota": self._settings.DEFAULT_STORAGE_QUOTA,
            },
        )
        logger.info(f"Registered user {user.id}")
        return self._to_response(user)

    async def authenticate(self, email: str, password: str) -> LoginResponse:
        """
        Authenticate user and return tokens.

        Args:
            email: User email
            password: User password

        Returns:
            User profile and token pair

        Raises:
            AuthenticationError: If credentials invalid
        """
        user = await self._store.find_unique(self.table, where={"email": email.lower()})

        if not user or not verify_password(password, user.hashed_password):
            raise AuthenticationError(message=ErrorMessages.INVALID_CREDENTIALS)

        user = await self._store.update(
            self.table,
            where={"id": user.id},
            data={"last_login": utc_now()},
        )

        tokens = create_token_pair(subject=user.id)
        return LoginResponse(
            user=self._to_response(user),
            tokens=TokenResponse(
                access_token=tokens["access_token"],
                refresh_token=tokens["refresh_token"],
                token_type=tokens["token_type"],
                expires_in=self._settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
            ),
        )

    # ==========================================================================
    # PROFILE
    # ==========================================================================

    async def get_profile(self, user_id: str) -> UserResponse:
        """Profile of ``user_id``, 404 when the account is gone."""
        return self._to_response(await self._get_or_404({"id": user_id}))

    async def update_profile(self, user_id: str, schema: UserUpdate) -> UserResponse:
        """Apply the fields set in ``schema`` to the user's profile."""
        user = await self._store.update(
            self.table,
            where={"id": user_id},
            data=schema.model_dump(exclude_unset=True),
        )
        return self._to_response(user)

    async def refresh(self, refresh_token: str) -> TokenResponse:
        """
        Exchange a refresh token for a new token pair.

        Raises:
            AuthenticationError: If the token is invalid or its user is gone
        """
        payload = verify_refresh_token(refresh_token)
        if not payload.get("sub"):
            raise InvalidTokenError(message="Invalid token payload")
        user = await self._store.find_unique(
            self.table,
            where={"id": payload["sub"]},
            select={"id": True},
        )
        if user is None:
            raise AuthenticationError(message=ErrorMessages.USER_NOT_FOUND)

        tokens = create_token_pair(subject=user["id"])
        return TokenResponse(
            access_token=tokens["access_token"],
            refresh_token=tokens["refresh_token"],
            token_type=tokens["token_type"],
            expires_in=self._settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        )
