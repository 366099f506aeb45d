# ==============================================================================
# APPLICATION CONSTANTS - Centralized Configuration Values
# ==============================================================================
# Immutable constants used throughout the application
# ==============================================================================

from __future__ import annotations

from typing import Final


class APIConstants:
    """API-related constants."""

    DEFAULT_PAGE_SIZE: Final[int] = 20
    MAX_PAGE_SIZE: Final[int] = 100

    REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
    RESPONSE_TIME_HEADER: Final[str] = "X-Response-Time"


class StorageConstants:
    """Blob storage constants."""

    DEFAULT_MIME_TYPE: Final[str] = "application/octet-stream"
    CHUNK_SIZE: Final[int] = 1024 * 1024


class SharePermissions:
    """Permission levels a share can grant."""

    READ: Final[str] = "read"
    WRITE: Final[str] = "write"

    @classmethod
    def all_permissions(cls) -> list[str]:
        return [cls.READ, cls.WRITE]


class ErrorMessages:
    """Standardized error messages."""

    INVALID_CREDENTIALS: Final[str] = "Invalid email or password"
    UNAUTHORIZED: Final[str] = "Authentication required"
    PERMISSION_DENIED: Final[str] = "You don't have permission to perform this action"

    USER_NOT_FOUND: Final[str] = "User not found"
    FOLDER_NOT_FOUND: Final[str] = "Folder not found"
    FILE_NOT_FOUND: Final[str] = "File not found"
    SHARE_NOT_FOUND: Final[str] = "Share not found"

    EMAIL_TAKEN: Final[str] = "Email already registered"
    SHARE_EXPIRED: Final[str] = "Share link has expired"


class SuccessMessages:
    """Standardized success messages."""

    USER_REGISTERED: Final[str] = "User registered successfully"
    LOGIN_SUCCESS: Final[str] = "Login successful"
    PROFILE_UPDATED: Final[str] = "Profile updated successfully"

    FOLDER_CREATED: Final[str] = "Folder created successfully"
    FILE_UPLOADED: Final[str] = "File uploaded successfully"
    VERSION_UPLOADED: Final[str] = "New version uploaded successfully"
    SHARE_CREATED: Final[str] = "Share created successfully"
    DELETED: Final[str] = "Resource deleted successfully"
