# ==============================================================================
# CORE PACKAGE INITIALIZATION
# ==============================================================================
# Core utilities: Settings, Security, Exceptions, Constants
# ==============================================================================

"""
Core Module
===========

Contains core utilities and configurations for the application:
- settings: Environment configuration management
- security: JWT authentication and password hashing
- exceptions: Custom exception classes
- constants: Application-wide constants
"""

from filevault.core.settings import settings, get_settings, Settings
from filevault.core.exceptions import (
    AppException,
    AuthenticationError,
    AuthorizationError,
    ConstraintViolationError,
    DatabaseError,
    InvalidQueryError,
    InvalidTableError,
    NotFoundError,
    RecordNotFoundError,
    StoreClosedError,
    ValidationError,
)

__all__ = [
    "settings",
    "get_settings",
    "Settings",
    "AppException",
    "AuthenticationError",
    "AuthorizationError",
    "ConstraintViolationError",
    "DatabaseError",
    "InvalidQueryError",
    "InvalidTableError",
    "NotFoundError",
    "RecordNotFoundError",
    "StoreClosedError",
    "ValidationError",
]
