# ==============================================================================
# API V1 ENDPOINTS PACKAGE
# ==============================================================================

"""
API V1 Endpoints
================

Version 1 API endpoint implementations.
"""

from filevault.api.v1.auth import router as auth_router
from filevault.api.v1.files import router as files_router
from filevault.api.v1.folders import router as folders_router
from filevault.api.v1.shares import router as shares_router
from filevault.api.v1.users import router as users_router

__all__ = [
    "auth_router",
    "files_router",
    "folders_router",
    "shares_router",
    "users_router",
]
