# ==============================================================================
# MAIN API ROUTER - Route Aggregation
# ==============================================================================
# Combines all v1 routers; mounted under API_V1_PREFIX by the app factory
# ==============================================================================

from __future__ import annotations

from fastapi import APIRouter

from filevault.api.v1 import (
    auth_router,
    files_router,
    folders_router,
    shares_router,
    users_router,
)

# Create main API router
api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(folders_router)
api_router.include_router(files_router)
api_router.include_router(shares_router)
