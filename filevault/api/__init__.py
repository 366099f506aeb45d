# ==============================================================================
# API PACKAGE INITIALIZATION
# ==============================================================================

"""
API Module
==========

FastAPI routers and endpoint definitions:
- Dependencies: Authentication, record store and service access
- Routers: Auth, Users, Folders, Files, Shares
"""

from filevault.api.router import api_router

__all__ = ["api_router"]
