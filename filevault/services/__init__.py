# ==============================================================================
# SERVICES PACKAGE INITIALIZATION
# ==============================================================================

"""
Business Logic Services
=======================

Service layer between the API routes and the record store:
- UserService: registration, login and profile
- FolderService: folder tree
- FileService: uploads, versions and downloads
- ShareService: share links
"""

from filevault.services.base_service import BaseService
from filevault.services.file_service import FileService
from filevault.services.folder_service import FolderService
from filevault.services.share_service import ShareService
from filevault.services.user_service import UserService

__all__ = [
    "BaseService",
    "FileService",
    "FolderService",
    "ShareService",
    "UserService",
]
