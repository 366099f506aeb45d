# ==============================================================================
# DOMAIN MODELS PACKAGE INITIALIZATION
# ==============================================================================

"""
Domain Models
=============

SQLAlchemy ORM models for the five stored entities:
- User: Accounts and storage quota
- Folder: Folder tree
- File / FileVersion: File metadata and stored revisions
- Share: Access grants and public links
"""

from filevault.domain_models.base import SQLBase, TimestampMixin, CreatedAtMixin
from filevault.domain_models.user import User
from filevault.domain_models.folder import Folder
from filevault.domain_models.file import File, FileVersion
from filevault.domain_models.share import Share

__all__ = [
    "SQLBase",
    "TimestampMixin",
    "CreatedAtMixin",
    "User",
    "Folder",
    "File",
    "FileVersion",
    "Share",
]
