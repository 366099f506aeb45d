# ==============================================================================
# FILE SCHEMAS - File Metadata and Versions
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import Field

from filevault.schemas.base import BaseSchema, TimestampSchema


class FileResponse(TimestampSchema):
    """
    Metadata of a stored file.

    The on-disk ``storage_path`` is never exposed.
    """

    id: str
    name: str
    mime_type: str
    size: int = Field(..., description="Size of the current version in bytes")
    current_version: int
    owner_id: str
    folder_id: Optional[str] = None


class FileVersionResponse(BaseSchema):
    """One stored revision of a file."""

    id: str
    file_id: str
    version: int
    size: int
    created_at: Optional[datetime] = None
