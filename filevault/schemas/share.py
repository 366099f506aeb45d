# ==============================================================================
# SHARE SCHEMAS - Share Links
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from filevault.core.constants import SharePermissions
from filevault.schemas.base import BaseSchema
from filevault.schemas.file import FileResponse
from filevault.schemas.folder import FolderResponse


class ShareCreate(BaseSchema):
    """Schema for sharing a file or a folder."""

    file_id: Optional[str] = Field(
        None,
        description="File to share",
    )
    folder_id: Optional[str] = Field(
        None,
        description="Folder to share",
    )
    permission: str = Field(
        SharePermissions.READ,
        description="Granted permission: read or write",
    )
    shared_with_email: Optional[EmailStr] = Field(
        None,
        description="Restrict the share to one registered user",
    )
    expires_in_hours: Optional[int] = Field(
        None,
        ge=1,
        le=24 * 365,
        description="Lifetime of the share link",
    )

    @field_validator("permission")
    @classmethod
    def validate_permission(cls, v: str) -> str:
        v = v.lower()
        if v not in SharePermissions.all_permissions():
            raise ValueError(
                f"Permission must be one of: {', '.join(SharePermissions.all_permissions())}"
            )
        return v

    @model_validator(mode="after")
    def validate_target(self) -> "ShareCreate":
        if (self.file_id is None) == (self.folder_id is None):
            raise ValueError("Exactly one of file_id or folder_id is required")
        return self


class ShareResponse(BaseSchema):
    """Schema for share response."""

    id: str
    token: str
    permission: str
    expires_at: Optional[datetime] = None
    file_id: Optional[str] = None
    folder_id: Optional[str] = None
    shared_by_id: str
    shared_with_id: Optional[str] = None
    created_at: Optional[datetime] = None


class ShareResolution(BaseSchema):
    """What a share token points at."""

    share: ShareResponse
    file: Optional[FileResponse] = None
    folder: Optional[FolderResponse] = None
