# ==============================================================================
# FOLDER SCHEMAS - Folder Tree
# ==============================================================================

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator

from filevault.schemas.base import BaseSchema, TimestampSchema


def _clean_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Name must not be blank")
    if "/" in v or "\\" in v:
        raise ValueError("Name must not contain path separators")
    return v


class FolderCreate(BaseSchema):
    """Schema for creating a folder."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Folder name",
    )
    parent_id: Optional[str] = Field(
        None,
        description="Parent folder; omitted for a root-level folder",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _clean_name(v)


class FolderUpdate(BaseSchema):
    """Schema for renaming or moving a folder."""

    name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=255,
        description="New folder name",
    )
    parent_id: Optional[str] = Field(
        None,
        description="New parent folder",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        return None if v is None else _clean_name(v)


class FolderResponse(TimestampSchema):
    """Schema for folder response."""

    id: str
    name: str
    owner_id: str
    parent_id: Optional[str] = None
