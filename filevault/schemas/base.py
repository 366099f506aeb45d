# ==============================================================================
# BASE SCHEMAS - Envelopes Shared by Every Router
# ==============================================================================
# ORM-aware base model, the success envelope and page metadata
# ==============================================================================

from __future__ import annotations

from datetime import datetime
from typing import Generic, List, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

T = TypeVar("T")


class BaseSchema(BaseModel):
    """
    Parent of every request and response model.

    ``from_attributes`` lets records returned by the record store (ORM
    instances or projected dicts) validate without manual conversion.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        use_enum_values=True,
    )


class TimestampSchema(BaseSchema):
    """Adds the audit columns carried by folders and files."""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaginatedResponse(BaseModel, Generic[T]):
    """
    One page of a listing.

    ``pages`` is 0 for an empty listing; ``has_next`` and ``has_prev``
    are derived, so they never disagree with ``page``/``pages``.
    """

    items: List[T]
    total: int = Field(..., ge=0, description="Matching records across all pages")
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1, description="Requested per_page")
    pages: int = Field(..., ge=0)

    @computed_field
    @property
    def has_next(self) -> bool:
        return self.page < self.pages

    @computed_field
    @property
    def has_prev(self) -> bool:
        return self.page > 1


class APIResponse(BaseModel, Generic[T]):
    """
    Success envelope: ``{"success": true, "message": ..., "data": ...}``.

    Failures never use it; exception handlers render
    ``AppException.to_dict()`` instead.
    """

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: T, message: Optional[str] = None) -> "APIResponse[T]":
        return cls(data=data, message=message)


class HealthResponse(BaseSchema):
    """Body of ``GET /health``."""

    status: Literal["healthy", "degraded"]
    version: str
    database: Literal["connected", "disconnected"]
