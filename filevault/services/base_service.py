# ==============================================================================
# BASE SERVICE - Generic Business Logic Layer
# ==============================================================================
# Shared lookup and pagination helpers over the record store
# ==============================================================================

from __future__ import annotations

from abc import ABC
from datetime import datetime, timezone
from typing import Any, Dict, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel

from filevault.core.exceptions import NotFoundError
from filevault.database import RecordStore, Table
from filevault.schemas.base import PaginatedResponse
from filevault.utils.helpers import paginate_results, utc_now

ResponseSchemaType = TypeVar("ResponseSchemaType", bound=BaseModel)


class BaseService(ABC, Generic[ResponseSchemaType]):
    """
    Abstract base service bound to one table.

    Encapsulates business logic for a domain entity, providing a clean
    interface for API endpoints. All persistence goes through the
    ``RecordStore``.

    Generic Parameters:
        ResponseSchemaType: Pydantic schema for responses

    Class Attributes:
        table: Table this service owns
        response_schema: Schema records are converted to
        not_found_message: Message used by ``_get_or_404``

    Example:
        >>> class FolderService(BaseService[FolderResponse]):
        ...     table = Table.FOLDER
        ...     response_schema = FolderResponse
    """

    table: Table
    response_schema: Type[ResponseSchemaType]
    not_found_message: str = "Resource not found"

    def __init__(self, store: RecordStore) -> None:
        """
        Initialize service.

        Args:
            store: Shared record store
        """
        self._store = store

    def _to_response(self, entity: Any) -> ResponseSchemaType:
        """Convert a record to the response schema."""
        return self.response_schema.model_validate(entity, from_attributes=True)

    async def _get_or_404(self, where: Mapping[str, Any]) -> Any:
        """
        First record of this service's table matching ``where``.

        Raises:
            NotFoundError: If nothing matches
        """
        record = await self._store.find_first(self.table, where=where)
        if record is None:
            raise NotFoundError(
                message=self.not_found_message,
                resource_type=self.table.value,
                resource_id=where.get("id"),
            )
        return record

    async def _paginate(
        self,
        where: Dict[str, Any],
        page: int,
        page_size: int,
        order_by: Optional[Mapping[str, str]] = None,
    ) -> PaginatedResponse[ResponseSchemaType]:
        """
        One page of records plus pagination metadata.

        Args:
            where: Filter applied to both the page and the total
            page: Page number (1-indexed)
            page_size: Items per page
            order_by: Sort order, newest first by default

        Returns:
            Paginated response
        """
        total = await self._store.count(self.table, where=where)
        records = await self._store.find_many(
            self.table,
            where=where,
            order_by=order_by or [{"created_at": "desc"}, {"id": "asc"}],
            page=page,
            per_page=page_size,
        )
        return PaginatedResponse[self.response_schema](
            **paginate_results(
                items=[self._to_response(record) for record in records],
                page=page,
                page_size=page_size,
                total=total,
            )
        )


def is_expired(expires_at: Optional[datetime]) -> bool:
    """
    Check an optional expiry against the current time.

    SQLite returns naive datetimes; those are read as UTC.
    """
    if expires_at is None:
        return False
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=timezone.utc)
    return expires_at <= utc_now()
