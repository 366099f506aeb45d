# ==============================================================================
# HELPER UTILITIES
# ==============================================================================
# Common utility functions used across the application
# ==============================================================================

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple, TypeVar
from uuid import uuid4
import math

from filevault.core.exceptions import InvalidQueryError

T = TypeVar("T")


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid4())


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def calculate_offset(page: int, page_size: int) -> int:
    """Calculate database offset from page number."""
    return (page - 1) * page_size


def paginate_window(
    skip: Optional[int] = None,
    take: Optional[int] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
) -> Tuple[int, Optional[int]]:
    """
    Resolve pagination arguments into an ``(offset, limit)`` window.

    ``page``/``per_page`` win over ``skip``/``take``. A ``page`` without
    ``per_page`` is ignored, and a missing ``take`` means no limit.

    Args:
        skip: Rows to skip
        take: Maximum rows to return
        page: Page number (1-indexed)
        per_page: Rows per page

    Returns:
        Tuple of offset and limit (None for unlimited)

    Raises:
        InvalidQueryError: On negative counts or a page below 1

    Example:
        >>> paginate_window(page=3, per_page=10)
        (20, 10)
    """
    for name, value in (("skip", skip), ("take", take), ("per_page", per_page)):
        if value is not None and value < 0:
            raise InvalidQueryError(message=f"{name} must not be negative")
    if page is not None and page < 1:
        raise InvalidQueryError(message="page must be 1 or greater")

    if per_page is not None:
        if page is not None:
            skip = calculate_offset(page, per_page)
        take = per_page

    return skip or 0, take


def paginate_results(
    items: List[T],
    page: int,
    page_size: int,
    total: int,
) -> Dict[str, Any]:
    """
    Create a pagination response dict.

    Args:
        items: List of items for current page
        page: Current page number (1-indexed)
        page_size: Items per page
        total: Total item count

    Returns:
        Pagination metadata dict
    """
    pages = math.ceil(total / page_size) if total > 0 else 0

    return {
        "items": items,
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": pages,
        "has_next": page < pages,
        "has_prev": page > 1,
    }


def sanitize_filename(value: str, max_length: int = 255) -> str:
    """
    Strip path components and surrounding whitespace from an upload name.

    Args:
        value: Client-supplied file name
        max_length: Maximum allowed length

    Returns:
        Bare file name, or "untitled" when nothing usable remains
    """
    if not value:
        return "untitled"
    name = value.replace("\\", "/").rsplit("/", 1)[-1].strip()
    return name[:max_length] or "untitled"
