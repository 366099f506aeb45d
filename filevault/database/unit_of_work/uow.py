# ==============================================================================
# UNIT OF WORK - Transaction-Scoped Record Operations
# ==============================================================================
# Every operation issued through a Transaction shares one session, so the
# whole group commits or rolls back together
# ==============================================================================

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from filevault.core.exceptions import DatabaseError
from filevault.database.operations import RecordOperations


class Transaction(RecordOperations):
    """
    Record operations bound to one open database transaction.

    Created by ``RecordStore.transaction()``; never instantiated directly.
    Changes are visible to later operations of the same transaction and
    become visible to everyone else only once the transaction commits.

    A constraint error raised inside the transaction leaves it unusable:
    let it propagate so the whole unit of work rolls back.

    Example:
        >>> async with store.transaction() as tx:
        ...     file = await tx.insert(Table.FILE, {...})
        ...     await tx.insert(Table.FILE_VERSION, {"file_id": file.id, ...})
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._is_active = True

    @asynccontextmanager
    async def _scope(self) -> AsyncIterator[AsyncSession]:
        if not self._is_active:
            raise DatabaseError(message="Transaction is no longer active")
        yield self._session

    def _finish(self) -> None:
        self._is_active = False

    @property
    def is_active(self) -> bool:
        """Check if the transaction still accepts operations."""
        return self._is_active
