# ==============================================================================
# RECORD OPERATIONS - Table-Generic CRUD Surface
# ==============================================================================
# Shared by RecordStore (one session per call) and Transaction
# (one session for the whole unit of work)
# ==============================================================================

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Dict,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Union,
)

from sqlalchemy import Table as SATable
from sqlalchemy import delete as sa_delete
from sqlalchemy import func, insert, select as sa_select, update as sa_update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from filevault.core.exceptions import (
    ConstraintViolationError,
    DatabaseError,
    RecordNotFoundError,
)
from filevault.database.query import (
    check_create_payload,
    compile_order_by,
    compile_select,
    compile_update_values,
    compile_where,
    equality_fields,
    group_rows,
    require_unique_where,
)
from filevault.database.tables import Table, TableName
from filevault.utils.helpers import paginate_window

logger = logging.getLogger(__name__)

Record = Any
Where = Mapping[str, Any]
Select = Mapping[str, bool]
OrderBy = Union[Mapping[str, str], Sequence[Mapping[str, str]]]

# Keeps multi-row INSERTs under SQLite's bound-parameter limit
MAX_ROWS_PER_INSERT = 500


@dataclass(frozen=True)
class BatchPayload:
    """Result of a batch write: the number of rows affected."""

    count: int


@contextmanager
def constraint_guard(table: Optional[Table]) -> Iterator[None]:
    """Re-raise driver integrity errors as ``ConstraintViolationError``."""
    try:
        yield
    except IntegrityError as exc:
        name = table.value if table else None
        raise ConstraintViolationError(
            message=f"Constraint violated on {name or 'database'}: {exc.orig}",
            table=name,
        ) from exc


class RecordOperations(ABC):
    """
    CRUD, pagination and raw-query operations over the known tables.

    Every method resolves its table argument with ``Table.resolve`` before
    opening a session, so an unknown table name fails without any
    database access.

    Subclasses decide where the session comes from through ``_scope``.
    """

    @abstractmethod
    def _scope(self) -> AsyncIterator[AsyncSession]:
        """Async context manager yielding the session to run on."""

    # ==========================================================================
    # CREATE
    # ==========================================================================

    async def insert(
        self,
        table: TableName,
        data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]],
        skip_duplicates: bool = True,
    ) -> Union[Record, BatchPayload]:
        """
        Insert one record, or a list of records in one batch.

        Args:
            table: Target table
            data: A record mapping, or a list of them
            skip_duplicates: For lists, silently skip rows that hit a
                unique constraint instead of failing

        Returns:
            The created record for a single mapping, otherwise a
            ``BatchPayload`` with the number of rows inserted

        Example:
            >>> await store.insert("User", {"email": "a@example.com", ...})
            >>> await store.insert("User", [row_a, row_b])
            BatchPayload(count=2)
        """
        table = Table.resolve(table)

        if isinstance(data, (list, tuple)):
            rows = [check_create_payload(table, row) for row in data]
            if not rows:
                return BatchPayload(count=0)
            with constraint_guard(table):
                async with self._scope() as session:
                    count = await _insert_rows(session, table, rows, skip_duplicates)
            logger.debug(f"Inserted {count}/{len(rows)} {table.value} rows")
            return BatchPayload(count=count)

        payload = check_create_payload(table, data)
        with constraint_guard(table):
            async with self._scope() as session:
                instance = table.model(**payload)
                session.add(instance)
                await session.flush()
                await session.refresh(instance)
                return instance

    # ==========================================================================
    # READ
    # ==========================================================================

    async def find_unique(
        self,
        table: TableName,
        where: Where,
        select: Optional[Select] = None,
    ) -> Optional[Record]:
        """
        Find the record identified by a unique filter.

        Args:
            table: Target table
            where: Filter pinning the primary key, a unique column or every
                column of a unique constraint
            select: Optional ``{field: True}`` projection

        Returns:
            The record (a dict when projected), or None
        """
        table = Table.resolve(table)
        require_unique_where(table, where)
        return await self._fetch_one(table, where, select, None)

    async def find_first(
        self,
        table: TableName,
        where: Optional[Where] = None,
        select: Optional[Select] = None,
        order_by: Optional[OrderBy] = None,
    ) -> Optional[Record]:
        """First record matching ``where`` under ``order_by``, or None."""
        table = Table.resolve(table)
        return await self._fetch_one(table, where, select, order_by)

    async def find_many(
        self,
        table: TableName,
        where: Optional[Where] = None,
        select: Optional[Select] = None,
        order_by: Optional[OrderBy] = None,
        skip: Optional[int] = None,
        take: Optional[int] = None,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> List[Record]:
        """
        Find all records matching ``where``.

        ``page`` and ``per_page`` take precedence over ``skip``/``take``:
        page 2 of 10 reads the same window as ``skip=10, take=10``.
        Without pagination arguments no limit is applied.

        Example:
            >>> await store.find_many(
            ...     "File",
            ...     where={"owner_id": user_id, "is_deleted": False},
            ...     order_by={"created_at": "desc"},
            ...     page=1,
            ...     per_page=20,
            ... )
        """
        table = Table.resolve(table)
        offset, limit = paginate_window(skip=skip, take=take, page=page, per_page=per_page)
        stmt = self._select_stmt(table, where, select, order_by)
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)

        async with self._scope() as session:
            result = await session.execute(stmt)
            if select is not None:
                return [dict(row) for row in result.mappings().all()]
            return list(result.scalars().all())

    async def count(
        self,
        table: TableName,
        where: Optional[Where] = None,
    ) -> int:
        """Number of records matching ``where``."""
        table = Table.resolve(table)
        stmt = sa_select(func.count()).select_from(table.model)
        clause = compile_where(table, where)
        if clause is not None:
            stmt = stmt.where(clause)

        async with self._scope() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    # ==========================================================================
    # UPDATE
    # ==========================================================================

    async def update(
        self,
        table: TableName,
        where: Where,
        data: Mapping[str, Any],
    ) -> Record:
        """
        Update the record identified by a unique filter.

        Raises:
            RecordNotFoundError: If no record matches ``where``
        """
        table = Table.resolve(table)
        require_unique_where(table, where)
        values = compile_update_values(table, data)

        with constraint_guard(table):
            async with self._scope() as session:
                instance = await self._load_for_write(session, table, where, "update")
                await _apply_values(session, instance, values)
                return instance

    async def upsert(
        self,
        table: TableName,
        where: Where,
        update: Mapping[str, Any],
        create: Optional[Mapping[str, Any]] = None,
    ) -> Record:
        """
        Update the record matching ``where``, or create it.

        Args:
            table: Target table
            where: Unique filter
            update: Fields applied when the record exists
            create: Fields used when it does not (defaults to ``update``).
                Fields pinned by ``where`` are filled in when missing.

        Returns:
            The updated or created record
        """
        table = Table.resolve(table)
        require_unique_where(table, where)
        values = compile_update_values(table, update)
        payload = check_create_payload(table, update if create is None else create)
        for field, value in equality_fields(where).items():
            payload.setdefault(field, value)

        with constraint_guard(table):
            async with self._scope() as session:
                stmt = sa_select(table.model).where(compile_where(table, where)).limit(1)
                instance = (await session.execute(stmt)).scalars().first()
                if instance is not None:
                    await _apply_values(session, instance, values)
                    return instance

                instance = table.model(**payload)
                session.add(instance)
                await session.flush()
                await session.refresh(instance)
                return instance

    async def update_many(
        self,
        table: TableName,
        where: Optional[Where],
        data: Mapping[str, Any],
    ) -> BatchPayload:
        """Update every record matching ``where``; returns the count."""
        table = Table.resolve(table)
        values = compile_update_values(table, data)
        if not values:
            return BatchPayload(count=await self.count(table, where))

        stmt = sa_update(table.model).values(**values)
        clause = compile_where(table, where)
        if clause is not None:
            stmt = stmt.where(clause)

        with constraint_guard(table):
            async with self._scope() as session:
                result = await session.execute(
                    stmt.execution_options(synchronize_session=False)
                )
                return BatchPayload(count=result.rowcount)

    # ==========================================================================
    # DELETE
    # ==========================================================================

    async def delete(
        self,
        table: TableName,
        where: Where,
    ) -> Record:
        """
        Delete the record identified by a unique filter.

        Returns:
            The deleted record, detached from any session

        Raises:
            RecordNotFoundError: If no record matches ``where``
        """
        table = Table.resolve(table)
        require_unique_where(table, where)

        with constraint_guard(table):
            async with self._scope() as session:
                instance = await self._load_for_write(session, table, where, "delete")
                await session.delete(instance)
                await session.flush()
                return instance

    async def delete_many(
        self,
        table: TableName,
        where: Optional[Where] = None,
    ) -> BatchPayload:
        """Delete every record matching ``where``; returns the count."""
        table = Table.resolve(table)
        stmt = sa_delete(table.model)
        clause = compile_where(table, where)
        if clause is not None:
            stmt = stmt.where(clause)

        with constraint_guard(table):
            async with self._scope() as session:
                result = await session.execute(
                    stmt.execution_options(synchronize_session=False)
                )
                return BatchPayload(count=result.rowcount)

    # ==========================================================================
    # RAW QUERIES
    # ==========================================================================

    async def raw_query(self, query: str, *params: Any) -> List[Dict[str, Any]]:
        """
        Run raw SQL and return its rows as dicts.

        Parameters are positional and use the driver's placeholder style
        (``?`` for SQLite, ``$1`` for asyncpg). The query is passed to the
        driver as-is: never interpolate untrusted input into it.

        Example:
            >>> await store.raw_query(
            ...     "SELECT owner_id, SUM(size) AS total FROM files "
            ...     "WHERE is_deleted = ? GROUP BY owner_id",
            ...     False,
            ... )
        """
        async with self._scope() as session:
            connection = await session.connection()
            result = await connection.exec_driver_sql(query, tuple(params))
            if not result.returns_rows:
                return []
            return [dict(row) for row in result.mappings().all()]

    async def execute_raw(self, query: str, *params: Any) -> int:
        """Run a raw statement that returns no rows; returns the affected count."""
        with constraint_guard(None):
            async with self._scope() as session:
                connection = await session.connection()
                result = await connection.exec_driver_sql(query, tuple(params))
                return result.rowcount

    # ==========================================================================
    # INTERNAL HELPERS
    # ==========================================================================

    def _select_stmt(
        self,
        table: Table,
        where: Optional[Where],
        select: Optional[Select],
        order_by: Optional[OrderBy],
    ):
        columns = compile_select(table, select)
        stmt = sa_select(*columns) if columns is not None else sa_select(table.model)
        clause = compile_where(table, where)
        if clause is not None:
            stmt = stmt.where(clause)
        ordering = compile_order_by(table, order_by)
        if ordering:
            stmt = stmt.order_by(*ordering)
        return stmt

    async def _fetch_one(
        self,
        table: Table,
        where: Optional[Where],
        select: Optional[Select],
        order_by: Optional[OrderBy],
    ) -> Optional[Record]:
        stmt = self._select_stmt(table, where, select, order_by).limit(1)
        async with self._scope() as session:
            result = await session.execute(stmt)
            if select is not None:
                row = result.mappings().first()
                return dict(row) if row is not None else None
            return result.scalars().first()

    async def _load_for_write(
        self,
        session: AsyncSession,
        table: Table,
        where: Where,
        operation: str,
    ) -> Record:
        stmt = sa_select(table.model).where(compile_where(table, where)).limit(1)
        instance = (await session.execute(stmt)).scalars().first()
        if instance is None:
            raise RecordNotFoundError(table.value, dict(where), operation)
        return instance


async def _apply_values(
    session: AsyncSession,
    instance: Record,
    values: Dict[str, Any],
) -> None:
    if not values:
        return
    for field, value in values.items():
        setattr(instance, field, value)
    await session.flush()
    # Reload expression-assigned and onupdate columns
    await session.refresh(instance)


def _dialect_insert(dialect_name: str, target: SATable, skip_duplicates: bool):
    if not skip_duplicates:
        return insert(target)
    if dialect_name == "sqlite":
        return sqlite_insert(target).on_conflict_do_nothing()
    if dialect_name == "postgresql":
        return pg_insert(target).on_conflict_do_nothing()
    if dialect_name in ("mysql", "mariadb"):
        return insert(target).prefix_with("IGNORE")
    raise DatabaseError(
        message=f"skip_duplicates is not supported on the {dialect_name} dialect",
    )


async def _insert_rows(
    session: AsyncSession,
    table: Table,
    rows: List[Dict[str, Any]],
    skip_duplicates: bool,
) -> int:
    target: SATable = table.model.__table__
    columns = {prop.key: prop.columns[0].key for prop in table.model.__mapper__.column_attrs}
    dialect_name = session.get_bind().dialect.name

    inserted = 0
    for group in group_rows(rows):
        for start in range(0, len(group), MAX_ROWS_PER_INSERT):
            chunk = [
                {columns[field]: value for field, value in row.items()}
                for row in group[start:start + MAX_ROWS_PER_INSERT]
            ]
            stmt = _dialect_insert(dialect_name, target, skip_duplicates).values(chunk)
            result = await session.execute(stmt)
            inserted += max(result.rowcount, 0)
    return inserted
