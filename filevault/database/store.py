# ==============================================================================
# RECORD STORE - Engine Lifecycle, Sessions and Transactions
# ==============================================================================
# SQLAlchemy async engine shared by every request. Works with SQLite
# (aiosqlite) and PostgreSQL (asyncpg).
# ==============================================================================

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Optional, TypeVar

from sqlalchemy import event, text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from filevault.core.exceptions import DatabaseError, StoreClosedError
from filevault.database.operations import RecordOperations, constraint_guard
from filevault.database.unit_of_work import Transaction
from filevault.domain_models import SQLBase

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreState(str, Enum):
    """Lifecycle of a RecordStore."""

    NEW = "new"
    OPEN = "open"
    CLOSED = "closed"


def _enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class RecordStore(RecordOperations):
    """
    Shared entry point for record access.

    One instance is created at application startup and used by every
    request. Each operation runs in its own short-lived session and
    commits on success; use ``transaction()`` to group operations.

    The engine is created on first use (or by ``open()``). After
    ``close()`` the store is permanently unusable and every operation
    raises ``StoreClosedError``.

    Attributes:
        _database_url: Async SQLAlchemy connection URL
        _engine_options: Extra keyword arguments for the engine
        _engine: Async engine, set once opened
        _session_factory: Session factory bound to the engine

    Example:
        >>> store = RecordStore("sqlite+aiosqlite:///./filevault.db")
        >>> await store.create_tables()
        >>> user = await store.find_unique("User", {"email": "a@example.com"})
        >>> await store.close()
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
        pool_timeout: int = 30,
        pool_recycle: int = 1800,
    ) -> None:
        self._database_url = database_url
        self._engine_options: Dict[str, Any] = {"echo": echo}

        if make_url(database_url).get_backend_name() == "sqlite":
            self._engine_options["connect_args"] = {"check_same_thread": False}
        else:
            self._engine_options.update(
                pool_size=pool_size,
                max_overflow=max_overflow,
                pool_timeout=pool_timeout,
                pool_recycle=pool_recycle,
                pool_pre_ping=True,
            )

        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._state = StoreState.NEW

    # ==========================================================================
    # LIFECYCLE METHODS
    # ==========================================================================

    @property
    def state(self) -> StoreState:
        """Current lifecycle state."""
        return self._state

    @property
    def is_closed(self) -> bool:
        """Check if the store has been closed."""
        return self._state is StoreState.CLOSED

    @property
    def engine(self) -> AsyncEngine:
        """Underlying engine, opening the store if needed."""
        self.open()
        return self._engine

    @property
    def dialect_name(self) -> str:
        """Name of the SQL dialect in use, e.g. ``sqlite``."""
        return make_url(self._database_url).get_backend_name()

    def open(self) -> None:
        """
        Create the engine and session factory.

        Called implicitly by the first operation. Does nothing when the
        store is already open.

        Raises:
            StoreClosedError: If the store has been closed
            DatabaseError: If the engine cannot be created
        """
        if self._state is StoreState.OPEN:
            return
        if self._state is StoreState.CLOSED:
            raise StoreClosedError()

        try:
            engine = create_async_engine(self._database_url, **self._engine_options)
        except (SQLAlchemyError, ImportError, ValueError) as e:
            logger.error(f"Failed to create database engine: {e}")
            raise DatabaseError(message=f"Database engine creation failed: {e}") from e

        if engine.dialect.name == "sqlite":
            event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

        self._engine = engine
        self._session_factory = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        self._state = StoreState.OPEN
        logger.info(f"Record store opened ({engine.dialect.name})")

    async def close(self) -> None:
        """
        Dispose of the engine and its connection pool.

        Safe to call more than once.
        """
        if self._state is StoreState.CLOSED:
            return
        engine = self._engine
        self._state = StoreState.CLOSED
        self._engine = None
        self._session_factory = None
        if engine is not None:
            await engine.dispose()
            logger.info("Record store closed")

    async def __aenter__(self) -> "RecordStore":
        self.open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def create_tables(self) -> None:
        """Create every table that does not exist yet."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLBase.metadata.create_all)
        logger.info("Database tables ensured")

    async def drop_tables(self) -> None:
        """Drop every table. Intended for tests and local resets."""
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLBase.metadata.drop_all)
        logger.warning("Database tables dropped")

    async def health_check(self) -> bool:
        """
        Verify database connectivity.

        Returns:
            True if a trivial query succeeds; False when the database is
            unreachable or the store is closed
        """
        try:
            async with self._scope() as session:
                await session.execute(text("SELECT 1"))
            return True
        except (DatabaseError, SQLAlchemyError, OSError) as e:
            logger.warning(f"Database health check failed: {e}")
            return False

    # ==========================================================================
    # SESSION MANAGEMENT
    # ==========================================================================

    @asynccontextmanager
    async def _scope(self) -> AsyncIterator[AsyncSession]:
        """
        Provide a transactional session scope.

        Commits on successful exit, rolls back on exception.
        """
        self.open()
        session: AsyncSession = self._session_factory()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[Transaction]:
        """
        Run a group of operations atomically.

        Commits when the block exits normally. Any exception rolls back
        every change made through the transaction and is re-raised.

        Yields:
            Transaction exposing the same operations as the store

        Example:
            >>> async with store.transaction() as tx:
            ...     await tx.update("File", {"id": file_id}, {"current_version": 2})
            ...     await tx.insert("FileVersion", {...})
        """
        self.open()
        with constraint_guard(None):
            async with self._session_factory() as session:
                async with session.begin():
                    tx = Transaction(session)
                    try:
                        yield tx
                    finally:
                        tx._finish()

    async def run_transaction(
        self,
        work: Callable[[Transaction], Awaitable[T]],
    ) -> T:
        """
        Call ``work`` with a transaction and commit if it returns.

        Args:
            work: Coroutine function receiving the transaction

        Returns:
            Whatever ``work`` returns
        """
        async with self.transaction() as tx:
            return await work(tx)
