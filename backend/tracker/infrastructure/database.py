"""Store Handle: the async engine, its transactions, and database error mapping.

Invariants:
    - Every transaction commits on normal exit and rolls back on any exception
    - All SQLAlchemy exceptions leave as TrackerError subclasses (core/errors.py)
    - On SQLite: foreign keys enforced on every connection, and every transaction
      starts with BEGIN IMMEDIATE so it holds the writer lock from its first read
    - No module-level handle: a Store is built once by bootstrap and passed to services

Design Decisions:
    - expire_on_commit=False: returned rows stay readable after their session closes
    - BEGIN IMMEDIATE over deferred BEGIN: check-then-write sequences (company delete,
      find_or_create, link upsert) cannot interleave with another writer
    - Integrity failures classified from the driver message: UNIQUE becomes
      UniquenessViolationError, everything else ConstraintViolationError
"""

import logging
import re
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from tracker.core.errors import (
    ConstraintViolationError, DatabaseError, ErrorContext,
    TrackerError, UniquenessViolationError,
)
from tracker.db.base import Base
from tracker.models import REQUIRED_TABLES

logger = logging.getLogger(__name__)

_UNIQUE_RE = re.compile(r"UNIQUE constraint failed: (\w+)\.(\w+)")


class Store:
    """Owns the engine and hands out transactional sessions."""

    def __init__(
        self, database_url: str, echo: bool = False,
        busy_timeout_seconds: float = 5.0,
    ):
        connect_args = {}
        if database_url.startswith("sqlite"):
            connect_args["timeout"] = busy_timeout_seconds
        self.engine = create_async_engine(
            database_url, echo=echo, connect_args=connect_args,
        )
        if self.engine.dialect.name == "sqlite":
            _install_sqlite_hooks(self.engine.sync_engine)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def transaction(
        self, operation: str, entity: str | None = None,
        entity_id: str | None = None,
    ) -> AsyncGenerator[AsyncSession, None]:
        """One atomic unit of work: commit on success, rollback on every other exit."""
        session = self._session_factory()
        try:
            async with session.begin():
                yield session
        except SQLAlchemyError as e:
            raise _translate(e, operation, entity, entity_id) from e
        finally:
            await session.close()

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a read session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _translate(e, "query", None, None) from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Schema created", extra={"operation": "create_schema"})

    async def drop_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def verify_integrity(self) -> None:
        """Raise DatabaseError unless all five tracker tables exist."""
        async with self.engine.connect() as conn:
            existing = await conn.run_sync(
                lambda sync_conn: set(inspect(sync_conn).get_table_names()),
            )
        missing = [t for t in REQUIRED_TABLES if t not in existing]
        if missing:
            raise DatabaseError(
                f"Missing required tables: {', '.join(missing)}", "verify",
            )
        logger.info("Database integrity verified", extra={"operation": "verify"})

    async def health_check(self) -> bool:
        """Check database connectivity."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except TrackerError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _install_sqlite_hooks(sync_engine: Engine) -> None:
    @event.listens_for(sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # driver-level BEGIN disabled; _on_begin emits our own
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def _translate(
    exc: SQLAlchemyError, operation: str,
    entity: str | None, entity_id: str | None,
) -> TrackerError:
    ctx = ErrorContext(operation=operation, entity=entity, entity_id=entity_id)
    log_extra = {"operation": operation, "entity": entity, "entity_id": entity_id}
    if isinstance(exc, IntegrityError):
        detail = str(exc.orig) if exc.orig is not None else str(exc)
        logger.error(f"DB integrity error: {detail}", extra=log_extra)
        return translate_integrity_error(detail, operation, ctx)
    if isinstance(exc, OperationalError):
        logger.error(f"DB operational error: {exc}", extra=log_extra)
        return DatabaseError("Connection or operational error", operation, ctx)
    if isinstance(exc, DBAPIError):
        logger.error(f"DB driver error: {exc}", extra=log_extra)
        return DatabaseError("Database driver error", operation, ctx)
    logger.error(f"SQLAlchemy error: {exc}", extra=log_extra)
    return DatabaseError("Database operation failed", operation, ctx)


def translate_integrity_error(
    detail: str, operation: str, ctx: ErrorContext,
) -> TrackerError:
    """Classify a driver integrity message into the tracker taxonomy."""
    match = _UNIQUE_RE.search(detail)
    if match:
        table, column = match.groups()
        return UniquenessViolationError(ctx.entity or table, column, context=ctx)
    if "unique" in detail.lower() or "duplicate key" in detail.lower():
        return UniquenessViolationError(ctx.entity or "record", "unknown", context=ctx)
    return ConstraintViolationError(detail, operation, ctx)
