"""Connection Pool - async engine wrapper with per-statement connections and error translation.

Invariants:
    - One pooled connection per statement, released on every exit path (async with)
    - Writes run inside engine.begin(): commit on success, rollback on exception
    - Every SQLAlchemy/driver failure, including raw binding errors the driver
      raises outside SQLAlchemy (OverflowError, ValueError), is re-raised as
      StoreError carrying the driver text
    - Unique violations are re-raised as DuplicateKeyError, whatever the backend

Design Decisions:
    - Pool lives on app.state and is resolved by get_pool: no module-level singleton,
      tests substitute it with dependency_overrides
    - pool_pre_ping + pool_recycle for stale connection detection
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.sql.expression import Executable

from book_api.core.errors import DuplicateKeyError, StoreError
from book_api.core.repository_protocols import WriteOutcome
from book_api.db.base import Base

logger = logging.getLogger(__name__)

_PG_UNIQUE_VIOLATION = "23505"
_MYSQL_DUP_ENTRY = 1062


def _driver_message(exc: BaseException) -> str:
    """Text of the underlying driver error, without SQLAlchemy's statement dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


def is_duplicate_key(exc: IntegrityError) -> bool:
    """True when an IntegrityError is a unique-constraint violation."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate == _PG_UNIQUE_VIOLATION:
        return True
    args = getattr(orig, "args", ())
    if args and args[0] == _MYSQL_DUP_ENTRY:
        return True
    return "UNIQUE constraint failed" in str(orig)


class ConnectionPool:
    """Executes parameterized statements against a pooled async engine."""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @classmethod
    def from_url(
        cls, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ) -> "ConnectionPool":
        kwargs: dict = {"pool_pre_ping": True}
        # SQLite picks its own pool class; sizing arguments are rejected there
        if make_url(database_url).get_backend_name() != "sqlite":
            kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        return cls(create_async_engine(database_url, **kwargs))

    @asynccontextmanager
    async def _translate_errors(self, operation: str) -> AsyncGenerator[None, None]:
        try:
            yield
        except IntegrityError as e:
            message = _driver_message(e)
            if is_duplicate_key(e):
                logger.warning(
                    f"DB duplicate key: {message}", extra={"operation": operation},
                )
                raise DuplicateKeyError(message, operation) from e
            logger.error(
                f"DB integrity error: {message}", extra={"operation": operation},
            )
            raise StoreError(message, operation) from e
        except (SQLAlchemyError, OSError, OverflowError, ValueError) as e:
            message = _driver_message(e)
            logger.error(f"DB error: {message}", extra={"operation": operation})
            raise StoreError(message, operation) from e

    async def fetch_all(self, statement: Executable) -> list[dict]:
        """Run a read statement and return its rows as dicts."""
        async with self._translate_errors("query"):
            async with self.engine.connect() as conn:
                result = await conn.execute(statement)
                return [dict(row._mapping) for row in result]

    async def execute(self, statement: Executable) -> WriteOutcome:
        """Run a write statement in its own transaction and describe the outcome."""
        async with self._translate_errors("execute"):
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                last_id = None
                if result.is_insert and result.inserted_primary_key:
                    last_id = result.inserted_primary_key[0]
                return WriteOutcome(rowcount=result.rowcount, last_id=last_id)

    async def create_tables(self) -> None:
        """Create missing tables from Base.metadata (startup bootstrap, not a migration)."""
        import book_api.models  # noqa: F401

        async with self._translate_errors("create_tables"):
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            await self.fetch_all(text("SELECT 1"))
            return True
        except StoreError as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def get_pool(request: Request) -> ConnectionPool:
    """FastAPI dependency for the process-wide connection pool."""
    pool = getattr(request.app.state, "pool", None)
    if pool is None:
        raise RuntimeError("Database not initialized")
    return pool
