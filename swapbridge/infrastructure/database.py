"""Database Session Manager — async engine, session scope and error mapping.

Invariants:
    - Every session rolls back on a SQLAlchemy exception before it is re-raised
      as DatabaseError (core/errors.py); non-database exceptions pass through untouched
    - Pool sizing only applies to pooled backends (PostgreSQL); SQLite URLs
      get the dialect's default pool
    - The readiness probe is bounded: a hung database reports unhealthy, never hangs

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle;
      the operator CLI builds its own manager
    - expire_on_commit=False: swap rows are read after the commit that reserved them
    - IntegrityError only reaches here when on-conflict handling did not apply:
      allocator and reconciler resolve their own unique-constraint races
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from swapbridge.core.errors import DatabaseError

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError/OperationalError are DBAPIError subclasses
_ERROR_OPERATIONS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "commit", "Integrity constraint violated"),
    (OperationalError, "execute", "Connection or operational error"),
    (DBAPIError, "query", "Database driver error"),
    (SQLAlchemyError, "unknown", "Database operation failed"),
)


def _engine_options(database_url: str, pool_size: int, max_overflow: int) -> dict:
    options = {"pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
        )
    return options


class DatabaseSessionManager:
    """Owns the engine; hands out sessions that surface failures as DatabaseError."""

    def __init__(
        self, database_url: str, pool_size: int = 20, max_overflow: int = 10,
    ):
        self.engine = create_async_engine(
            database_url, **_engine_options(database_url, pool_size, max_overflow),
        )
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            raise _to_database_error(e) from e
        finally:
            await session.close()

    async def health_check(self, timeout_seconds: float = 5.0) -> bool:
        """SELECT 1 within timeout_seconds (readiness probe)."""
        try:
            async with self.session() as db:
                await asyncio.wait_for(
                    db.execute(text("SELECT 1")), timeout=timeout_seconds,
                )
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


def _to_database_error(error: SQLAlchemyError) -> DatabaseError:
    operation, message = next(
        (operation, message)
        for error_type, operation, message in _ERROR_OPERATIONS
        if isinstance(error, error_type)
    )
    logger.error(
        f"DB {operation} error: {error}", extra={"error_code": "DATABASE_ERROR"},
    )
    return DatabaseError(message, operation)


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs):
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise RuntimeError("Database not initialized")
    async with db_manager.session() as session:
        yield session
