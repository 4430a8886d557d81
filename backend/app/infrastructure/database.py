"""Database Session Manager: async connection pool, single-statement execution, error translation.

Invariants:
    - One AsyncEngine per process, built in the FastAPI lifespan and kept on app.state
    - Every statement runs inside engine.begin(): committed on success, rolled back on error
    - All store failures are translated HERE (translate_database_error) and nowhere else
    - No retries: an unreachable store surfaces immediately as ServiceUnavailableError

Design Decisions:
    - pool_timeout bounds connection acquisition; pool_recycle evicts idle connections;
      pool_pre_ping detects stale connections
    - get_db reads app.state instead of a module singleton, so tests override one dependency
"""

import logging
import time
from typing import Any

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.exc import (
    DataError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.sql import Executable

from app.core.errors import (
    BadRequestError,
    BooksApiError,
    ConflictError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
INVALID_TEXT_REPRESENTATION = "22P02"


def _driver_errors(exc: BaseException) -> list[BaseException]:
    """The DBAPI exception and whatever the driver chained under it."""
    orig = getattr(exc, "orig", None)
    found = [e for e in (orig, getattr(orig, "__cause__", None)) if e is not None]
    return found or [exc]


def _sqlstate(exc: BaseException) -> str | None:
    for err in _driver_errors(exc):
        code = getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
        if code:
            return str(code)
    return None


def _store_detail(exc: BaseException) -> str:
    for err in _driver_errors(exc):
        detail = getattr(err, "detail", None)
        if detail:
            return str(detail)
    return str(_driver_errors(exc)[0])


def translate_database_error(exc: BaseException) -> BooksApiError | None:
    """Map a store failure to an API error kind. None means unclassified (-> 500)."""
    code = _sqlstate(exc)
    message = str(_driver_errors(exc)[0]).upper()
    is_integrity = isinstance(exc, IntegrityError)

    if code == UNIQUE_VIOLATION or (is_integrity and "UNIQUE" in message):
        return ConflictError(
            "A record with this data already exists", details=_store_detail(exc),
        )
    if code == FOREIGN_KEY_VIOLATION or (is_integrity and "FOREIGN KEY" in message):
        return BadRequestError(
            "Foreign key constraint violated", details=_store_detail(exc),
        )
    if code == INVALID_TEXT_REPRESENTATION or isinstance(exc, DataError):
        return BadRequestError("Invalid data format")
    if isinstance(
        exc, (OperationalError, InterfaceError, PoolTimeoutError, OSError),
    ):
        return ServiceUnavailableError()
    return None


class DatabaseSessionManager:
    """Pooled SQL executor with error translation and health checks."""

    def __init__(
        self,
        database_url: str,
        pool_size: int = 20,
        max_overflow: int = 0,
        pool_timeout: float = 2.0,
        pool_recycle: int = 30,
    ):
        self.engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
            pool_recycle=pool_recycle,
            pool_pre_ping=True,
        )

    async def query(self, statement: Executable) -> list[dict[str, Any]]:
        """Execute one statement; rows come back as plain dicts."""
        start = time.perf_counter()
        try:
            async with self.engine.begin() as conn:
                result = await conn.execute(statement)
                rows = (
                    [dict(row) for row in result.mappings()]
                    if result.returns_rows else []
                )
        except (SQLAlchemyError, OSError) as e:
            mapped = translate_database_error(e)
            logger.error(
                f"DB query failed: {e}",
                extra={"error_code": mapped.code if mapped else None},
            )
            if mapped is None:
                raise
            raise mapped from e
        logger.debug(
            "DB query executed",
            extra={
                "duration_ms": round((time.perf_counter() - start) * 1000, 2),
                "rows": len(rows),
            },
        )
        return rows

    async def health_check(self) -> bool:
        """Check database connectivity (for /health and the startup probe)."""
        try:
            await self.query(text("SELECT 1"))
            return True
        except Exception as e:
            # query() has already logged the failure at ERROR
            logger.warning(f"DB health check failed: {type(e).__name__}")
            return False

    async def close(self) -> None:
        await self.engine.dispose()


def get_db(request: Request) -> DatabaseSessionManager:
    """FastAPI dependency: the executor built by the lifespan."""
    db_manager = getattr(request.app.state, "db_manager", None)
    if db_manager is None:
        raise RuntimeError("Database not initialized")
    return db_manager
