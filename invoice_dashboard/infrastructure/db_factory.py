"""
Database connection factory utilities for the invoice dashboard.

Provides centralized management of the async PostgreSQL connection pool shared
by both gateways, plus a plain sync connection for scripts. The PoolManager
singleton creates the pool once per process and hands out the same handle
until it is closed.

Includes retry logic for transient connection failures using tenacity.
Individual queries are never retried.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Optional

import psycopg
from psycopg import AsyncCursor, sql
from psycopg_pool import AsyncConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from invoice_dashboard.config import Settings, get_settings
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings; DATABASE_URL wins when set."""
    settings = settings or get_settings()
    if settings.database_url:
        return settings.database_url
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class PoolManager:
    """
    Thread-safe singleton owning the process-wide async connection pool.

    The pool is created lazily on first use and never replaced while open;
    callers share it read-only. Whoever owns the process lifecycle calls
    `close()` at shutdown.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._async_pool = None
                cls._instance._open_lock = None
            return cls._instance

    def get_async_pool(
        self,
        min_size: Optional[int] = None,
        max_size: Optional[int] = None,
        dsn: Optional[str] = None,
    ) -> AsyncConnectionPool:
        """
        Get or create the (not yet opened) asynchronous connection pool.

        Parameters
        ----------
        min_size : int | None
            Minimum number of idle connections to keep. Defaults to settings.
        max_size : int | None
            Maximum total connections in the pool. Defaults to settings.
        dsn : str | None
            Optional DSN override; defaults to `build_dsn()`.

        Returns
        -------
        AsyncConnectionPool
            The managed async pool instance.
        """
        with self._lock:
            if self._async_pool is None:
                settings = get_settings()
                self._async_pool = AsyncConnectionPool(
                    conninfo=dsn or build_dsn(settings),
                    min_size=min_size or settings.db_pool_min_size,
                    max_size=max_size or settings.db_pool_max_size,
                    open=False,
                )
            return self._async_pool

    async def open_async_pool(self, dsn: Optional[str] = None) -> AsyncConnectionPool:
        """Return the shared pool, opened and ready to hand out connections."""
        pool = self.get_async_pool(dsn=dsn)
        if self._open_lock is None:
            self._open_lock = asyncio.Lock()
        async with self._open_lock:
            await _open_pool(pool)
        return pool

    async def close(self) -> None:
        """Close the managed pool and release its connections."""
        with self._lock:
            pool, self._async_pool = self._async_pool, None
            self._open_lock = None
        if pool is not None:
            await pool.close()
            log.info("Connection pool closed")


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, PoolTimeout)),
    reraise=True,
)
async def _open_pool(pool: AsyncConnectionPool) -> None:
    # Opening an already-open pool is a no-op.
    await pool.open(wait=True)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> psycopg.Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Used by maintenance scripts; the gateways go through the async pool.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


async def apply_statement_timeout(cursor: AsyncCursor, timeout_ms: int) -> None:
    """Bound the current transaction's statements; 0 disables the limit."""
    if timeout_ms and timeout_ms > 0:
        await cursor.execute(
            sql.SQL("SET LOCAL statement_timeout = {}").format(sql.Literal(int(timeout_ms)))
        )


__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
    "get_sync_connection",
]
