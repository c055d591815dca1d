"""
Remote data client: the only code that talks to Postgres.

Every call returns a `QueryResult`. Driver failures are captured as a
`RemoteError` inside the result instead of being raised, so the gateways decide
how to report them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, runtime_checkable

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool, PoolTimeout

from invoice_dashboard.infrastructure.db_factory import PoolManager, apply_statement_timeout
from invoice_dashboard.infrastructure.query import (
    Filter,
    Select,
    compile_count,
    compile_delete,
    compile_insert,
    compile_select,
    compile_sum,
    compile_update,
)
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)

INVOICES = "invoices"
CUSTOMERS = "customers"
REVENUE = "revenue"

Row = Dict[str, Any]


@dataclass(frozen=True)
class RemoteError:
    """What the database reported, kept for logs only."""

    message: str
    code: Optional[str] = None
    details: Optional[str] = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "RemoteError":
        diag = getattr(exc, "diag", None)
        return cls(
            message=str(exc).strip() or exc.__class__.__name__,
            code=getattr(exc, "sqlstate", None),
            details=getattr(diag, "message_detail", None),
        )


@dataclass
class QueryResult:
    """
    Outcome of one remote call.

    `data` holds returned rows, `count` the exact count for count queries or the
    affected row count for writes, and `error` is set instead when the call
    failed.
    """

    data: List[Row] = field(default_factory=list)
    count: Optional[int] = None
    error: Optional[RemoteError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@runtime_checkable
class DataClient(Protocol):
    """Query-builder style access to the `invoices`, `customers` and `revenue` tables."""

    async def select(self, query: Select) -> QueryResult:
        ...

    async def count(self, query: Select) -> QueryResult:
        ...

    async def sum(self, table: str, column: str, filters: Sequence[Filter] = ()) -> QueryResult:
        ...

    async def insert(self, table: str, record: Mapping[str, Any]) -> QueryResult:
        ...

    async def update(
        self, table: str, record: Mapping[str, Any], match: Sequence[Filter]
    ) -> QueryResult:
        ...

    async def delete(self, table: str, match: Sequence[Filter]) -> QueryResult:
        ...


class PostgresDataClient:
    """
    DataClient backed by a shared psycopg AsyncConnectionPool.

    Each call borrows one connection for one statement; the pool commits on
    success and rolls back on error when the connection is returned.
    """

    def __init__(
        self,
        pool: Optional[AsyncConnectionPool] = None,
        statement_timeout_ms: int = 0,
    ) -> None:
        self._pool = pool
        self._statement_timeout_ms = statement_timeout_ms

    async def _get_pool(self) -> AsyncConnectionPool:
        if self._pool is None:
            self._pool = await PoolManager().open_async_pool()
        return self._pool

    async def _execute(
        self,
        operation: str,
        table: str,
        statement: sql.Composed,
        params: Sequence[Any],
    ) -> QueryResult:
        try:
            pool = await self._get_pool()
            async with pool.connection() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await apply_statement_timeout(cur, self._statement_timeout_ms)
                    await cur.execute(statement, params)
                    rows = await cur.fetchall() if cur.description else []
                    affected = cur.rowcount
        except (psycopg.Error, PoolTimeout) as exc:
            log.debug(
                f"{operation} on {table} failed",
                extra={"operation": operation, "table": table, "error": str(exc)},
            )
            return QueryResult(error=RemoteError.from_exception(exc))
        log.debug(
            f"{operation} on {table} returned {len(rows)} row(s)",
            extra={"operation": operation, "table": table, "rows": len(rows)},
        )
        return QueryResult(data=list(rows), count=affected if affected >= 0 else None)

    async def select(self, query: Select) -> QueryResult:
        statement, params = compile_select(query)
        result = await self._execute("select", query.table, statement, params)
        result.count = None
        return result

    async def count(self, query: Select) -> QueryResult:
        statement, params = compile_count(query)
        result = await self._execute("count", query.table, statement, params)
        if result.ok:
            return QueryResult(count=_first_value(result.data, "count"))
        return result

    async def sum(self, table: str, column: str, filters: Sequence[Filter] = ()) -> QueryResult:
        statement, params = compile_sum(table, column, filters)
        return await self._execute("sum", table, statement, params)

    async def insert(self, table: str, record: Mapping[str, Any]) -> QueryResult:
        statement, params = compile_insert(table, record)
        return await self._execute("insert", table, statement, params)

    async def update(
        self, table: str, record: Mapping[str, Any], match: Sequence[Filter]
    ) -> QueryResult:
        statement, params = compile_update(table, record, match)
        return await self._execute("update", table, statement, params)

    async def delete(self, table: str, match: Sequence[Filter]) -> QueryResult:
        statement, params = compile_delete(table, match)
        return await self._execute("delete", table, statement, params)


def _first_value(rows: List[Row], key: str) -> Any:
    if not rows:
        return None
    return rows[0].get(key)


__all__ = [
    "CUSTOMERS",
    "DataClient",
    "INVOICES",
    "PostgresDataClient",
    "QueryResult",
    "REVENUE",
    "RemoteError",
    "Row",
]
