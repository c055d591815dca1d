"""
Infrastructure package for the invoice dashboard.

Centralizes database connectivity concerns (pooling, query compilation and the
remote data client). Keep this layer focused on I/O and resource management,
decoupled from gateway logic.
"""

from invoice_dashboard.infrastructure.client import (
    CUSTOMERS,
    INVOICES,
    REVENUE,
    DataClient,
    PostgresDataClient,
    QueryResult,
    RemoteError,
)
from invoice_dashboard.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    get_sync_connection,
)

__all__ = [
    "CUSTOMERS",
    "DataClient",
    "INVOICES",
    "PoolManager",
    "PostgresDataClient",
    "QueryResult",
    "REVENUE",
    "RemoteError",
    "build_dsn",
    "get_sync_connection",
]
