"""
Composition root: one data client, shared by both gateways.

Usage:
    from invoice_dashboard.services import open_dashboard

    async with open_dashboard() as dashboard:
        revenue, latest = await asyncio.gather(
            dashboard.queries.fetch_revenue(),
            dashboard.queries.fetch_latest_invoices(),
        )
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from invoice_dashboard.config import Settings, get_settings
from invoice_dashboard.gateways.mutations import MutationGateway
from invoice_dashboard.gateways.queries import QueryGateway
from invoice_dashboard.gateways.side_effects import Navigator, ViewCache
from invoice_dashboard.infrastructure.client import DataClient, PostgresDataClient
from invoice_dashboard.infrastructure.db_factory import PoolManager
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Dashboard:
    client: DataClient
    queries: QueryGateway
    mutations: MutationGateway


def build_dashboard(
    client: DataClient,
    settings: Optional[Settings] = None,
    cache: Optional[ViewCache] = None,
    navigator: Optional[Navigator] = None,
) -> Dashboard:
    """Wire both gateways around an existing client."""
    settings = settings or get_settings()
    return Dashboard(
        client=client,
        queries=QueryGateway(client, settings=settings),
        mutations=MutationGateway(client, cache=cache, navigator=navigator, settings=settings),
    )


@contextlib.asynccontextmanager
async def open_dashboard(
    settings: Optional[Settings] = None,
    cache: Optional[ViewCache] = None,
    navigator: Optional[Navigator] = None,
    dsn: Optional[str] = None,
) -> AsyncIterator[Dashboard]:
    """Open the shared pool, yield wired gateways, close the pool on exit."""
    settings = settings or get_settings()
    manager = PoolManager()
    pool = await manager.open_async_pool(dsn=dsn)
    log.info("Connection pool ready", extra={"max_size": pool.max_size})
    client = PostgresDataClient(pool, statement_timeout_ms=settings.db_statement_timeout_ms)
    try:
        yield build_dashboard(client, settings=settings, cache=cache, navigator=navigator)
    finally:
        await manager.close()


__all__ = ["Dashboard", "build_dashboard", "open_dashboard"]
