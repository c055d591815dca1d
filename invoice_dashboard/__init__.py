"""
Invoice Dashboard - server-side data layer for an invoice-management dashboard.

This package provides the reads and writes the dashboard pages make against
PostgreSQL:

- Mutation gateway: create, update and delete invoices with validation
- Query gateway: revenue, latest invoices, paged search, customer lookups
- A query-builder data client over a shared psycopg async pool

Remote failures never escape as driver errors; every operation raises
ValidationError, PersistenceError or FetchError.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from invoice_dashboard.config import Settings, get_settings
from invoice_dashboard.domain.errors import (
    DashboardError,
    FetchError,
    PersistenceError,
    Redirect,
    ValidationError,
)
from invoice_dashboard.gateways import MutationGateway, QueryGateway
from invoice_dashboard.infrastructure.client import DataClient, PostgresDataClient, QueryResult
from invoice_dashboard.services import Dashboard, build_dashboard, open_dashboard
from invoice_dashboard.utils.currency import format_currency
from invoice_dashboard.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Gateways
    "Dashboard",
    "MutationGateway",
    "QueryGateway",
    "build_dashboard",
    "open_dashboard",
    # Data client
    "DataClient",
    "PostgresDataClient",
    "QueryResult",
    # Errors
    "DashboardError",
    "FetchError",
    "PersistenceError",
    "Redirect",
    "ValidationError",
    # Utilities
    "configure_logging",
    "format_currency",
    "get_logger",
]
