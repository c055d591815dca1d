"""
Pytest configuration for the invoice dashboard.

Provides fixtures for:
- An in-memory DataClient that evaluates the query builder's queries
- Database connection management and seeding for integration tests
- Settings override for tests
"""

from __future__ import annotations

import os
from typing import Any, Dict, Generator, List

import psycopg
import pytest

from invoice_dashboard.config import Settings
from tests.fakes import CUSTOMER_ROWS, FakeDataClient, RecordingCache, RecordingNavigator


@pytest.fixture
def settings() -> Settings:
    return Settings(
        db_host="localhost",
        db_port=5432,
        db_user="postgres",
        db_password="postgres",
        db_name="invoice_dashboard",
        log_level="DEBUG",
    )


@pytest.fixture
def fake_client() -> FakeDataClient:
    return FakeDataClient({"customers": CUSTOMER_ROWS})


@pytest.fixture
def cache() -> RecordingCache:
    return RecordingCache()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


# ---------------------------------------------------------------------------
# Integration fixtures (real Postgres)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "invoice_dashboard"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the dashboard tables exist.
    """
    from scripts.seed_data import SCHEMA_SQL

    db_connection.execute(SCHEMA_SQL)
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_tables(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the dashboard tables before and after each test function.
    """
    truncate = "TRUNCATE TABLE invoices, customers, revenue CASCADE;"
    db_connection.execute(truncate)
    db_connection.commit()
    yield
    db_connection.execute(truncate)
    db_connection.commit()


@pytest.fixture(scope="function")
def seeded_customers(db_connection: psycopg.Connection, clean_tables) -> List[Dict[str, Any]]:
    """
    Seed a handful of customers and return them.
    """
    import random

    from scripts.seed_data import _generate_customers, _load

    customers = _generate_customers(random.Random(42), 4)
    _load(db_connection, "customers", customers)
    db_connection.commit()
    return customers
