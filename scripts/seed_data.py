"""
Schema and placeholder-data loader for the invoice dashboard.

Creates the `customers`, `invoices` and `revenue` tables when missing and
loads a deterministic pseudo-random dataset with psycopg. Amounts are written
in cents.
"""

from __future__ import annotations

import random
import sys
import time
import uuid
from datetime import date, timedelta
from typing import Any, Dict, List

import psycopg
from psycopg import sql
import typer

from invoice_dashboard.domain.models import Customer, Invoice, InvoiceStatus
from invoice_dashboard.infrastructure.db_factory import build_dsn, get_sync_connection

app = typer.Typer(help="Create the dashboard tables and load placeholder data.")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS customers (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    name VARCHAR(255) NOT NULL,
    email VARCHAR(255) NOT NULL,
    image_url VARCHAR(255) NOT NULL
);

CREATE TABLE IF NOT EXISTS invoices (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    customer_id UUID NOT NULL REFERENCES customers (id) ON DELETE CASCADE,
    amount INT NOT NULL CHECK (amount >= 0),
    status VARCHAR(16) NOT NULL CHECK (status IN ('pending', 'paid')),
    date DATE NOT NULL
);

CREATE INDEX IF NOT EXISTS invoices_date_idx ON invoices (date DESC);

CREATE TABLE IF NOT EXISTS revenue (
    month VARCHAR(4) NOT NULL UNIQUE,
    revenue INT NOT NULL
);
"""

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

FIRST_NAMES = ["Evil", "Delba", "Lee", "Michael", "Amy", "Balazs", "Hector", "Steven", "Emil", "Steph"]
LAST_NAMES = ["Rabbit", "de Oliveira", "Robinson", "Novotny", "Burns", "Orban", "Simpson", "Tey", "Kowalski", "Dietz"]


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _generate_customers(rng: random.Random, count: int) -> List[Dict[str, Any]]:
    customers = []
    for i in range(count):
        first = FIRST_NAMES[i % len(FIRST_NAMES)]
        last = LAST_NAMES[(i // len(FIRST_NAMES) + i) % len(LAST_NAMES)]
        slug = f"{first}.{last}".lower().replace(" ", "")
        customer = Customer(
            id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            name=f"{first} {last}",
            email=f"{slug}{i}@example.com",
            image_url=f"/customers/{slug}.png",
        )
        customers.append(customer.model_dump(mode="json"))
    return customers


def _generate_invoices(
    rng: random.Random, customers: List[Dict[str, Any]], count: int, today: date
) -> List[Dict[str, Any]]:
    invoices = []
    for _ in range(count):
        invoice = Invoice(
            id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            customer_id=rng.choice(customers)["id"],
            amount=rng.randint(100, 5_000_000),
            status=rng.choice(list(InvoiceStatus)),
            date=today - timedelta(days=rng.randint(0, 365)),
        )
        invoices.append(invoice.model_dump(mode="json"))
    return invoices


def _generate_revenue(rng: random.Random) -> List[Dict[str, Any]]:
    return [{"month": month, "revenue": rng.randint(500, 5_000) * 100} for month in MONTHS]


def _load(conn: psycopg.Connection, table: str, rows: List[Dict[str, Any]]) -> int:
    if not rows:
        return 0
    columns = list(rows[0])
    statement = sql.SQL("INSERT INTO {} ({}) VALUES ({}) ON CONFLICT DO NOTHING").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(column) for column in columns),
        sql.SQL(", ").join(sql.Placeholder() for _ in columns),
    )
    with conn.cursor() as cur:
        cur.executemany(statement, [[row[column] for column in columns] for row in rows])
    return len(rows)


@app.command()
def main(
    customers: int = typer.Option(10, "--customers", help="Number of customers to generate."),
    invoices: int = typer.Option(50, "--invoices", "-n", help="Number of invoices to generate."),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    schema_only: bool = typer.Option(False, "--schema-only", help="Create tables; skip data."),
) -> None:
    """
    Create the dashboard schema and optionally load placeholder rows.
    """
    start = time.perf_counter()
    rng = random.Random(seed)

    with get_sync_connection(_build_dsn(dsn)) as conn:
        conn.execute(SCHEMA_SQL)
        typer.echo("Schema ready.")
        if schema_only:
            return

        customer_rows = _generate_customers(rng, customers)
        invoice_rows = _generate_invoices(rng, customer_rows, invoices, date.today())
        revenue_rows = _generate_revenue(rng)

        loaded = {
            "customers": _load(conn, "customers", customer_rows),
            "invoices": _load(conn, "invoices", invoice_rows),
            "revenue": _load(conn, "revenue", revenue_rows),
        }
        conn.commit()

    duration = time.perf_counter() - start
    summary = ", ".join(f"{table}={count}" for table, count in loaded.items())
    typer.echo(f"Seeded {summary} in {duration:.2f}s (seed={seed}).")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
