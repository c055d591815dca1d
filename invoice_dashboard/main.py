from __future__ import annotations

import asyncio
import sys
from typing import Any, Awaitable, Callable, Optional, TypeVar

import typer

from invoice_dashboard.config import get_settings
from invoice_dashboard.domain.errors import DashboardError, Redirect, ValidationError
from invoice_dashboard.infrastructure.db_factory import build_dsn
from invoice_dashboard.reporter import print_cards, print_rows
from invoice_dashboard.services import Dashboard, open_dashboard
from invoice_dashboard.utils.logging import configure_logging

T = TypeVar("T")

app = typer.Typer(help="Invoice dashboard data layer CLI.")


def _run(action: Callable[[Dashboard], Awaitable[T]]) -> T:
    """Run one gateway call inside a freshly opened dashboard and report errors."""
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    async def _main() -> T:
        async with open_dashboard(settings=settings) as dashboard:
            return await action(dashboard)

    try:
        return asyncio.run(_main())
    except Redirect as signal:
        typer.echo(f"Done. Next view: {signal.location}")
        raise typer.Exit(0)
    except ValidationError as exc:
        typer.echo(f"{exc.message}:", err=True)
        for field, messages in exc.errors.items():
            typer.echo(f"  {field}: {'; '.join(messages)}", err=True)
        raise typer.Exit(2)
    except DashboardError as exc:
        typer.echo(exc.message, err=True)
        raise typer.Exit(1)


def _form(customer_id: str, amount: str, status: str) -> dict[str, Any]:
    return {"customerId": customer_id, "amount": amount, "status": status}


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    dsn = build_dsn(settings)
    safe_dsn = dsn.split("@", 1)[-1]
    typer.echo(
        f"DB={safe_dsn} | pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"page_size={settings.items_per_page} latest={settings.latest_invoices_limit} "
        f"view={settings.invoices_view_path}"
    )


@app.command()
def revenue() -> None:
    """Show the revenue aggregate as stored."""
    rows = _run(lambda d: d.queries.fetch_revenue())
    print_rows(rows, title="Revenue")


@app.command()
def latest() -> None:
    """Show the most recent invoices."""
    rows = _run(lambda d: d.queries.fetch_latest_invoices())
    print_rows(rows, title="Latest Invoices", columns=["name", "email", "amount"])


@app.command()
def invoices(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Customer name or email to search for."),
    page: int = typer.Option(1, "--page", "-p", min=1, help="1-indexed page number."),
) -> None:
    """Show one page of invoices, newest first."""

    async def _fetch(d: Dashboard):
        return await asyncio.gather(
            d.queries.fetch_filtered_invoices(query, page),
            d.queries.fetch_invoices_pages(query),
        )

    rows, total = _run(_fetch)
    print_rows(
        rows,
        title=f"Invoices (page {page} of {total})",
        columns=["id", "name", "email", "amount", "date", "status"],
    )


@app.command()
def pages(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Customer name or email to search for."),
) -> None:
    """Print the number of invoice pages for a search."""
    typer.echo(_run(lambda d: d.queries.fetch_invoices_pages(query)))


@app.command()
def customers(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Show totals for matching customers."),
) -> None:
    """List customers; with --query, show the customer table with totals."""
    if query is None:
        print_rows(_run(lambda d: d.queries.fetch_customers()), title="Customers")
        return
    print_rows(_run(lambda d: d.queries.fetch_filtered_customers(query)), title="Customers")


@app.command()
def cards() -> None:
    """Show the headline dashboard cards."""
    print_cards(_run(lambda d: d.queries.fetch_card_data()))


@app.command()
def show(invoice_id: str = typer.Argument(..., help="Invoice id.")) -> None:
    """Show one invoice as the edit form sees it."""
    invoice = _run(lambda d: d.queries.fetch_invoice_by_id(invoice_id))
    if invoice is None:
        typer.echo(f"Invoice {invoice_id} not found.", err=True)
        raise typer.Exit(1)
    print_rows([invoice], title="Invoice")


@app.command()
def create(
    customer_id: str = typer.Option(..., "--customer", "-c", help="Customer id."),
    amount: str = typer.Option(..., "--amount", "-a", help="Amount in dollars, e.g. 42.50."),
    status: str = typer.Option("pending", "--status", "-s", help="pending or paid."),
) -> None:
    """Create an invoice dated today."""
    _run(lambda d: d.mutations.create_invoice(_form(customer_id, amount, status)))


@app.command()
def update(
    invoice_id: str = typer.Argument(..., help="Invoice id."),
    customer_id: str = typer.Option(..., "--customer", "-c", help="Customer id."),
    amount: str = typer.Option(..., "--amount", "-a", help="Amount in dollars, e.g. 42.50."),
    status: str = typer.Option(..., "--status", "-s", help="pending or paid."),
) -> None:
    """Replace an invoice's customer, amount and status."""
    _run(lambda d: d.mutations.update_invoice(invoice_id, _form(customer_id, amount, status)))


@app.command()
def delete(invoice_id: str = typer.Argument(..., help="Invoice id.")) -> None:
    """Delete an invoice."""
    _run(lambda d: d.mutations.delete_invoice(invoice_id))
    typer.echo(f"Deleted {invoice_id}.")


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
