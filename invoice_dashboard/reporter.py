from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.table import Table

from invoice_dashboard.domain.models import CardData, InvoiceStatus


def _status_cell(status: Any) -> str:
    value = status.value if isinstance(status, InvoiceStatus) else str(status)
    style = "green" if value == InvoiceStatus.PAID.value else "yellow"
    return f"[{style}]{value}[/{style}]"


def print_rows(
    rows: Sequence[BaseModel | Dict[str, Any]],
    title: str,
    columns: Optional[List[str]] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render models or plain row dicts as a rich table.

    Column order follows `columns` when given, otherwise the first row's keys.
    Amount-like columns are right-aligned; `status` cells are colored.
    """
    console = console or Console()

    if not rows:
        console.print(f"[yellow]No {title.lower()} to display.[/yellow]")
        return

    records = [row.model_dump() if isinstance(row, BaseModel) else dict(row) for row in rows]
    names = columns or list(records[0].keys())

    table = Table(title=title, box=box.ROUNDED, caption=f"{len(records)} row(s)")
    for name in names:
        justify = "right" if name in {"amount", "revenue"} or name.startswith("total") else "left"
        style = "cyan" if name in {"id", "name"} else None
        table.add_column(name.replace("_", " ").title(), justify=justify, style=style, no_wrap=name == "id")

    for record in records:
        cells = []
        for name in names:
            value = record.get(name)
            cells.append(_status_cell(value) if name == "status" else ("" if value is None else str(value)))
        table.add_row(*cells)

    console.print(table)


def print_cards(cards: CardData, console: Optional[Console] = None) -> None:
    """Render the dashboard's headline cards as a two-column table."""
    console = console or Console()
    table = Table(title="Dashboard", box=box.ROUNDED, show_header=False)
    table.add_column("Card", style="cyan")
    table.add_column("Value", justify="right", style="bold green")
    table.add_row("Collected", cards.total_paid_invoices)
    table.add_row("Pending", cards.total_pending_invoices)
    table.add_row("Total Invoices", f"{cards.number_of_invoices:,}")
    table.add_row("Total Customers", f"{cards.number_of_customers:,}")
    console.print(table)


__all__ = ["print_cards", "print_rows"]
