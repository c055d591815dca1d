"""
Utilities package for the invoice dashboard.

Exports shared helpers for logging and money formatting.
Keep this package lightweight and free of database access.
"""

from invoice_dashboard.utils.currency import format_currency, from_cents, to_cents
from invoice_dashboard.utils.logging import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "format_currency",
    "from_cents",
    "get_logger",
    "to_cents",
]
