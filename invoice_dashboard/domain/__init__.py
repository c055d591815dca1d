"""
Domain package for the invoice dashboard.

Exports the row/view models and the error hierarchy shared by the gateways.
Keep this package focused on data definitions and validation concerns.
"""

from invoice_dashboard.domain.errors import (
    DashboardError,
    FetchError,
    PersistenceError,
    Redirect,
    ValidationError,
)
from invoice_dashboard.domain.models import (
    CardData,
    Customer,
    CustomerField,
    CustomersTableRow,
    Invoice,
    InvoiceForm,
    InvoiceFormInput,
    InvoiceStatus,
    InvoicesTableRow,
    LatestInvoice,
)

__all__ = [
    # Models
    "CardData",
    "Customer",
    "CustomerField",
    "CustomersTableRow",
    "Invoice",
    "InvoiceForm",
    "InvoiceFormInput",
    "InvoiceStatus",
    "InvoicesTableRow",
    "LatestInvoice",
    # Errors
    "DashboardError",
    "FetchError",
    "PersistenceError",
    "Redirect",
    "ValidationError",
]
