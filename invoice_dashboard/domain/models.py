"""
Domain models for the invoice dashboard.

Row models mirror the `invoices` and `customers` tables (see
`scripts/seed_data.py`) and the shapes the dashboard views consume. The
`InvoiceFormInput` model is the structural validator for submitted invoice
forms.
"""
from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

# Postgres hands back uuid.UUID for uuid columns; the dashboard treats ids as opaque text.
Identifier = Annotated[str, BeforeValidator(lambda value: str(value) if value is not None else value)]

_ROW_CONFIG = ConfigDict(frozen=True, populate_by_name=True, arbitrary_types_allowed=False)

# Largest dollar amount whose cents fit the INT `invoices.amount` column.
MAX_AMOUNT = 21_474_836.47


class InvoiceStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"


class Invoice(BaseModel):
    """
    Representation of a single row in the `invoices` table.
    """

    id: Identifier = Field(..., description="Primary key.")
    customer_id: Identifier = Field(..., description="References customers.id.")
    amount: int = Field(..., ge=0, description="Amount in cents.")
    status: InvoiceStatus = Field(..., description="Payment status.")
    date: dt.date = Field(..., description="Calendar date the invoice was issued.")

    model_config = _ROW_CONFIG


class Customer(BaseModel):
    """
    Representation of a single row in the `customers` table.
    """

    id: Identifier
    name: str
    email: str
    image_url: str

    model_config = _ROW_CONFIG


class CustomerField(BaseModel):
    """Customer option for the invoice form's select box."""

    id: Identifier
    name: str

    model_config = _ROW_CONFIG


class LatestInvoice(BaseModel):
    id: Identifier
    name: str
    image_url: str
    email: str
    amount: str = Field(..., description="Formatted currency string.")

    model_config = _ROW_CONFIG


class InvoicesTableRow(BaseModel):
    id: Identifier
    name: str
    email: str
    image_url: str
    date: dt.date
    amount: str = Field(..., description="Formatted currency string.")
    status: InvoiceStatus

    model_config = _ROW_CONFIG


class InvoiceForm(BaseModel):
    """An invoice prepared for the edit form: amount in dollars, not cents."""

    id: Identifier
    customer_id: Identifier
    amount: float
    status: InvoiceStatus

    model_config = _ROW_CONFIG


class CardData(BaseModel):
    number_of_invoices: int
    number_of_customers: int
    total_paid_invoices: str
    total_pending_invoices: str

    model_config = _ROW_CONFIG


class CustomersTableRow(BaseModel):
    id: Identifier
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str

    model_config = _ROW_CONFIG


class InvoiceFormInput(BaseModel):
    """
    Structural validator for a submitted invoice form.

    Accepts the form's field names (``customerId``) as well as the column
    name. ``amount`` is coerced from text, so ``"10.50"`` becomes ``10.5``;
    anything non-numeric, non-finite, negative, boolean or too large for the
    integer cents column is rejected.
    """

    customer_id: str = Field(..., alias="customerId", min_length=1)
    amount: float = Field(..., ge=0, le=MAX_AMOUNT, allow_inf_nan=False)
    status: InvoiceStatus

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True, extra="ignore")

    @field_validator("amount", mode="before")
    @classmethod
    def _reject_booleans(cls, value: Any) -> Any:
        if isinstance(value, bool):
            raise ValueError("Amount must be a number, not a boolean")
        return value


__all__ = [
    "CardData",
    "Customer",
    "CustomerField",
    "CustomersTableRow",
    "Identifier",
    "Invoice",
    "InvoiceForm",
    "InvoiceFormInput",
    "InvoiceStatus",
    "InvoicesTableRow",
    "LatestInvoice",
]
