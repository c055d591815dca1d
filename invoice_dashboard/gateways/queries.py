"""
Query gateway: every read the dashboard pages make.

Query construction lives in small pure functions (`filtered_invoices_query`,
`invoice_count_query`, ...) so paging and search behaviour can be checked
without a database. The gateway methods run those queries through the shared
DataClient and reshape rows for the views.

Search policy: the list fetch and the page count use the same predicate,
``customers.name ILIKE %q% OR customers.email ILIKE %q%`` on the joined
customer, so the page count always describes the list it pages through. An
empty or whitespace-only query means no predicate.

Both invoice lists order by date, newest first, then by id so that rows sharing a
date keep a stable position across pages.

Amount policy: reads feeding display tables format cents as currency strings;
the edit-form read converts cents to dollars.
"""

from __future__ import annotations

import asyncio
import math
from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from invoice_dashboard.config import Settings, get_settings
from invoice_dashboard.domain.errors import FetchError, ValidationError
from invoice_dashboard.domain.models import (
    CardData,
    CustomerField,
    CustomersTableRow,
    InvoiceForm,
    InvoiceStatus,
    InvoicesTableRow,
    LatestInvoice,
)
from invoice_dashboard.gateways.boundary import boundary, unwrap
from invoice_dashboard.infrastructure.client import (
    CUSTOMERS,
    INVOICES,
    REVENUE,
    DataClient,
    Row,
)
from invoice_dashboard.infrastructure.query import AnyOf, Eq, ILike, In, Select, contains
from invoice_dashboard.utils.currency import format_currency, from_cents
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)

CUSTOMER_SEARCH_FIELDS = ("name", "email")


def customer_search_filter(query: Optional[str]) -> Optional[AnyOf]:
    """Predicate matching invoices whose joined customer's name or email contains `query`."""
    if query is None or not query.strip():
        return None
    pattern = contains(query.strip())
    return AnyOf(tuple(ILike(field, pattern, table=CUSTOMERS) for field in CUSTOMER_SEARCH_FIELDS))


def page_window(page: int, page_size: int) -> Tuple[int, int]:
    """Inclusive `(start, end)` row window for a 1-indexed page."""
    if isinstance(page, bool) or not isinstance(page, int) or page < 1:
        raise ValidationError("Invalid page", {"page": ["Page must be an integer >= 1"]})
    offset = (page - 1) * page_size
    return offset, offset + page_size - 1


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size)


def latest_invoices_query(limit: int) -> Select:
    return (
        Select(INVOICES, columns=("amount", "id"))
        .join_inner(CUSTOMERS, ("name", "image_url", "email"), local_key="customer_id")
        .order_by("date", ascending=False)
        .order_by("id", ascending=False)
        .limit(limit)
    )


def filtered_invoices_query(query: Optional[str], page: int, page_size: int) -> Select:
    start, end = page_window(page, page_size)
    select = (
        Select(INVOICES, columns=("id", "amount", "date", "status"))
        .join_inner(CUSTOMERS, ("name", "email", "image_url"), local_key="customer_id")
        .order_by("date", ascending=False)
        .order_by("id", ascending=False)
        .range(start, end)
    )
    predicate = customer_search_filter(query)
    return select.where(predicate) if predicate is not None else select


def invoice_count_query(query: Optional[str]) -> Select:
    select = Select(INVOICES).join_inner(CUSTOMERS, ("name", "email"), local_key="customer_id")
    predicate = customer_search_filter(query)
    return select.where(predicate) if predicate is not None else select


def customers_query(
    query: Optional[str] = None, columns: Tuple[str, ...] = ("id", "name")
) -> Select:
    select = Select(CUSTOMERS, columns=columns).order_by("name", ascending=True)
    if query is not None and query.strip():
        pattern = contains(query.strip())
        select = select.where(AnyOf(tuple(ILike(field, pattern) for field in CUSTOMER_SEARCH_FIELDS)))
    return select


class QueryGateway:
    """
    Dashboard reads against a shared DataClient.

    Every method maps remote failures to `FetchError` with a fixed message and
    never returns None where a list is expected.
    """

    def __init__(self, client: DataClient, settings: Optional[Settings] = None) -> None:
        settings = settings or get_settings()
        self._client = client
        self.items_per_page = settings.items_per_page
        self.latest_invoices_limit = settings.latest_invoices_limit

    async def fetch_revenue(self) -> List[Row]:
        """Revenue rows exactly as stored."""
        message = "Failed to fetch revenue data."
        log.info("Fetching revenue data")
        with boundary("fetch_revenue", FetchError, message):
            result = await self._client.select(Select(REVENUE))
            unwrap(result, operation="fetch_revenue", error_cls=FetchError, message=message)
        log.info("Revenue fetch completed", extra={"rows": len(result.data)})
        return list(result.data or [])

    async def fetch_latest_invoices(self) -> List[LatestInvoice]:
        message = "Failed to fetch the latest invoices."
        with boundary("fetch_latest_invoices", FetchError, message):
            result = await self._client.select(latest_invoices_query(self.latest_invoices_limit))
            unwrap(result, operation="fetch_latest_invoices", error_cls=FetchError, message=message)
            return [
                LatestInvoice.model_validate({**row, "amount": format_currency(row["amount"])})
                for row in result.data or []
            ]

    async def fetch_filtered_invoices(self, query: Optional[str], page: int) -> List[InvoicesTableRow]:
        """One page of invoices, newest first, optionally narrowed by customer name/email."""
        select = filtered_invoices_query(query, page, self.items_per_page)
        message = "Failed to fetch invoices."
        with boundary("fetch_filtered_invoices", FetchError, message, query=query, page=page):
            result = await self._client.select(select)
            unwrap(
                result,
                operation="fetch_filtered_invoices",
                error_cls=FetchError,
                message=message,
                query=query,
                page=page,
            )
            return [
                InvoicesTableRow.model_validate({**row, "amount": format_currency(row["amount"])})
                for row in result.data or []
            ]

    async def fetch_invoices_pages(self, query: Optional[str]) -> int:
        message = "Failed to fetch total number of invoices."
        with boundary("fetch_invoices_pages", FetchError, message, query=query):
            result = await self._client.count(invoice_count_query(query))
            unwrap(
                result,
                operation="fetch_invoices_pages",
                error_cls=FetchError,
                message=message,
                query=query,
            )
            count = result.count
            if isinstance(count, bool) or not isinstance(count, int) or count < 0:
                log.error(
                    "Invalid count value",
                    extra={"operation": "fetch_invoices_pages", "count": repr(count)},
                )
                raise FetchError(message)

        pages = total_pages(count, self.items_per_page)
        log.debug(f"Total pages: {pages}", extra={"count": count, "pages": pages, "query": query})
        return pages

    async def fetch_invoice_by_id(self, invoice_id: str) -> Optional[InvoiceForm]:
        """The invoice with `invoice_id`, amount in dollars, or None if there is none."""
        message = "Failed to fetch invoice."
        with boundary("fetch_invoice_by_id", FetchError, message, invoice_id=invoice_id):
            select = Select(INVOICES, columns=("id", "customer_id", "amount", "status")).where(
                Eq("id", invoice_id)
            )
            result = await self._client.select(select)
            unwrap(
                result,
                operation="fetch_invoice_by_id",
                error_cls=FetchError,
                message=message,
                invoice_id=invoice_id,
            )
            if not result.data:
                return None
            row = result.data[0]
            return InvoiceForm.model_validate({**row, "amount": from_cents(row["amount"])})

    async def fetch_customers(self) -> List[CustomerField]:
        message = "Failed to fetch all customers."
        with boundary("fetch_customers", FetchError, message):
            result = await self._client.select(customers_query())
            unwrap(result, operation="fetch_customers", error_cls=FetchError, message=message)
            return [CustomerField.model_validate(row) for row in result.data or []]

    async def fetch_card_data(self) -> CardData:
        """Headline counts and totals; the four remote calls run concurrently."""
        message = "Failed to fetch card data."
        with boundary("fetch_card_data", FetchError, message):
            invoice_count, customer_count, paid, pending = await asyncio.gather(
                self._client.count(Select(INVOICES)),
                self._client.count(Select(CUSTOMERS)),
                self._client.sum(INVOICES, "amount", (Eq("status", InvoiceStatus.PAID.value),)),
                self._client.sum(INVOICES, "amount", (Eq("status", InvoiceStatus.PENDING.value),)),
            )
            for result in (invoice_count, customer_count, paid, pending):
                unwrap(result, operation="fetch_card_data", error_cls=FetchError, message=message)
            return CardData(
                number_of_invoices=invoice_count.count or 0,
                number_of_customers=customer_count.count or 0,
                total_paid_invoices=format_currency(_total(paid.data)),
                total_pending_invoices=format_currency(_total(pending.data)),
            )

    async def fetch_filtered_customers(self, query: Optional[str]) -> List[CustomersTableRow]:
        """Customers matching `query` by name or email, with per-status invoice totals."""
        message = "Failed to fetch customer table."
        with boundary("fetch_filtered_customers", FetchError, message, query=query):
            customers = await self._client.select(
                customers_query(query, columns=("id", "name", "email", "image_url"))
            )
            unwrap(
                customers,
                operation="fetch_filtered_customers",
                error_cls=FetchError,
                message=message,
                query=query,
            )
            if not customers.data:
                return []

            invoices = await self._client.select(
                Select(INVOICES, columns=("customer_id", "amount", "status")).where(
                    In("customer_id", tuple(row["id"] for row in customers.data))
                )
            )
            unwrap(
                invoices,
                operation="fetch_filtered_customers",
                error_cls=FetchError,
                message=message,
                query=query,
            )
            return _customer_rows(customers.data, invoices.data)


def _total(rows: List[Row]) -> Any:
    if not rows:
        return 0
    return rows[0].get("total") or 0


def _customer_rows(customers: List[Row], invoices: List[Row]) -> List[CustomersTableRow]:
    totals: Dict[str, Dict[str, int]] = defaultdict(lambda: {"count": 0, "pending": 0, "paid": 0})
    for invoice in invoices:
        bucket = totals[str(invoice["customer_id"])]
        bucket["count"] += 1
        if invoice["status"] == InvoiceStatus.PAID.value:
            bucket["paid"] += invoice["amount"]
        elif invoice["status"] == InvoiceStatus.PENDING.value:
            bucket["pending"] += invoice["amount"]

    rows = []
    for customer in customers:
        bucket = totals[str(customer["id"])]
        rows.append(
            CustomersTableRow.model_validate(
                {
                    **customer,
                    "total_invoices": bucket["count"],
                    "total_pending": format_currency(bucket["pending"]),
                    "total_paid": format_currency(bucket["paid"]),
                }
            )
        )
    return rows


__all__ = [
    "QueryGateway",
    "customer_search_filter",
    "customers_query",
    "filtered_invoices_query",
    "invoice_count_query",
    "latest_invoices_query",
    "page_window",
    "total_pages",
]
