"""
Mutation gateway: create, update and delete invoices.

Each operation validates its input before any remote call, converts the dollar
amount to cents exactly once, performs a single remote write and then, only if
the write succeeded, invalidates the invoice list view (and redirects to it for
create/update). The write and the side effects are not transactional.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import pydantic

from invoice_dashboard.config import Settings, get_settings
from invoice_dashboard.domain.errors import PersistenceError, ValidationError
from invoice_dashboard.domain.models import InvoiceFormInput
from invoice_dashboard.gateways.boundary import boundary, unwrap
from invoice_dashboard.gateways.side_effects import (
    Navigator,
    RedirectNavigator,
    RenderCache,
    ViewCache,
)
from invoice_dashboard.infrastructure.client import INVOICES, DataClient
from invoice_dashboard.infrastructure.query import Eq
from invoice_dashboard.utils.currency import to_cents
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def parse_invoice_form(fields: Mapping[str, Any]) -> InvoiceFormInput:
    """
    Validate submitted invoice fields.

    Raises
    ------
    ValidationError
        With one entry per offending field, e.g. ``{"amount": [...]}``.
    """
    try:
        return InvoiceFormInput.model_validate(dict(fields))
    except pydantic.ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for error in exc.errors(include_url=False):
            key = ".".join(str(part) for part in error["loc"]) or "__root__"
            errors.setdefault(key, []).append(error["msg"])
        raise ValidationError("Invalid invoice fields", errors) from None


def _require_id(invoice_id: Any) -> str:
    if not isinstance(invoice_id, str) or not invoice_id.strip():
        raise ValidationError("Missing invoice id", {"id": ["Invoice id is required"]})
    return invoice_id


class MutationGateway:
    """
    Invoice writes against a shared DataClient.

    Parameters
    ----------
    client : DataClient
        Process-wide remote data client.
    cache : ViewCache | None
        Receives `revalidate_path` after each successful write.
    navigator : Navigator | None
        Receives `redirect` after successful create/update.
    settings : Settings | None
        Source of the invoice list view path.
    today : callable | None
        Clock used for the creation date; defaults to the UTC calendar date.
    """

    def __init__(
        self,
        client: DataClient,
        cache: Optional[ViewCache] = None,
        navigator: Optional[Navigator] = None,
        settings: Optional[Settings] = None,
        today: Optional[Callable[[], date]] = None,
    ) -> None:
        settings = settings or get_settings()
        self._client = client
        self._cache = cache if cache is not None else RenderCache()
        self._navigator = navigator if navigator is not None else RedirectNavigator()
        self._today = today or utc_today
        self.view_path = settings.invoices_view_path

    async def create_invoice(self, fields: Mapping[str, Any]) -> None:
        form = parse_invoice_form(fields)
        record = {
            "customer_id": form.customer_id,
            "amount": to_cents(form.amount),
            "status": form.status.value,
            "date": self._today().isoformat(),
        }
        log.info(
            "Creating invoice",
            extra={"customer_id": form.customer_id, "amount": record["amount"], "status": record["status"]},
        )

        message = "Failed to create invoice"
        with boundary("create_invoice", PersistenceError, message):
            result = await self._client.insert(INVOICES, record)
            unwrap(result, operation="create_invoice", error_cls=PersistenceError, message=message)

        self._cache.revalidate_path(self.view_path)
        self._navigator.redirect(self.view_path)

    async def update_invoice(self, invoice_id: str, fields: Mapping[str, Any]) -> None:
        invoice_id = _require_id(invoice_id)
        form = parse_invoice_form(fields)
        record = {
            "customer_id": form.customer_id,
            "amount": to_cents(form.amount),
            "status": form.status.value,
        }
        log.info("Updating invoice", extra={"invoice_id": invoice_id, **record})

        message = "Failed to update invoice"
        with boundary("update_invoice", PersistenceError, message, invoice_id=invoice_id):
            result = await self._client.update(INVOICES, record, match=(Eq("id", invoice_id),))
            unwrap(
                result,
                operation="update_invoice",
                error_cls=PersistenceError,
                message=message,
                invoice_id=invoice_id,
            )

        self._cache.revalidate_path(self.view_path)
        self._navigator.redirect(self.view_path)

    async def delete_invoice(self, invoice_id: str) -> None:
        """Delete by id. A missing id is not an error; nothing is checked beforehand."""
        invoice_id = _require_id(invoice_id)
        log.info("Deleting invoice", extra={"invoice_id": invoice_id})

        message = "Failed to delete invoice"
        with boundary("delete_invoice", PersistenceError, message, invoice_id=invoice_id):
            result = await self._client.delete(INVOICES, match=(Eq("id", invoice_id),))
            unwrap(
                result,
                operation="delete_invoice",
                error_cls=PersistenceError,
                message=message,
                invoice_id=invoice_id,
            )
        if result.count == 0:
            log.info("Delete matched no rows", extra={"invoice_id": invoice_id})

        self._cache.revalidate_path(self.view_path)


__all__ = ["MutationGateway", "parse_invoice_form", "utc_today"]
