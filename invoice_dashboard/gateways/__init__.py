"""
Gateways package for the invoice dashboard.

Re-exports the two gateways and their side-effect collaborators so callers can
import from `invoice_dashboard.gateways` directly.
"""

from invoice_dashboard.gateways.mutations import MutationGateway, parse_invoice_form
from invoice_dashboard.gateways.queries import QueryGateway
from invoice_dashboard.gateways.side_effects import (
    Navigator,
    RedirectNavigator,
    RenderCache,
    ViewCache,
)

__all__ = [
    # Gateways
    "MutationGateway",
    "QueryGateway",
    "parse_invoice_form",
    # Collaborators
    "Navigator",
    "RedirectNavigator",
    "RenderCache",
    "ViewCache",
]
