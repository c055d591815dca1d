"""
Error hierarchy for the dashboard gateways.

Callers only ever see these types: validation problems are raised before any
remote call, and remote failures are logged at the gateway boundary and
re-raised with a fixed, user-presentable message.
"""

from __future__ import annotations

from typing import Dict, List, Optional


class DashboardError(Exception):
    """Base class for all gateway errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Malformed or incomplete input, detected before touching the database."""

    def __init__(self, message: str, errors: Optional[Dict[str, List[str]]] = None) -> None:
        super().__init__(message)
        self.errors: Dict[str, List[str]] = errors or {}


class PersistenceError(DashboardError):
    """A remote write (insert, update, delete) failed."""


class FetchError(DashboardError):
    """A remote read failed or returned structurally invalid data."""


class Redirect(Exception):
    """
    Control-flow signal asking the web layer to send the caller elsewhere.

    Not a DashboardError: it is raised on the success path of a mutation.
    """

    def __init__(self, location: str) -> None:
        super().__init__(location)
        self.location = location


__all__ = [
    "DashboardError",
    "FetchError",
    "PersistenceError",
    "Redirect",
    "ValidationError",
]
