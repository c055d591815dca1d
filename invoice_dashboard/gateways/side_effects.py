"""
Collaborators the mutation gateway notifies after a successful write.

`ViewCache` drops cached renders of a view path; `Navigator` sends the caller
to a path. The defaults here are what a web layer wires in when it has nothing
better: an in-memory render cache and a navigator that raises `Redirect`.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable

from invoice_dashboard.domain.errors import Redirect
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)


@runtime_checkable
class ViewCache(Protocol):
    def revalidate_path(self, path: str) -> None:
        """Invalidate any cached render of `path`."""
        ...


@runtime_checkable
class Navigator(Protocol):
    def redirect(self, path: str) -> None:
        """Send the current caller to `path`."""
        ...


class RenderCache:
    """
    In-memory store of rendered views keyed by path.

    Revalidating a path drops it and every nested path (``/dashboard/invoices``
    also drops ``/dashboard/invoices/<id>/edit``).
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def get(self, path: str) -> Optional[Any]:
        return self._entries.get(path)

    def set(self, path: str, payload: Any) -> None:
        self._entries[path] = payload

    def __contains__(self, path: object) -> bool:
        return path in self._entries

    def revalidate_path(self, path: str) -> None:
        prefix = path.rstrip("/") + "/"
        stale = [key for key in self._entries if key == path or key.startswith(prefix)]
        for key in stale:
            del self._entries[key]
        log.debug(f"Revalidated {path}", extra={"path": path, "dropped": len(stale)})


class RedirectNavigator:
    """Navigator that raises `Redirect` for the web layer to translate."""

    def redirect(self, path: str) -> None:
        raise Redirect(path)


__all__ = ["Navigator", "RedirectNavigator", "RenderCache", "ViewCache"]
