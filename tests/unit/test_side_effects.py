from __future__ import annotations

import pytest

from invoice_dashboard.domain.errors import Redirect
from invoice_dashboard.gateways.side_effects import (
    Navigator,
    RedirectNavigator,
    RenderCache,
    ViewCache,
)
from tests.fakes import RecordingCache, RecordingNavigator


def test_revalidate_drops_the_path_and_nested_views():
    cache = RenderCache()
    cache.set("/dashboard/invoices", "list")
    cache.set("/dashboard/invoices/inv-1/edit", "form")
    cache.set("/dashboard/invoices-archive", "other")
    cache.set("/dashboard", "home")

    cache.revalidate_path("/dashboard/invoices")

    assert "/dashboard/invoices" not in cache
    assert "/dashboard/invoices/inv-1/edit" not in cache
    assert cache.get("/dashboard/invoices-archive") == "other"
    assert cache.get("/dashboard") == "home"


def test_revalidating_an_uncached_path_is_harmless():
    cache = RenderCache()

    cache.revalidate_path("/dashboard/invoices")

    assert cache.get("/dashboard/invoices") is None


def test_redirect_navigator_raises_with_location():
    with pytest.raises(Redirect) as excinfo:
        RedirectNavigator().redirect("/dashboard/invoices")

    assert excinfo.value.location == "/dashboard/invoices"


def test_collaborators_satisfy_their_protocols():
    assert isinstance(RenderCache(), ViewCache)
    assert isinstance(RecordingCache(), ViewCache)
    assert isinstance(RedirectNavigator(), Navigator)
    assert isinstance(RecordingNavigator(), Navigator)
