from __future__ import annotations

import pytest

from invoice_dashboard.gateways.queries import filtered_invoices_query
from invoice_dashboard.infrastructure.query import (
    AnyOf,
    Eq,
    ILike,
    In,
    Select,
    compile_count,
    compile_delete,
    compile_insert,
    compile_select,
    compile_sum,
    compile_update,
    contains,
    escape_like,
)


def _search_query() -> Select:
    return (
        Select("invoices", columns=("id", "amount"))
        .join_inner("customers", ("name", "email"), local_key="customer_id")
        .where(
            AnyOf(
                (
                    ILike("name", contains("lee"), table="customers"),
                    ILike("email", contains("lee"), table="customers"),
                )
            )
        )
        .order_by("date", ascending=False)
        .range(6, 11)
    )


def test_select_binds_filters_then_limit_then_offset():
    statement, params = compile_select(_search_query())

    assert params == ["%lee%", "%lee%", 6, 6]
    text = statement.as_string()
    assert 'INNER JOIN "customers" ON "invoices"."customer_id" = "customers"."id"' in text
    assert '("customers"."name" ILIKE %s OR "customers"."email" ILIKE %s)' in text
    assert text.endswith('ORDER BY "invoices"."date" DESC LIMIT %s OFFSET %s')


def test_select_quotes_every_identifier():
    statement, _ = compile_select(_search_query())

    text = statement.as_string()
    assert text.startswith(
        'SELECT "invoices"."id", "invoices"."amount", "customers"."name", "customers"."email" FROM'
    )
    assert "lee" not in text


def test_first_page_has_no_offset():
    statement, params = compile_select(Select("invoices").range(0, 5))

    assert params == [6]
    assert "OFFSET" not in statement.as_string()
    assert statement.as_string().startswith('SELECT "invoices".* FROM "invoices"')


def test_count_ignores_window_and_ordering():
    statement, params = compile_count(_search_query())

    assert params == ["%lee%", "%lee%"]
    text = statement.as_string()
    assert text.startswith("SELECT count(*) AS count FROM")
    assert "LIMIT" not in text
    assert "ORDER BY" not in text


def test_in_filter_binds_a_list():
    statement, params = compile_select(Select("invoices").where(In("customer_id", ("c1", "c2"))))

    assert params == [["c1", "c2"]]
    assert '"invoices"."customer_id" = ANY(%s)' in statement.as_string()


def test_empty_any_of_matches_nothing():
    statement, params = compile_select(Select("customers").where(AnyOf(())))

    assert params == []
    assert statement.as_string().endswith("WHERE FALSE")


def test_sum_coalesces_to_zero():
    statement, params = compile_sum("invoices", "amount", (Eq("status", "paid"),))

    assert params == ["paid"]
    assert 'COALESCE(SUM("invoices"."amount"), 0) AS total' in statement.as_string()


def test_insert_returns_the_row():
    statement, params = compile_insert("invoices", {"customer_id": "c1", "amount": 100})

    assert params == ["c1", 100]
    assert statement.as_string() == (
        'INSERT INTO "invoices" ("customer_id", "amount") VALUES (%s, %s) RETURNING *'
    )


def test_update_binds_values_before_match():
    statement, params = compile_update(
        "invoices", {"amount": 100, "status": "paid"}, (Eq("id", "inv-1"),)
    )

    assert params == [100, "paid", "inv-1"]
    assert statement.as_string() == (
        'UPDATE "invoices" SET "amount" = %s, "status" = %s '
        'WHERE "invoices"."id" = %s RETURNING *'
    )


def test_update_and_delete_refuse_to_touch_every_row():
    with pytest.raises(ValueError):
        compile_update("invoices", {"amount": 1}, ())
    with pytest.raises(ValueError):
        compile_delete("invoices", ())
    with pytest.raises(ValueError):
        compile_insert("invoices", {})


@pytest.mark.parametrize(("start", "end"), [(-1, 5), (5, 4)])
def test_range_rejects_bad_windows(start, end):
    with pytest.raises(ValueError):
        Select("invoices").range(start, end)


def test_range_is_inclusive():
    select = Select("invoices").range(12, 17)

    assert (select.row_offset, select.row_limit) == (12, 6)


def test_builders_do_not_mutate_the_original():
    base = Select("invoices")
    base.where(Eq("id", "x")).limit(1)

    assert base.filters == ()
    assert base.row_limit is None


@pytest.mark.parametrize(
    ("text", "escaped"),
    [("lee", "lee"), ("50%", "50\\%"), ("a_b", "a\\_b"), ("back\\slash", "back\\\\slash")],
)
def test_escape_like(text, escaped):
    assert escape_like(text) == escaped
    assert contains(text) == f"%{escaped}%"


def test_invoice_page_orders_by_date_then_id():
    statement, params = compile_select(filtered_invoices_query(None, 2, 6))

    assert params == [6, 6]
    assert statement.as_string().endswith(
        'ORDER BY "invoices"."date" DESC, "invoices"."id" DESC LIMIT %s OFFSET %s'
    )
