"""
Query builder for the dashboard's remote tables.

Queries are plain frozen dataclasses so gateways can build them without a
connection and tests can inspect exactly what was asked for. `compile_*`
functions turn them into parameterised `psycopg.sql` statements: identifiers
are always quoted through `sql.Identifier` and values are always bound
parameters.

Usage:
    query = (
        Select("invoices", columns=("id", "amount"))
        .join_inner("customers", ("name", "email"), local_key="customer_id")
        .where(AnyOf((ILike("name", contains("lee"), table="customers"),
                      ILike("email", contains("lee"), table="customers"))))
        .order_by("date", ascending=False)
        .range(0, 5)
    )
    statement, params = compile_select(query)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Union

from psycopg import sql


@dataclass(frozen=True)
class Eq:
    column: str
    value: Any
    table: Optional[str] = None


@dataclass(frozen=True)
class ILike:
    """Case-insensitive LIKE; `pattern` is used verbatim (see `contains`)."""

    column: str
    pattern: str
    table: Optional[str] = None


@dataclass(frozen=True)
class In:
    column: str
    values: Tuple[Any, ...]
    table: Optional[str] = None


@dataclass(frozen=True)
class AnyOf:
    """Logical OR across its member filters."""

    filters: Tuple["Filter", ...]


Filter = Union[Eq, ILike, In, AnyOf]


@dataclass(frozen=True)
class Join:
    """
    Join another table on `<base>.<local_key> = <table>.<foreign_key>`.

    Joined columns are spread into each row next to the base columns. An
    inner join drops base rows without a match.
    """

    table: str
    columns: Tuple[str, ...]
    local_key: str
    foreign_key: str = "id"
    inner: bool = True


@dataclass(frozen=True)
class Order:
    column: str
    ascending: bool = True
    table: Optional[str] = None


@dataclass(frozen=True)
class Select:
    table: str
    columns: Tuple[str, ...] = ("*",)
    join: Optional[Join] = None
    filters: Tuple[Filter, ...] = ()
    ordering: Tuple[Order, ...] = ()
    row_limit: Optional[int] = None
    row_offset: int = 0

    def join_inner(
        self, table: str, columns: Sequence[str], local_key: str, foreign_key: str = "id"
    ) -> "Select":
        return replace(
            self,
            join=Join(table, tuple(columns), local_key=local_key, foreign_key=foreign_key),
        )

    def where(self, *filters: Filter) -> "Select":
        return replace(self, filters=self.filters + tuple(filters))

    def order_by(self, column: str, ascending: bool = True, table: Optional[str] = None) -> "Select":
        return replace(self, ordering=self.ordering + (Order(column, ascending, table),))

    def limit(self, count: int) -> "Select":
        if count < 0:
            raise ValueError("limit must be non-negative")
        return replace(self, row_limit=count)

    def range(self, start: int, end: int) -> "Select":
        """Restrict to rows `start..end`, both ends inclusive."""
        if start < 0 or end < start:
            raise ValueError(f"invalid range {start}..{end}")
        return replace(self, row_offset=start, row_limit=end - start + 1)


def escape_like(text: str) -> str:
    """Escape LIKE metacharacters so `text` matches literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains(text: str) -> str:
    """Substring pattern for ILike."""
    return f"%{escape_like(text)}%"


def _column(base_table: str, table: Optional[str], column: str) -> sql.Composable:
    return sql.Identifier(table or base_table, column)


def _compile_filter(base_table: str, flt: Filter, params: List[Any]) -> sql.Composable:
    if isinstance(flt, Eq):
        params.append(flt.value)
        return sql.SQL("{} = {}").format(_column(base_table, flt.table, flt.column), sql.Placeholder())
    if isinstance(flt, ILike):
        params.append(flt.pattern)
        return sql.SQL("{} ILIKE {}").format(
            _column(base_table, flt.table, flt.column), sql.Placeholder()
        )
    if isinstance(flt, In):
        params.append(list(flt.values))
        return sql.SQL("{} = ANY({})").format(
            _column(base_table, flt.table, flt.column), sql.Placeholder()
        )
    if isinstance(flt, AnyOf):
        if not flt.filters:
            return sql.SQL("FALSE")
        parts = [_compile_filter(base_table, member, params) for member in flt.filters]
        return sql.SQL("({})").format(sql.SQL(" OR ").join(parts))
    raise TypeError(f"Unsupported filter: {flt!r}")


def _compile_where(base_table: str, filters: Sequence[Filter], params: List[Any]) -> sql.Composable:
    if not filters:
        return sql.SQL("")
    parts = [_compile_filter(base_table, flt, params) for flt in filters]
    return sql.SQL(" WHERE {}").format(sql.SQL(" AND ").join(parts))


def _compile_from(query: Select) -> sql.Composable:
    base = sql.Identifier(query.table)
    if query.join is None:
        return sql.SQL(" FROM {}").format(base)
    join = query.join
    return sql.SQL(" FROM {} {} JOIN {} ON {} = {}").format(
        base,
        sql.SQL("INNER" if join.inner else "LEFT"),
        sql.Identifier(join.table),
        sql.Identifier(query.table, join.local_key),
        sql.Identifier(join.table, join.foreign_key),
    )


def _compile_columns(query: Select) -> sql.Composable:
    columns: List[sql.Composable] = []
    for column in query.columns:
        if column == "*":
            columns.append(sql.SQL("{}.*").format(sql.Identifier(query.table)))
        else:
            columns.append(sql.Identifier(query.table, column))
    if query.join is not None:
        columns.extend(sql.Identifier(query.join.table, column) for column in query.join.columns)
    return sql.SQL(", ").join(columns)


def compile_select(query: Select) -> Tuple[sql.Composed, List[Any]]:
    """Compile a Select into `(statement, params)`."""
    params: List[Any] = []
    where = _compile_where(query.table, query.filters, params)
    parts: List[sql.Composable] = [
        sql.SQL("SELECT "),
        _compile_columns(query),
        _compile_from(query),
        where,
    ]
    if query.ordering:
        parts.append(
            sql.SQL(" ORDER BY {}").format(
                sql.SQL(", ").join(
                    sql.SQL("{} {}").format(
                        _column(query.table, order.table, order.column),
                        sql.SQL("ASC" if order.ascending else "DESC"),
                    )
                    for order in query.ordering
                )
            )
        )
    if query.row_limit is not None:
        parts.append(sql.SQL(" LIMIT {}").format(sql.Placeholder()))
        params.append(query.row_limit)
    if query.row_offset:
        parts.append(sql.SQL(" OFFSET {}").format(sql.Placeholder()))
        params.append(query.row_offset)
    return sql.Composed(parts), params


def compile_count(query: Select) -> Tuple[sql.Composed, List[Any]]:
    """Exact row count for a Select, ignoring its ordering and window."""
    params: List[Any] = []
    where = _compile_where(query.table, query.filters, params)
    statement = sql.Composed(
        [sql.SQL("SELECT count(*) AS count"), _compile_from(query), where]
    )
    return statement, params


def compile_sum(table: str, column: str, filters: Sequence[Filter]) -> Tuple[sql.Composed, List[Any]]:
    params: List[Any] = []
    where = _compile_where(table, filters, params)
    statement = sql.Composed(
        [
            sql.SQL("SELECT COALESCE(SUM({}), 0) AS total FROM {}").format(
                sql.Identifier(table, column), sql.Identifier(table)
            ),
            where,
        ]
    )
    return statement, params


def compile_insert(table: str, record: Mapping[str, Any]) -> Tuple[sql.Composed, List[Any]]:
    if not record:
        raise ValueError("insert needs at least one column")
    columns = list(record)
    statement = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
        sql.Identifier(table),
        sql.SQL(", ").join(sql.Identifier(column) for column in columns),
        sql.SQL(", ").join(sql.Placeholder() for _ in columns),
    )
    return statement, [record[column] for column in columns]


def compile_update(
    table: str, record: Mapping[str, Any], match: Sequence[Filter]
) -> Tuple[sql.Composed, List[Any]]:
    if not record:
        raise ValueError("update needs at least one column")
    if not match:
        raise ValueError("refusing to update without a match filter")
    params: List[Any] = [record[column] for column in record]
    assignments = sql.SQL(", ").join(
        sql.SQL("{} = {}").format(sql.Identifier(column), sql.Placeholder()) for column in record
    )
    where = _compile_where(table, match, params)
    statement = sql.Composed(
        [
            sql.SQL("UPDATE {} SET ").format(sql.Identifier(table)),
            assignments,
            where,
            sql.SQL(" RETURNING *"),
        ]
    )
    return statement, params


def compile_delete(table: str, match: Sequence[Filter]) -> Tuple[sql.Composed, List[Any]]:
    if not match:
        raise ValueError("refusing to delete without a match filter")
    params: List[Any] = []
    where = _compile_where(table, match, params)
    statement = sql.Composed([sql.SQL("DELETE FROM {}").format(sql.Identifier(table)), where])
    return statement, params


__all__ = [
    "AnyOf",
    "Eq",
    "Filter",
    "ILike",
    "In",
    "Join",
    "Order",
    "Select",
    "compile_count",
    "compile_delete",
    "compile_insert",
    "compile_select",
    "compile_sum",
    "compile_update",
    "contains",
    "escape_like",
]
