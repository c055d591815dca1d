"""
Error-mapping boundary shared by every gateway operation.

`unwrap` turns a failed `QueryResult` into the operation's narrow error type
after logging the remote details. `boundary` wraps an operation body so that
anything unexpected (a pool that never opened, rows that do not fit the
expected shape) surfaces the same way. Remote error objects and driver
exceptions never reach the caller as such.
"""

from __future__ import annotations

import contextlib
from typing import Any, Iterator, Type

import pydantic

from invoice_dashboard.domain.errors import DashboardError
from invoice_dashboard.infrastructure.client import QueryResult
from invoice_dashboard.utils.logging import get_logger

log = get_logger(__name__)


def unwrap(
    result: QueryResult,
    *,
    operation: str,
    error_cls: Type[DashboardError],
    message: str,
    **context: Any,
) -> QueryResult:
    """Return `result` if it succeeded, otherwise log and raise `error_cls(message)`."""
    if result.error is None:
        return result
    log.error(
        f"[{operation}] database error: {result.error.message}",
        extra={
            "operation": operation,
            "code": result.error.code,
            "details": result.error.details,
            **context,
        },
    )
    raise error_cls(message)


@contextlib.contextmanager
def boundary(
    operation: str,
    error_cls: Type[DashboardError],
    message: str,
    **context: Any,
) -> Iterator[None]:
    """Map anything but our own errors raised inside the block to `error_cls(message)`."""
    try:
        yield
    except DashboardError:
        raise
    except pydantic.ValidationError as exc:
        log.error(
            f"[{operation}] unexpected row shape",
            extra={"operation": operation, "errors": exc.errors(include_url=False), **context},
        )
        raise error_cls(message) from exc
    except Exception as exc:  # noqa: BLE001 - collapse to the operation's error type
        log.exception(f"[{operation}] failed", extra={"operation": operation, **context})
        raise error_cls(message) from exc


__all__ = ["boundary", "unwrap"]
