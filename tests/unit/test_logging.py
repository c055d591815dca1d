from __future__ import annotations

import json
import logging
import sys

from invoice_dashboard.utils.logging import _json_formatter, configure_logging, logging_config

EXPECTED_ROWS = 6


def _record(msg: str = "hello", level: int = logging.INFO) -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.rows = EXPECTED_ROWS
    record.operation = "fetch_revenue"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["rows"] == EXPECTED_ROWS
    assert payload["operation"] == "fetch_revenue"


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"code": "23503"}

    payload = json.loads(_json_formatter(record))

    assert payload["code"] == "23503"


def test_json_formatter_stringifies_unserialisable_values() -> None:
    record = _record(level=logging.ERROR)
    record.details = {"c1"}

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "ERROR"
    assert "c1" in payload["details"]


def test_configure_logging_quiets_pool_logger() -> None:
    configure_logging(level="DEBUG")
    try:
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("psycopg.pool").level == logging.WARNING
    finally:
        configure_logging(level="WARNING")


def test_logging_config_selects_formatter_and_normalises_level() -> None:
    config = logging_config(level="debug", json_logs=True)

    assert config["root"]["level"] == "DEBUG"
    assert config["handlers"]["stderr"]["formatter"] == "json"
    assert logging_config()["handlers"]["stderr"]["formatter"] == "console"
    assert config["loggers"]["psycopg.pool"] == {"level": "WARNING"}


def test_json_formatter_includes_exception_text() -> None:
    try:
        raise OSError("connection reset by peer")
    except OSError:
        record = logging.LogRecord(
            name="invoice_dashboard.gateways.boundary",
            level=logging.ERROR,
            pathname=__file__,
            lineno=1,
            msg="[create_invoice] failed",
            args=(),
            exc_info=sys.exc_info(),
        )
    record.operation = "create_invoice"

    payload = json.loads(_json_formatter(record))

    assert payload["operation"] == "create_invoice"
    assert "connection reset by peer" in payload["exc_info"]
