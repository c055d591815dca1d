"""
Logging setup for the invoice dashboard.

Gateways log through module loggers and attach their context with ``extra=``
(``operation``, ``invoice_id``, ``query``, the remote ``code``...). The console
format shows the message only; the JSON format carries every extra field, which
is what makes a failed remote call traceable after the caller has only seen the
fixed user-facing message.

    configure_logging(level="INFO", json_logs=True)
    log = get_logger(__name__)
    log.error("[fetch_invoices_pages] database error", extra={"code": "42P01"})
"""

from __future__ import annotations

import json
import logging
import logging.config
from typing import Any, Dict, Optional

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"

# Third-party loggers that are noisy below WARNING while the pool churns connections.
QUIET_LOGGERS = ("psycopg", "psycopg.pool")

_RESERVED = frozenset(vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))) | {
    "message",
    "asctime",
    "extra",
}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a record and everything passed through ``extra=`` as one JSON line."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    payload.update(
        (key, value)
        for key, value in vars(record).items()
        if key not in _RESERVED and not key.startswith("_")
    )
    nested = getattr(record, "extra", None)
    if isinstance(nested, dict):
        payload.update(nested)
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def logging_config(level: str = "INFO", json_logs: bool = False) -> Dict[str, Any]:
    """The dictConfig mapping `configure_logging` applies."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "console": {"format": CONSOLE_FORMAT, "datefmt": "%H:%M:%S"},
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "json" if json_logs else "console",
            }
        },
        "root": {"handlers": ["stderr"], "level": level},
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
    }


def configure_logging(level: str = "INFO", json_logs: bool = False) -> None:
    """Route all dashboard logging to stderr; called once by the CLI entry point."""
    logging.config.dictConfig(logging_config(level, json_logs))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ["JsonFormatter", "configure_logging", "get_logger", "logging_config"]
