"""
Structured logging for ERP commands.

Every record under the ``erp_kernel`` logger tree is written as one JSON
object per line.  A record carries:

    ts, level, logger, message     always
    command, actor_id              while a service command runs
    event_id                       while the bus dispatches an event
    correlation_id                 when the caller binds one
    <extra>                        whatever the call site passed in extra=
    error_*                        when logged with exc_info

Services never format strings for logs; the message is a stable snake_case
name (``accounts_payable_created``) and the facts go in ``extra``.

Example line::

    {"ts": "...", "level": "INFO", "logger": "erp_kernel.modules.finance.handlers",
     "message": "accounts_payable_created", "command": "confirm_purchase_order",
     "event_id": "6f1c...", "po_number": "PO-2024-000001", "total_amount": "5000.00"}
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

__all__ = [
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

LOGGER_ROOT = "erp_kernel"

CONTEXT_FIELDS = ("correlation_id", "command", "actor_id", "event_id")

_context: ContextVar[Mapping[str, str]] = ContextVar("erp_log_context", default={})


class LogContext:
    """Fields merged into every record logged in the current context."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    def set(**fields: Any) -> None:
        _context.set(_merged(fields))

    @staticmethod
    def clear() -> None:
        _context.set({})

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Add ``fields`` for the duration of the block; None values are skipped."""
        token = _context.set(_merged(fields))
        try:
            yield
        finally:
            _context.reset(token)


def _merged(fields: Mapping[str, Any]) -> dict[str, str]:
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field(s): {', '.join(sorted(unknown))}")
    merged = dict(_context.get())
    merged.update({k: str(v) for k, v in fields.items() if v is not None})
    return merged


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


_RESERVED = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context.get())
        payload.update(
            (key, value) for key, value in record.__dict__.items()
            if key not in _RESERVED and key not in payload
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._error_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_jsonable)

    @staticmethod
    def _error_fields(error: BaseException) -> dict[str, Any]:
        fields: dict[str, Any] = {
            "error_type": type(error).__name__,
            "error_message": str(error),
        }
        # ErpError subclasses expose a code and their context
        code = getattr(error, "code", None)
        if code is not None:
            fields["error_code"] = code
        details = getattr(error, "details", None)
        if callable(details):
            fields["error_details"] = details()
        return fields


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``erp_kernel`` tree, e.g. ``get_logger("modules.invoice")``."""
    return logging.getLogger(f"{LOGGER_ROOT}.{name}")


def _installed_handler(root: logging.Logger) -> logging.Handler | None:
    for handler in root.handlers:
        if getattr(handler, "_erp_structured", False):
            return handler
    return None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """Install the JSON handler on ``erp_kernel``; a second call is a no-op."""
    root = logging.getLogger(LOGGER_ROOT)
    if _installed_handler(root) is not None:
        return
    handler = handler or logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    handler._erp_structured = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False


def reset_logging() -> None:
    """Remove the installed handler. Tests only."""
    root = logging.getLogger(LOGGER_ROOT)
    installed = _installed_handler(root)
    if installed is not None:
        root.removeHandler(installed)
    root.setLevel(logging.WARNING)
