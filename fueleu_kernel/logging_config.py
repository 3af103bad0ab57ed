"""
Structured JSON logging for the FuelEU kernel.

Every module logs through ``get_logger`` under the ``fueleu`` namespace and
passes its data as ``extra``; ``StructuredFormatter`` turns each record into
one JSON line with the bound ``LogContext`` fields merged in.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextvars import ContextVar, Token
from datetime import UTC, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

# Fields merged into every JSON line while bound.
_CONTEXT_VARS: dict[str, ContextVar[str | None]] = {
    "correlation_id": ContextVar("fueleu_correlation_id", default=None),
    "ship_id": ContextVar("fueleu_ship_id", default=None),
    "pool_id": ContextVar("fueleu_pool_id", default=None),
}


class LogContext:
    """Request-scoped fields merged into every fueleu log line."""

    @staticmethod
    def set(
        *,
        correlation_id: str | None = None,
        ship_id: str | None = None,
        pool_id: str | None = None,
    ) -> None:
        """Set context fields. None leaves a field as it is."""
        values = {
            "correlation_id": correlation_id,
            "ship_id": ship_id,
            "pool_id": pool_id,
        }
        for name, value in values.items():
            if value is not None:
                _CONTEXT_VARS[name].set(value)

    @staticmethod
    def get_all() -> dict[str, str]:
        """Bound fields only; unset ones are left out."""
        return {
            name: var.get()
            for name, var in _CONTEXT_VARS.items()
            if var.get() is not None
        }

    @staticmethod
    def clear() -> None:
        for var in _CONTEXT_VARS.values():
            var.set(None)

    @staticmethod
    def bind(**fields: str | None) -> "_BoundFields":
        """
        Bind fields for the duration of a ``with`` block.

        Previous values come back on exit. Names that are not context
        fields and None values are skipped.
        """
        return _BoundFields(fields)


class _BoundFields:

    def __init__(self, fields: dict[str, str | None]):
        self._fields = {
            name: value
            for name, value in fields.items()
            if value is not None and name in _CONTEXT_VARS
        }
        self._tokens: list[tuple[ContextVar[str | None], Token]] = []

    def __enter__(self) -> type[LogContext]:
        for name, value in self._fields.items():
            var = _CONTEXT_VARS[name]
            self._tokens.append((var, var.set(value)))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        while self._tokens:
            var, token = self._tokens.pop()
            var.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

# LogRecord attributes; anything else on a record came in through ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


class _JSONEncoder(json.JSONEncoder):
    """Decimals stay exact as strings; datetimes and UUIDs are stringified."""

    def default(self, obj: Any) -> Any:
        if isinstance(obj, Decimal):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, UUID):
            return str(obj)
        return super().default(obj)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    """Flatten an exception, including FuelEUError attributes, to exc_* keys."""
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    for attr, value in vars(exc).items():
        if not attr.startswith("_") and attr not in ("args", "code"):
            fields[f"exc_{attr}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, bound context, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, cls=_JSONEncoder, default=str)


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "fueleu"


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the fueleu namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``fueleu`` logger.

    Only the first call has any effect until ``reset_logging`` runs. Records
    do not propagate to the root logger.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    fueleu_logger = logging.getLogger(_LOGGER_PREFIX)
    fueleu_logger.setLevel(level)
    fueleu_logger.propagate = False
    fueleu_logger.addHandler(handler)


def reset_logging() -> None:
    """Drop fueleu handlers so the next ``configure_logging`` applies. Tests only."""
    global _configured
    with _lock:
        _configured = False
    fueleu_logger = logging.getLogger(_LOGGER_PREFIX)
    fueleu_logger.handlers.clear()
    fueleu_logger.setLevel(logging.WARNING)
