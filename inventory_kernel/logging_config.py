"""
Structured JSON logging for the inventory kernel.

Every record leaving the ``inventory_kernel`` logger tree is rendered as one
JSON object per line.  Records carry the request-scoped fields bound through
``LogContext`` (correlation id, supply, movement, operation) plus whatever the
caller passed in ``extra``.  Stock quantities are Decimals and are always
written as strings so no precision is lost on the way to the log sink.
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_CONTEXT_FIELDS: tuple[str, ...] = (
    "correlation_id",
    "supply_id",
    "movement_id",
    "operation",
)

_EMPTY: Mapping[str, str] = MappingProxyType({})

_context: ContextVar[Mapping[str, str]] = ContextVar(
    "inventory_log_context", default=_EMPTY
)


def _merged(current: Mapping[str, str], fields: dict[str, Any]) -> Mapping[str, str]:
    updated = dict(current)
    for name, value in fields.items():
        if name in _CONTEXT_FIELDS and value is not None:
            updated[name] = str(value)
    return MappingProxyType(updated)


class LogContext:
    """
    Request-scoped log fields, isolated per thread and per asyncio task.

    The whole context is one immutable mapping held in a ContextVar, so a
    nested ``bind`` restores exactly what the outer scope had.  Unknown field
    names and None values are ignored.
    """

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        supply_id: str | None = None,
        movement_id: str | None = None,
        operation: str | None = None,
    ) -> None:
        """Set context fields. Only non-None values are updated."""
        _context.set(
            _merged(
                _context.get(),
                {
                    "correlation_id": correlation_id,
                    "supply_id": supply_id,
                    "movement_id": movement_id,
                    "operation": operation,
                },
            )
        )

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block."""
        token = _context.set(_merged(_context.get(), fields))
        try:
            yield LogContext
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}

# Attributes every kernel exception exposes that are reported separately.
_EXC_SKIP = frozenset({"args", "code", "kind"})


def _to_json(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, frozenset, set)):
        return [_to_json(v) for v in value]
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    kind = getattr(exc, "kind", None)
    if kind is not None:
        fields["exc_kind"] = kind
    # InventoryKernelError subclasses keep their context as plain attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name not in _EXC_SKIP:
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **_context.get(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_KEYS:
                payload.setdefault(key, value)

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_to_json)


# ---------------------------------------------------------------------------
# Logger factory and setup
# ---------------------------------------------------------------------------

_LOGGER_PREFIX = "inventory_kernel"

_configured = False
_lock = threading.Lock()


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the inventory_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach one JSON handler to the ``inventory_kernel`` logger.

    Only the first call has any effect; later calls (for example every
    ``init_engine``) leave the existing handler and level alone.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.setLevel(level)
    kernel_logger.propagate = False

    target = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    target.setFormatter(StructuredFormatter())
    kernel_logger.addHandler(target)


def reset_logging() -> None:
    """Detach handlers and allow configure_logging() to run again. Test use only."""
    global _configured
    with _lock:
        _configured = False
    kernel_logger = logging.getLogger(_LOGGER_PREFIX)
    kernel_logger.handlers.clear()
    kernel_logger.setLevel(logging.WARNING)
