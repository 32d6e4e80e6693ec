"""Structured logging and metrics for storage operations.

Each storage call made through `StorageClient` runs inside an
`OperationContext`. The context is visible to every log line emitted during
the call and, on exit, reports a ``blob.<operation>`` timer on success or a
``blob.<operation>.errors`` counter on failure:

    with OperationContext("write", storage_name="uploads", path="/a.txt"):
        await storage.write("/a.txt", b"data")
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar, Token
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

MetricCallback = Callable[[str, float, dict[str, Any]], None]

_metric_callbacks: list[MetricCallback] = []


class LogLevel(str, Enum):
    """Log levels matching Python's logging module."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass(frozen=True)
class StorageOperation:
    """The storage call currently in progress."""

    operation_id: str
    operation: str
    storage_name: str | None = None
    path: str | None = None

    def fields(self) -> dict[str, Any]:
        """Non-empty fields, as attached to log lines."""
        result: dict[str, Any] = {
            "operation_id": self.operation_id,
            "operation": self.operation,
        }
        if self.storage_name:
            result["storage_name"] = self.storage_name
        if self.path:
            result["path"] = self.path
        return result


current_operation_var: ContextVar[StorageOperation | None] = ContextVar(
    "current_operation", default=None
)


def current_operation() -> StorageOperation | None:
    """Return the operation the caller is running in, if any."""
    return current_operation_var.get()


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, including the current operation."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        context: dict[str, Any] = {}
        operation = current_operation()
        if operation is not None:
            context.update(operation.fields())
        context.update(getattr(record, "context", None) or {})
        if context:
            data["context"] = context

        duration_ms = getattr(record, "duration_ms", None)
        if duration_ms is not None:
            data["duration_ms"] = round(duration_ms, 3)

        if record.exc_info and record.exc_info[0] is not None:
            data["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(data, default=str)


class StructuredLogger:
    """Logger taking a ``context`` dict and an optional ``error`` per call.

    Example:
        logger = get_logger(__name__)
        logger.debug("Blob written", context={"size": 5})
        logger.warning("Blob read failed", error=exc)
    """

    def __init__(self, name: str) -> None:
        self.logger = logging.getLogger(name)

    def _log(
        self,
        level: int,
        message: str,
        context: dict[str, Any] | None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        extra = {"context": context or {}, "duration_ms": duration_ms}
        exc_info = (type(error), error, error.__traceback__) if error is not None else None
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        duration_ms: float | None = None,
    ) -> None:
        self._log(logging.DEBUG, message, context, duration_ms=duration_ms)

    def info(self, message: str, context: dict[str, Any] | None = None) -> None:
        self._log(logging.INFO, message, context)

    def warning(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        error: BaseException | None = None,
        duration_ms: float | None = None,
    ) -> None:
        self._log(logging.WARNING, message, context, error, duration_ms)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger for a module (typically ``__name__``)."""
    return StructuredLogger(name)


_logger = get_logger(__name__)


class OperationContext:
    """Scope of one storage operation.

    Sets the current operation for logging, measures how long the block
    takes, then logs and reports metrics for the outcome. Exceptions raised
    in the block are never suppressed.
    """

    def __init__(
        self,
        operation: str,
        storage_name: str | None = None,
        path: str | None = None,
        operation_id: str | None = None,
    ) -> None:
        """Initialize operation context.

        Args:
            operation: Operation name, used in metric names (``blob.<operation>``)
            storage_name: Name of the storage the operation runs against
            path: Blob or folder path the operation targets
            operation_id: Unique identifier, generated if omitted
        """
        self.operation = StorageOperation(
            operation_id=operation_id or uuid.uuid4().hex,
            operation=operation,
            storage_name=storage_name,
            path=path,
        )
        self.duration_ms: float | None = None
        self._started = 0.0
        self._token: Token[StorageOperation | None] | None = None

    @property
    def operation_id(self) -> str:
        return self.operation.operation_id

    def __enter__(self) -> "OperationContext":
        self._token = current_operation_var.set(self.operation)
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.duration_ms = (time.perf_counter() - self._started) * 1000
        name = f"blob.{self.operation.operation}"
        try:
            if exc is None:
                emit_timer(name, self.duration_ms)
                _logger.debug(
                    f"Blob {self.operation.operation} completed",
                    context=self.operation.fields(),
                    duration_ms=self.duration_ms,
                )
            else:
                emit_counter(f"{name}.errors", {"error": exc_type.__name__})
                _logger.warning(
                    f"Blob {self.operation.operation} failed",
                    context=self.operation.fields(),
                    error=exc,
                    duration_ms=self.duration_ms,
                )
        finally:
            if self._token is not None:
                current_operation_var.reset(self._token)
                self._token = None


def register_metric_callback(callback: MetricCallback) -> None:
    """Register a ``callback(name, value, labels)`` to receive metrics."""
    _metric_callbacks.append(callback)


def unregister_metric_callback(callback: MetricCallback) -> None:
    """Remove a previously registered metric callback. Unknown callbacks are ignored."""
    if callback in _metric_callbacks:
        _metric_callbacks.remove(callback)


def emit_metric(name: str, value: float, labels: dict[str, Any] | None = None) -> None:
    """Send a metric to all registered callbacks.

    The storage name and operation of the current `OperationContext` are
    added as labels unless the caller already set them. A failing callback
    is logged and does not stop the others.
    """
    labels = dict(labels) if labels else {}

    operation = current_operation()
    if operation is not None:
        labels.setdefault("operation", operation.operation)
        if operation.storage_name:
            labels.setdefault("storage_name", operation.storage_name)

    for callback in list(_metric_callbacks):
        try:
            callback(name, value, labels)
        except Exception as e:
            _logger.warning("Metric callback failed", context={"metric": name}, error=e)


def emit_counter(name: str, labels: dict[str, Any] | None = None) -> None:
    """Emit a counter metric (increment by 1)."""
    emit_metric(name, 1.0, labels)


def emit_timer(name: str, duration_ms: float, labels: dict[str, Any] | None = None) -> None:
    """Emit a timer metric in milliseconds."""
    emit_metric(name, duration_ms, labels)


def configure_logging(
    level: LogLevel = LogLevel.INFO,
    format: str = "json",
) -> None:
    """Send ``blob_core`` logs to stdout.

    Args:
        level: Minimum log level
        format: Output format ("json" or "text")
    """
    package_logger = logging.getLogger("blob_core")
    package_logger.setLevel(level.value)
    package_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    if format == "json":
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))
    package_logger.addHandler(handler)
