"""Per-object log context and per-stage timing for pipeline runs."""

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from .logging_config import DEFAULT_LOGGER_NAME, get_logger


def _new_correlation_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass(frozen=True)
class LogContext:
    """
    Fields attached to every message about one source object.

    ``correlation_id`` ties together the fetch, transcode and publish lines
    of a single object; ``metadata`` carries key/variant/error details.
    """

    correlation_id: str = field(default_factory=_new_correlation_id)
    operation: str = ""
    component: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)

    def with_operation(self, operation: str) -> "LogContext":
        return replace(self, operation=operation, metadata=dict(self.metadata))

    def with_metadata(self, **kwargs: Any) -> "LogContext":
        return replace(self, metadata={**self.metadata, **kwargs})

    def render(self, message: str, extra: Optional[Dict[str, Any]] = None) -> str:
        """Format ``message`` as ``[operation] [id] message (k=v, ...)``."""
        prefix = f"[{self.operation}] " if self.operation else ""
        return prefix + _with_fields(f"[{self.correlation_id}] {message}", {**self.metadata, **(extra or {})})


def _with_fields(message: str, fields: Dict[str, Any]) -> str:
    if not fields:
        return message
    return f"{message} ({', '.join(f'{k}={v}' for k, v in fields.items())})"


class StructuredLogger:
    """LoggerProtocol implementation on top of the package logger."""

    def __init__(self, name: str = DEFAULT_LOGGER_NAME, level: Optional[int] = None):
        self._logger = get_logger(name)
        if level is not None:
            self._logger.setLevel(level)

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _emit(self, level: int, message: str, context: Optional[LogContext], fields: Dict[str, Any]) -> None:
        if context is not None:
            text = context.render(message, fields)
        else:
            text = _with_fields(message, fields)
        # stacklevel points %(funcName)s at the pipeline code, not this wrapper
        self._logger.log(level, text, stacklevel=3)

    def debug(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._emit(logging.DEBUG, message, context, kwargs)

    def info(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._emit(logging.INFO, message, context, kwargs)

    def warning(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._emit(logging.WARNING, message, context, kwargs)

    def error(self, message: str, context: Optional[LogContext] = None, **kwargs: Any) -> None:
        self._emit(logging.ERROR, message, context, kwargs)


@dataclass
class PerformanceMetrics:
    """Timing of one fetch, transcode or publish call."""

    operation: str
    start_time: float
    end_time: float
    success: bool
    error_message: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time


class MetricsCollector:
    """
    In-memory record of stage timings for one run.

    The runner wraps each stage in :meth:`timed`; the reporter reads
    :meth:`get_summary` per operation at the end of the run.
    """

    def __init__(self) -> None:
        self._metrics: List[PerformanceMetrics] = []

    def record_metric(self, metric: PerformanceMetrics) -> None:
        self._metrics.append(metric)

    def record(
        self,
        operation: str,
        start_time: float,
        success: bool,
        error_message: Optional[str] = None,
    ) -> None:
        """Close a measurement that began at ``start_time``."""
        self.record_metric(PerformanceMetrics(operation, start_time, time.time(), success, error_message))

    @contextmanager
    def timed(self, operation: str) -> Iterator[None]:
        """Time the enclosed block; an exception marks it failed and is re-raised."""
        start_time = time.time()
        try:
            yield
        except Exception as exc:
            self.record(operation, start_time, False, str(exc))
            raise
        self.record(operation, start_time, True)

    def get_metrics(self, operation: Optional[str] = None) -> List[PerformanceMetrics]:
        return [m for m in self._metrics if operation is None or m.operation == operation]

    def operations(self) -> List[str]:
        """Operation names in first-recorded order."""
        return list(dict.fromkeys(m.operation for m in self._metrics))

    def get_summary(self, operation: Optional[str] = None) -> Dict[str, Any]:
        """Count, failures and duration stats; empty when nothing was recorded."""
        durations = [m.duration for m in self.get_metrics(operation)]
        if not durations:
            return {}

        failed = sum(1 for m in self.get_metrics(operation) if not m.success)
        return {
            "total_operations": len(durations),
            "successful_operations": len(durations) - failed,
            "failed_operations": failed,
            "success_rate": (len(durations) - failed) / len(durations),
            "avg_duration": sum(durations) / len(durations),
            "min_duration": min(durations),
            "max_duration": max(durations),
            "total_duration": sum(durations),
        }
