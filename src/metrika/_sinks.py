"""Sink capability and the sinks that ship with metrika.

A sink receives every dispatched MeasurementResult together with the
localization and timestamp policy resolved for that call. Sinks are called
synchronously on the measuring thread and are expected not to raise.
"""

import threading
from collections.abc import Sequence
from typing import Any, NamedTuple, Protocol, runtime_checkable

from beartype import beartype
from loguru import logger as _loguru_logger

from metrika._format import format_measurement
from metrika._models import Localization, MeasurementResult, TimestampFormat


@runtime_checkable
class MetrikaSink(Protocol):
    """Consumer of measurement results (console, file, telemetry...)."""

    def log_measurement(
        self,
        result: MeasurementResult,
        localization: Localization,
        timestamp_format: TimestampFormat,
    ) -> None:
        """Handle one measurement."""


@runtime_checkable
class StructuredLogger(Protocol):
    """Anything with loguru's ``log(level, message, *args)`` call shape."""

    def log(self, level: Any, message: str, *args: Any, **kwargs: Any) -> Any:
        """Emit one log entry."""


class CapturedMeasurement(NamedTuple):
    result: MeasurementResult
    localization: Localization
    timestamp_format: TimestampFormat


class InMemorySink:
    """In-memory sink for tests and local debugging."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._captured: list[CapturedMeasurement] = []

    def log_measurement(
        self,
        result: MeasurementResult,
        localization: Localization,
        timestamp_format: TimestampFormat,
    ) -> None:
        """Append a measurement to the in-memory list (thread-safe)."""
        with self._lock:
            self._captured.append(CapturedMeasurement(result, localization, timestamp_format))

    def snapshot(self) -> Sequence[CapturedMeasurement]:
        """Return a point-in-time copy of all captured measurements."""
        with self._lock:
            return list(self._captured)

    def clear(self) -> None:
        with self._lock:
            self._captured.clear()


class LoguruSink:
    """Forwards the formatted one-line message to loguru.

    Threshold violations are logged at WARNING, everything else at INFO.

    Args:
        logger: loguru logger to write to (default: the global loguru logger).
            Pass ``logger.bind(...)`` to attach extra context.
    """

    @beartype
    def __init__(self, logger: StructuredLogger | None = None) -> None:
        self._logger = logger if logger is not None else _loguru_logger

    def log_measurement(
        self,
        result: MeasurementResult,
        localization: Localization,
        timestamp_format: TimestampFormat,
    ) -> None:
        level = "WARNING" if result.threshold_exceeded else "INFO"
        self._logger.log(level, "{}", format_measurement(result, localization, timestamp_format))
