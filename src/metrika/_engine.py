"""Measurement engine: wraps a unit of work and dispatches its result.

All call shapes share one core, the Measurement context manager:
begin snapshot -> start timer -> work -> stop timer -> end snapshot -> dispatch.

Design by Contract:
- The work's value or failure is passed through untouched
- A failing (or cancelled) unit of work produces no result and no dispatch
- Elapsed time is truncated to whole milliseconds and never negative
"""

import functools
import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from beartype import beartype

from metrika._models import Localization, MeasurementResult, MemoryInfo, TimestampFormat, local_now
from metrika._pipeline import Pipeline, default_pipeline
from metrika._sinks import StructuredLogger

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])


class Measurement:
    """Context manager that times a block and dispatches the result on success.

    Args:
        name: Label for the measured work (may be empty)
        threshold_ms: Warn when elapsed exceeds this; <= 0 disables (default: 0)
        logger: Structured logger that gets a one-line summary (default: None)
        localization: Per-call localization override (default: pipeline's)
        timestamp_format: Per-call timestamp override (default: pipeline's)
        track_memory: Per-call memory tracking flag (default: pipeline's)
        pipeline: Pipeline to dispatch through (default: default_pipeline)

    Attributes:
        result: The dispatched MeasurementResult, or None if the block raised

    Example:
        with Measurement("Parse Config", threshold_ms=50) as m:
            config = parse(path)
        print(m.result.elapsed_ms)
    """

    @beartype
    def __init__(
        self,
        name: str,
        *,
        threshold_ms: int = 0,
        logger: StructuredLogger | None = None,
        localization: Localization | None = None,
        timestamp_format: TimestampFormat | None = None,
        track_memory: bool | None = None,
        pipeline: Pipeline | None = None,
    ) -> None:
        self.name = name
        self.threshold_ms = threshold_ms
        self.logger = logger
        self.localization = localization
        self.timestamp_format = timestamp_format
        self.pipeline = pipeline if pipeline is not None else default_pipeline
        self.track_memory = self.pipeline.resolve_track_memory(track_memory)
        self.result: MeasurementResult | None = None
        self._memory_info: MemoryInfo | None = None
        self._start: float = 0.0

    def __enter__(self) -> "Measurement":
        self.result = None
        self._memory_info = None
        if self.track_memory:
            self._memory_info = self.pipeline.memory_tracker.begin()
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        end_time = time.perf_counter()
        if exc_type is not None:
            self._memory_info = None
            return

        elapsed_ms = max(0, int((end_time - self._start) * 1000))

        if self._memory_info is not None:
            self.pipeline.memory_tracker.end(self._memory_info)

        self.result = MeasurementResult(
            name=self.name,
            elapsed_ms=elapsed_ms,
            threshold_ms=self.threshold_ms,
            memory_info=self._memory_info,
            timestamp=local_now(),
        )
        self.pipeline.dispatch(
            self.result,
            logger=self.logger,
            localization=self.localization,
            timestamp_format=self.timestamp_format,
        )


def _resolve_awaitable(work: Awaitable[T] | Callable[[], Awaitable[T]]) -> Awaitable[T]:
    if inspect.isawaitable(work):
        return work
    awaitable = work()
    assert inspect.isawaitable(awaitable), (
        f"Async work must return an awaitable, got {type(awaitable).__name__}"
    )
    return awaitable


@beartype
def measure(
    work: Callable[[], T],
    name: str,
    *,
    threshold_ms: int = 0,
    logger: StructuredLogger | None = None,
    localization: Localization | None = None,
    timestamp_format: TimestampFormat | None = None,
    track_memory: bool | None = None,
    pipeline: Pipeline | None = None,
) -> T:
    """Call ``work()``, measure it, dispatch the result, and return its value.

    Example:
        rows = measure(lambda: load_rows(path), "Load Rows", threshold_ms=200)
    """
    with Measurement(
        name,
        threshold_ms=threshold_ms,
        logger=logger,
        localization=localization,
        timestamp_format=timestamp_format,
        track_memory=track_memory,
        pipeline=pipeline,
    ):
        return work()


@beartype
def measure_void(
    work: Callable[[], Any],
    name: str,
    *,
    threshold_ms: int = 0,
    logger: StructuredLogger | None = None,
    localization: Localization | None = None,
    timestamp_format: TimestampFormat | None = None,
    track_memory: bool | None = None,
    pipeline: Pipeline | None = None,
) -> None:
    """Like measure(), for work whose return value is not wanted."""
    with Measurement(
        name,
        threshold_ms=threshold_ms,
        logger=logger,
        localization=localization,
        timestamp_format=timestamp_format,
        track_memory=track_memory,
        pipeline=pipeline,
    ):
        work()


@beartype
async def measure_async(
    work: Awaitable[T] | Callable[[], Awaitable[T]],
    name: str,
    *,
    threshold_ms: int = 0,
    logger: StructuredLogger | None = None,
    localization: Localization | None = None,
    timestamp_format: TimestampFormat | None = None,
    track_memory: bool | None = None,
    pipeline: Pipeline | None = None,
) -> T:
    """Await ``work`` (an awaitable, or a callable returning one) and measure it.

    Elapsed time covers the whole await, including time spent suspended.
    Cancellation propagates like any other failure.

    Example:
        body = await measure_async(client.get(url), "Fetch", threshold_ms=500)
    """
    with Measurement(
        name,
        threshold_ms=threshold_ms,
        logger=logger,
        localization=localization,
        timestamp_format=timestamp_format,
        track_memory=track_memory,
        pipeline=pipeline,
    ):
        return await _resolve_awaitable(work)


@beartype
async def measure_void_async(
    work: Awaitable[Any] | Callable[[], Awaitable[Any]],
    name: str,
    *,
    threshold_ms: int = 0,
    logger: StructuredLogger | None = None,
    localization: Localization | None = None,
    timestamp_format: TimestampFormat | None = None,
    track_memory: bool | None = None,
    pipeline: Pipeline | None = None,
) -> None:
    """Like measure_async(), for work whose result is not wanted."""
    with Measurement(
        name,
        threshold_ms=threshold_ms,
        logger=logger,
        localization=localization,
        timestamp_format=timestamp_format,
        track_memory=track_memory,
        pipeline=pipeline,
    ):
        await _resolve_awaitable(work)


@beartype
def measured(
    name: str | None = None,
    *,
    threshold_ms: int = 0,
    logger: StructuredLogger | None = None,
    localization: Localization | None = None,
    timestamp_format: TimestampFormat | None = None,
    track_memory: bool | None = None,
    pipeline: Pipeline | None = None,
) -> Callable[[F], F]:
    """Decorator form of measure()/measure_async().

    Coroutine functions are measured across their await; everything else is
    measured synchronously. ``name`` defaults to the function's qualified name.

    Example:
        @measured(threshold_ms=100)
        async def fetch_quotes(symbol: str) -> list[Quote]:
            ...
    """
    options: dict[str, Any] = {
        "threshold_ms": threshold_ms,
        "logger": logger,
        "localization": localization,
        "timestamp_format": timestamp_format,
        "track_memory": track_memory,
        "pipeline": pipeline,
    }

    def decorator(func: F) -> F:
        label = name if name is not None else func.__qualname__

        if inspect.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
                with Measurement(label, **options):
                    return await func(*args, **kwargs)

            return async_wrapper  # type: ignore[return-value]

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with Measurement(label, **options):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator
