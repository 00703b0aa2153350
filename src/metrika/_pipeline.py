"""Dispatch pipeline: sink registry, process-wide defaults, fan-out.

Design by Contract:
- Sinks are called once each, in registration order
- Registration is identity-deduplicated; None is ignored
- None passed to configure_* restores the built-in default
- Sink failures are NOT caught (propagate to the measuring call)

The registry is an immutable tuple replaced under a lock, so dispatch always
iterates a consistent snapshot even if registration happens concurrently.
"""

import threading

from beartype import beartype
from loguru import logger

from metrika._format import display_mb
from metrika._memory import MemoryTracker
from metrika._models import ENGLISH, Localization, MeasurementResult, TimestampFormat
from metrika._sinks import MetrikaSink, StructuredLogger

WARNING_ICON = "⚠️"
INFO_ICON = "⏱️"


class Pipeline:
    """Holds the registered sinks and defaults, and routes results to them.

    Args:
        memory_tracker: Tracker used by the engine when memory tracking is on
            (default: a new MemoryTracker)

    Example:
        pipeline = Pipeline()
        pipeline.register_sink(ConsoleSink())
        pipeline.configure_timestamp_format(TimestampFormat.SHORT)
        value = measure(load_data, "Load Data", pipeline=pipeline)
    """

    @beartype
    def __init__(self, memory_tracker: MemoryTracker | None = None) -> None:
        self.memory_tracker = memory_tracker if memory_tracker is not None else MemoryTracker()
        self._lock = threading.Lock()
        self._sinks: tuple[MetrikaSink, ...] = ()
        self._localization: Localization = ENGLISH
        self._timestamp_format: TimestampFormat = TimestampFormat.DISABLED
        self._track_memory: bool = False

    @property
    def sinks(self) -> tuple[MetrikaSink, ...]:
        return self._sinks

    @property
    def localization(self) -> Localization:
        return self._localization

    @property
    def timestamp_format(self) -> TimestampFormat:
        return self._timestamp_format

    @property
    def track_memory(self) -> bool:
        return self._track_memory

    @beartype
    def register_sink(self, sink: MetrikaSink | None) -> None:
        """Append a sink unless it is None or already registered."""
        if sink is None:
            return
        with self._lock:
            if any(existing is sink for existing in self._sinks):
                return
            self._sinks = (*self._sinks, sink)
        logger.debug(f"metrika: registered sink {type(sink).__name__} ({len(self._sinks)} total)")

    @beartype
    def clear_sinks(self) -> None:
        with self._lock:
            self._sinks = ()
        logger.debug("metrika: cleared all sinks")

    @beartype
    def configure_localization(self, localization: Localization | None = None) -> None:
        self._localization = localization if localization is not None else ENGLISH

    @beartype
    def configure_timestamp_format(self, timestamp_format: TimestampFormat | None = None) -> None:
        """Set the default timestamp policy; None disables timestamps."""
        self._timestamp_format = (
            timestamp_format if timestamp_format is not None else TimestampFormat.DISABLED
        )

    @beartype
    def configure_memory_tracking(self, track_memory: bool) -> None:
        self._track_memory = track_memory
        logger.debug(f"metrika: memory tracking default set to {track_memory}")

    @beartype
    def reset(self) -> None:
        """Clear sinks and restore every built-in default."""
        self.clear_sinks()
        self.configure_localization(None)
        self.configure_timestamp_format(None)
        self.configure_memory_tracking(False)

    @beartype
    def resolve_track_memory(self, track_memory: bool | None) -> bool:
        """An explicit per-call flag wins; None falls back to the default."""
        return track_memory if track_memory is not None else self._track_memory

    @beartype
    def dispatch(
        self,
        result: MeasurementResult,
        logger: StructuredLogger | None = None,
        localization: Localization | None = None,
        timestamp_format: TimestampFormat | None = None,
    ) -> None:
        """Send a result to the direct logger (if any) and every registered sink.

        Args:
            result: Completed measurement
            logger: Structured logger for a one-line summary, independent of sinks
            localization: Per-call override of the default localization
            timestamp_format: Per-call override of the default timestamp policy
        """
        if logger is not None:
            _log_direct(logger, result)

        sinks = self._sinks
        if not sinks:
            return

        effective_localization = localization if localization is not None else self._localization
        effective_timestamp = (
            timestamp_format if timestamp_format is not None else self._timestamp_format
        )
        for sink in sinks:
            sink.log_measurement(result, effective_localization, effective_timestamp)


def _log_direct(logger: StructuredLogger, result: MeasurementResult) -> None:
    exceeded = result.threshold_exceeded
    level = "WARNING" if exceeded else "INFO"
    icon = WARNING_ICON if exceeded else INFO_ICON
    duration_text = "duration high" if exceeded else "duration"

    info = result.memory_info
    if info is None:
        logger.log(
            level,
            "{} {} {}: {} ms",
            icon, result.name, duration_text, result.elapsed_ms,
        )
        return

    logger.log(
        level,
        "{} {} {}: {} ms | Memory: {:+.2f} MB | GC: Gen0: {}, Gen1: {}, Gen2: {}",
        icon, result.name, duration_text, result.elapsed_ms,
        display_mb(info),
        info.gen0_collections,
        info.gen1_collections,
        info.gen2_collections,
    )


default_pipeline = Pipeline()
