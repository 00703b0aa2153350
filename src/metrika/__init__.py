"""metrika: Call-site timing and memory instrumentation with pluggable sinks.

Provides:
- measure / measure_void: Time a synchronous callable and return its value
- measure_async / measure_void_async: Time an awaitable without blocking the loop
- measured: Decorator form for plain and coroutine functions
- Measurement: Context manager behind all of the above
- Pipeline: Sink registry plus default localization, timestamp and memory settings
- ConsoleSink, LoguruSink, InMemorySink: Ready-made sinks

Usage:
    from metrika import measure, register_sink, configure_timestamp_format, TimestampFormat
    from metrika.console import ConsoleSink

    register_sink(ConsoleSink())
    configure_timestamp_format(TimestampFormat.SHORT)

    answer = measure(compute_answer, "Compute Answer", threshold_ms=100, track_memory=True)

The module-level configuration functions operate on ``default_pipeline``.
Pass ``pipeline=`` to any entry point to route through a different Pipeline.
"""

from metrika._engine import (
    Measurement,
    measure,
    measure_async,
    measure_void,
    measure_void_async,
    measured,
)
from metrika._format import format_measurement
from metrika._memory import MemoryTracker
from metrika._models import (
    CHINESE_SIMPLIFIED,
    ENGLISH,
    FRENCH,
    GERMAN,
    ITALIAN,
    JAPANESE,
    PORTUGUESE,
    RUSSIAN,
    SPANISH,
    TURKISH,
    Localization,
    MeasurementResult,
    MemoryInfo,
    PerformanceLevel,
    TimestampFormat,
)
from metrika._pipeline import Pipeline, default_pipeline
from metrika._sinks import (
    CapturedMeasurement,
    InMemorySink,
    LoguruSink,
    MetrikaSink,
    StructuredLogger,
)
from metrika.console import ColorScheme, ConsoleSink

register_sink = default_pipeline.register_sink
clear_sinks = default_pipeline.clear_sinks
configure_localization = default_pipeline.configure_localization
configure_timestamp_format = default_pipeline.configure_timestamp_format
configure_memory_tracking = default_pipeline.configure_memory_tracking
reset = default_pipeline.reset

__all__ = [
    "CHINESE_SIMPLIFIED",
    "ENGLISH",
    "FRENCH",
    "GERMAN",
    "ITALIAN",
    "JAPANESE",
    "PORTUGUESE",
    "RUSSIAN",
    "SPANISH",
    "TURKISH",
    "CapturedMeasurement",
    "ColorScheme",
    "ConsoleSink",
    "InMemorySink",
    "Localization",
    "LoguruSink",
    "Measurement",
    "MeasurementResult",
    "MemoryInfo",
    "MemoryTracker",
    "MetrikaSink",
    "PerformanceLevel",
    "Pipeline",
    "StructuredLogger",
    "TimestampFormat",
    "clear_sinks",
    "configure_localization",
    "configure_memory_tracking",
    "configure_timestamp_format",
    "default_pipeline",
    "format_measurement",
    "measure",
    "measure_async",
    "measure_void",
    "measure_void_async",
    "measured",
    "register_sink",
    "reset",
]

__version__ = "0.1.0"
