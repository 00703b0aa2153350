"""One-line text rendering of a measurement, shared by the text sinks."""

from metrika._models import Localization, MeasurementResult, MemoryInfo, TimestampFormat

UNIT = "ms"
THRESHOLD_LABEL = "threshold"


def display_mb(info: MemoryInfo) -> float:
    """Memory delta in MB rounded for display; a delta that rounds to zero is +0.00."""
    return round(info.memory_delta_mb, 2) or 0.0


def format_measurement(
    result: MeasurementResult,
    localization: Localization,
    timestamp_format: TimestampFormat,
) -> str:
    """Build the space-joined message for one measurement.

    Example:
        [METRIKA] [INFO] Load duration: 12 ms (threshold: 100 ms) | Memory: +0.25 MB
    """
    parts = [f"[{localization.prefix}]"]

    timestamp = timestamp_format.render(result.timestamp)
    if timestamp:
        parts.append(f"[{timestamp}]")

    parts.append("[WARN]" if result.threshold_exceeded else "[INFO]")

    label = localization.duration_high if result.threshold_exceeded else localization.duration
    parts.append(f"{result.name} {label}: {result.elapsed_ms} {UNIT}")

    if result.threshold_ms > 0:
        parts.append(f"({THRESHOLD_LABEL}: {result.threshold_ms} {UNIT})")

    info = result.memory_info
    if info is not None:
        parts.append(f"| {localization.memory}: {display_mb(info):+.2f} MB")

        if info.total_collections > 0:
            parts.append(
                f"| {localization.garbage_collection}: Gen0: {info.gen0_collections}, "
                f"Gen1: {info.gen1_collections}, Gen2: {info.gen2_collections}"
            )

        if info.is_high_memory_usage:
            parts.append(f"[WARN] {localization.high_memory}")
        elif info.is_high_gc_pressure:
            parts.append(f"[WARN] {localization.gc_pressure}")

    return " ".join(parts)
