"""Measurement data model.

Design by Contract:
- elapsed_ms MUST be non-negative (crash if negative)
- threshold_exceeded and level are derived, never stored
- MemoryInfo is the reduced (end - begin) delta, never a raw reading

Value objects (Localization, TimestampFormat) are frozen and shared freely.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from beartype import beartype

BYTES_PER_MB = 1024 * 1024
HIGH_MEMORY_BYTES = 100_000_000
SLOW_MS = 1000
NORMAL_MS = 500


def local_now() -> datetime:
    """Return the current local time as a timezone-aware datetime."""
    return datetime.now().astimezone()


class PerformanceLevel(Enum):
    FAST = "fast"
    NORMAL = "normal"
    SLOW = "slow"
    THRESHOLD_EXCEEDED = "threshold_exceeded"


@beartype
@dataclass
class MemoryInfo:
    """Memory and collector-cycle delta for one measured call.

    Attributes:
        memory_delta: Change in process resident memory (bytes, can be negative)
        gen0_collections: Collections of the youngest gc generation
        gen1_collections: Collections of the middle gc generation
        gen2_collections: Collections of the oldest gc generation

    The tracker creates this with negated baseline readings and adds the end
    readings in place, so outside the tracker it always holds a delta.
    """

    memory_delta: int = 0
    gen0_collections: int = 0
    gen1_collections: int = 0
    gen2_collections: int = 0

    @property
    def memory_delta_mb(self) -> float:
        return self.memory_delta / BYTES_PER_MB

    @property
    def total_collections(self) -> int:
        return self.gen0_collections + self.gen1_collections + self.gen2_collections

    @property
    def is_high_memory_usage(self) -> bool:
        return abs(self.memory_delta) > HIGH_MEMORY_BYTES

    @property
    def is_high_gc_pressure(self) -> bool:
        return self.gen2_collections > 0


@beartype
@dataclass(frozen=True)
class MeasurementResult:
    """One completed measurement, handed to sinks and then discarded.

    Example:
        result = MeasurementResult(name="Load", elapsed_ms=1200, threshold_ms=1000)
        assert result.level is PerformanceLevel.THRESHOLD_EXCEEDED
    """

    name: str
    elapsed_ms: int
    threshold_ms: int = 0
    memory_info: MemoryInfo | None = None
    timestamp: datetime = field(default_factory=local_now)

    def __post_init__(self) -> None:
        assert self.elapsed_ms >= 0, (
            f"Elapsed time cannot be negative: {self.elapsed_ms}ms. "
            f"Timer went backwards or timing bug."
        )

    @property
    def threshold_exceeded(self) -> bool:
        return self.threshold_ms > 0 and self.elapsed_ms > self.threshold_ms

    @property
    def level(self) -> PerformanceLevel:
        if self.threshold_exceeded:
            return PerformanceLevel.THRESHOLD_EXCEEDED
        if self.elapsed_ms > SLOW_MS:
            return PerformanceLevel.SLOW
        if self.elapsed_ms > NORMAL_MS:
            return PerformanceLevel.NORMAL
        return PerformanceLevel.FAST


@beartype
@dataclass(frozen=True)
class Localization:
    """Labels used by text sinks. The engine treats a table as opaque."""

    duration_high: str = "duration high"
    duration: str = "duration"
    total_duration: str = "Total duration"
    prefix: str = "METRIKA"
    memory: str = "Memory"
    garbage_collection: str = "GC"
    high_memory: str = "HIGH MEMORY"
    gc_pressure: str = "GC PRESSURE"


ENGLISH = Localization()

TURKISH = Localization(
    duration_high="süresi yüksek",
    duration="süresi",
    total_duration="Toplam süre",
    prefix="METRİKA",
    memory="Bellek",
    garbage_collection="GC",
    high_memory="YÜKSEK BELLEK",
    gc_pressure="GC BASKISI",
)

FRENCH = Localization(
    duration_high="durée élevée",
    duration="durée",
    total_duration="Durée totale",
    prefix="METRIKA",
    memory="Mémoire",
    garbage_collection="GC",
    high_memory="MÉMOIRE ÉLEVÉE",
    gc_pressure="PRESSION GC",
)

GERMAN = Localization(
    duration_high="Dauer hoch",
    duration="Dauer",
    total_duration="Gesamtdauer",
    prefix="METRIKA",
    memory="Speicher",
    garbage_collection="GC",
    high_memory="HOHER SPEICHER",
    gc_pressure="GC-DRUCK",
)

SPANISH = Localization(
    duration_high="duración alta",
    duration="duración",
    total_duration="Duración total",
    prefix="METRIKA",
    memory="Memoria",
    garbage_collection="GC",
    high_memory="MEMORIA ALTA",
    gc_pressure="PRESIÓN GC",
)

JAPANESE = Localization(
    duration_high="処理時間が長い",
    duration="処理時間",
    total_duration="合計時間",
    prefix="メトリカ",
    memory="メモリ",
    garbage_collection="GC",
    high_memory="高メモリ使用",
    gc_pressure="GC圧力",
)

CHINESE_SIMPLIFIED = Localization(
    duration_high="持续时间长",
    duration="持续时间",
    total_duration="总持续时间",
    prefix="指标",
    memory="内存",
    garbage_collection="GC",
    high_memory="高内存",
    gc_pressure="GC压力",
)

RUSSIAN = Localization(
    duration_high="длительность высокая",
    duration="длительность",
    total_duration="Общая продолжительность",
    prefix="МЕТРИКА",
    memory="Память",
    garbage_collection="GC",
    high_memory="ВЫСОКАЯ ПАМЯТЬ",
    gc_pressure="ДАВЛЕНИЕ GC",
)

PORTUGUESE = Localization(
    duration_high="duração alta",
    duration="duração",
    total_duration="Duração total",
    prefix="METRIKA",
    memory="Memória",
    garbage_collection="GC",
    high_memory="MEMÓRIA ALTA",
    gc_pressure="PRESSÃO GC",
)

ITALIAN = Localization(
    duration_high="durata elevata",
    duration="durata",
    total_duration="Durata totale",
    prefix="METRIKA",
    memory="Memoria",
    garbage_collection="GC",
    high_memory="MEMORIA ALTA",
    gc_pressure="PRESSIONE GC",
)


UNIX_PATTERN = "unix"
# "%%" is matched first so an escaped "%%3f" stays literal.
_MILLIS_OR_ESCAPE = re.compile(r"%(%|3f)")


@beartype
@dataclass(frozen=True)
class TimestampFormat:
    """How sinks render MeasurementResult.timestamp.

    Args:
        pattern: strftime pattern, or "unix" for epoch seconds. ``%3f`` renders
            zero-padded milliseconds.
        enabled: If False, nothing is rendered whatever the pattern.
    """

    pattern: str | None = "%Y-%m-%d %H:%M:%S.%3f"
    enabled: bool = True

    @classmethod
    def custom(cls, pattern: str) -> "TimestampFormat":
        return cls(pattern=pattern, enabled=True)

    def render(self, timestamp: datetime) -> str:
        """Render a timestamp, or return "" when rendering is disabled."""
        if not self.enabled or self.pattern is None:
            return ""
        if self.pattern.lower() == UNIX_PATTERN:
            return str(int(timestamp.timestamp()))
        millis = f"{timestamp.microsecond // 1000:03d}"
        pattern = _MILLIS_OR_ESCAPE.sub(
            lambda match: "%%" if match.group(1) == "%" else millis, self.pattern
        )
        return timestamp.strftime(pattern)


TimestampFormat.DEFAULT = TimestampFormat()
TimestampFormat.SHORT = TimestampFormat("%H:%M:%S")
TimestampFormat.TIME_WITH_MS = TimestampFormat("%H:%M:%S.%3f")
TimestampFormat.ISO8601 = TimestampFormat("%Y-%m-%dT%H:%M:%S.%3f%z")
TimestampFormat.UNIX = TimestampFormat(UNIX_PATTERN)
TimestampFormat.DATE_ONLY = TimestampFormat("%Y-%m-%d")
TimestampFormat.DISABLED = TimestampFormat(pattern=None, enabled=False)
