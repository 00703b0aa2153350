"""Console sink with per-level colors.

Usage:
    from metrika import register_sink
    from metrika.console import ColorScheme, ConsoleSink

    register_sink(ConsoleSink(color_scheme=ColorScheme.PASTEL))
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable

from beartype import beartype

from metrika._format import format_measurement
from metrika._models import Localization, MeasurementResult, PerformanceLevel, TimestampFormat


class Color(Enum):
    """ANSI foreground colors."""

    DARK_RED = "\033[31m"
    DARK_GREEN = "\033[32m"
    DARK_YELLOW = "\033[33m"
    DARK_CYAN = "\033[36m"
    GRAY = "\033[37m"
    DARK_GRAY = "\033[90m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"


RESET = "\033[0m"


@runtime_checkable
class TextStream(Protocol):
    """Anything ConsoleSink can write lines to."""

    def write(self, text: str, /) -> object: ...

    def flush(self) -> None: ...


@beartype
@dataclass(frozen=True)
class ColorScheme:
    """Colors per performance level (fast < 500ms, normal < 1000ms, slow above)."""

    fast: Color = Color.GREEN
    normal: Color = Color.BLUE
    slow: Color = Color.YELLOW
    threshold_exceeded: Color = Color.RED


ColorScheme.DEFAULT = ColorScheme()
ColorScheme.PASTEL = ColorScheme(
    fast=Color.CYAN,
    normal=Color.MAGENTA,
    slow=Color.DARK_YELLOW,
    threshold_exceeded=Color.DARK_RED,
)
ColorScheme.MONOCHROME = ColorScheme(
    fast=Color.GRAY,
    normal=Color.WHITE,
    slow=Color.DARK_GRAY,
    threshold_exceeded=Color.WHITE,
)
ColorScheme.DARK = ColorScheme(
    fast=Color.DARK_GREEN,
    normal=Color.DARK_CYAN,
    slow=Color.DARK_YELLOW,
    threshold_exceeded=Color.DARK_RED,
)


class ConsoleSink:
    """Writes one line per measurement to a text stream.

    Args:
        color_scheme: Level colors (default: ColorScheme.DEFAULT)
        use_colors: Wrap lines in ANSI color codes (default: True)
        stream: Output stream (default: sys.stdout at write time)
    """

    @beartype
    def __init__(
        self,
        color_scheme: ColorScheme | None = None,
        use_colors: bool = True,
        stream: TextStream | None = None,
    ) -> None:
        self.color_scheme = color_scheme if color_scheme is not None else ColorScheme.DEFAULT
        self.use_colors = use_colors
        self._stream = stream

    def log_measurement(
        self,
        result: MeasurementResult,
        localization: Localization,
        timestamp_format: TimestampFormat,
    ) -> None:
        message = format_measurement(result, localization, timestamp_format)
        if self.use_colors:
            message = f"{self.color_for(result).value}{message}{RESET}"
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(message + "\n")
        stream.flush()

    def color_for(self, result: MeasurementResult) -> Color:
        """Threshold first, then memory warnings, then duration level."""
        if result.threshold_exceeded:
            return self.color_scheme.threshold_exceeded

        info = result.memory_info
        if info is not None:
            if info.is_high_memory_usage:
                return Color.RED
            if info.is_high_gc_pressure:
                return Color.YELLOW

        level = result.level
        if level is PerformanceLevel.SLOW:
            return self.color_scheme.slow
        if level is PerformanceLevel.NORMAL:
            return self.color_scheme.normal
        return self.color_scheme.fast
