"""Property-based tests for metrika using Hypothesis.

These tests pin down the derived-field invariants of the result model for
arbitrary inputs, including the threshold and memory boundaries.
"""

from hypothesis import given, settings
from hypothesis import strategies as st

from metrika import (
    ENGLISH,
    InMemorySink,
    MeasurementResult,
    MemoryInfo,
    PerformanceLevel,
    Pipeline,
    TimestampFormat,
    format_measurement,
)

# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

valid_elapsed = st.integers(min_value=0, max_value=10**9)

positive_threshold = st.integers(min_value=1, max_value=10**9)

disabled_threshold = st.integers(max_value=0, min_value=-(10**9))

memory_delta = st.integers(min_value=-(10**12), max_value=10**12)

generation_count = st.integers(min_value=0, max_value=10**6)

names = st.text(max_size=50)

memory_infos = st.builds(
    MemoryInfo,
    memory_delta=memory_delta,
    gen0_collections=generation_count,
    gen1_collections=generation_count,
    gen2_collections=generation_count,
)


def expected_level(elapsed_ms: int, exceeded: bool) -> PerformanceLevel:
    if exceeded:
        return PerformanceLevel.THRESHOLD_EXCEEDED
    if elapsed_ms > 1000:
        return PerformanceLevel.SLOW
    if elapsed_ms > 500:
        return PerformanceLevel.NORMAL
    return PerformanceLevel.FAST


# ---------------------------------------------------------------------------
# Threshold classification
# ---------------------------------------------------------------------------

class TestThresholdProperties:
    @given(elapsed=valid_elapsed, threshold=disabled_threshold)
    def test_disabled_threshold_is_never_exceeded(self, elapsed, threshold):
        result = MeasurementResult(name="p", elapsed_ms=elapsed, threshold_ms=threshold)
        assert result.threshold_exceeded is False

    @given(elapsed=valid_elapsed, threshold=positive_threshold)
    def test_positive_threshold_matches_comparison(self, elapsed, threshold):
        result = MeasurementResult(name="p", elapsed_ms=elapsed, threshold_ms=threshold)
        assert result.threshold_exceeded == (elapsed > threshold)

    @given(elapsed=valid_elapsed, threshold=st.integers(min_value=-(10**9), max_value=10**9))
    def test_level_is_pure_function_of_elapsed_and_exceeded(self, elapsed, threshold):
        result = MeasurementResult(name="p", elapsed_ms=elapsed, threshold_ms=threshold)
        assert result.level is expected_level(elapsed, result.threshold_exceeded)


# ---------------------------------------------------------------------------
# Memory delta
# ---------------------------------------------------------------------------

class TestMemoryProperties:
    @given(delta=memory_delta)
    def test_high_memory_uses_absolute_value(self, delta):
        assert MemoryInfo(memory_delta=delta).is_high_memory_usage == (abs(delta) > 100_000_000)

    @given(info=memory_infos)
    def test_gc_pressure_iff_gen2(self, info):
        assert info.is_high_gc_pressure == (info.gen2_collections > 0)

    @given(info=memory_infos)
    def test_total_collections_is_sum(self, info):
        assert info.total_collections == (
            info.gen0_collections + info.gen1_collections + info.gen2_collections
        )

    @given(
        begin=st.tuples(memory_delta, generation_count, generation_count, generation_count),
        growth=st.tuples(memory_delta, generation_count, generation_count, generation_count),
    )
    def test_negated_baseline_plus_end_is_delta(self, begin, growth):
        """Adding end readings to a negated baseline yields end - begin."""
        info = MemoryInfo(*(-value for value in begin))
        end = [b + g for b, g in zip(begin, growth)]
        info.memory_delta += end[0]
        info.gen0_collections += end[1]
        info.gen1_collections += end[2]
        info.gen2_collections += end[3]
        assert (
            info.memory_delta,
            info.gen0_collections,
            info.gen1_collections,
            info.gen2_collections,
        ) == growth


# ---------------------------------------------------------------------------
# Dispatch and formatting never crash
# ---------------------------------------------------------------------------

class TestDispatchProperties:
    @given(
        name=names,
        elapsed=valid_elapsed,
        threshold=st.integers(min_value=-10, max_value=10**6),
        info=st.none() | memory_infos,
    )
    @settings(max_examples=50)
    def test_format_never_crashes(self, name, elapsed, threshold, info):
        result = MeasurementResult(
            name=name, elapsed_ms=elapsed, threshold_ms=threshold, memory_info=info
        )
        message = format_measurement(result, ENGLISH, TimestampFormat.DEFAULT)
        assert message.startswith("[METRIKA] [")
        assert f"{name} " in message

    @given(copies=st.integers(min_value=1, max_value=10))
    @settings(max_examples=20)
    def test_repeated_registration_dispatches_once(self, copies):
        pipeline = Pipeline()
        sink = InMemorySink()
        for _ in range(copies):
            pipeline.register_sink(sink)
        pipeline.dispatch(MeasurementResult(name="p", elapsed_ms=1))
        assert len(sink.snapshot()) == 1
