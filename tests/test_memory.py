"""Tests for MemoryTracker.

psutil and the gc counters are external readings, patched where the test
needs deterministic values.
"""

import gc

import pytest

from metrika import MemoryInfo, MemoryTracker


class FakeProcess:
    """Stands in for psutil.Process, replaying queued RSS readings."""

    readings: list[int] = []

    def memory_info(self):
        return type("MemInfo", (), {"rss": FakeProcess.readings.pop(0)})()


@pytest.fixture
def fake_readings(monkeypatch):
    """Queue (rss, (gen0, gen1, gen2)) readings for the tracker to consume."""
    counts: list[tuple[int, int, int]] = []
    collects: list[int] = []

    def fake_get_stats():
        gen0, gen1, gen2 = counts.pop(0)
        return [{"collections": gen0}, {"collections": gen1}, {"collections": gen2}]

    monkeypatch.setattr("metrika._memory.psutil.Process", FakeProcess)
    monkeypatch.setattr("metrika._memory.gc.get_stats", fake_get_stats)
    monkeypatch.setattr("metrika._memory.gc.collect", lambda: collects.append(1) or 0)

    def queue(rss: int, gen_counts: tuple[int, int, int]) -> None:
        FakeProcess.readings.append(rss)
        counts.append(gen_counts)

    queue.collects = collects
    FakeProcess.readings = []
    yield queue
    FakeProcess.readings = []


class TestMemoryTracker:
    def test_begin_stores_negated_baseline(self, fake_readings):
        fake_readings(1000, (5, 2, 0))
        info = MemoryTracker().begin()
        assert info == MemoryInfo(
            memory_delta=-1000, gen0_collections=-5, gen1_collections=-2, gen2_collections=0
        )

    def test_begin_forces_collection(self, fake_readings):
        fake_readings(1000, (0, 0, 0))
        MemoryTracker().begin()
        assert fake_readings.collects == [1]

    def test_end_reduces_to_delta(self, fake_readings):
        fake_readings(1000, (5, 2, 0))
        fake_readings(1500, (7, 2, 1))
        tracker = MemoryTracker()

        info = tracker.begin()
        tracker.end(info)

        assert info.memory_delta == 500
        assert info.gen0_collections == 2
        assert info.gen1_collections == 0
        assert info.gen2_collections == 1
        assert info.is_high_gc_pressure is True
        assert info.is_high_memory_usage is False

    def test_end_does_not_force_collection(self, fake_readings):
        fake_readings(1000, (0, 0, 0))
        fake_readings(900, (0, 0, 0))
        tracker = MemoryTracker()
        info = tracker.begin()
        tracker.end(info)
        assert fake_readings.collects == [1]
        assert info.memory_delta == -100

    def test_real_readings_produce_integer_delta(self):
        tracker = MemoryTracker()
        info = tracker.begin()
        payload = [bytearray(1024) for _ in range(1000)]
        gc.collect()
        tracker.end(info)
        del payload

        assert isinstance(info.memory_delta, int)
        assert info.total_collections >= 1
        assert info.gen0_collections >= 0
        assert info.gen1_collections >= 0
        assert info.gen2_collections >= 0
