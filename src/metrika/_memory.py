"""Before/after memory accounting for a measured call.

The tracker stores negated baseline readings in a MemoryInfo at begin() and
adds the current readings at end(), so the same object goes straight from
"negated baseline" to "delta" without a separate subtraction step.

Memory is process RSS via psutil; collector cycles are the cumulative
per-generation counts reported by gc.get_stats().
"""

import gc

import psutil
from beartype import beartype

from metrika._models import MemoryInfo

GENERATIONS = 3


def _resident_bytes() -> int:
    return psutil.Process().memory_info().rss


def _collection_counts() -> tuple[int, int, int]:
    stats = gc.get_stats()
    assert len(stats) >= GENERATIONS, (
        f"Expected {GENERATIONS} gc generations, got {len(stats)}"
    )
    return (
        stats[0]["collections"],
        stats[1]["collections"],
        stats[2]["collections"],
    )


class MemoryTracker:
    """Produces memory snapshots and reduces them to a delta.

    Usage:
        tracker = MemoryTracker()
        info = tracker.begin()
        do_work()
        tracker.end(info)
        print(f"{info.memory_delta_mb:+.2f} MB, gen2={info.gen2_collections}")
    """

    @beartype
    def begin(self) -> MemoryInfo:
        """Force a full collection, then capture the negated baseline."""
        gc.collect()
        gen0, gen1, gen2 = _collection_counts()
        return MemoryInfo(
            memory_delta=-_resident_bytes(),
            gen0_collections=-gen0,
            gen1_collections=-gen1,
            gen2_collections=-gen2,
        )

    @beartype
    def end(self, info: MemoryInfo) -> None:
        """Add the current readings to a snapshot returned by begin()."""
        gen0, gen1, gen2 = _collection_counts()
        info.memory_delta += _resident_bytes()
        info.gen0_collections += gen0
        info.gen1_collections += gen1
        info.gen2_collections += gen2
