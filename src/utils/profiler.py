"""
Memory profiling for strategy runs.

Join-based fetches trade round-trips for row fan-out, so each benchmark run also
captures how much memory the strategy needed:
- Peak RSS via a background sampling thread (psutil)
- Peak Python allocations (tracemalloc)

Usage:
    from src.utils.profiler import profile_block

    with profile_block("join") as stats:
        strategy.fetch(100)

    print(stats.peak_rss_bytes, stats.peak_traced_bytes)
"""

from __future__ import annotations

import contextlib
import threading
import time
import tracemalloc
from dataclasses import dataclass
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """Container for profiling measurements."""

    label: str
    duration_seconds: float = 0.0
    peak_rss_bytes: Optional[int] = None
    peak_traced_bytes: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "duration_seconds": round(self.duration_seconds, 4),
            "peak_rss_bytes": self.peak_rss_bytes,
            "peak_traced_bytes": self.peak_traced_bytes,
        }


@contextlib.contextmanager
def profile_block(label: str, sample_interval_ms: int = 20) -> Generator[ProfileStats, None, None]:
    """
    Profile wall time and memory of a block.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    sample_interval_ms : int
        RSS sampling interval. Lower is more accurate but costs more.
    """
    stats = ProfileStats(label=label)
    process = psutil.Process()
    peak_rss = process.memory_info().rss
    stop_sampling = threading.Event()

    def _sample_memory() -> None:
        nonlocal peak_rss
        while not stop_sampling.is_set():
            try:
                peak_rss = max(peak_rss, process.memory_info().rss)
            except psutil.Error:
                return
            stop_sampling.wait(timeout=sample_interval_ms / 1000.0)

    tracemalloc_was_running = tracemalloc.is_tracing()
    if not tracemalloc_was_running:
        tracemalloc.start()
    else:
        tracemalloc.reset_peak()

    sampler = threading.Thread(target=_sample_memory, daemon=True)
    sampler.start()

    start = time.perf_counter()
    try:
        yield stats
    finally:
        stats.duration_seconds = time.perf_counter() - start
        stop_sampling.set()
        sampler.join(timeout=1.0)
        stats.peak_rss_bytes = peak_rss
        _, stats.peak_traced_bytes = tracemalloc.get_traced_memory()
        if not tracemalloc_was_running:
            tracemalloc.stop()


__all__ = ["ProfileStats", "profile_block"]
