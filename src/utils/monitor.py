"""
Per-window query statistics.

A PerformanceMonitor collects one QueryRecord per executed statement between
`start()` and the moment its stats are read. Snapshots are frozen dataclasses,
so a report built from one cannot drift while the monitor keeps recording.

Usage:
    monitor = PerformanceMonitor()
    monitor.start()
    monitor.record_query("SELECT 1", 0.42)
    stats = monitor.get_stats()
    stats.query_count, stats.total_time_ms, stats.average_ms
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from src.errors import PreconditionError


@dataclass(frozen=True)
class QueryRecord:
    """One executed statement. `sql` is stored verbatim."""

    sql: str
    duration_ms: float
    timestamp: float


@dataclass(frozen=True)
class StatsSnapshot:
    """
    Immutable read of a monitor window.

    Attributes
    ----------
    query_count : int
        Number of statements recorded in the window.
    total_time_ms : float
        Sum of per-query durations.
    queries : tuple[QueryRecord, ...]
        Records in execution order.
    elapsed_ms : float
        Wall time since `start()` at the moment the snapshot was taken.
    """

    query_count: int = 0
    total_time_ms: float = 0.0
    queries: Tuple[QueryRecord, ...] = field(default_factory=tuple)
    elapsed_ms: float = 0.0

    @property
    def average_ms(self) -> float:
        if self.query_count == 0:
            return 0.0
        return self.total_time_ms / self.query_count

    def to_dict(self) -> dict:
        return {
            "query_count": self.query_count,
            "total_time_ms": self.total_time_ms,
            "average_ms": self.average_ms,
            "elapsed_ms": self.elapsed_ms,
            "queries": [
                {"sql": q.sql, "duration_ms": q.duration_ms, "timestamp": q.timestamp}
                for q in self.queries
            ],
        }


class PerformanceMonitor:
    """
    Accumulates query statistics for a single measurement window.

    The monitor is idle until `start()` is called. Calling `start()` again opens
    a fresh window and discards everything recorded before.
    """

    def __init__(self) -> None:
        self._started_at: Optional[float] = None
        self._query_count = 0
        self._total_time_ms = 0.0
        self._queries: List[QueryRecord] = []

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        self._query_count = 0
        self._total_time_ms = 0.0
        self._queries = []
        self._started_at = time.perf_counter()

    def record_query(self, sql: str, duration_ms: float) -> None:
        if duration_ms < 0:
            raise ValueError(f"Query duration must be >= 0, got {duration_ms}")
        if self._started_at is None:
            raise PreconditionError("record_query() called before start()")
        self._query_count += 1
        self._total_time_ms += duration_ms
        self._queries.append(QueryRecord(sql=sql, duration_ms=duration_ms, timestamp=time.time()))

    def get_stats(self) -> StatsSnapshot:
        if self._started_at is None:
            return StatsSnapshot()
        return StatsSnapshot(
            query_count=self._query_count,
            total_time_ms=self._total_time_ms,
            queries=tuple(self._queries),
            elapsed_ms=(time.perf_counter() - self._started_at) * 1000.0,
        )


__all__ = ["PerformanceMonitor", "QueryRecord", "StatsSnapshot"]
