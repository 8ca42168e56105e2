"""
Instrumented query execution.

QueryExecutor wraps any `query(sql, params) -> rows` callable and reports the
duration of every successful call to the monitor attached to *this* executor.
Strategies only ever talk to an executor, so every statement they issue
(including the per-row lookups of the N+1 pattern) shows up in the monitor
without the strategies knowing they are being measured.
"""

from __future__ import annotations

import contextlib
import time
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

from src.utils.monitor import PerformanceMonitor

Row = Dict[str, Any]
QueryFn = Callable[[str, Sequence[Any]], List[Row]]


class QueryExecutor:
    """
    Times queries and feeds them to an optional PerformanceMonitor.

    One executor must not be shared by concurrent benchmark runs: the attached
    monitor would receive records from both.
    """

    def __init__(self, query: QueryFn, monitor: Optional[PerformanceMonitor] = None) -> None:
        self._query = query
        self._monitor = monitor

    @property
    def monitor(self) -> Optional[PerformanceMonitor]:
        return self._monitor

    def set_monitor(self, monitor: Optional[PerformanceMonitor]) -> None:
        """Attach `monitor`, or detach the current one with None."""
        self._monitor = monitor

    @contextlib.contextmanager
    def monitored(self, monitor: PerformanceMonitor) -> Generator[PerformanceMonitor, None, None]:
        """
        Attach `monitor` for the duration of the block and restore the previous one.

        Example
        -------
            monitor = PerformanceMonitor()
            with executor.monitored(monitor):
                monitor.start()
                strategy.fetch(10)
            stats = monitor.get_stats()
        """
        previous = self._monitor
        self._monitor = monitor
        try:
            yield monitor
        finally:
            self._monitor = previous

    def execute(self, sql: str, params: Sequence[Any] = ()) -> List[Row]:
        """
        Run `sql` through the wrapped capability.

        Raises
        ------
        QueryError
            Propagated unchanged from the query capability; nothing is recorded.
        """
        start = time.perf_counter()
        rows = self._query(sql, params)
        duration_ms = (time.perf_counter() - start) * 1000.0
        if self._monitor is not None:
            self._monitor.record_query(sql, duration_ms)
        return rows


__all__ = ["QueryExecutor", "QueryFn", "Row"]
