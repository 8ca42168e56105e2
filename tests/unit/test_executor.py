from __future__ import annotations

import pytest

from src.errors import QueryError
from src.infrastructure.executor import QueryExecutor
from src.strategies.sql import POSTS_SQL, USER_BY_ID_SQL
from src.utils.monitor import PerformanceMonitor


def test_every_query_is_recorded_once(executor: QueryExecutor):
    monitor = PerformanceMonitor()
    executor.set_monitor(monitor)
    monitor.start()

    rows = executor.execute(POSTS_SQL, (2,))
    executor.execute(USER_BY_ID_SQL, (1,))

    stats = monitor.get_stats()
    assert len(rows) == 2
    assert stats.query_count == 2
    assert [q.sql for q in stats.queries] == [POSTS_SQL, USER_BY_ID_SQL]
    assert all(q.duration_ms >= 0 for q in stats.queries)


def test_executes_without_monitor(executor: QueryExecutor):
    assert executor.monitor is None
    assert executor.execute(USER_BY_ID_SQL, (2,))[0]["name"] == "Bob"


def test_detached_monitor_stops_recording(executor: QueryExecutor):
    monitor = PerformanceMonitor()
    executor.set_monitor(monitor)
    monitor.start()
    executor.execute(POSTS_SQL, (1,))
    executor.set_monitor(None)
    executor.execute(POSTS_SQL, (1,))

    assert monitor.get_stats().query_count == 1


def test_query_error_propagates_unchanged_and_is_not_recorded(blog_backend):
    blog_backend.fail_on = POSTS_SQL
    monitor = PerformanceMonitor()
    executor = QueryExecutor(blog_backend, monitor=monitor)
    monitor.start()

    with pytest.raises(QueryError) as excinfo:
        executor.execute(POSTS_SQL, (3,))

    assert excinfo.value.sql == POSTS_SQL
    assert monitor.get_stats().query_count == 0
    # no retry
    assert blog_backend.count(POSTS_SQL) == 1


def test_monitored_restores_previous_monitor_even_on_error(executor: QueryExecutor):
    outer = PerformanceMonitor()
    inner = PerformanceMonitor()
    executor.set_monitor(outer)

    with pytest.raises(RuntimeError):
        with executor.monitored(inner):
            assert executor.monitor is inner
            raise RuntimeError("boom")

    assert executor.monitor is outer


def test_monitors_are_isolated_per_executor(blog_backend):
    first = QueryExecutor(blog_backend, monitor=PerformanceMonitor())
    second = QueryExecutor(blog_backend, monitor=PerformanceMonitor())
    first.monitor.start()
    second.monitor.start()

    first.execute(POSTS_SQL, (1,))

    assert first.monitor.get_stats().query_count == 1
    assert second.monitor.get_stats().query_count == 0
