from __future__ import annotations

import dataclasses

import pytest

from src.errors import PreconditionError
from src.utils.monitor import PerformanceMonitor, StatsSnapshot

DURATIONS = [1.5, 0.25, 3.0, 0.0]


def test_counts_and_total_match_recorded_queries():
    monitor = PerformanceMonitor()
    monitor.start()
    for idx, duration in enumerate(DURATIONS):
        monitor.record_query(f"SELECT {idx}", duration)

    stats = monitor.get_stats()

    assert stats.query_count == len(DURATIONS)
    assert stats.total_time_ms == pytest.approx(sum(DURATIONS))
    assert [q.sql for q in stats.queries] == ["SELECT 0", "SELECT 1", "SELECT 2", "SELECT 3"]
    assert stats.average_ms == pytest.approx(sum(DURATIONS) / len(DURATIONS))
    assert stats.elapsed_ms >= 0


def test_start_resets_window():
    monitor = PerformanceMonitor()
    monitor.start()
    monitor.record_query("SELECT 1", 2.0)
    monitor.start()

    stats = monitor.get_stats()

    assert stats.query_count == 0
    assert stats.total_time_ms == 0
    assert stats.queries == ()


def test_get_stats_is_non_destructive_and_snapshots_do_not_drift():
    monitor = PerformanceMonitor()
    monitor.start()
    monitor.record_query("SELECT 1", 1.0)

    first = monitor.get_stats()
    second = monitor.get_stats()
    monitor.record_query("SELECT 2", 1.0)
    third = monitor.get_stats()

    assert first.query_count == second.query_count == 1
    assert len(first.queries) == 1
    assert third.query_count == 2
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.query_count = 5  # type: ignore[misc]


def test_average_is_zero_without_queries():
    monitor = PerformanceMonitor()
    monitor.start()
    assert monitor.get_stats().average_ms == 0.0
    assert StatsSnapshot().average_ms == 0.0


def test_negative_duration_is_rejected():
    monitor = PerformanceMonitor()
    monitor.start()
    with pytest.raises(ValueError):
        monitor.record_query("SELECT 1", -0.1)
    assert monitor.get_stats().query_count == 0


def test_recording_while_idle_is_a_precondition_error():
    monitor = PerformanceMonitor()
    assert not monitor.running
    with pytest.raises(PreconditionError):
        monitor.record_query("SELECT 1", 1.0)


def test_idle_monitor_returns_empty_snapshot():
    stats = PerformanceMonitor().get_stats()
    assert stats == StatsSnapshot()
    assert stats.elapsed_ms == 0.0


def test_sql_is_stored_verbatim():
    long_sql = "SELECT " + ", ".join(f"col_{i}" for i in range(100)) + " FROM posts"
    monitor = PerformanceMonitor()
    monitor.start()
    monitor.record_query(long_sql, 1.0)

    assert monitor.get_stats().queries[0].sql == long_sql
    assert monitor.get_stats().to_dict()["queries"][0]["sql"] == long_sql
