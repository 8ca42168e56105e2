"""
Utilities package for the N+1 query benchmark.

Exports shared helpers for logging, query monitoring and memory profiling.
Keep this package lightweight and free of domain-specific logic.
"""

from src.utils.logging import configure_logging, get_logger
from src.utils.monitor import PerformanceMonitor, QueryRecord, StatsSnapshot
from src.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "PerformanceMonitor",
    "ProfileStats",
    "QueryRecord",
    "StatsSnapshot",
    "profile_block",
]
