"""
N+1 Query Benchmark - measures the N+1 anti-pattern against join and batched fetches.

The package loads the same blog posts (with authors and comments) through
interchangeable strategies and records how many statements each one sends:

- Naive per-row lookups (1 + 2N queries)
- A single JOIN with json_agg (1 query)
- Batched `= ANY(ids)` lookups stitched in memory (3 queries)

Each run is measured by a PerformanceMonitor attached to the QueryExecutor the
strategy runs through, and pairs of runs are compared by the reporter.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from src.config import Settings, get_settings
from src.errors import HarnessError, PreconditionError, QueryError
from src.infrastructure.executor import QueryExecutor
from src.orchestrator import available_strategies, run_benchmark, run_strategy
from src.reporter import Comparison, compare
from src.strategies import (
    AbstractFetchStrategy,
    BatchedStrategy,
    FetchStrategy,
    JoinStrategy,
    NaiveStrategy,
)
from src.utils.logging import configure_logging, get_logger
from src.utils.monitor import PerformanceMonitor, QueryRecord, StatsSnapshot

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Errors
    "HarnessError",
    "PreconditionError",
    "QueryError",
    # Instrumentation
    "PerformanceMonitor",
    "QueryExecutor",
    "QueryRecord",
    "StatsSnapshot",
    # Strategies
    "AbstractFetchStrategy",
    "BatchedStrategy",
    "FetchStrategy",
    "JoinStrategy",
    "NaiveStrategy",
    # Orchestration and reporting
    "Comparison",
    "available_strategies",
    "compare",
    "run_benchmark",
    "run_strategy",
    # Logging
    "configure_logging",
    "get_logger",
]
