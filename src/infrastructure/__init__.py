"""
Infrastructure package for the N+1 query benchmark.

Centralizes database connectivity (pool, query capability, readiness polling)
and the instrumented executor the strategies run their SQL through.
"""

from src.infrastructure.db_factory import (
    check_connection,
    create_executor,
    get_pool,
    make_query,
    wait_for_database,
)
from src.infrastructure.executor import QueryExecutor

__all__ = [
    "QueryExecutor",
    "check_connection",
    "create_executor",
    "get_pool",
    "make_query",
    "wait_for_database",
]
