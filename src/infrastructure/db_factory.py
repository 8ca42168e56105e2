"""
Database connection factory utilities for the N+1 query benchmark.

Provides a managed psycopg ConnectionPool, the `query(sql, params) -> rows`
capability the harness consumes (dict rows, driver errors translated into
QueryError), and readiness polling used by the setup scripts.

Readiness polling retries a bounded number of times with a fixed delay using
tenacity.
"""

from __future__ import annotations

import atexit
import threading
from typing import Any, List, Optional, Sequence

import psycopg
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool
from tenacity import (
    RetryError,
    Retrying,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from src.config import get_settings
from src.errors import DatabaseUnavailableError, QueryError
from src.infrastructure.executor import QueryExecutor, QueryFn, Row
from src.utils.logging import get_logger

log = get_logger(__name__)


class PoolManager:
    """
    Thread-safe singleton owning the application's connection pool.

    The pool is closed automatically on interpreter exit.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._pool = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_pool(self, dsn: Optional[str] = None) -> ConnectionPool:
        """
        Get or create the connection pool.

        Parameters
        ----------
        dsn : str, optional
            Connection string; defaults to the configured one.
        """
        with self._lock:
            if self._pool is None:
                settings = get_settings()
                self._pool = ConnectionPool(
                    conninfo=dsn or settings.dsn,
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    open=True,
                )
            return self._pool

    def close_all(self) -> None:
        with self._lock:
            if self._pool is not None:
                self._pool.close()
                self._pool = None


def get_pool(dsn: Optional[str] = None) -> ConnectionPool:
    return PoolManager().get_pool(dsn)


def make_query(pool: ConnectionPool) -> QueryFn:
    """
    Build the query capability backed by `pool`.

    Each call borrows a connection, runs one statement and returns the rows as
    dicts. Any psycopg error is re-raised as QueryError.
    """

    def query(sql: str, params: Sequence[Any] = ()) -> List[Row]:
        try:
            with pool.connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    cur.execute(sql, list(params))
                    if cur.description is None:
                        return []
                    return cur.fetchall()
        except psycopg.Error as exc:
            raise QueryError(f"Query failed: {exc}", sql=sql) from exc

    return query


def create_executor(dsn: Optional[str] = None) -> QueryExecutor:
    """Executor over the shared pool, with no monitor attached."""
    return QueryExecutor(make_query(get_pool(dsn)))


def check_connection(dsn: Optional[str] = None) -> bool:
    """
    Open a dedicated connection and run `SELECT NOW()`.

    Returns False instead of raising so callers can poll.
    """
    try:
        with psycopg.connect(dsn or get_settings().dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT NOW()")
                now = cur.fetchone()
        log.info("Database connection test successful", extra={"now": str(now[0])})
        return True
    except psycopg.Error as exc:
        log.warning("Database connection test failed: %s", exc)
        return False


def wait_for_database(
    dsn: Optional[str] = None,
    max_attempts: Optional[int] = None,
    delay_seconds: Optional[float] = None,
) -> None:
    """
    Poll the database until it answers, with a fixed delay between attempts.

    Raises
    ------
    DatabaseUnavailableError
        If every attempt failed.
    """
    settings = get_settings()
    attempts = max_attempts or settings.db_connect_attempts
    delay = settings.db_connect_delay_seconds if delay_seconds is None else delay_seconds

    log.info("Waiting for database to be ready...")
    retrying = Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(lambda ok: not ok),
        before=lambda state: log.info(
            f"Connection attempt {state.attempt_number}/{attempts}..."
        ),
    )
    try:
        retrying(check_connection, dsn)
    except RetryError as exc:
        raise DatabaseUnavailableError(
            f"Could not connect to database after {attempts} attempts"
        ) from exc
    log.info("Database is ready!")


__all__ = [
    "PoolManager",
    "create_executor",
    "get_pool",
    "make_query",
    "check_connection",
    "wait_for_database",
]
