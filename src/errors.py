"""
Error taxonomy for the N+1 benchmark harness.

- QueryError: the underlying data fetch failed. Never retried by the harness.
- PreconditionError: the caller broke a documented contract (e.g. comparing
  against an empty baseline run).
"""

from __future__ import annotations

from typing import Optional


class HarnessError(Exception):
    """Base class for all harness errors."""


class QueryError(HarnessError):
    """
    Raised when the query capability reports a failure.

    Attributes
    ----------
    sql : str | None
        Statement that failed, when known.
    """

    def __init__(self, message: str, sql: Optional[str] = None) -> None:
        super().__init__(message)
        self.sql = sql


class PreconditionError(HarnessError):
    """Raised when a caller invokes an operation outside its contract."""


class DatabaseUnavailableError(HarnessError):
    """Raised when the database never became reachable during setup."""


__all__ = [
    "HarnessError",
    "QueryError",
    "PreconditionError",
    "DatabaseUnavailableError",
]
