"""
Abstract fetch-strategy interfaces for the N+1 query benchmark.

Every strategy answers the same request ("load the first `limit` posts with
their author and comments") and returns the same shape, so the orchestrator,
the API and the tests can swap them freely. Strategies differ only in how many
statements they send through the executor.
"""

from __future__ import annotations

import abc
from typing import List, Protocol, runtime_checkable

from src.domain.models import Post
from src.infrastructure.executor import QueryExecutor


@runtime_checkable
class FetchStrategy(Protocol):
    """
    Common interface all fetch strategies implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the approach.
    """

    name: str
    description: str

    def fetch(self, limit: int) -> List[Post]:
        """
        Load up to `limit` enriched posts in ascending id order.

        Raises
        ------
        QueryError
            If any constituent query fails; the whole fetch is aborted.
        """
        ...


class AbstractFetchStrategy(abc.ABC):
    """
    Base class for executor-backed strategies.

    Subclasses set `name` and `description` and implement `_fetch`.
    """

    name: str
    description: str

    def __init__(self, executor: QueryExecutor) -> None:
        self.executor = executor

    def fetch(self, limit: int) -> List[Post]:
        if limit < 0:
            raise ValueError(f"limit must be >= 0, got {limit}")
        return self._fetch(limit)

    @abc.abstractmethod
    def _fetch(self, limit: int) -> List[Post]:  # pragma: no cover - interface only
        raise NotImplementedError


__all__ = ["AbstractFetchStrategy", "FetchStrategy"]
