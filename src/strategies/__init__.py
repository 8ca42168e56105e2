"""
Strategies package for the N+1 query benchmark.

This module re-exports the abstract interfaces and the concrete strategy classes
so downstream code can import from `src.strategies` directly.
"""

from src.strategies.abstract import AbstractFetchStrategy, FetchStrategy
from src.strategies.batched import BatchedStrategy
from src.strategies.join import JoinStrategy
from src.strategies.naive import NaiveStrategy

__all__ = [
    # Abstracts
    "AbstractFetchStrategy",
    "FetchStrategy",
    # Concrete strategies
    "BatchedStrategy",
    "JoinStrategy",
    "NaiveStrategy",
]
