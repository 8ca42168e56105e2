"""
Orchestrator for running fetch strategies under a monitor, comparing them and
persisting results.

Usage (example from CLI):
    from src.orchestrator import compare_runs, run_benchmark

    runs = run_benchmark(executor, sizes=[10, 50, 100])
    comparisons = compare_runs(runs)

Outputs are saved to `results/` by default:
- `results/latest.json` (last run)
- `results/run-<timestamp>.json` (timestamped archive)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple, Type

from src.domain.models import Post
from src.errors import HarnessError
from src.infrastructure.executor import QueryExecutor
from src.reporter import Comparison, compare
from src.strategies.abstract import AbstractFetchStrategy
from src.strategies.batched import BatchedStrategy
from src.strategies.join import JoinStrategy
from src.strategies.naive import NaiveStrategy
from src.utils.logging import get_logger
from src.utils.monitor import PerformanceMonitor, StatsSnapshot
from src.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)

# (baseline, optimized) pairs reported for every size.
COMPARISON_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("naive", "join"),
    ("naive", "batched"),
    ("join", "batched"),
)


@dataclass(frozen=True)
class BenchmarkRun:
    """Outcome of one strategy invocation under a fresh monitor."""

    strategy: str
    limit: int
    posts: List[Post]
    stats: StatsSnapshot
    profile: Optional[ProfileStats] = None

    def to_dict(self) -> dict:
        return {
            "strategy": self.strategy,
            "limit": self.limit,
            "posts": len(self.posts),
            "stats": self.stats.to_dict(),
            "profile": self.profile.to_dict() if self.profile else None,
        }


@dataclass(frozen=True)
class StrategyComparison:
    limit: int
    baseline: str
    optimized: str
    result: Comparison

    def to_dict(self) -> dict:
        return {
            "limit": self.limit,
            "baseline": self.baseline,
            "optimized": self.optimized,
            **self.result.to_dict(),
        }


def _strategy_factories() -> Dict[str, Type[AbstractFetchStrategy]]:
    """Registry of available strategies."""
    return {
        "naive": NaiveStrategy,
        "join": JoinStrategy,
        "batched": BatchedStrategy,
    }


def available_strategies() -> List[str]:
    """List available strategy names."""
    return sorted(_strategy_factories().keys())


def resolve_strategy(name: str, executor: QueryExecutor) -> AbstractFetchStrategy:
    factories = _strategy_factories()
    if name not in factories:
        raise ValueError(f"Unknown strategy '{name}'. Available: {', '.join(sorted(factories))}")
    return factories[name](executor)


def run_strategy(strategy: AbstractFetchStrategy, limit: int, profile: bool = False) -> BenchmarkRun:
    """
    Invoke `strategy` with a fresh monitor attached to its executor.

    The monitor is detached again even if the strategy fails; failures are
    logged and re-raised.

    With `profile`, memory is measured in a second fetch whose queries are not
    counted. tracemalloc and the RSS sampler never overlap the timed pass.
    """
    monitor = PerformanceMonitor()
    log.info(f"[STRATEGY START] {strategy.name}", extra={"strategy": strategy.name, "limit": limit})
    with strategy.executor.monitored(monitor):
        monitor.start()
        try:
            posts = strategy.fetch(limit)
        except HarnessError:
            log.exception(f"[STRATEGY FAILED] {strategy.name}", extra={"strategy": strategy.name})
            raise
        stats = monitor.get_stats()

    profile_stats: Optional[ProfileStats] = None
    if profile:
        scratch = PerformanceMonitor()
        with strategy.executor.monitored(scratch), profile_block(strategy.name) as profile_stats:
            scratch.start()
            strategy.fetch(limit)

    log.info(
        f"[STRATEGY SUCCESS] {strategy.name}",
        extra={
            "strategy": strategy.name,
            "posts": len(posts),
            "queries": stats.query_count,
            "elapsed_ms": round(stats.elapsed_ms, 2),
        },
    )
    return BenchmarkRun(
        strategy=strategy.name,
        limit=limit,
        posts=posts,
        stats=stats,
        profile=profile_stats,
    )


def run_benchmark(
    executor: QueryExecutor,
    sizes: Iterable[int],
    strategy_names: Optional[Iterable[str]] = None,
    profile: bool = False,
    on_run: Optional[Callable[[BenchmarkRun], None]] = None,
) -> List[BenchmarkRun]:
    """
    Run each strategy once per size, sequentially, through the same executor.

    Parameters
    ----------
    executor : QueryExecutor
        Executor shared by all runs; runs never overlap.
    sizes : iterable[int]
        Post limits to benchmark.
    strategy_names : iterable[str] | None
        Strategies to execute. If None or ["all"], executes all available in
        naive, join, batched order.
    profile : bool
        Whether to add an untimed memory-profiling pass per run.
    on_run : callable, optional
        Invoked with each completed run (the CLI prints summaries from it).
    """
    names = list(strategy_names) if strategy_names is not None else ["all"]
    if names == ["all"]:
        names = list(_strategy_factories())

    runs: List[BenchmarkRun] = []
    for size in sizes:
        log.info(f"{'=' * 60}")
        log.info(f"[SIZE] {size} posts", extra={"limit": size})
        log.info(f"{'=' * 60}")
        for name in names:
            run = run_strategy(resolve_strategy(name, executor), size, profile=profile)
            runs.append(run)
            if on_run is not None:
                on_run(run)
    return runs


def compare_runs(runs: Iterable[BenchmarkRun]) -> List[StrategyComparison]:
    """Build the configured baseline/optimized comparisons for every size."""
    by_key: Dict[Tuple[int, str], BenchmarkRun] = {(r.limit, r.strategy): r for r in runs}
    limits = sorted({limit for limit, _ in by_key})

    comparisons: List[StrategyComparison] = []
    for limit in limits:
        for baseline, optimized in COMPARISON_PAIRS:
            if (limit, baseline) not in by_key or (limit, optimized) not in by_key:
                continue
            comparisons.append(
                StrategyComparison(
                    limit=limit,
                    baseline=baseline,
                    optimized=optimized,
                    result=compare(
                        by_key[(limit, baseline)].stats, by_key[(limit, optimized)].stats
                    ),
                )
            )
    return comparisons


def build_payload(runs: List[BenchmarkRun], comparisons: List[StrategyComparison]) -> dict:
    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "sizes": sorted({r.limit for r in runs}),
        "runs": [r.to_dict() for r in runs],
        "comparisons": [c.to_dict() for c in comparisons],
    }


def persist_results(payload: dict, results_dir: Path | str) -> Path:
    results_dir = Path(results_dir)
    results_dir.mkdir(parents=True, exist_ok=True)
    latest_path = results_dir / "latest.json"
    timestamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    archive_path = results_dir / f"run-{timestamp}.json"

    for path in (latest_path, archive_path):
        with path.open("w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, sort_keys=True, default=str)

    log.info("Results persisted", extra={"latest": str(latest_path), "archive": str(archive_path)})
    return latest_path


__all__ = [
    "BenchmarkRun",
    "COMPARISON_PAIRS",
    "StrategyComparison",
    "available_strategies",
    "build_payload",
    "compare_runs",
    "persist_results",
    "resolve_strategy",
    "run_benchmark",
    "run_strategy",
]
