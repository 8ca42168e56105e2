from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from rich import box
from rich.console import Console
from rich.table import Table

from src.errors import PreconditionError
from src.utils.monitor import StatsSnapshot

DEFAULT_SQL_PREVIEW = 100


@dataclass(frozen=True)
class Comparison:
    """Relative improvement of `optimized` over `baseline`, in percent and x-fold."""

    query_count_reduction: float
    elapsed_time_reduction: float
    speedup_factor: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def compare(baseline: StatsSnapshot, optimized: StatsSnapshot) -> Comparison:
    """
    Compare two completed runs.

    The baseline must have issued at least one query and taken measurable time;
    anything else is a caller bug and raises PreconditionError.
    """
    if baseline.query_count == 0:
        raise PreconditionError("Baseline run issued no queries")
    if baseline.elapsed_ms == 0:
        raise PreconditionError("Baseline run has zero elapsed time")

    query_reduction = (baseline.query_count - optimized.query_count) / baseline.query_count * 100
    time_reduction = (baseline.elapsed_ms - optimized.elapsed_ms) / baseline.elapsed_ms * 100
    speedup = baseline.elapsed_ms / optimized.elapsed_ms if optimized.elapsed_ms else math.inf

    return Comparison(
        query_count_reduction=query_reduction,
        elapsed_time_reduction=time_reduction,
        speedup_factor=speedup,
    )


def format_duration(ms: float) -> str:
    """Render milliseconds as µs, ms or s depending on magnitude."""
    if ms < 1:
        return f"{ms * 1000:.2f}μs"
    if ms < 1000:
        return f"{ms:.2f}ms"
    return f"{ms / 1000:.2f}s"


def truncate_sql(sql: str, max_length: int = DEFAULT_SQL_PREVIEW) -> str:
    """Collapse whitespace and cut `sql` to `max_length` characters for display."""
    flat = " ".join(sql.split())
    if len(flat) <= max_length:
        return flat
    return flat[:max_length] + "..."


def print_summary(label: str, stats: StatsSnapshot, console: Optional[Console] = None) -> None:
    """Render one run's counters as a two-column table."""
    console = console or Console()
    table = Table(title=label, box=box.ROUNDED, show_header=False)
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="green")
    table.add_row("Queries", str(stats.query_count))
    table.add_row("Total query time", format_duration(stats.total_time_ms))
    table.add_row("Elapsed", format_duration(stats.elapsed_ms))
    table.add_row("Average query time", format_duration(stats.average_ms))
    console.print(table)


def print_query_log(
    stats: StatsSnapshot,
    max_sql_length: int = DEFAULT_SQL_PREVIEW,
    console: Optional[Console] = None,
) -> None:
    """List every recorded statement with its duration."""
    console = console or Console()
    table = Table(title="Executed queries", box=box.SIMPLE)
    table.add_column("#", justify="right", style="magenta")
    table.add_column("Duration", justify="right", style="green")
    table.add_column("SQL", style="white")
    for idx, record in enumerate(stats.queries, start=1):
        table.add_row(
            str(idx), format_duration(record.duration_ms), truncate_sql(record.sql, max_sql_length)
        )
    console.print(table)


def print_comparison(
    baseline_label: str,
    optimized_label: str,
    baseline: StatsSnapshot,
    optimized: StatsSnapshot,
    console: Optional[Console] = None,
) -> Comparison:
    """Render the before/after table for two runs and return the comparison."""
    console = console or Console()
    result = compare(baseline, optimized)

    table = Table(
        title=f"{baseline_label} vs {optimized_label}",
        box=box.ROUNDED,
        caption=f"Speedup: {result.speedup_factor:.2f}x",
    )
    table.add_column("Metric", style="cyan", no_wrap=True)
    table.add_column(baseline_label, justify="right", style="red")
    table.add_column(optimized_label, justify="right", style="green")
    table.add_column("Reduction", justify="right", style="bold yellow")
    table.add_row(
        "Queries",
        str(baseline.query_count),
        str(optimized.query_count),
        f"{result.query_count_reduction:.1f}%",
    )
    table.add_row(
        "Elapsed",
        format_duration(baseline.elapsed_ms),
        format_duration(optimized.elapsed_ms),
        f"{result.elapsed_time_reduction:.1f}%",
    )
    console.print(table)
    return result


def print_results(results: List[Dict[str, Any]], console: Optional[Console] = None) -> None:
    """
    Render orchestrator results (one entry per size and strategy) as a table.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    table = Table(
        title="N+1 Query Benchmark Results",
        box=box.ROUNDED,
        caption="Grouped by size, sorted by elapsed time",
    )
    table.add_column("Size", justify="right", style="blue")
    table.add_column("Strategy", style="cyan", no_wrap=True)
    table.add_column("Posts", justify="right", style="magenta")
    table.add_column("Queries", justify="right", style="bold green")
    table.add_column("Elapsed", justify="right", style="green")
    table.add_column("Avg query", justify="right", style="green")
    table.add_column("Peak traced (KB)", justify="right", style="yellow")

    ordered = sorted(results, key=lambda r: (r["limit"], r["stats"]["elapsed_ms"]))
    for res in ordered:
        stats = res["stats"]
        traced = (res.get("profile") or {}).get("peak_traced_bytes")
        table.add_row(
            str(res["limit"]),
            res["strategy"],
            str(res["posts"]),
            str(stats["query_count"]),
            format_duration(stats["elapsed_ms"]),
            format_duration(stats["average_ms"]),
            f"{traced / 1024:.1f}" if traced is not None else "N/A",
        )

    console.print(table)


__all__ = [
    "Comparison",
    "compare",
    "format_duration",
    "print_comparison",
    "print_query_log",
    "print_results",
    "print_summary",
    "truncate_sql",
]
