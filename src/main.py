from __future__ import annotations

import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from src.config import get_settings, parse_sizes
from src.infrastructure.db_factory import check_connection, create_executor
from src.orchestrator import (
    BenchmarkRun,
    available_strategies,
    build_payload,
    compare_runs,
    persist_results,
    run_benchmark,
)
from src.queries.join_types import JOIN_EXAMPLES
from src.reporter import print_comparison, print_query_log, print_results, print_summary
from src.utils.logging import configure_logging
from src.utils.monitor import PerformanceMonitor

app = typer.Typer(help="N+1 query benchmark CLI.")
console = Console()


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _parse_strategy(strategy: str) -> List[str]:
    if strategy == "all":
        return ["all"]
    if strategy not in available_strategies():
        raise typer.BadParameter(
            f"Unknown strategy '{strategy}'. Available: {', '.join(available_strategies())}",
            param_hint="--strategy",
        )
    return [strategy]


def _parse_sizes_option(raw: str) -> List[int]:
    try:
        return parse_sizes(raw)
    except ValueError as exc:
        raise typer.BadParameter(
            f"Expected comma-separated non-negative integers, got {raw!r}",
            param_hint="--sizes",
        ) from exc


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"sizes={settings.benchmark_sizes} limit={settings.default_limit} "
        f"strategies={','.join(available_strategies())}"
    )


@app.command("check-connection")
def check_connection_cmd() -> None:
    """
    Test the database connection once.
    """
    _setup_logging()
    if check_connection():
        typer.echo("Connection successful!")
        return
    typer.echo("Connection failed!", err=True)
    raise typer.Exit(code=1)


@app.command()
def run(
    sizes: Optional[str] = typer.Option(
        None,
        "--sizes",
        help="Comma-separated post limits to benchmark (default from settings).",
    ),
    strategy: str = typer.Option(
        "all",
        "--strategy",
        "-s",
        help="Strategy to run (naive, join, batched, all, or list).",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Print every executed query for each run.",
    ),
    persist: bool = typer.Option(
        True,
        "--persist/--no-persist",
        help="Write results/latest.json and a timestamped archive.",
    ),
    profile: bool = typer.Option(
        False,
        "--profile/--no-profile",
        help="Measure peak memory in an extra, untimed fetch per run.",
    ),
) -> None:
    """
    Benchmark the fetch strategies for each size and compare them.
    """
    settings = get_settings()
    _setup_logging()

    if strategy == "list":
        typer.echo("Available strategies: " + ", ".join(available_strategies()))
        return

    strategy_names = _parse_strategy(strategy)
    size_list = _parse_sizes_option(sizes) if sizes else settings.sizes()

    def _report(run_result: BenchmarkRun) -> None:
        print_summary(
            f"{run_result.strategy} ({run_result.limit} posts)", run_result.stats, console=console
        )
        if verbose:
            print_query_log(
                run_result.stats, max_sql_length=settings.sql_preview_length, console=console
            )

    executor = create_executor()
    runs = run_benchmark(
        executor, size_list, strategy_names=strategy_names, profile=profile, on_run=_report
    )
    comparisons = compare_runs(runs)

    by_key = {(r.limit, r.strategy): r for r in runs}
    for item in comparisons:
        print_comparison(
            item.baseline,
            item.optimized,
            by_key[(item.limit, item.baseline)].stats,
            by_key[(item.limit, item.optimized)].stats,
            console=console,
        )

    payload = build_payload(runs, comparisons)
    print_results(payload["runs"], console=console)
    if persist:
        path = persist_results(payload, settings.results_dir)
        typer.echo(f"Results written to {path}")


@app.command()
def joins() -> None:
    """
    Run the JOIN showcase queries and print their rows and timings.
    """
    _setup_logging()
    executor = create_executor()
    for label, example in JOIN_EXAMPLES.items():
        monitor = PerformanceMonitor()
        with executor.monitored(monitor):
            monitor.start()
            rows = example(executor)
            stats = monitor.get_stats()

        table = Table(title=label)
        for column in rows[0].keys() if rows else []:
            table.add_column(str(column))
        for row in rows:
            table.add_row(*(str(value) for value in row.values()))
        console.print(table)
        print_summary(label, stats, console=console)


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address."),
    port: Optional[int] = typer.Option(None, "--port", help="Bind port."),
) -> None:
    """
    Serve the HTTP API with uvicorn.
    """
    import uvicorn

    settings = get_settings()
    _setup_logging()
    uvicorn.run("src.api:app", host=host or settings.app_host, port=port or settings.app_port)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
