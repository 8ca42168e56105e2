"""
Database setup script for the N+1 query benchmark.

Waits for Postgres to accept connections (bounded retries, fixed delay), then
applies `db/schema.sql` and `db/seed.sql` and prints row counts per table.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict

import psycopg
import typer
from psycopg.rows import dict_row
from rich.console import Console
from rich.table import Table

from src.config import get_settings
from src.errors import DatabaseUnavailableError
from src.infrastructure.db_factory import wait_for_database
from src.utils.logging import configure_logging

SQL_DIR = Path(__file__).resolve().parent.parent / "db"
SCHEMA_FILE = SQL_DIR / "schema.sql"
SEED_FILE = SQL_DIR / "seed.sql"

COUNTS_SQL = """
SELECT
    (SELECT COUNT(*) FROM users) AS users,
    (SELECT COUNT(*) FROM posts) AS posts,
    (SELECT COUNT(*) FROM comments) AS comments,
    (SELECT COUNT(*) FROM tags) AS tags,
    (SELECT COUNT(*) FROM post_tags) AS post_tags
"""

app = typer.Typer(help="Create the blog schema and load sample data into Postgres.")


def _read_sql(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _apply_sql(dsn: str, *paths: Path) -> None:
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            for path in paths:
                cur.execute(_read_sql(path))
        conn.commit()


def _table_counts(dsn: str) -> Dict[str, int]:
    with psycopg.connect(dsn, row_factory=dict_row) as conn:
        with conn.cursor() as cur:
            cur.execute(COUNTS_SQL)
            return dict(cur.fetchone())


def _print_counts(counts: Dict[str, int]) -> None:
    table = Table(title="Data summary")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right", style="magenta")
    for name, count in counts.items():
        table.add_row(name, f"{count:,}")
    Console().print(table)


@app.command()
def main(
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    no_seed: bool = typer.Option(
        False,
        "--no-seed",
        help="Only create the schema; skip sample data.",
    ),
) -> None:
    """
    Wait for the database, create the schema and insert sample data.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level)
    conn_dsn = dsn or settings.dsn

    try:
        wait_for_database(conn_dsn)
    except DatabaseUnavailableError as exc:
        typer.echo(f"Error setting up database: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    typer.echo("Setting up database schema...")
    files = [SCHEMA_FILE] if no_seed else [SCHEMA_FILE, SEED_FILE]
    _apply_sql(conn_dsn, *files)
    typer.echo("Schema created" + ("" if no_seed else " and sample data inserted") + ".")

    _print_counts(_table_counts(conn_dsn))
    typer.echo("Database setup completed successfully!")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
