"""
Grow the sample dataset so N+1 effects become visible at larger page sizes.

Adds users, posts and comments with `generate_series`, continuing after the
rows already present. User and post ids are assumed contiguous from 1,
as created by `scripts/setup_db.py`.
"""

from __future__ import annotations

import sys
import time

import psycopg
import typer

from scripts.setup_db import _print_counts, _table_counts
from src.config import get_settings

app = typer.Typer(help="Append a large synthetic dataset to the blog tables.")

INSERT_USERS_SQL = """
INSERT INTO users (name, email)
SELECT 'User ' || n, 'user' || n || '@example.com'
FROM generate_series((SELECT COALESCE(MAX(id), 0) + 1 FROM users), %(users)s) AS n
"""

INSERT_POSTS_SQL = """
INSERT INTO posts (user_id, title, content, published_at)
SELECT
    floor(random() * %(users)s + 1)::int,
    'Post ' || n,
    'Content for post ' || n,
    CURRENT_TIMESTAMP - (random() * INTERVAL '365 days')
FROM generate_series((SELECT COALESCE(MAX(id), 0) + 1 FROM posts), %(posts)s) AS n
"""

INSERT_COMMENTS_SQL = """
INSERT INTO comments (post_id, user_id, body)
SELECT
    floor(random() * %(posts)s + 1)::int,
    floor(random() * %(users)s + 1)::int,
    'Comment ' || n
FROM generate_series((SELECT COALESCE(MAX(id), 0) + 1 FROM comments), %(comments)s) AS n
"""


def _seed_large(dsn: str, users: int, posts: int, comments: int) -> None:
    """Top each table up to the requested total row id."""
    params = {"users": users, "posts": posts, "comments": comments}
    with psycopg.connect(dsn) as conn:
        with conn.cursor() as cur:
            typer.echo("Adding users...")
            cur.execute(INSERT_USERS_SQL, params)
            typer.echo("Adding posts...")
            cur.execute(INSERT_POSTS_SQL, params)
            typer.echo("Adding comments...")
            cur.execute(INSERT_COMMENTS_SQL, params)
        conn.commit()


@app.command()
def main(
    users: int = typer.Option(50, "--users", help="Target number of users."),
    posts: int = typer.Option(2_500, "--posts", help="Target number of posts."),
    comments: int = typer.Option(10_000, "--comments", help="Target number of comments."),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
) -> None:
    """
    Seed a large dataset on top of the sample data.
    """
    conn_dsn = dsn or get_settings().dsn
    start = time.perf_counter()
    _seed_large(conn_dsn, users=users, posts=posts, comments=comments)
    typer.echo(f"Large dataset created in {time.perf_counter() - start:.2f}s.")
    _print_counts(_table_counts(conn_dsn))


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
