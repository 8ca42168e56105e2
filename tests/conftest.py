"""
Pytest configuration for the N+1 query benchmark.

Provides fixtures for:
- An in-memory blog backend that answers the strategies' SQL statements
- Executors wired to that backend
- Database connection management and seeding for integration tests
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Generator, List, Optional, Sequence

import psycopg
import pytest

from src.config import Settings
from src.errors import QueryError
from src.infrastructure.executor import QueryExecutor
from src.strategies.sql import (
    COMMENTS_BY_POST_IDS_SQL,
    COMMENTS_BY_POST_SQL,
    JOINED_POSTS_SQL,
    POSTS_SQL,
    USERS_BY_IDS_SQL,
    USER_BY_ID_SQL,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
SQL_DIR = Path(__file__).parent.parent / "db"


def _ts(minutes: int) -> datetime:
    return BASE_TIME + timedelta(minutes=minutes)


class FakeBlogBackend:
    """
    In-memory stand-in for the `query(sql, params)` capability.

    Understands exactly the statements in `src.strategies.sql` and answers them
    the way Postgres would, including the JSON-aggregated comments of the join
    query (timestamps serialized as ISO strings).
    """

    def __init__(
        self,
        users: List[Dict[str, Any]],
        posts: List[Dict[str, Any]],
        comments: List[Dict[str, Any]],
        fail_on: Optional[str] = None,
    ) -> None:
        self.users = {u["id"]: u for u in users}
        self.posts = sorted(posts, key=lambda p: p["id"])
        self.comments = sorted(comments, key=lambda c: c["id"])
        self.fail_on = fail_on
        self.calls: List[tuple] = []
        self._handlers: Dict[str, Callable[[Sequence[Any]], List[Dict[str, Any]]]] = {
            POSTS_SQL: self._posts,
            USER_BY_ID_SQL: self._user_by_id,
            COMMENTS_BY_POST_SQL: self._comments_by_post,
            USERS_BY_IDS_SQL: self._users_by_ids,
            COMMENTS_BY_POST_IDS_SQL: self._comments_by_post_ids,
            JOINED_POSTS_SQL: self._joined_posts,
        }

    def __call__(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        self.calls.append((sql, tuple(params)))
        if sql == self.fail_on:
            raise QueryError("connection reset by peer", sql=sql)
        if sql not in self._handlers:
            raise QueryError(f"unexpected statement: {sql}", sql=sql)
        return self._handlers[sql](params)

    def _posts(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        return [dict(p) for p in self.posts[: params[0]]]

    def _user_by_id(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        user = self.users.get(params[0])
        return [dict(user)] if user else []

    def _comments_by_post(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        return [dict(c) for c in self.comments if c["post_id"] == params[0]]

    def _users_by_ids(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        return [dict(self.users[i]) for i in params[0] if i in self.users]

    def _comments_by_post_ids(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        ids = set(params[0])
        rows = [dict(c) for c in self.comments if c["post_id"] in ids]
        return sorted(rows, key=lambda c: (c["post_id"], c["id"]))

    def _joined_posts(self, params: Sequence[Any]) -> List[Dict[str, Any]]:
        rows = []
        for post in self.posts[: params[0]]:
            user = self.users.get(post["user_id"])
            if user is None:
                continue
            rows.append(
                {
                    "post_id": post["id"],
                    "user_id": post["user_id"],
                    "title": post["title"],
                    "content": post["content"],
                    "published_at": post["published_at"],
                    "post_created_at": post["created_at"],
                    "user_name": user["name"],
                    "user_email": user["email"],
                    "user_created_at": user["created_at"],
                    "comments": [
                        {**c, "created_at": c["created_at"].isoformat()}
                        for c in self.comments
                        if c["post_id"] == post["id"]
                    ],
                }
            )
        return rows

    def count(self, sql: str) -> int:
        return sum(1 for call_sql, _ in self.calls if call_sql == sql)


def make_user(user_id: int, name: str) -> Dict[str, Any]:
    return {
        "id": user_id,
        "name": name,
        "email": f"{name.lower()}@example.com",
        "created_at": _ts(user_id),
    }


def make_post(post_id: int, user_id: int) -> Dict[str, Any]:
    return {
        "id": post_id,
        "user_id": user_id,
        "title": f"Post {post_id}",
        "content": f"Content for post {post_id}",
        "published_at": _ts(100 + post_id),
        "created_at": _ts(100 + post_id),
    }


def make_comment(comment_id: int, post_id: int, user_id: int) -> Dict[str, Any]:
    return {
        "id": comment_id,
        "post_id": post_id,
        "user_id": user_id,
        "body": f"Comment {comment_id}",
        "created_at": _ts(1000 + comment_id),
    }


@pytest.fixture
def blog_backend() -> FakeBlogBackend:
    """
    2 users, 3 posts (posts 1 and 2 by Alice, post 3 by Bob), 4 comments.

    Post 2 has no comments.
    """
    return FakeBlogBackend(
        users=[make_user(1, "Alice"), make_user(2, "Bob")],
        posts=[make_post(1, 1), make_post(2, 1), make_post(3, 2)],
        comments=[
            make_comment(1, 1, 2),
            make_comment(2, 3, 1),
            make_comment(3, 1, 1),
            make_comment(4, 3, 2),
        ],
    )


@pytest.fixture
def make_backend() -> Callable[..., FakeBlogBackend]:
    """Factory for larger generated datasets."""

    def _make(posts: int, users: int = 5, comments_per_post: int = 2, **kwargs: Any) -> FakeBlogBackend:
        user_rows = [make_user(i, f"User{i}") for i in range(1, users + 1)]
        post_rows = [make_post(i, (i % users) + 1) for i in range(1, posts + 1)]
        comment_rows = []
        for post in post_rows:
            for _ in range(comments_per_post):
                comment_rows.append(make_comment(len(comment_rows) + 1, post["id"], 1))
        return FakeBlogBackend(user_rows, post_rows, comment_rows, **kwargs)

    return _make


@pytest.fixture
def executor(blog_backend: FakeBlogBackend) -> QueryExecutor:
    return QueryExecutor(blog_backend)


# ---------------------------------------------------------------------------
# Integration fixtures (real Postgres)
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "nplusone"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection(test_dsn: str) -> Generator[psycopg.Connection, None, None]:
    """
    Session-scoped connection for integration tests; skips when unreachable.
    """
    try:
        conn = psycopg.connect(test_dsn, connect_timeout=5)
    except psycopg.OperationalError:
        pytest.skip("Database not available for integration tests")
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture
def seeded_blog(db_connection: psycopg.Connection) -> psycopg.Connection:
    """
    Recreate the schema and load the 2-user / 3-post / 4-comment scenario.
    """
    with db_connection.cursor() as cur:
        cur.execute((SQL_DIR / "schema.sql").read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com'), "
            "('Bob', 'bob@example.com')"
        )
        cur.execute(
            "INSERT INTO posts (user_id, title, content, published_at) VALUES "
            "(1, 'Post 1', 'Content 1', now()), (1, 'Post 2', 'Content 2', now()), "
            "(2, 'Post 3', 'Content 3', NULL)"
        )
        cur.execute(
            "INSERT INTO comments (post_id, user_id, body) VALUES "
            "(1, 2, 'Comment 1'), (3, 1, 'Comment 2'), (1, 1, 'Comment 3'), (3, 2, 'Comment 4')"
        )
    db_connection.commit()
    return db_connection
