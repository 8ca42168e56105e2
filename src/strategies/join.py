"""
Join strategy: a single aggregate query.

Posts are inner-joined to their author and left-joined to their comments, then
grouped so each result row is one post carrying a JSON array of its comments.
"""

from __future__ import annotations

from typing import Any, Dict, List

from src.domain.models import Comment, Post, User
from src.strategies.abstract import AbstractFetchStrategy
from src.strategies.sql import JOINED_POSTS_SQL


def _row_to_post(row: Dict[str, Any]) -> Post:
    user = User(
        id=row["user_id"],
        name=row["user_name"],
        email=row["user_email"],
        created_at=row["user_created_at"],
    )
    return Post(
        id=row["post_id"],
        user_id=row["user_id"],
        title=row["title"],
        content=row["content"],
        published_at=row["published_at"],
        created_at=row["post_created_at"],
        user=user,
        comments=[Comment.model_validate(c) for c in row["comments"] or []],
    )


class JoinStrategy(AbstractFetchStrategy):
    """
    INNER JOIN users + LEFT JOIN comments with json_agg; always one query.

    The join multiplies rows per comment before grouping (fan-out), which is
    the cost this strategy pays for the single round-trip.
    """

    name: str = "join"
    description: str = "Single query: INNER JOIN users, LEFT JOIN comments, json_agg per post."

    def _fetch(self, limit: int) -> List[Post]:
        rows = self.executor.execute(JOINED_POSTS_SQL, (limit,))
        return [_row_to_post(row) for row in rows]


__all__ = ["JoinStrategy"]
