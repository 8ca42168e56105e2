"""
Naive (N+1) strategy: the baseline the other strategies are measured against.

Fetches the posts, then asks the database for each post's author and each
post's comments one statement at a time: 1 + 2N queries for N posts.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from src.domain.models import Comment, Post, User
from src.strategies.abstract import AbstractFetchStrategy
from src.strategies.sql import COMMENTS_BY_POST_SQL, POSTS_SQL, USER_BY_ID_SQL
from src.utils.logging import get_logger

log = get_logger(__name__)


class NaiveStrategy(AbstractFetchStrategy):
    """
    One query for the posts, then one per post for the user and one per post for
    the comments.

    WARNING: the round-trip count grows linearly with `limit`. This is the
    defect being demonstrated; keep as a baseline only.
    """

    name: str = "naive"
    description: str = "Posts, then one user query and one comments query per post (1 + 2N)."

    def _fetch(self, limit: int) -> List[Post]:
        posts = [Post.model_validate(row) for row in self.executor.execute(POSTS_SQL, (limit,))]

        users: Dict[int, Optional[User]] = {}
        for post in posts:
            rows = self.executor.execute(USER_BY_ID_SQL, (post.user_id,))
            users[post.id] = User.model_validate(rows[0]) if rows else None

        comments: Dict[int, List[Comment]] = {}
        for post in posts:
            rows = self.executor.execute(COMMENTS_BY_POST_SQL, (post.id,))
            comments[post.id] = [Comment.model_validate(row) for row in rows]

        enriched: List[Post] = []
        for post in posts:
            user = users[post.id]
            if user is None:
                log.debug(
                    "Dropping post with unresolved author",
                    extra={"post_id": post.id, "user_id": post.user_id},
                )
                continue
            enriched.append(post.model_copy(update={"user": user, "comments": comments[post.id]}))
        return enriched


__all__ = ["NaiveStrategy"]
