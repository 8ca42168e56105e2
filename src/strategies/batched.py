"""
Batched strategy: one query per table, stitched together in memory.

Issues exactly three statements for any non-empty page of posts (posts, users
by `= ANY(ids)`, comments by `= ANY(ids)`), avoiding both the N+1 round-trips
and the join's row fan-out.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List

from src.domain.models import Comment, Post, User
from src.strategies.abstract import AbstractFetchStrategy
from src.strategies.sql import COMMENTS_BY_POST_IDS_SQL, POSTS_SQL, USERS_BY_IDS_SQL
from src.utils.logging import get_logger

log = get_logger(__name__)


class BatchedStrategy(AbstractFetchStrategy):
    """Posts, then all referenced users and all comments in one query each."""

    name: str = "batched"
    description: str = "Posts, then users and comments fetched with = ANY(ids) (3 queries)."

    def _fetch(self, limit: int) -> List[Post]:
        posts = [Post.model_validate(row) for row in self.executor.execute(POSTS_SQL, (limit,))]
        if not posts:
            return []

        user_ids = sorted({post.user_id for post in posts})
        post_ids = [post.id for post in posts]

        users: Dict[int, User] = {
            user.id: user
            for user in (
                User.model_validate(row)
                for row in self.executor.execute(USERS_BY_IDS_SQL, (user_ids,))
            )
        }

        comments: Dict[int, List[Comment]] = defaultdict(list)
        for row in self.executor.execute(COMMENTS_BY_POST_IDS_SQL, (post_ids,)):
            comment = Comment.model_validate(row)
            comments[comment.post_id].append(comment)

        enriched: List[Post] = []
        for post in posts:
            user = users.get(post.user_id)
            if user is None:
                log.debug(
                    "Dropping post with unresolved author",
                    extra={"post_id": post.id, "user_id": post.user_id},
                )
                continue
            post_comments = sorted(comments.get(post.id, []), key=lambda c: c.id)
            enriched.append(post.model_copy(update={"user": user, "comments": post_comments}))
        return enriched


__all__ = ["BatchedStrategy"]
