"""
Showcase queries for the different JOIN flavours over the blog schema.

Each function takes an executor and returns the raw rows, so the CLI can time
them with the same monitor used for the fetch strategies.
"""

from __future__ import annotations

from typing import Callable, Dict, List

from src.infrastructure.executor import QueryExecutor, Row

INNER_JOIN_SQL = """
SELECT p.id AS post_id, p.title, u.name AS author
FROM posts p
INNER JOIN users u ON p.user_id = u.id
ORDER BY p.id
LIMIT 5
"""

LEFT_JOIN_SQL = """
SELECT u.id AS user_id, u.name, COUNT(p.id) AS post_count
FROM users u
LEFT JOIN posts p ON u.id = p.user_id
GROUP BY u.id, u.name
ORDER BY post_count DESC, u.id
"""

MULTIPLE_JOINS_SQL = """
SELECT
    p.id AS post_id,
    p.title,
    u.name AS author,
    COUNT(DISTINCT c.id) AS comment_count,
    COUNT(DISTINCT pt.tag_id) AS tag_count
FROM posts p
INNER JOIN users u ON p.user_id = u.id
LEFT JOIN comments c ON p.id = c.post_id
LEFT JOIN post_tags pt ON p.id = pt.post_id
GROUP BY p.id, p.title, u.name
ORDER BY comment_count DESC, p.id
LIMIT 10
"""

SUBQUERY_JOIN_SQL = """
SELECT p.id, p.title, u.name AS author, comment_counts.count AS comment_count
FROM posts p
INNER JOIN users u ON p.user_id = u.id
INNER JOIN (
    SELECT post_id, COUNT(*) AS count
    FROM comments
    GROUP BY post_id
    HAVING COUNT(*) >= %s
) comment_counts ON p.id = comment_counts.post_id
ORDER BY comment_counts.count DESC, p.id
LIMIT 10
"""


def inner_join(executor: QueryExecutor) -> List[Row]:
    """First five posts with their author; posts without a user are excluded."""
    return executor.execute(INNER_JOIN_SQL)


def left_join(executor: QueryExecutor) -> List[Row]:
    """Every user with a post count, including users who never posted."""
    return executor.execute(LEFT_JOIN_SQL)


def multiple_joins(executor: QueryExecutor) -> List[Row]:
    """Posts with author, comment count and tag count in one statement."""
    return executor.execute(MULTIPLE_JOINS_SQL)


def subquery_join(executor: QueryExecutor, min_comments: int = 5) -> List[Row]:
    """Posts having at least `min_comments` comments, joined to an aggregate."""
    return executor.execute(SUBQUERY_JOIN_SQL, (min_comments,))


JOIN_EXAMPLES: Dict[str, Callable[[QueryExecutor], List[Row]]] = {
    "INNER JOIN": inner_join,
    "LEFT JOIN": left_join,
    "Multiple JOINs": multiple_joins,
    "JOIN with subquery": subquery_join,
}

__all__ = [
    "JOIN_EXAMPLES",
    "inner_join",
    "left_join",
    "multiple_joins",
    "subquery_join",
]
