"""
SQL statements issued by the fetch strategies.

Kept in one place so the strategies, the integration fixtures and the in-memory
test backend agree on exactly which statements exist.
"""

from __future__ import annotations

POSTS_SQL = "SELECT * FROM posts ORDER BY id LIMIT %s"

USER_BY_ID_SQL = "SELECT * FROM users WHERE id = %s"

COMMENTS_BY_POST_SQL = "SELECT * FROM comments WHERE post_id = %s ORDER BY id"

USERS_BY_IDS_SQL = "SELECT * FROM users WHERE id = ANY(%s)"

COMMENTS_BY_POST_IDS_SQL = "SELECT * FROM comments WHERE post_id = ANY(%s) ORDER BY post_id, id"

# The limit is applied to posts before joining so fan-out from comments can't
# eat into it. Unmatched LEFT JOIN rows are filtered out of the aggregate.
JOINED_POSTS_SQL = """
SELECT
    p.id AS post_id,
    p.user_id,
    p.title,
    p.content,
    p.published_at,
    p.created_at AS post_created_at,
    u.name AS user_name,
    u.email AS user_email,
    u.created_at AS user_created_at,
    COALESCE(
        json_agg(
            json_build_object(
                'id', c.id,
                'post_id', c.post_id,
                'user_id', c.user_id,
                'body', c.body,
                'created_at', c.created_at
            )
            ORDER BY c.id
        ) FILTER (WHERE c.id IS NOT NULL),
        '[]'::json
    ) AS comments
FROM (SELECT * FROM posts ORDER BY id LIMIT %s) p
INNER JOIN users u ON p.user_id = u.id
LEFT JOIN comments c ON c.post_id = p.id
GROUP BY
    p.id, p.user_id, p.title, p.content, p.published_at, p.created_at,
    u.id, u.name, u.email, u.created_at
ORDER BY p.id
"""

__all__ = [
    "COMMENTS_BY_POST_IDS_SQL",
    "COMMENTS_BY_POST_SQL",
    "JOINED_POSTS_SQL",
    "POSTS_SQL",
    "USERS_BY_IDS_SQL",
    "USER_BY_ID_SQL",
]
