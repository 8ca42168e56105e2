"""
Domain package for the N+1 query benchmark.

Exports the blog entities the fetch strategies load and enrich.
"""

from src.domain.models import Comment, Post, PostTag, Tag, User

__all__ = [
    "Comment",
    "Post",
    "PostTag",
    "Tag",
    "User",
]
