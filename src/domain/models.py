"""
Domain models for the N+1 query benchmark.

Mirrors the blog schema in `db/schema.sql`. Models are frozen: strategies build
an enriched Post in one go instead of mutating rows they fetched earlier.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "extra": "ignore",
}


class User(BaseModel):
    """A row of the `users` table."""

    id: int = Field(..., description="Primary key.")
    name: str = Field(..., description="Display name.")
    email: str = Field(..., description="Unique e-mail address.")
    created_at: datetime = Field(..., description="Row creation timestamp.")

    model_config = _FROZEN


class Comment(BaseModel):
    """A row of the `comments` table."""

    id: int
    post_id: int
    user_id: int
    body: str
    created_at: datetime

    model_config = _FROZEN


class Post(BaseModel):
    """
    A row of the `posts` table, optionally enriched with its author and comments.

    `user` and `comments` stay None until a fetch strategy populates them.
    """

    id: int
    user_id: int
    title: str
    content: str
    published_at: Optional[datetime] = None
    created_at: datetime
    user: Optional[User] = None
    comments: Optional[List[Comment]] = None

    model_config = _FROZEN


class Tag(BaseModel):
    id: int
    name: str

    model_config = _FROZEN


class PostTag(BaseModel):
    id: int
    post_id: int
    tag_id: int

    model_config = _FROZEN


__all__ = ["Comment", "Post", "PostTag", "Tag", "User"]
