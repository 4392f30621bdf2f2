"""
Murmur Backend — Post and Feed Schemas
========================================

What:  API contracts for POST /api/posts and GET /api/feed.

Field names (`userid`, `createdat`) are part of the public API and are kept
lowercase and unseparated.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class PostCreateRequest(BaseModel):
    """Body of POST /api/posts. Length is checked by PostService (→ 422)."""
    content: Optional[str] = Field(default=None, description="Post text, 1-200 characters")


class PostResponse(BaseModel):
    """A stored post, as returned by POST /api/posts (201)."""
    id: int = Field(description="Post identifier")
    userid: int = Field(description="Owner's user identifier")
    content: str = Field(description="Post text")
    createdat: datetime = Field(description="Creation timestamp (UTC ISO 8601)")


class FeedPost(PostResponse):
    """A feed entry: the post plus its author's username."""
    username: str = Field(description="Author's username")


class FeedResponse(BaseModel):
    """
    One page of the caller's feed, newest first.

    An empty followee set yields an empty `posts` list.
    """
    page: int = Field(description="1-based page number that was served")
    limit: int = Field(description="Page size that was applied (after capping)")
    posts: List[FeedPost] = Field(default_factory=list)
