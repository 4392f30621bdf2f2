"""
Murmur Backend — Feed Service
===============================

What:  Builds one page of the caller's feed: posts by the users they follow,
       newest first.
Who:   Called by GET /api/feed.

Query Plan:
    1. SELECT followee_id FROM follows WHERE follower_id = :caller
    2. (empty → return an empty page without a second query)
    3. SELECT posts.*, users.username
       FROM posts JOIN users ON users.id = posts.user_id
       WHERE posts.user_id IN (:followees)
       ORDER BY posts.created_at DESC, posts.id DESC
       OFFSET (page-1)*limit LIMIT limit

    The secondary `id DESC` key makes ordering total, so consecutive pages
    never overlap when timestamps tie.
"""

import logging
from typing import Optional, Tuple

from sqlalchemy import desc, select

from murmur.database import Database
from murmur.exceptions import DatabaseError, MurmurError
from murmur.models import Follow, Post, User
from murmur.schemas.post import FeedPost, FeedResponse

logger = logging.getLogger(__name__)

# Largest OFFSET a 64-bit store integer can hold
MAX_OFFSET = 2**63 - 1


def _positive_int(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        number = int(str(value).strip())
    except ValueError:
        return None
    return number if number >= 1 else None


def resolve_page_window(
    page: Optional[str],
    limit: Optional[str],
    default_limit: int = 10,
    max_limit: int = 100,
) -> Tuple[int, int]:
    """
    Turn raw query-string values into a (page, limit) pair.

    Absent, non-numeric or non-positive values fall back to page 1 and
    `default_limit`; limit is capped at `max_limit`. page is capped so that
    `(page - 1) * max_limit` never exceeds MAX_OFFSET; past that point the
    page is empty anyway.

    >>> resolve_page_window("2", "500", 10, 100)
    (2, 100)
    >>> resolve_page_window("abc", None)
    (1, 10)
    """
    max_page = MAX_OFFSET // max_limit + 1
    resolved_page = min(_positive_int(page) or 1, max_page)
    resolved_limit = _positive_int(limit) or default_limit
    return resolved_page, min(resolved_limit, max_limit)


class FeedService:
    def __init__(self, database: Database):
        self.database = database

    async def get_feed(self, caller_id: int, page: int, limit: int) -> FeedResponse:
        """
        Return page `page` (1-based) of `limit` posts for `caller_id`.

        Raises:
            DatabaseError: any store failure (→ 500)
        """
        try:
            async with self.database.session() as session:
                followee_result = await self.database.bounded(
                    session.execute(
                        select(Follow.followee_id).where(Follow.follower_id == caller_id)
                    )
                )
                followee_ids = list(followee_result.scalars().all())

                if not followee_ids:
                    return FeedResponse(page=page, limit=limit, posts=[])

                query = (
                    select(Post, User.username)
                    .join(User, User.id == Post.user_id)
                    .where(Post.user_id.in_(followee_ids))
                    .order_by(desc(Post.created_at), desc(Post.id))
                    .offset((page - 1) * limit)
                    .limit(limit)
                )
                rows = (await self.database.bounded(session.execute(query))).all()
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Failed to fetch feed for user %d: %s", caller_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Failed to fetch feed",
                context={"caller_id": caller_id, "error_type": type(e).__name__},
            )

        posts = [
            FeedPost(
                id=post.id,
                userid=post.user_id,
                content=post.content,
                createdat=post.created_at,
                username=username,
            )
            for post, username in rows
        ]
        return FeedResponse(page=page, limit=limit, posts=posts)
