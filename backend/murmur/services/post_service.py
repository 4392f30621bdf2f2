"""
Murmur Backend — Post Service
===============================

What:  Creates posts owned by the authenticated caller.
Who:   Called by POST /api/posts.

There is no edit or delete: a post is immutable once stored.
"""

import logging
from typing import Optional

from murmur.database import Database
from murmur.exceptions import DatabaseError, MurmurError, UnprocessableEntityError
from murmur.models import MAX_CONTENT_LENGTH, Post
from murmur.schemas.post import PostResponse

logger = logging.getLogger(__name__)


def validate_content(content: Optional[str]) -> str:
    """Return the content if it is 1-200 characters, else raise (→ 422)."""
    if not content or len(content) > MAX_CONTENT_LENGTH:
        raise UnprocessableEntityError(
            message=f"Content must be 1-{MAX_CONTENT_LENGTH} characters",
            field="content",
            context={"length": len(content) if content else 0},
        )
    return content


class PostService:
    def __init__(self, database: Database):
        self.database = database

    async def create_post(self, user_id: int, content: Optional[str]) -> PostResponse:
        """
        Persist a post for `user_id`.

        Raises:
            UnprocessableEntityError: content empty or longer than 200 characters (→ 422)
            DatabaseError:            store failure (→ 500)
        """
        content = validate_content(content)

        try:
            async with self.database.session() as session:
                post = Post(content=content, user_id=user_id)
                session.add(post)
                await self.database.bounded(session.flush())
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Database error creating post for user %d: %s", user_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save the post. Please try again.",
                context={"user_id": user_id, "error_type": type(e).__name__},
            )

        logger.info("User %d created post %d", user_id, post.id)
        return PostResponse(
            id=post.id,
            userid=post.user_id,
            content=post.content,
            createdat=post.created_at,
        )
