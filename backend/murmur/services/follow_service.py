"""
Murmur Backend — Follow Graph Service
=======================================

What:  Creates and removes directed follow edges between users.
Who:   Called by POST and DELETE /api/follow/{userid}.

Rules:
    follow():   self-follow → 400, unknown followee → 404, duplicate edge → 409
    unfollow(): missing edge → 404

    An id outside the users.id column range is reported as 404 without a
    store round trip.

Duplicate edges are detected by the store's primary key on
(follower_id, followee_id), not by a read-before-write check, so two
concurrent follow requests cannot both succeed.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from murmur.database import Database
from murmur.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidInputError,
    MurmurError,
    NotFoundError,
)
from murmur.models import Follow, User
from murmur.schemas.common import MessageResponse

logger = logging.getLogger(__name__)

# users.id is a 32-bit INTEGER column; nothing outside this range can exist
MAX_USER_ID = 2**31 - 1


def _is_storable_id(user_id: int) -> bool:
    return 1 <= user_id <= MAX_USER_ID


class FollowService:
    """Encapsulates follow/unfollow workflows."""

    def __init__(self, database: Database):
        self.database = database

    async def follow(self, follower_id: int, followee_id: int) -> MessageResponse:
        if follower_id == followee_id:
            raise InvalidInputError(message="Cannot follow yourself", field="userid")
        if not _is_storable_id(followee_id):
            raise NotFoundError(resource="user", message="User not found")

        try:
            async with self.database.session() as session:
                result = await self.database.bounded(
                    session.execute(select(User.id).where(User.id == followee_id))
                )
                if result.scalar_one_or_none() is None:
                    raise NotFoundError(resource="user", message="User not found")

                session.add(Follow(follower_id=follower_id, followee_id=followee_id))
                try:
                    await self.database.bounded(session.flush())
                except IntegrityError:
                    raise ConflictError(
                        message=f"Already following user {followee_id}",
                        context={"follower_id": follower_id, "followee_id": followee_id},
                    )
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Database error creating follow %d -> %d: %s", follower_id, followee_id, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User %d followed user %d", follower_id, followee_id)
        return MessageResponse(message=f"You are now following user {followee_id}")

    async def unfollow(self, follower_id: int, followee_id: int) -> MessageResponse:
        if not _is_storable_id(followee_id):
            raise NotFoundError(resource="follow", message="Relationship not found")

        try:
            async with self.database.session() as session:
                result = await self.database.bounded(
                    session.execute(
                        delete(Follow).where(
                            Follow.follower_id == follower_id,
                            Follow.followee_id == followee_id,
                        )
                    )
                )
                if result.rowcount == 0:
                    raise NotFoundError(resource="follow", message="Relationship not found")
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Database error removing follow %d -> %d: %s", follower_id, followee_id, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("User %d unfollowed user %d", follower_id, followee_id)
        return MessageResponse(message=f"You unfollowed user {followee_id}")
