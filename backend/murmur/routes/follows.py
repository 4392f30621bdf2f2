"""
Murmur Backend — Follow Routes
================================

What:  POST /api/follow/{userid} and DELETE /api/follow/{userid}.
Who:   Authenticated callers; the follower is always the token's user.
"""

from fastapi import APIRouter, Depends, Path

from murmur.dependencies import get_follow_service, require_user
from murmur.schemas.auth import AuthenticatedUser
from murmur.schemas.common import ErrorResponse, MessageResponse
from murmur.services.follow_service import FollowService

router = APIRouter(prefix="/api/follow", tags=["Follow"])


@router.post(
    "/{userid}",
    response_model=MessageResponse,
    responses={
        200: {"description": "Now following", "model": MessageResponse},
        400: {"description": "Cannot follow yourself", "model": ErrorResponse},
        404: {"description": "User not found", "model": ErrorResponse},
        409: {"description": "Already following", "model": ErrorResponse},
    },
    summary="Follow a user",
)
async def follow_user(
    userid: int = Path(..., description="ID of the user to follow"),
    user: AuthenticatedUser = Depends(require_user),
    service: FollowService = Depends(get_follow_service),
) -> MessageResponse:
    return await service.follow(user.id, userid)


@router.delete(
    "/{userid}",
    response_model=MessageResponse,
    responses={
        200: {"description": "Unfollowed", "model": MessageResponse},
        404: {"description": "Relationship not found", "model": ErrorResponse},
    },
    summary="Unfollow a user",
)
async def unfollow_user(
    userid: int = Path(..., description="ID of the user to unfollow"),
    user: AuthenticatedUser = Depends(require_user),
    service: FollowService = Depends(get_follow_service),
) -> MessageResponse:
    return await service.unfollow(user.id, userid)
