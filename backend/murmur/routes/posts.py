"""
Murmur Backend — Post Routes
==============================

What:  POST /api/posts: create a post owned by the authenticated caller.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from murmur.dependencies import get_post_service, require_user
from murmur.schemas.auth import AuthenticatedUser
from murmur.schemas.common import ErrorResponse
from murmur.schemas.post import PostCreateRequest, PostResponse
from murmur.services.post_service import PostService

router = APIRouter(prefix="/api", tags=["Posts"])


@router.post(
    "/posts",
    status_code=201,
    response_model=PostResponse,
    responses={
        201: {"description": "Post created", "model": PostResponse},
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
        422: {"description": "Content must be 1-200 characters", "model": ErrorResponse},
    },
    summary="Create a post",
)
async def create_post(
    payload: Optional[PostCreateRequest] = None,
    user: AuthenticatedUser = Depends(require_user),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """The owner is always the caller; any owner in the body is ignored."""
    content = payload.content if payload else None
    return await service.create_post(user.id, content)
