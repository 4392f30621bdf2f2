"""
Murmur Backend — Feed Route
=============================

What:  GET /api/feed?page&limit: posts by followed users, newest first.

`page` and `limit` are read as raw strings so that absent or non-numeric
values fall back to 1 and FEED_DEFAULT_LIMIT instead of failing validation.
`limit` is capped at FEED_MAX_LIMIT.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from murmur.config import Settings
from murmur.dependencies import get_feed_service, get_settings, require_user
from murmur.schemas.auth import AuthenticatedUser
from murmur.schemas.common import ErrorResponse
from murmur.schemas.post import FeedResponse
from murmur.services.feed_service import FeedService, resolve_page_window

router = APIRouter(prefix="/api", tags=["Feed"])


@router.get(
    "/feed",
    response_model=FeedResponse,
    responses={
        200: {"description": "One page of the feed", "model": FeedResponse},
        401: {"description": "No bearer token", "model": ErrorResponse},
        403: {"description": "Invalid or expired token", "model": ErrorResponse},
        500: {"description": "Failed to fetch feed", "model": ErrorResponse},
    },
    summary="Get the caller's feed",
)
async def get_feed(
    page: Optional[str] = Query(default=None, description="1-based page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Posts per page (default 10, max 100)"),
    user: AuthenticatedUser = Depends(require_user),
    service: FeedService = Depends(get_feed_service),
    settings: Settings = Depends(get_settings),
) -> FeedResponse:
    resolved_page, resolved_limit = resolve_page_window(
        page,
        limit,
        default_limit=settings.feed_default_limit,
        max_limit=settings.feed_max_limit,
    )
    return await service.get_feed(user.id, resolved_page, resolved_limit)
