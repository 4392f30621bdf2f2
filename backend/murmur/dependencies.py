"""
Murmur Backend — FastAPI Dependencies
=======================================

What:  The token guard and the providers that hand services to routes.
How:   Everything is resolved from `request.app.state`, which the lifespan
       fills on startup (database, token service, password hasher, settings).

Token Guard (`require_user`):
    Authorization header absent, empty, or not "Bearer <token>"  → 401
    Token present but bad signature / expired / malformed          → 403
    Otherwise the decoded {id, username} is passed to the handler.
    The guard never touches the store.
"""

from typing import Optional

from fastapi import Depends, Header, Request

from murmur.config import Settings
from murmur.database import Database
from murmur.exceptions import UnauthorizedError
from murmur.schemas.auth import AuthenticatedUser
from murmur.services.feed_service import FeedService
from murmur.services.follow_service import FollowService
from murmur.services.identity_service import IdentityService
from murmur.services.passwords import PasswordHasher
from murmur.services.post_service import PostService
from murmur.services.token_service import TokenService


# ── Application state ─────────────────────────────────────────────────────

def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_token_service(request: Request) -> TokenService:
    return request.app.state.tokens


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.hasher


# ── Token guard ───────────────────────────────────────────────────────────

def require_user(
    authorization: Optional[str] = Header(default=None),
    tokens: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """Resolve the caller's identity from `Authorization: Bearer <token>`."""
    if not authorization:
        raise UnauthorizedError(message="Unauthorized")

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthorizedError(message="Unauthorized")

    return tokens.decode(token)


# ── Services ──────────────────────────────────────────────────────────────

def get_identity_service(
    database: Database = Depends(get_database),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenService = Depends(get_token_service),
) -> IdentityService:
    return IdentityService(database, hasher, tokens)


def get_post_service(database: Database = Depends(get_database)) -> PostService:
    return PostService(database)


def get_follow_service(database: Database = Depends(get_database)) -> FollowService:
    return FollowService(database)


def get_feed_service(database: Database = Depends(get_database)) -> FeedService:
    return FeedService(database)
