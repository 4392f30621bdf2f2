"""
Murmur Backend — Identity Service
===================================

What:  Registration and login.
How:   register() hashes the password and inserts the user, letting the
       store's UNIQUE(username) constraint decide duplicates. login() looks
       the user up, verifies the hash, and asks TokenService for a token.
Who:   Called by the /api/register and /api/login route handlers.

Login failures are indistinguishable: an unknown username and a
wrong password both produce the same 401 "Invalid credentials".
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from murmur.database import Database
from murmur.exceptions import (
    ConflictError,
    DatabaseError,
    InvalidInputError,
    MurmurError,
    UnauthorizedError,
)
from murmur.models import User
from murmur.schemas.auth import TokenResponse, UserResponse
from murmur.services.passwords import PasswordHasher
from murmur.services.token_service import TokenService

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 255


def _require_credentials(username: Optional[str], password: Optional[str]) -> None:
    if not username or not password:
        raise InvalidInputError(
            message="Username and password are required",
            field="username" if not username else "password",
        )


class IdentityService:
    """
    Business logic for accounts.

    Dependencies are passed in explicitly; the service holds no per-request
    state and can be rebuilt for every request.
    """

    def __init__(self, database: Database, hasher: PasswordHasher, tokens: TokenService):
        self.database = database
        self.hasher = hasher
        self.tokens = tokens

    async def register(self, username: Optional[str], password: Optional[str]) -> UserResponse:
        """
        Create an account.

        Raises:
            InvalidInputError: username or password absent/empty, or username too long (→ 400)
            ConflictError:     username already taken (→ 409)
            DatabaseError:     any other store failure (→ 500)
        """
        _require_credentials(username, password)
        if len(username) > MAX_USERNAME_LENGTH:
            raise InvalidInputError(
                message=f"Username must be at most {MAX_USERNAME_LENGTH} characters",
                field="username",
            )

        password_hash = await self.hasher.hash_async(password)

        try:
            async with self.database.session() as session:
                user = User(username=username, password_hash=password_hash)
                session.add(user)
                try:
                    await self.database.bounded(session.flush())
                except IntegrityError:
                    raise ConflictError(
                        message="Username already exists",
                        context={"username": username},
                    )
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Something went wrong while creating the account.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Registered user %d (%s)", user.id, user.username)
        return UserResponse(id=user.id, username=user.username)

    async def login(self, username: Optional[str], password: Optional[str]) -> TokenResponse:
        """
        Verify credentials and issue a one-hour token.

        Raises:
            InvalidInputError: username or password absent/empty (→ 400)
            UnauthorizedError: unknown user or wrong password (→ 401)
        """
        _require_credentials(username, password)

        try:
            async with self.database.session() as session:
                result = await self.database.bounded(
                    session.execute(select(User).where(User.username == username))
                )
                user = result.scalar_one_or_none()
        except MurmurError:
            raise
        except Exception as e:
            logger.error("Database error during login: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        valid = await self.hasher.verify_async(
            password, user.password_hash if user is not None else None
        )
        if not valid:
            logger.info("Failed login attempt for username %r", username)
            raise UnauthorizedError(message="Invalid credentials")

        logger.info("User %d logged in", user.id)
        return TokenResponse(token=self.tokens.issue(user.id, user.username))
