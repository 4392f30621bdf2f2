"""
Murmur Backend — Token Service
================================

What:  Issues and verifies signed, time-limited access tokens (JWT, HS256).
How:   python-jose signs `{id, username, iat, exp}` with SECRET_KEY. Decoding
       checks signature and expiry; there is no server-side session store.
Who:   IdentityService (issue on login), the token guard (decode).

Failure Mapping:
    Any decode failure (bad signature, expired, malformed, missing claims)
    raises ForbiddenError → 403. A missing token is the guard's concern (401).
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import ExpiredSignatureError, JWTError, jwt

from murmur.config import INSECURE_SECRETS, Settings
from murmur.exceptions import ConfigurationError, ForbiddenError
from murmur.schemas.auth import AuthenticatedUser

logger = logging.getLogger(__name__)


class TokenService:
    """
    Stateless JWT issuer/verifier bound to one secret and algorithm.

    Raises ConfigurationError on construction when the secret is empty or a
    known placeholder: there is no fallback secret.
    """

    def __init__(self, settings: Settings):
        if settings.secret_key.strip() in INSECURE_SECRETS:
            raise ConfigurationError("SECRET_KEY must be set to sign access tokens")
        self._secret = settings.secret_key
        self.algorithm = settings.jwt_algorithm
        self.expires_delta = timedelta(minutes=settings.token_expire_minutes)

    def issue(
        self,
        user_id: int,
        username: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Sign a token for the given identity. Default lifetime is one hour."""
        now = datetime.now(timezone.utc)
        claims = {
            "id": user_id,
            "username": username,
            "iat": now,
            "exp": now + (expires_delta if expires_delta is not None else self.expires_delta),
        }
        return jwt.encode(claims, self._secret, algorithm=self.algorithm)

    def decode(self, token: str) -> AuthenticatedUser:
        """
        Verify a token and return the identity it asserts.

        Raises:
            ForbiddenError: signature, expiry or payload shape is invalid
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise ForbiddenError(message="Token has expired")
        except JWTError as e:
            logger.info("Rejected invalid token: %s", type(e).__name__)
            raise ForbiddenError(message="Invalid token")

        user_id = payload.get("id")
        username = payload.get("username")
        # bool is an int subclass; a token carrying `true` as id is not valid
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
            logger.warning("Token payload missing id/username claims")
            raise ForbiddenError(message="Invalid token")

        return AuthenticatedUser(id=user_id, username=username)
