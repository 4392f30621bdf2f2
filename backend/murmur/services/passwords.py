"""Password hashing with passlib's bcrypt scheme."""

import logging

from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

logger = logging.getLogger(__name__)


class PasswordHasher:
    """
    Salted bcrypt hashing at a fixed cost factor.

    bcrypt is CPU-bound (~50-100ms at 10 rounds), so the async helpers run it
    in Starlette's threadpool instead of on the event loop.
    """

    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )
        # Verified against when the username is unknown, so a miss costs the
        # same as a wrong password
        self._dummy_hash = self._context.hash("murmur-dummy-password")

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return self._context.verify(password, password_hash)
        except ValueError:
            # Malformed stored hash
            logger.error("Stored password hash could not be parsed")
            return False

    async def hash_async(self, password: str) -> str:
        return await run_in_threadpool(self.hash, password)

    async def verify_async(self, password: str, password_hash: str | None) -> bool:
        if password_hash is None:
            await run_in_threadpool(self.verify, password, self._dummy_hash)
            return False
        return await run_in_threadpool(self.verify, password, password_hash)
