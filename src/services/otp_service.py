"""One-time password storage for password resets.

Each store keeps at most one live code per username: storing a new code
replaces the previous one. ``consume`` checks and deletes in one atomic
step so a code can never be used twice.
"""

import asyncio
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

import redis.asyncio as redis
import structlog

from src.config import Settings
from src.errors import PersistenceError
from src.models.user import OTPEntry
from src.services.redis_service import get_redis

logger = structlog.get_logger(__name__)

OTP_KEY_PREFIX = "otp"

# Delete the key only if it still holds the submitted code.
_CONSUME_SCRIPT = """
if redis.call("GET", KEYS[1]) == ARGV[1] then
    return redis.call("DEL", KEYS[1])
end
return 0
"""


def generate_otp(length: int = 6) -> str:
    """Return a random numeric code of ``length`` digits."""
    return "".join(secrets.choice(string.digits) for _ in range(length))


class OTPStore(Protocol):
    """Ephemeral username -> code mapping with expiry."""

    def generate(self) -> str: ...

    async def store(self, username: str, code: str) -> None: ...

    async def consume(self, username: str, code: str) -> bool: ...


class RedisOTPStore:
    """OTP store backed by Redis key expiry."""

    def __init__(self, ttl_seconds: int = 300, length: int = 6):
        self.ttl_seconds = ttl_seconds
        self.length = length

    @staticmethod
    def _key(username: str) -> str:
        return f"{OTP_KEY_PREFIX}:{username}"

    async def _client(self) -> redis.Redis:
        client = await get_redis()
        if client is None:
            raise PersistenceError()
        return client

    def generate(self) -> str:
        return generate_otp(self.length)

    async def store(self, username: str, code: str) -> None:
        """Store ``code`` for ``username``, replacing any live code.

        Raises:
            PersistenceError: If Redis is unavailable or the write fails
        """
        client = await self._client()
        try:
            await client.set(self._key(username), code, ex=self.ttl_seconds)
        except redis.RedisError as e:
            logger.error("otp_store_failed", username=username, error=str(e))
            raise PersistenceError() from e

        logger.info("otp_stored", username=username, ttl_seconds=self.ttl_seconds)

    async def consume(self, username: str, code: str) -> bool:
        """Atomically delete the code for ``username`` if it matches.

        Returns:
            True if the code matched a live entry (now deleted), False otherwise

        Raises:
            PersistenceError: If Redis is unavailable or the script fails
        """
        client = await self._client()
        try:
            deleted = await client.eval(_CONSUME_SCRIPT, 1, self._key(username), code)
        except redis.RedisError as e:
            logger.error("otp_consume_failed", username=username, error=str(e))
            raise PersistenceError() from e

        consumed = int(deleted) == 1
        logger.info("otp_consumed" if consumed else "otp_rejected", username=username)
        return consumed


class InMemoryOTPStore:
    """Process-local OTP store for development and tests."""

    def __init__(
        self,
        ttl_seconds: int = 300,
        length: int = 6,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.ttl_seconds = ttl_seconds
        self.length = length
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[str, OTPEntry] = {}
        self._lock = asyncio.Lock()

    def generate(self) -> str:
        return generate_otp(self.length)

    async def store(self, username: str, code: str) -> None:
        """Store ``code`` for ``username`` and drop any expired entries."""
        now = self._clock()
        expires_at = now + timedelta(seconds=self.ttl_seconds)
        async with self._lock:
            expired = [
                name for name, entry in self._entries.items() if entry.expires_at <= now
            ]
            for name in expired:
                del self._entries[name]
            self._entries[username] = OTPEntry(
                username=username, code=code, expires_at=expires_at
            )
        logger.info("otp_stored", username=username, ttl_seconds=self.ttl_seconds)

    async def consume(self, username: str, code: str) -> bool:
        async with self._lock:
            entry = self._entries.get(username)
            if entry is None:
                return False
            if entry.expires_at <= self._clock():
                del self._entries[username]
                logger.info("otp_expired", username=username)
                return False
            if not secrets.compare_digest(entry.code, code):
                logger.info("otp_rejected", username=username)
                return False
            del self._entries[username]

        logger.info("otp_consumed", username=username)
        return True

    async def get(self, username: str) -> Optional[OTPEntry]:
        """Return the live entry for ``username``, if any."""
        async with self._lock:
            entry = self._entries.get(username)
        if entry is None or entry.expires_at <= self._clock():
            return None
        return entry


_memory_store: Optional[InMemoryOTPStore] = None


def build_otp_store(settings: Settings) -> OTPStore:
    """Create the OTP store selected by ``settings.otp_store_backend``.

    The in-memory store is shared across requests for the life of the process.
    """
    global _memory_store

    backend = settings.otp_store_backend.lower()
    if backend == "memory":
        if _memory_store is None:
            _memory_store = InMemoryOTPStore(
                ttl_seconds=settings.otp_ttl_seconds, length=settings.otp_length
            )
        return _memory_store
    if backend == "redis":
        return RedisOTPStore(
            ttl_seconds=settings.otp_ttl_seconds, length=settings.otp_length
        )
    raise ValueError(f"Unknown OTP store backend: {settings.otp_store_backend}")
