# =============================================
# workhub/core/otp_store.py
# =============================================
"""
Expiring storage for one-time passwords.

Codes live outside the relational store so that every server instance sees
the same pending logins. The in-memory store serves tests and single-process
development; the Redis store is used whenever more than one instance runs.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional
import asyncio
import logging
import time

import redis.asyncio as redis

logger = logging.getLogger(__name__)


@dataclass
class OtpRecord:
    code: str
    attempts: int = 0


class OtpStore(ABC):
    """Interface shared by every OTP backend"""

    @abstractmethod
    async def save(self, phone: str, code: str, ttl_seconds: int) -> None:
        """Store a fresh code for the phone, replacing any previous one"""

    @abstractmethod
    async def get(self, phone: str) -> Optional[OtpRecord]:
        """Return the pending code, or None when missing or expired"""

    @abstractmethod
    async def register_failed_attempt(self, phone: str) -> int:
        """Record a wrong guess and return the total failed attempts"""

    @abstractmethod
    async def delete(self, phone: str) -> None:
        """Forget the pending code"""

    async def close(self) -> None:
        return None

# =============================================
# IN-MEMORY BACKEND
# =============================================

class InMemoryOtpStore(OtpStore):
    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._records: Dict[str, OtpRecord] = {}
        self._expires_at: Dict[str, float] = {}
        self._lock = asyncio.Lock()

    def _purge_if_expired(self, phone: str) -> None:
        expires_at = self._expires_at.get(phone)
        if expires_at is not None and self._clock() >= expires_at:
            self._records.pop(phone, None)
            self._expires_at.pop(phone, None)

    async def save(self, phone: str, code: str, ttl_seconds: int) -> None:
        async with self._lock:
            self._records[phone] = OtpRecord(code=code)
            self._expires_at[phone] = self._clock() + ttl_seconds

    async def get(self, phone: str) -> Optional[OtpRecord]:
        async with self._lock:
            self._purge_if_expired(phone)
            record = self._records.get(phone)
            return OtpRecord(code=record.code, attempts=record.attempts) if record else None

    async def register_failed_attempt(self, phone: str) -> int:
        async with self._lock:
            self._purge_if_expired(phone)
            record = self._records.get(phone)
            if record is None:
                return 0
            record.attempts += 1
            return record.attempts

    async def delete(self, phone: str) -> None:
        async with self._lock:
            self._records.pop(phone, None)
            self._expires_at.pop(phone, None)

# =============================================
# REDIS BACKEND
# =============================================

class RedisOtpStore(OtpStore):
    """Stores each code as a hash with `code` and `attempts`, expired by Redis"""

    key_prefix = "otp"

    # Returns 0 without touching a key that has already expired
    increment_script = """
    if redis.call('EXISTS', KEYS[1]) == 0 then
        return 0
    end
    return redis.call('HINCRBY', KEYS[1], 'attempts', 1)
    """

    def __init__(self, client: redis.Redis):
        self.client = client
        self._increment_attempts = client.register_script(self.increment_script)

    @classmethod
    def from_url(cls, url: str) -> "RedisOtpStore":
        client = redis.from_url(
            url,
            encoding="utf-8",
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
            retry_on_timeout=True,
            health_check_interval=30,
        )
        return cls(client)

    def _key(self, phone: str) -> str:
        return f"{self.key_prefix}:{phone}"

    async def save(self, phone: str, code: str, ttl_seconds: int) -> None:
        key = self._key(phone)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            pipe.hset(key, mapping={"code": code, "attempts": 0})
            pipe.expire(key, ttl_seconds)
            await pipe.execute()

    async def get(self, phone: str) -> Optional[OtpRecord]:
        data = await self.client.hgetall(self._key(phone))
        if not data or "code" not in data:
            return None
        return OtpRecord(code=data["code"], attempts=int(data.get("attempts", 0)))

    async def register_failed_attempt(self, phone: str) -> int:
        # Runs atomically so an expiring key is never recreated without a TTL
        return int(await self._increment_attempts(keys=[self._key(phone)]))

    async def delete(self, phone: str) -> None:
        await self.client.delete(self._key(phone))

    async def close(self) -> None:
        await self.client.aclose()
        logger.info("Redis OTP store connection closed")

# =============================================
# FACTORY
# =============================================

def build_otp_store(backend: str, redis_url: Optional[str] = None) -> OtpStore:
    if backend == "redis":
        if not redis_url:
            raise ValueError("REDIS_URL is required for the redis OTP backend")
        logger.info("Using Redis OTP store")
        return RedisOtpStore.from_url(redis_url)
    logger.info("Using in-memory OTP store")
    return InMemoryOtpStore()
