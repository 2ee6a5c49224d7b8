"""One-time challenge nonces for Sign-In-With-Ethereum.

At most one live nonce exists per address. Issuing a new nonce replaces the
previous one; consuming compares and deletes in a single atomic step so that
two concurrent sign-in attempts cannot both succeed with the same nonce.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import lru_cache
from threading import Lock
from typing import Protocol

import redis

from siwe_faucet.core.security import generate_nonce
from siwe_faucet.core.settings import settings
from siwe_faucet.services.errors import ExternalServiceError

logger = logging.getLogger(__name__)

_KEY_PREFIX = "siwe:nonce:"


class NonceStore(Protocol):
    """Issue and consume single-use nonces keyed by identity."""

    def issue(self, identity: str) -> str: ...

    def consume(self, identity: str, candidate: str) -> bool: ...


@dataclass(frozen=True)
class NonceRecord:
    value: str
    created_at: float


class InMemoryNonceStore:
    """Process-local nonce store guarded by a lock.

    Records live for the lifetime of the process only. A record older than
    `ttl_seconds` is treated as absent and is dropped on the next `issue` or
    on a `consume` for the same identity.
    """

    def __init__(
        self,
        ttl_seconds: int | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._records: dict[str, NonceRecord] = {}
        self._lock = Lock()

    def issue(self, identity: str) -> str:
        nonce = generate_nonce()
        with self._lock:
            self._sweep()
            self._records[identity] = NonceRecord(value=nonce, created_at=self._clock())
        return nonce

    def consume(self, identity: str, candidate: str) -> bool:
        with self._lock:
            record = self._records.get(identity)
            if record is None:
                return False
            if self._expired(record):
                del self._records[identity]
                return False
            if record.value != candidate:
                return False
            del self._records[identity]
            return True

    def _expired(self, record: NonceRecord) -> bool:
        if not self._ttl_seconds:
            return False
        return self._clock() - record.created_at > self._ttl_seconds

    def _sweep(self) -> None:
        # Caller holds the lock.
        if not self._ttl_seconds:
            return
        expired = [key for key, record in self._records.items() if self._expired(record)]
        for key in expired:
            del self._records[key]

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class RedisNonceStore:
    """Nonce store shared across workers through Redis.

    `consume` uses WATCH/MULTI so the compare and the delete commit together.
    """

    def __init__(self, client: redis.Redis, ttl_seconds: int | None = None) -> None:
        self._redis = client
        self._ttl_seconds = ttl_seconds

    @staticmethod
    def _key(identity: str) -> str:
        return f"{_KEY_PREFIX}{identity}"

    def issue(self, identity: str) -> str:
        nonce = generate_nonce()
        try:
            self._redis.set(self._key(identity), nonce, ex=self._ttl_seconds or None)
        except redis.RedisError as err:
            logger.error("Failed to store nonce for %s: %s", identity, err)
            raise ExternalServiceError(f"Nonce store unavailable: {err}") from err
        return nonce

    def consume(self, identity: str, candidate: str) -> bool:
        key = self._key(identity)
        try:
            with self._redis.pipeline() as pipe:
                while True:
                    try:
                        pipe.watch(key)
                        stored = pipe.get(key)
                        if stored is None or _as_text(stored) != candidate:
                            pipe.unwatch()
                            return False
                        pipe.multi()
                        pipe.delete(key)
                        pipe.execute()
                        return True
                    except redis.WatchError:
                        # Key changed between GET and EXEC; re-read it.
                        continue
        except redis.RedisError as err:
            logger.error("Failed to consume nonce for %s: %s", identity, err)
            raise ExternalServiceError(f"Nonce store unavailable: {err}") from err


def _as_text(value: bytes | str) -> str:
    return value.decode() if isinstance(value, bytes) else value


@lru_cache(maxsize=1)
def get_nonce_store() -> NonceStore:
    """Return the process-wide nonce store selected by configuration."""
    if settings.nonce_store_backend == "redis":
        client = redis.Redis.from_url(settings.redis_url)
        return RedisNonceStore(client, ttl_seconds=settings.nonce_ttl_seconds)
    return InMemoryNonceStore(ttl_seconds=settings.nonce_ttl_seconds)
