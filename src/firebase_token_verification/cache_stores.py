"""Cache store implementations for Google signing certificates.

This module provides implementations of the KeyCache protocol so resolved
certificates can be reused across verifications until Google rotates them.

Implementations:
- InMemoryCache: Simple in-process caching (good for dev/single-instance)
- RedisCache: Distributed caching via an async Redis client (multi-instance)

Both implementations store the raw PEM certificate string under the key the
verifier supplies and honour the TTL it passes, which comes straight from the
``max-age`` Google advertises for its key set.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any


@dataclass(slots=True)
class _CacheItem:
    """Internal cache entry with TTL tracking.

    Attributes:
        value: Cached certificate string.
        expires_at: Unix timestamp when this entry should be considered expired.
    """

    value: str
    expires_at: float


class InMemoryCache:
    """In-process memory cache for signing certificates.

    Expired entries are lazily removed on access.

    Example:
        ```python
        cache = InMemoryCache()
        await cache.put("googlePublicKey-abc", pem, expiration_ttl=3600)
        pem = await cache.get("googlePublicKey-abc")
        ```

    Attributes:
        _store: Internal dict mapping cache key -> _CacheItem.
    """

    def __init__(self) -> None:
        """Initialize an empty in-memory cache."""
        self._store: dict[str, _CacheItem] = {}

    async def get(self, key: str) -> str | None:
        """Return the cached value if present and not expired, None otherwise."""
        item = self._store.get(key)
        if not item:
            return None

        if time.time() >= item.expires_at:
            # Lazy removal of expired entry
            self._store.pop(key, None)
            return None

        return item.value

    async def put(self, key: str, value: str, *, expiration_ttl: int) -> None:
        """Cache a value for ``expiration_ttl`` seconds.

        Raises:
            ValueError: If expiration_ttl is not positive.
        """
        if expiration_ttl <= 0:
            raise ValueError(f"expiration_ttl must be positive, got {expiration_ttl}")

        self._store[key] = _CacheItem(value=value, expires_at=time.time() + expiration_ttl)


class RedisCache:
    """Redis-backed distributed cache for signing certificates.

    Certificates are stored as plain strings and expire through Redis's native
    TTL (``SETEX``).

    Dependencies:
        Requires the redis package: pip install "firebase-token-verification[redis]"

    Example:
        ```python
        from redis.asyncio import Redis

        cache = RedisCache(Redis(host="localhost", port=6379))
        claims = await verify_id_token(token, "my-project", credential, cache)
        ```

    Attributes:
        _client: Async Redis client instance.
    """

    def __init__(self, redis_client: Any) -> None:
        """Initialize Redis cache.

        Args:
            redis_client: Async Redis client (e.g. ``redis.asyncio.Redis``).
                Must support awaitable get() and setex() methods.

        Note:
            The type is Any to avoid hard dependency on redis package types.
        """
        self._client = redis_client

    async def get(self, key: str) -> str | None:
        """Return the cached certificate, or None if Redis has no entry.

        Raises:
            RuntimeError: If the Redis operation fails.
        """
        try:
            data = await self._client.get(key)
        except Exception as e:
            raise RuntimeError("Failed to read key from Redis") from e

        if data is None:
            return None
        if isinstance(data, bytes):
            return data.decode("utf-8")
        return data

    async def put(self, key: str, value: str, *, expiration_ttl: int) -> None:
        """Cache a certificate with TTL.

        Raises:
            ValueError: If expiration_ttl is not positive.
            RuntimeError: If the Redis operation fails.
        """
        if expiration_ttl <= 0:
            raise ValueError(f"expiration_ttl must be positive, got {expiration_ttl}")

        try:
            await self._client.setex(key, expiration_ttl, value)
        except Exception as e:
            raise RuntimeError("Failed to cache key in Redis") from e
