"""
Best-effort response cache for read-mostly billing calls.

Backed by any async Redis-like store (``redis.asyncio.Redis`` in production).
Store failures and timeouts are logged and treated as a miss or a no-op; the
cache never turns a successful backend call into a failure.
"""

import asyncio
import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


class ResponseCache:
    """TTL-keyed cache of serialized responses."""

    def __init__(
        self,
        store: Any = None,
        ttl_seconds: int = 0,
        key_prefix: str = "",
        timeout: Optional[float] = None,
    ):
        """
        Initialize the cache.

        Args:
            store: Async store with ``get(key)`` and ``set(key, value, ex=ttl)``
            ttl_seconds: Entry lifetime; the cache is disabled when not positive
            key_prefix: Namespace prepended to every key
            timeout: Upper bound in seconds for a single store call
        """
        self._store = store
        self._ttl = ttl_seconds
        self._prefix = key_prefix
        self._timeout = timeout

    @property
    def enabled(self) -> bool:
        """Whether reads and writes reach the store."""
        return self._store is not None and self._ttl > 0

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        """Return the cached value, or None on a miss or store failure."""
        if not self.enabled:
            return None
        try:
            value = await asyncio.wait_for(
                self._store.get(self._key(key)), self._timeout
            )
        except Exception as e:
            logger.error(f"billing cache read failed for {key}: {e!r}")
            return None
        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        """Store a value with the configured TTL; failures are only logged."""
        if not self.enabled:
            return
        try:
            await asyncio.wait_for(
                self._store.set(self._key(key), value, ex=self._ttl), self._timeout
            )
        except Exception as e:
            logger.error(f"billing cache write failed for {key}: {e!r}")

    async def close(self) -> None:
        """Release the store connection."""
        if self._store is None:
            return
        close = getattr(self._store, "aclose", None) or getattr(self._store, "close", None)
        if close is not None:
            await close()
