"""
Storage Module - Black Box Interface

Purpose: Own the Redis connection used by the redis store backend
Interface: connect(), disconnect()
Hidden: Redis specifics, connection pooling

Only built when AUTH_STORE_BACKEND=redis; the default backend keeps
everything in process memory.
"""

from typing import Optional

import redis.asyncio as redis


class StorageModule:
    """Black box storage abstraction."""

    def __init__(self, connection_url: Optional[str] = None):
        """Initialize storage with connection URL."""
        self.url = connection_url or "redis://localhost:6379/0"
        self._client: Optional[redis.Redis] = None

    def connect(self) -> redis.Redis:
        """Get storage connection (created lazily, connects on first command)."""
        if not self._client:
            self._client = redis.from_url(self.url, decode_responses=True)
        return self._client

    async def ping(self) -> bool:
        """Check that Redis answers."""
        return bool(await self.connect().ping())

    async def disconnect(self):
        """Close storage connection."""
        if self._client:
            await self._client.aclose()
            self._client = None


__all__ = ["StorageModule"]
