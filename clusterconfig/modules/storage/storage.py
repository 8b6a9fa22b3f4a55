import logging
from typing import Optional

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class StorageModule:
    """
    Lazily connected Redis client.

    Redis is optional here: without a URL nothing connects and ``connect()``
    returns None, which callers treat as "no audit trail".
    """

    def __init__(self, connection_url: Optional[str] = None):
        """
        Args:
            connection_url: Redis URL, e.g. redis://localhost:6379/0
        """
        self.url = connection_url
        self._client: Optional[redis.Redis] = None

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def connect(self) -> Optional[redis.Redis]:
        """Return the client, creating it on first use."""
        if not self.enabled:
            return None
        if self._client is None:
            self._client = redis.from_url(self.url, encoding="utf-8", decode_responses=True)
            logger.info("Connected audit storage")
        return self._client

    async def ping(self) -> bool:
        """Check the connection; False when disabled or unreachable."""
        if self._client is None:
            return False
        try:
            return bool(await self._client.ping())
        except redis.ConnectionError as e:
            logger.warning(f"Audit storage unreachable: {e}")
            return False

    async def disconnect(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
