import json
import logging
from datetime import UTC, datetime
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


class AuditLog:
    """
    Append-only trail of configuration changes, kept in a capped Redis list.

    Events describe what changed, never the values written: the auth
    document only reports whether a key is set.
    """

    def __init__(self, redis_client, key: str = "cluster_config:audit", max_events: int = 10000):
        """
        Args:
            redis_client: Async Redis client
            key: List key holding the events
            max_events: Number of most recent events to keep
        """
        self.redis = redis_client
        self.key = key
        self.max_events = max_events

    async def record(self, event_type: str, data: Dict[str, Any]) -> None:
        """
        Push an event onto the trail.

        Args:
            event_type: Type of configuration event
            data: Event data (must not contain secrets)
        """
        event = {
            "type": event_type,
            "data": data,
            "timestamp": datetime.now(UTC).isoformat(),
        }

        await self.redis.lpush(self.key, json.dumps(event))
        await self.redis.ltrim(self.key, 0, self.max_events - 1)

    async def recent(self, limit: int = 100) -> List[Dict[str, Any]]:
        """Return up to ``limit`` events, newest first."""
        raw_events = await self.redis.lrange(self.key, 0, limit - 1)
        events = []
        for raw in raw_events:
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError:
                logger.warning(f"Skipping malformed audit event in {self.key}")
        return events
