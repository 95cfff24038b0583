"""
Audit sinks for authentication events.

Entries are ``{timestamp, message, metadata}`` records. Writers schedule
them in the background; a failing sink is logged and otherwise ignored.
"""

import json
import logging
from dataclasses import asdict
from datetime import UTC, datetime
from typing import Any, Dict, Optional

from .interfaces import AuditEntry

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "authgate.audit"


def make_entry(message: str, metadata: Optional[Dict[str, Any]] = None) -> AuditEntry:
    """Build an audit entry stamped with the current UTC time."""
    return AuditEntry(
        timestamp=datetime.now(UTC).isoformat(),
        message=message,
        metadata=dict(metadata or {}),
    )


class LoggingAuditSink:
    """Writes each entry as one JSON line to the ``authgate.audit`` logger."""

    def __init__(self, audit_logger: Optional[logging.Logger] = None):
        self.audit_logger = audit_logger or logging.getLogger(AUDIT_LOGGER_NAME)

    async def record(self, entry: AuditEntry) -> None:
        self.audit_logger.info(json.dumps(asdict(entry)))


class RedisAuditSink:
    """Keeps the most recent audit entries in a capped Redis list."""

    def __init__(self, redis_client, key: str = "auth:audit", max_entries: int = 10000):
        """
        Initialize Redis audit sink.

        Args:
            redis_client: Async Redis client
            key: List key entries are pushed to
            max_entries: Number of most recent entries to keep
        """
        self.redis = redis_client
        self.key = key
        self.max_entries = max_entries

    async def record(self, entry: AuditEntry) -> None:
        await self.redis.lpush(self.key, json.dumps(asdict(entry)))
        await self.redis.ltrim(self.key, 0, self.max_entries - 1)
