"""Redis-backed snapshot publishing for dashboards.

Writes the current top list under a well-known key so other processes (a
web dashboard, ``toptalkers snapshot``) can read it without access to the
tracker itself. Snapshots expire after a TTL; nothing is ever loaded back
into a tracker.

Key schema:
    toptalkers:top:{name}

Payload (JSON)::

    {"generated_at": "2025-08-01T10:00:00+00:00",
     "top": [["192.168.1.100", 100], ["10.0.0.1", 42], ...]}

Usage::

    from toptalkers.publish.redis_snapshot import SnapshotPublisher

    publisher = SnapshotPublisher(url="redis://localhost:6379/0", ttl=60)
    publisher.publish(top_ips.top())
    publisher.fetch()
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger(__name__)

KEY_PREFIX = "toptalkers:top:"


def make_snapshot_key(name: str) -> str:
    """Redis key under which the snapshot called ``name`` lives."""
    return f"{KEY_PREFIX}{name}"


class SnapshotPublisher:
    """Publish and fetch top-address snapshots through Redis.

    Gracefully degrades to a no-op when the Redis client is unavailable —
    the caller never needs to handle Redis errors.

    Args:
        url:   Redis connection URL (redis://host:port/db).
        ttl:   Time-to-live in seconds for a published snapshot (default: 300).
        name:  Snapshot name; see :func:`make_snapshot_key`.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379/0",
        ttl: int = 300,
        name: str = "default",
    ) -> None:
        self._url = url
        self._ttl = ttl
        self._key = make_snapshot_key(name)
        self._client: Any = None
        self._connect()

    def _connect(self) -> None:
        try:
            import redis  # type: ignore[import-untyped]

            self._client = redis.Redis.from_url(self._url, decode_responses=True)
            self._client.ping()
            logger.debug("Redis connected: %s", self._url)
        except Exception as exc:
            logger.warning("Redis unavailable — snapshot publishing disabled: %s", exc)
            self._client = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def key(self) -> str:
        return self._key

    @property
    def available(self) -> bool:
        """True when the Redis connection is healthy."""
        return self._client is not None

    def publish(self, top: list[tuple[str, int]]) -> bool:
        """Store ``top`` under the snapshot key with the configured TTL.

        Returns True on success, False on error.
        """
        if self._client is None:
            return False
        payload = {
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "top": [[address, count] for address, count in top],
        }
        try:
            self._client.setex(self._key, self._ttl, json.dumps(payload))
            return True
        except Exception as exc:
            logger.warning("Snapshot publish failed for key %r: %s", self._key, exc)
            return False

    def fetch(self) -> list[tuple[str, int]] | None:
        """Return the published snapshot, or None when missing / on error."""
        if self._client is None:
            return None
        try:
            raw = self._client.get(self._key)
            if raw is None:
                return None
            payload = json.loads(raw)
            return [(str(address), int(count)) for address, count in payload["top"]]
        except Exception as exc:
            logger.warning("Snapshot fetch failed for key %r: %s", self._key, exc)
            return None

    def invalidate(self) -> bool:
        """Delete the published snapshot. Returns True if it existed."""
        if self._client is None:
            return False
        try:
            return bool(self._client.delete(self._key))
        except Exception as exc:
            logger.warning("Snapshot invalidate failed for key %r: %s", self._key, exc)
            return False
