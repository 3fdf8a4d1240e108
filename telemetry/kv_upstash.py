# telemetry/kv_upstash.py
"""
PulseCraft KV Store — Upstash Redis Implementation

Uses the Upstash REST API via the upstash-redis SDK. Calls are
synchronous; the telemetry store runs them in a worker thread.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from upstash_redis import Redis

from telemetry.kv_store import KVConfig, KVStore

logger = logging.getLogger("pulsecraft.telemetry.kv_upstash")


class UpstashKVStore(KVStore):
    """
    Upstash Redis implementation of KVStore.

    Errors are logged and turned into empty results; telemetry is never
    allowed to fail a user operation.
    """

    def __init__(self, config: KVConfig, client: Optional[Redis] = None):
        super().__init__(config)
        self.client = client if client is not None else Redis(url=config.url, token=config.token)
        logger.info("Telemetry KV on Upstash at %s...", config.url[:30])

    def rpush(self, key: str, value: str) -> int:
        try:
            return self.client.rpush(self._prefixed_key(key), value)
        except Exception as e:
            logger.warning("rpush error for %s: %s", key, e)
            return 0

    def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]:
        try:
            values = self.client.lrange(self._prefixed_key(key), start, stop) or []
        except Exception as e:
            logger.warning("lrange error for %s: %s", key, e)
            return []
        return [v.decode("utf-8") if isinstance(v, bytes) else str(v) for v in values]


__all__ = ["UpstashKVStore"]
