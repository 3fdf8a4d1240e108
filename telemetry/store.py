# telemetry/store.py
"""
PulseCraft — Telemetry Store

Append-only log of TelemetryRecords with a small query interface:

    await store.insert(record)
    await store.find(user_id, event_type=None, since=None, descending=False, limit=None)

insert() is fire-and-forget: a storage failure is logged, never raised,
so telemetry cannot fail a user operation.

Backends:
- InMemoryTelemetryStore: list backed, the default
- KVTelemetryStore: one JSON-encoded Redis list per user via KVStore
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from system.config import PulseConfig
from telemetry.kv_store import SUPPORTED_PROVIDERS, KVConfig, KVStore
from telemetry.kv_upstash import UpstashKVStore
from telemetry.records import EventType, TelemetryRecord

logger = logging.getLogger("pulsecraft.telemetry.store")


class TelemetryStore(ABC):
    """Append-only telemetry log."""

    @abstractmethod
    async def insert(self, record: TelemetryRecord) -> None:
        """Append a record. Never raises."""

    @abstractmethod
    async def find(
        self,
        user_id: str,
        event_type: Optional[EventType] = None,
        since: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[TelemetryRecord]:
        """Records for a user, filtered and sorted by timestamp."""


def _matches(record: TelemetryRecord, event_type: Optional[EventType], since: Optional[datetime]) -> bool:
    return (event_type is None or record.event_type == event_type) and (since is None or record.timestamp > since)


def _select(
    records: Iterable[TelemetryRecord],
    event_type: Optional[EventType],
    since: Optional[datetime],
    descending: bool,
    limit: Optional[int],
) -> List[TelemetryRecord]:
    selected = [r for r in records if _matches(r, event_type, since)]
    # stable sort keeps insertion order for equal timestamps
    selected.sort(key=lambda r: r.timestamp, reverse=descending)
    if limit is not None:
        selected = selected[:max(0, limit)]
    return selected


# -----------------------------------------------------------------------------
# In-memory
# -----------------------------------------------------------------------------

class InMemoryTelemetryStore(TelemetryStore):
    """Process-local store. Lost on restart."""

    def __init__(self):
        self._records: List[TelemetryRecord] = []

    async def insert(self, record: TelemetryRecord) -> None:
        self._records.append(record)
        logger.debug("Telemetry %s recorded for %s", record.event_type.value, record.user_id)

    async def find(
        self,
        user_id: str,
        event_type: Optional[EventType] = None,
        since: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[TelemetryRecord]:
        mine = (r for r in self._records if r.user_id == user_id)
        return _select(mine, event_type, since, descending, limit)

    def __len__(self) -> int:
        return len(self._records)


# -----------------------------------------------------------------------------
# KV (Redis list per user)
# -----------------------------------------------------------------------------

TAIL_PAGE_SIZE = 50


class KVTelemetryStore(TelemetryStore):
    """
    Stores each user's records as JSON strings in `telemetry:<user_id>`.

    Records are appended in time order, so a newest-first query with a
    limit only reads pages from the tail of the list until enough
    matching records (or the `since` boundary) are reached.

    KVStore calls are synchronous and run in a worker thread.
    """

    def __init__(self, kv: KVStore, page_size: int = TAIL_PAGE_SIZE):
        self.kv = kv
        self.page_size = page_size

    @staticmethod
    def _key(user_id: str) -> str:
        return f"telemetry:{user_id}"

    async def insert(self, record: TelemetryRecord) -> None:
        try:
            payload = json.dumps(record.to_dict(), default=str)
            length = await asyncio.to_thread(self.kv.rpush, self._key(record.user_id), payload)
        except Exception as e:
            logger.warning("Telemetry insert failed for %s: %s", record.user_id, e)
            return
        if not length:
            logger.warning("Telemetry insert for %s was not acknowledged", record.user_id)

    @staticmethod
    def _decode(raw: Iterable[str], user_id: str) -> List[TelemetryRecord]:
        records: List[TelemetryRecord] = []
        for item in raw:
            try:
                records.append(TelemetryRecord.from_dict(json.loads(item)))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning("Skipping unreadable telemetry entry for %s: %s", user_id, e)
        return records

    async def _read_tail(
        self,
        user_id: str,
        event_type: Optional[EventType],
        since: Optional[datetime],
        limit: int,
    ) -> List[TelemetryRecord]:
        key = self._key(user_id)
        page = max(limit, self.page_size)
        records: List[TelemetryRecord] = []
        matched = 0
        offset = 0
        while matched < limit:
            raw = await asyncio.to_thread(self.kv.lrange, key, -(offset + page), -(offset + 1))
            chunk = self._decode(raw, user_id)
            records[:0] = chunk
            matched += sum(1 for r in chunk if _matches(r, event_type, since))
            if len(raw) < page:
                break
            if since is not None and any(r.timestamp <= since for r in chunk):
                break
            offset += page
        return records

    async def find(
        self,
        user_id: str,
        event_type: Optional[EventType] = None,
        since: Optional[datetime] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[TelemetryRecord]:
        if descending and limit is not None:
            records = await self._read_tail(user_id, event_type, since, limit)
        else:
            raw = await asyncio.to_thread(self.kv.lrange, self._key(user_id), 0, -1)
            records = self._decode(raw, user_id)
        return _select(records, event_type, since, descending, limit)


def build_kv_store() -> KVStore:
    """
    KV backend from KV_* environment variables.

    Raises:
        ValueError: KV_URL / KV_TOKEN missing, or unsupported KV_PROVIDER
    """
    kv_config = KVConfig.from_env()
    if kv_config.provider not in SUPPORTED_PROVIDERS:
        raise ValueError(
            f"Unknown KV provider: {kv_config.provider}. Supported: {', '.join(SUPPORTED_PROVIDERS)}"
        )
    if not kv_config.is_configured():
        raise ValueError("KV store not configured. Set KV_URL and KV_TOKEN.")
    return UpstashKVStore(kv_config)


def build_telemetry_store(config: Optional[PulseConfig] = None) -> TelemetryStore:
    """
    Pick the telemetry backend from config.

    Raises:
        ValueError: unknown backend, or "kv" without a usable KV configuration
    """
    backend = (config.telemetry_backend if config else "memory").lower()
    if backend == "memory":
        return InMemoryTelemetryStore()
    if backend == "kv":
        return KVTelemetryStore(build_kv_store())
    raise ValueError(f"Unknown telemetry backend: {backend}. Supported: memory, kv")


__all__ = [
    "TAIL_PAGE_SIZE",
    "TelemetryStore",
    "InMemoryTelemetryStore",
    "KVTelemetryStore",
    "build_kv_store",
    "build_telemetry_store",
]
