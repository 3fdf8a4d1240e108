#!/usr/bin/env python3
# tests/test_telemetry.py
"""
PulseCraft — Telemetry Store Tests

Run with: python -m pytest tests/test_telemetry.py -v
"""

import json
import os
import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import unittest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch


T0 = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def _record(event="MIRROR_VOICE", minutes=0, user_id="u", **kwargs):
    from telemetry.records import EventType, TelemetryRecord

    return TelemetryRecord(
        user_id=user_id,
        event_type=EventType(event),
        timestamp=T0 + timedelta(minutes=minutes),
        **kwargs,
    )


class TestTelemetryRecord(unittest.TestCase):
    """Test record shape."""

    def test_input_context_truncated(self):
        record = _record(input_context="x" * 800)
        self.assertEqual(len(record.input_context), 500)

    def test_wire_round_trip(self):
        from telemetry.records import TelemetryRecord

        record = _record(
            output_data={"archetype": "The Rebel"},
            latent_profile={"stabilityIndex": 0.7},
            vector_embedding=[0.5, 0.25],
        )
        data = record.to_dict()

        self.assertEqual(data["eventType"], "MIRROR_VOICE")
        self.assertEqual(data["vectorEmbedding"], [0.5, 0.25])
        self.assertEqual(TelemetryRecord.from_dict(json.loads(json.dumps(data))), record)

    def test_archetype(self):
        self.assertEqual(_record(output_data={"archetype": "The Sage"}).archetype, "The Sage")
        self.assertIsNone(_record("GENERATE_CONTENT", output_data="text").archetype)

    def test_naive_timestamp_read_as_utc(self):
        from telemetry.records import TelemetryRecord

        record = TelemetryRecord.from_dict({
            "userId": "u", "eventType": "GENERATE_CONTENT", "timestamp": "2025-03-01T12:00:00",
        })
        self.assertEqual(record.timestamp, T0)

    def test_bad_timestamp_rejected(self):
        from telemetry.records import TelemetryRecord

        for timestamp in ("last tuesday", None, 1740830400):
            data = {"userId": "u", "eventType": "MIRROR_VOICE", "timestamp": timestamp}
            with self.assertRaises(ValueError):
                TelemetryRecord.from_dict(data)


def _redis_slice(items, start, stop):
    """LRANGE index semantics: inclusive stop, negatives from the tail."""
    n = len(items)
    start = max(0, n + start) if start < 0 else start
    stop = n + stop if stop < 0 else stop
    return items[start:stop + 1] if stop >= 0 else []


def _list_kv(records=()):
    kv = MagicMock()
    stored = [json.dumps(r.to_dict()) for r in records]
    kv.rpush.side_effect = lambda key, value: stored.append(value) or len(stored)
    kv.lrange.side_effect = lambda key, start=0, stop=-1: _redis_slice(stored, start, stop)
    return kv


class TestInMemoryStore(unittest.IsolatedAsyncioTestCase):
    """Test the in-memory backend's query semantics."""

    async def asyncSetUp(self):
        from telemetry.store import InMemoryTelemetryStore

        self.store = InMemoryTelemetryStore()
        for event, minutes in (("MIRROR_VOICE", 0), ("GENERATE_CONTENT", 1),
                               ("MIRROR_VOICE", 2), ("GENERATE_CONTENT", 3)):
            await self.store.insert(_record(event, minutes))
        await self.store.insert(_record("MIRROR_VOICE", 5, user_id="other"))

    async def test_scoped_to_user(self):
        self.assertEqual(len(await self.store.find("u")), 4)
        self.assertEqual(len(self.store), 5)

    async def test_event_filter_and_order(self):
        from telemetry.records import EventType

        ascending = await self.store.find("u", EventType.MIRROR_VOICE)
        descending = await self.store.find("u", EventType.MIRROR_VOICE, descending=True)

        self.assertEqual([r.timestamp for r in ascending], [T0, T0 + timedelta(minutes=2)])
        self.assertEqual(descending, list(reversed(ascending)))

    async def test_since_is_strict(self):
        records = await self.store.find("u", since=T0 + timedelta(minutes=2))
        self.assertEqual([r.timestamp for r in records], [T0 + timedelta(minutes=3)])

    async def test_limit(self):
        records = await self.store.find("u", descending=True, limit=1)
        self.assertEqual(records[0].timestamp, T0 + timedelta(minutes=3))
        self.assertEqual(await self.store.find("u", limit=0), [])


class TestKVTelemetryStore(unittest.IsolatedAsyncioTestCase):
    """Test the KV backend against a fake list store."""

    async def test_insert_and_find(self):
        from telemetry.records import EventType
        from telemetry.store import KVTelemetryStore

        kv = MagicMock()
        stored = []
        kv.rpush.side_effect = lambda key, value: stored.append(value) or len(stored)
        kv.lrange.side_effect = lambda key, start=0, stop=-1: list(stored)
        store = KVTelemetryStore(kv)

        await store.insert(_record("MIRROR_VOICE", 0, vector_embedding=[1.0, 0.0]))
        await store.insert(_record("GENERATE_CONTENT", 1, output_data="post"))

        self.assertEqual(kv.rpush.call_args.args[0], "telemetry:u")
        records = await store.find("u", EventType.GENERATE_CONTENT)
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].output_data, "post")
        self.assertEqual((await store.find("u", EventType.MIRROR_VOICE))[0].vector_embedding, (1.0, 0.0))

    async def test_unreadable_entries_skipped(self):
        from telemetry.store import KVTelemetryStore

        kv = MagicMock()
        kv.lrange.return_value = [
            "not json",
            json.dumps({"eventType": "MIRROR_VOICE"}),
            json.dumps({"userId": "u", "eventType": "BOGUS"}),
            json.dumps({"userId": "u", "eventType": "MIRROR_VOICE", "timestamp": "garbled"}),
            json.dumps(_record().to_dict()),
        ]
        records = await KVTelemetryStore(kv).find("u")
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0].timestamp, T0)

    def _alternating(self, count=120):
        # even minutes are identities, odd minutes are generated posts
        return [
            _record("MIRROR_VOICE" if minute % 2 == 0 else "GENERATE_CONTENT", minute)
            for minute in range(count)
        ]

    async def test_newest_first_reads_only_the_tail(self):
        from telemetry.records import EventType
        from telemetry.store import KVTelemetryStore

        kv = _list_kv(self._alternating())
        records = await KVTelemetryStore(kv).find("u", EventType.GENERATE_CONTENT, descending=True, limit=3)

        self.assertEqual([r.timestamp for r in records], [T0 + timedelta(minutes=m) for m in (119, 117, 115)])
        self.assertEqual(kv.lrange.call_count, 1)
        self.assertEqual(kv.lrange.call_args.args[1:], (-50, -1))

    async def test_tail_read_pages_until_limit_met(self):
        from telemetry.records import EventType
        from telemetry.store import InMemoryTelemetryStore, KVTelemetryStore

        history = self._alternating()
        kv = _list_kv(history)
        records = await KVTelemetryStore(kv).find("u", EventType.MIRROR_VOICE, descending=True, limit=40)

        memory = InMemoryTelemetryStore()
        for record in history:
            await memory.insert(record)
        expected = await memory.find("u", EventType.MIRROR_VOICE, descending=True, limit=40)

        self.assertEqual(records, expected)
        self.assertEqual([c.args[1:] for c in kv.lrange.call_args_list], [(-50, -1), (-100, -51)])

    async def test_tail_read_stops_at_list_start(self):
        from telemetry.store import KVTelemetryStore

        kv = _list_kv(self._alternating(5))
        records = await KVTelemetryStore(kv).find("u", descending=True, limit=10)

        self.assertEqual(len(records), 5)
        self.assertEqual(kv.lrange.call_count, 1)

    async def test_tail_read_stops_at_since(self):
        from telemetry.records import EventType
        from telemetry.store import KVTelemetryStore

        kv = _list_kv(self._alternating())
        records = await KVTelemetryStore(kv).find(
            "u", EventType.GENERATE_CONTENT, since=T0 + timedelta(minutes=100), descending=True, limit=30,
        )

        self.assertEqual([r.timestamp for r in records], [T0 + timedelta(minutes=m) for m in range(119, 100, -2)])
        self.assertEqual(kv.lrange.call_count, 1)

    async def test_insert_failure_swallowed(self):
        from telemetry.store import KVTelemetryStore

        kv = MagicMock()
        kv.rpush.side_effect = ConnectionError("redis down")

        await KVTelemetryStore(kv).insert(_record())
        kv.rpush.assert_called_once()


class TestStoreFactory(unittest.TestCase):
    """Test backend selection."""

    KV_ENV = {"KV_URL": "https://kv.example", "KV_TOKEN": "t"}

    def test_memory_default(self):
        from telemetry.store import InMemoryTelemetryStore, build_telemetry_store

        self.assertIsInstance(build_telemetry_store(None), InMemoryTelemetryStore)

    def test_unknown_backend(self):
        from system.config import PulseConfig
        from telemetry.store import build_telemetry_store

        with self.assertRaises(ValueError):
            build_telemetry_store(PulseConfig(telemetry_backend="sqlite"))

    def test_kv_backend_builds_upstash_from_env(self):
        from system.config import PulseConfig
        from telemetry.store import KVTelemetryStore, build_telemetry_store

        with patch.dict(os.environ, self.KV_ENV, clear=True), \
                patch("telemetry.store.UpstashKVStore") as upstash:
            store = build_telemetry_store(PulseConfig(telemetry_backend="kv"))

        self.assertIsInstance(store, KVTelemetryStore)
        self.assertIs(store.kv, upstash.return_value)
        kv_config = upstash.call_args.args[0]
        self.assertEqual((kv_config.url, kv_config.token), ("https://kv.example", "t"))

    def test_each_build_gets_its_own_kv_store(self):
        from telemetry.store import build_kv_store

        with patch.dict(os.environ, self.KV_ENV, clear=True), \
                patch("telemetry.store.UpstashKVStore", side_effect=lambda config: MagicMock()):
            first, second = build_kv_store(), build_kv_store()

        self.assertIsNot(first, second)

    def test_kv_not_configured(self):
        from system.config import PulseConfig
        from telemetry.store import build_telemetry_store

        with patch.dict(os.environ, {"KV_URL": "https://kv.example"}, clear=True):
            with self.assertRaises(ValueError):
                build_telemetry_store(PulseConfig(telemetry_backend="kv"))

    def test_kv_unknown_provider(self):
        from telemetry.store import build_kv_store

        with patch.dict(os.environ, dict(self.KV_ENV, KV_PROVIDER="memcached"), clear=True):
            with self.assertRaises(ValueError):
                build_kv_store()

    def test_kv_config_from_env(self):
        from telemetry.kv_store import KVConfig

        with patch.dict(os.environ, dict(self.KV_ENV, KV_PROVIDER="Upstash"), clear=True):
            config = KVConfig.from_env()

        self.assertTrue(config.is_configured())
        self.assertEqual(config.provider, "upstash")
        self.assertEqual(config.prefix, "pulsecraft")


class TestUpstashKVStore(unittest.TestCase):
    """Test the Upstash backend with a mock client."""

    def _store(self):
        from telemetry.kv_store import KVConfig
        from telemetry.kv_upstash import UpstashKVStore

        client = MagicMock()
        config = KVConfig(provider="upstash", url="https://kv.example", token="t")
        return UpstashKVStore(config, client=client), client

    def test_client_built_from_config(self):
        from telemetry.kv_store import KVConfig
        from telemetry.kv_upstash import UpstashKVStore

        with patch("telemetry.kv_upstash.Redis") as redis:
            store = UpstashKVStore(KVConfig(provider="upstash", url="https://kv.example", token="t"))

        redis.assert_called_once_with(url="https://kv.example", token="t")
        self.assertIs(store.client, redis.return_value)

    def test_keys_prefixed(self):
        store, client = self._store()
        client.rpush.return_value = 3

        self.assertEqual(store.rpush("telemetry:u", "{}"), 3)
        client.rpush.assert_called_once_with("pulsecraft:telemetry:u", "{}")

    def test_lrange_decodes(self):
        store, client = self._store()
        client.lrange.return_value = [b'{"a": 1}', '{"b": 2}']

        self.assertEqual(store.lrange("k", -50, -1), ['{"a": 1}', '{"b": 2}'])
        client.lrange.assert_called_once_with("pulsecraft:k", -50, -1)

    def test_errors_become_empty_results(self):
        store, client = self._store()
        client.rpush.side_effect = RuntimeError("down")
        client.lrange.side_effect = RuntimeError("down")

        self.assertEqual(store.rpush("k", "v"), 0)
        self.assertEqual(store.lrange("k"), [])


if __name__ == "__main__":
    unittest.main()
