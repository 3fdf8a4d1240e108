# telemetry/__init__.py
"""
PulseCraft — Telemetry Package

Append-only operation log used by drift and latent meta analytics.
"""

from telemetry.records import EventType, TelemetryRecord
from telemetry.store import (
    InMemoryTelemetryStore,
    KVTelemetryStore,
    TelemetryStore,
    build_telemetry_store,
)

__all__ = [
    "EventType",
    "TelemetryRecord",
    "TelemetryStore",
    "InMemoryTelemetryStore",
    "KVTelemetryStore",
    "build_telemetry_store",
]
