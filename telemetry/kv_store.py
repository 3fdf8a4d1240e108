# telemetry/kv_store.py
"""
PulseCraft KV Store Protocol

The telemetry log keeps one append-only list per user, so a backend
only has to push onto a list and read a slice of it back. Keys are
prefixed per deployment.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

SUPPORTED_PROVIDERS = ("upstash",)


@dataclass
class KVConfig:
    """Connection settings for the telemetry KV backend."""
    provider: str  # "upstash"
    url: str
    token: Optional[str] = None  # Required for Upstash
    prefix: str = "pulsecraft"

    @classmethod
    def from_env(cls) -> "KVConfig":
        """Load config from KV_PROVIDER, KV_URL, KV_TOKEN and KV_PREFIX."""
        return cls(
            provider=os.getenv("KV_PROVIDER", "upstash").lower(),
            url=os.getenv("KV_URL", ""),
            token=os.getenv("KV_TOKEN"),
            prefix=os.getenv("KV_PREFIX", "pulsecraft"),
        )

    def is_configured(self) -> bool:
        if not self.url:
            return False
        if self.provider == "upstash" and not self.token:
            return False
        return True


class KVStore(ABC):
    """List-only KV backend. Implementations prefix every key."""

    def __init__(self, config: KVConfig):
        self.config = config
        self.prefix = config.prefix

    def _prefixed_key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    @abstractmethod
    def rpush(self, key: str, value: str) -> int:
        """
        Append a value to the tail of a list.

        Returns:
            Length of list after push (0 on failure)
        """

    @abstractmethod
    def lrange(self, key: str, start: int = 0, stop: int = -1) -> List[str]:
        """
        Read a slice of a list, oldest first. Redis index semantics
        (inclusive `stop`, negatives count from the tail).

        Returns:
            Values, or [] if the key is missing
        """


__all__ = [
    "SUPPORTED_PROVIDERS",
    "KVConfig",
    "KVStore",
]
