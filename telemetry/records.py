# telemetry/records.py
"""
PulseCraft — Telemetry Records

One immutable record per user-facing operation. Records are append-only;
the drift engine and the latent meta layer read them back in time order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

INPUT_CONTEXT_MAX_CHARS = 500


class EventType(Enum):
    """What produced the record."""
    MIRROR_VOICE = "MIRROR_VOICE"
    GENERATE_CONTENT = "GENERATE_CONTENT"
    REFINE_ALCHEMY = "REFINE_ALCHEMY"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    """ISO-8601 (or datetime) to an aware UTC datetime. Raises ValueError otherwise."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not isinstance(value, str):
        raise ValueError(f"Telemetry timestamp must be an ISO-8601 string, got {value!r}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class TelemetryRecord:
    """
    Attributes:
        user_id: Owner of the record
        event_type: Operation that produced it
        input_context: Caller input, truncated to 500 chars
        output_data: Kit dict (mirror / alchemy) or generated text
        latent_profile: Wire-shape LatentProfile, mirror only
        latent_meta: Wire-shape LatentMeta, mirror only
        vector_embedding: Embedding of the output; empty when embedding failed
        timestamp: UTC creation time
    """
    user_id: str
    event_type: EventType
    input_context: str = ""
    output_data: Union[Dict[str, Any], str, None] = None
    latent_profile: Optional[Dict[str, Any]] = None
    latent_meta: Optional[Dict[str, Any]] = None
    vector_embedding: Tuple[float, ...] = ()
    timestamp: datetime = field(default_factory=utc_now)

    def __post_init__(self):
        object.__setattr__(self, "input_context", (self.input_context or "")[:INPUT_CONTEXT_MAX_CHARS])
        object.__setattr__(self, "vector_embedding", tuple(float(v) for v in self.vector_embedding or ()))

    @property
    def archetype(self) -> Optional[str]:
        """Archetype of the kit in output_data, when there is one."""
        if isinstance(self.output_data, dict):
            return self.output_data.get("archetype") or None
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "timestamp": self.timestamp.isoformat(),
            "eventType": self.event_type.value,
            "inputContext": self.input_context,
            "outputData": self.output_data,
            "latentProfile": self.latent_profile,
            "latentMeta": self.latent_meta,
            "vectorEmbedding": list(self.vector_embedding),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TelemetryRecord":
        return cls(
            user_id=data["userId"],
            event_type=EventType(data["eventType"]),
            input_context=data.get("inputContext") or "",
            output_data=data.get("outputData"),
            latent_profile=data.get("latentProfile"),
            latent_meta=data.get("latentMeta"),
            vector_embedding=tuple(data.get("vectorEmbedding") or ()),
            timestamp=_parse_timestamp(data.get("timestamp")),
        )


__all__ = [
    "EventType",
    "TelemetryRecord",
    "INPUT_CONTEXT_MAX_CHARS",
    "utc_now",
]
