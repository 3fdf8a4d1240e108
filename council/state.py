# council/state.py
"""
PulseCraft — Session State

Per-session convenience state. The caller owns the SessionState object and
passes it into the operations that read or write it; there is no process
wide registry and no locking. Concurrent requests on one session may
overwrite each other's active kit (last write wins).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from core.models import VoiceKit


@dataclass
class SessionState:
    """
    Per-session PulseCraft state.

    Attributes:
        session_id: Caller-chosen identifier (for logs only)
        active_kit: Most recent successfully mirrored kit
        mirrors: Successful mirror operations this session
        alchemies: Successful alchemy operations this session
        generations: Successful content generations this session
        errors: Failed operations this session
    """
    session_id: str = "default"
    active_kit: Optional[VoiceKit] = field(default=None, repr=False)
    mirrors: int = 0
    alchemies: int = 0
    generations: int = 0
    errors: int = 0

    def set_active_kit(self, kit: VoiceKit) -> None:
        """Store a kit in the active slot. Failed kits are ignored."""
        if kit.ok:
            self.active_kit = kit

    def mark_mirror(self, kit: VoiceKit) -> None:
        self.mirrors += 1
        self.set_active_kit(kit)

    def mark_alchemy(self) -> None:
        self.alchemies += 1

    def mark_generation(self) -> None:
        self.generations += 1

    def mark_error(self) -> None:
        self.errors += 1

    def export_active_kit(self) -> Optional[Dict[str, Any]]:
        """Wire-shape active kit, or None when nothing has been mirrored."""
        return self.active_kit.to_dict() if self.active_kit is not None else None

    def reset(self) -> None:
        """Reset state (new session)."""
        self.active_kit = None
        self.mirrors = 0
        self.alchemies = 0
        self.generations = 0
        self.errors = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize counters (excluding the kit itself)."""
        return {
            "session_id": self.session_id,
            "has_active_kit": self.active_kit is not None,
            "mirrors": self.mirrors,
            "alchemies": self.alchemies,
            "generations": self.generations,
            "errors": self.errors,
        }


__all__ = [
    "SessionState",
]
