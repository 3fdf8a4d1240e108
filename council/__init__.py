# council/__init__.py
"""
PulseCraft — Council Package

Multi-provider orchestration: three providers fanned out in parallel,
their outputs fused into one canonical VoiceKit.

- retry / json_extract / repairs: per-call resilience
- prompts / fanout: the three-way provider fan-out
- fusion: deterministic merge into a VoiceKit
- router: intent classification and content routing
- orchestrator: PulseCraftCore, the public boundary (import it directly)
"""

from council.fusion import fuse_alchemy, fuse_extraction, fuse_field, normalize_kit
from council.json_extract import extract_json
from council.retry import RetryPolicy, with_retry, with_timeout
from council.state import SessionState
from council.validate import validate_voice_kit

__all__ = [
    # Retry
    "RetryPolicy",
    "with_retry",
    "with_timeout",
    # Parsing / fusion
    "extract_json",
    "fuse_field",
    "fuse_extraction",
    "fuse_alchemy",
    "normalize_kit",
    # State / validation
    "SessionState",
    "validate_voice_kit",
]
