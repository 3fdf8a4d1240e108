# core/__init__.py
"""
PulseCraft Core — data model and error taxonomy.
"""

from core.errors import (
    ExtractionFailed,
    MalformedJson,
    OperationTimeout,
    ProviderError,
    PulseCraftError,
    ValidationError,
)
from core.models import LatentMeta, LatentProfile, VoiceKit

__all__ = [
    "PulseCraftError",
    "ProviderError",
    "OperationTimeout",
    "MalformedJson",
    "ExtractionFailed",
    "ValidationError",
    "LatentMeta",
    "LatentProfile",
    "VoiceKit",
]
