# council/validate.py
"""
PulseCraft — Voice Kit Validation

Light validation of fused kits and latent profiles against the size limits
the HTTP layer enforces, plus input checks for alchemy.

Fused output is never rejected here: size violations come back as a list
of warnings for the logs. Alchemy input is the one place a caller mistake
is fatal (ValidationError).
"""

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.errors import ValidationError
from core.models import REQUIRED_LIST_FIELDS, REQUIRED_STRING_FIELDS, VoiceKit

logger = logging.getLogger("pulsecraft.council.validate")


# -----------------------------------------------------------------------------
# Limits
# -----------------------------------------------------------------------------

KIT_STRING_MAX = 500
KIT_LIST_MAX = 10
KIT_ITEM_MAX = {
    "samplePhrases": 200,
    "phrasesToAvoid": 100,
    "dnaTags": 50,
    "symbolAnchors": 50,
}

LATENT_STRING_FIELDS = ("narrativeMode", "emotionalCadence", "cognitiveTension", "communicativeIntent")
LATENT_STRING_MAX = 300
LATENT_MOTIF_MAX = 50

MIN_ALCHEMY_KITS = 2


# -----------------------------------------------------------------------------
# Voice Kit
# -----------------------------------------------------------------------------

def voice_kit_warnings(data: Dict[str, Any]) -> List[str]:
    """Every size/shape violation in a wire-shape kit, as readable strings."""
    warnings: List[str] = []

    for key in REQUIRED_STRING_FIELDS:
        value = data.get(key)
        if not isinstance(value, str) or not value:
            warnings.append(f"'{key}' is missing or empty")
        elif len(value) > KIT_STRING_MAX:
            warnings.append(f"'{key}' exceeds {KIT_STRING_MAX} chars ({len(value)})")

    for key in REQUIRED_LIST_FIELDS:
        value = data.get(key)
        if not isinstance(value, list) or not value:
            warnings.append(f"'{key}' is missing or empty")
            continue
        if len(value) > KIT_LIST_MAX:
            warnings.append(f"'{key}' has {len(value)} items, maximum is {KIT_LIST_MAX}")
        limit = KIT_ITEM_MAX[key]
        long_items = [item for item in value if isinstance(item, str) and len(item) > limit]
        if long_items:
            warnings.append(f"'{key}' has {len(long_items)} item(s) over {limit} chars")

    latent = data.get("latentProfile")
    if isinstance(latent, dict):
        warnings.extend(latent_profile_warnings(latent))

    return warnings


def validate_voice_kit(data: Optional[Dict[str, Any]]) -> Tuple[bool, str]:
    """
    Validate a wire-shape kit.

    Returns:
        (is_valid, error_message) - True with empty string if valid
    """
    if data is None:
        return False, "Kit is None"

    if not isinstance(data, dict):
        return False, f"Expected dict, got {type(data).__name__}"

    warnings = voice_kit_warnings(data)
    if warnings:
        return False, "; ".join(warnings)
    return True, ""


def log_kit_warnings(kit: VoiceKit, operation: str) -> None:
    """Log (never raise) limit violations on a fused kit."""
    for warning in voice_kit_warnings(kit.to_dict()):
        logger.warning("%s: %s", operation, warning)


# -----------------------------------------------------------------------------
# Latent Profile
# -----------------------------------------------------------------------------

def latent_profile_warnings(data: Dict[str, Any]) -> List[str]:
    warnings: List[str] = []
    for key in LATENT_STRING_FIELDS:
        value = data.get(key)
        if isinstance(value, str) and len(value) > LATENT_STRING_MAX:
            warnings.append(f"latent '{key}' exceeds {LATENT_STRING_MAX} chars")

    stability = data.get("stabilityIndex")
    if not isinstance(stability, (int, float)) or not 0.0 <= stability <= 1.0:
        warnings.append("latent 'stabilityIndex' must be a number in [0, 1]")

    motifs = data.get("dominantMotifs", [])
    if not isinstance(motifs, list):
        warnings.append("latent 'dominantMotifs' must be a list")
    elif len(motifs) > KIT_LIST_MAX:
        warnings.append(f"latent 'dominantMotifs' has {len(motifs)} items, maximum is {KIT_LIST_MAX}")
    elif any(isinstance(m, str) and len(m) > LATENT_MOTIF_MAX for m in motifs):
        warnings.append(f"latent 'dominantMotifs' has item(s) over {LATENT_MOTIF_MAX} chars")

    return warnings


def validate_latent_profile(data: Optional[Dict[str, Any]]) -> Tuple[bool, str]:
    if not isinstance(data, dict):
        return False, "Latent profile must be a dict"
    warnings = latent_profile_warnings(data)
    return (False, "; ".join(warnings)) if warnings else (True, "")


# -----------------------------------------------------------------------------
# Alchemy Input
# -----------------------------------------------------------------------------

def coerce_alchemy_kits(kits: Any) -> List[Dict[str, Any]]:
    """
    Normalize alchemy input to a list of wire-shape dicts.

    Raises:
        ValidationError: not a sequence, fewer than two kits, or an entry
            that is neither a VoiceKit nor a mapping
    """
    if not isinstance(kits, (list, tuple)):
        raise ValidationError(f"Kits must be a list, got {type(kits).__name__}")

    if len(kits) < MIN_ALCHEMY_KITS:
        raise ValidationError(f"At least {MIN_ALCHEMY_KITS} kits are required for alchemy, got {len(kits)}")

    coerced: List[Dict[str, Any]] = []
    for i, kit in enumerate(kits):
        if isinstance(kit, VoiceKit):
            coerced.append(kit.to_dict())
        elif isinstance(kit, dict):
            coerced.append(dict(kit))
        else:
            raise ValidationError(f"Kit {i} must be a VoiceKit or dict, got {type(kit).__name__}")
    return coerced


def require_text(value: Any, name: str) -> str:
    """Non-blank string input or ValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Missing {name}")
    return value


__all__ = [
    "voice_kit_warnings",
    "validate_voice_kit",
    "log_kit_warnings",
    "latent_profile_warnings",
    "validate_latent_profile",
    "coerce_alchemy_kits",
    "require_text",
    "MIN_ALCHEMY_KITS",
]
