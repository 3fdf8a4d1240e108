# analytics/latent_profile.py
"""
PulseCraft — Latent Profile Builder

Turns the three raw latent fan-out outputs into one LatentProfile. Each
part is parsed on its own and degrades field by field; this never raises.

    structural (JSON)  → narrativeMode, stabilityIndex
    emotional (lines)  → emotionalCadence, cognitiveTension
    motif (JSON)       → communicativeIntent, dominantMotifs
"""

import logging
import math
from typing import Any, Dict, List, Optional

from core.errors import MalformedJson
from core.models import (
    DEFAULT_CADENCE,
    DEFAULT_INTENT,
    DEFAULT_NARRATIVE_MODE,
    DEFAULT_STABILITY_INDEX,
    DEFAULT_TENSION,
    LatentProfile,
)
from council.json_extract import extract_json

logger = logging.getLogger("pulsecraft.analytics.latent_profile")

# communicativeIntent when the motif JSON could not be parsed at all
UNPARSED_INTENT = "Complex Expression"

CADENCE_KEY = "emotional"
TENSION_KEY = "tension"


def _parse_or_none(text: Optional[str], part: str) -> Optional[Dict[str, Any]]:
    if text is None:
        return None
    try:
        return extract_json(text)
    except MalformedJson as e:
        logger.warning("Latent %s parse warning (handled): %s", part, e)
        return None


def _stability(value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return DEFAULT_STABILITY_INDEX
    if math.isnan(value):
        return DEFAULT_STABILITY_INDEX
    return float(value)


def _labeled_value(lines: List[str], key: str, default: str) -> str:
    """Value after the first ':' on the first line mentioning `key`."""
    for line in lines:
        if key in line.lower():
            parts = line.split(":")
            if len(parts) > 1 and parts[1].strip():
                return parts[1].strip()
            return default
    return default


def _motifs(value: Any) -> tuple:
    if not isinstance(value, list):
        return ()
    return tuple(item.strip() for item in value if isinstance(item, str) and item.strip())


def build_latent_profile(
    structural_text: Optional[str],
    emotional_text: Optional[str],
    motif_text: Optional[str],
) -> LatentProfile:
    """
    Build a LatentProfile from raw provider outputs (None for a failed branch).

    Examples:
        >>> build_latent_profile('{"narrativeMode": "Spiral", "stabilityIndex": 0.8}', None, None).narrative_mode
        'Spiral'
    """
    structural = _parse_or_none(structural_text, "structural") or {}
    narrative_mode = structural.get("narrativeMode")
    if not isinstance(narrative_mode, str) or not narrative_mode.strip():
        narrative_mode = DEFAULT_NARRATIVE_MODE

    lines = emotional_text.split("\n") if emotional_text else []
    cadence = _labeled_value(lines, CADENCE_KEY, DEFAULT_CADENCE)
    tension = _labeled_value(lines, TENSION_KEY, DEFAULT_TENSION)

    motif = _parse_or_none(motif_text, "motif")
    if motif is None:
        intent = UNPARSED_INTENT
        motifs: tuple = ()
    else:
        intent = motif.get("communicativeIntent")
        if not isinstance(intent, str) or not intent.strip():
            intent = DEFAULT_INTENT
        motifs = _motifs(motif.get("dominantMotifs"))

    return LatentProfile(
        narrative_mode=narrative_mode.strip(),
        stability_index=_stability(structural.get("stabilityIndex")),
        emotional_cadence=cadence,
        cognitive_tension=tension,
        communicative_intent=intent.strip(),
        dominant_motifs=motifs,
    )


__all__ = [
    "build_latent_profile",
    "UNPARSED_INTENT",
]
