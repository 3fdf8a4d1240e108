# core/models.py
"""
PulseCraft — Canonical Data Model

VoiceKit is the canonical output unit of extraction and alchemy.
LatentProfile is the hidden structural signal extracted alongside it.
LatentMeta is a derived, read-only view computed per query.

All three are frozen: once returned they are never mutated. Sequence
fields are stored as tuples. `to_dict()` produces the camelCase wire
shape used by the HTTP layer and the telemetry log; `from_dict()` reads it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple


# -----------------------------------------------------------------------------
# Wire field names
# -----------------------------------------------------------------------------

REQUIRED_STRING_FIELDS = ("tone", "vocabulary", "phrasingStyle", "archetype")
REQUIRED_LIST_FIELDS = ("samplePhrases", "phrasesToAvoid", "dnaTags", "symbolAnchors")
REQUIRED_FIELDS = REQUIRED_STRING_FIELDS + REQUIRED_LIST_FIELDS


def _as_str_tuple(value: Any) -> Tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item is not None)


def clamp_unit(value: float) -> float:
    """Clamp a float into [0.0, 1.0]."""
    return max(0.0, min(1.0, float(value)))


# -----------------------------------------------------------------------------
# Latent Profile
# -----------------------------------------------------------------------------

DEFAULT_NARRATIVE_MODE = "Linear"
DEFAULT_STABILITY_INDEX = 0.5
DEFAULT_CADENCE = "Unclear"
DEFAULT_TENSION = "Unclear"
DEFAULT_INTENT = "Expression"


@dataclass(frozen=True)
class LatentProfile:
    """
    Hidden structural signal for one piece of text.

    Always well-formed: every string has a placeholder and the stability
    index is clamped into [0, 1] even when upstream extraction failed.
    """
    narrative_mode: str = DEFAULT_NARRATIVE_MODE
    stability_index: float = DEFAULT_STABILITY_INDEX
    emotional_cadence: str = DEFAULT_CADENCE
    cognitive_tension: str = DEFAULT_TENSION
    communicative_intent: str = DEFAULT_INTENT
    dominant_motifs: Tuple[str, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "stability_index", clamp_unit(self.stability_index))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "narrativeMode": self.narrative_mode,
            "stabilityIndex": self.stability_index,
            "emotionalCadence": self.emotional_cadence,
            "cognitiveTension": self.cognitive_tension,
            "communicativeIntent": self.communicative_intent,
            "dominantMotifs": list(self.dominant_motifs),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LatentProfile":
        stability = data.get("stabilityIndex")
        if isinstance(stability, bool) or not isinstance(stability, (int, float)):
            stability = DEFAULT_STABILITY_INDEX
        return cls(
            narrative_mode=data.get("narrativeMode") or DEFAULT_NARRATIVE_MODE,
            stability_index=stability,
            emotional_cadence=data.get("emotionalCadence") or DEFAULT_CADENCE,
            cognitive_tension=data.get("cognitiveTension") or DEFAULT_TENSION,
            communicative_intent=data.get("communicativeIntent") or DEFAULT_INTENT,
            dominant_motifs=_as_str_tuple(data.get("dominantMotifs")),
        )


# -----------------------------------------------------------------------------
# Latent Meta
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class LatentMeta:
    """Derived view over one profile plus its trailing history window."""
    stability_band: str
    tension_form: str
    coherence_type: str
    stability_delta: float = 0.0
    stability_variance: float = 0.0
    tension_shift: str = "flat"
    trend_confidence: str = "weak"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stabilityBand": self.stability_band,
            "tensionForm": self.tension_form,
            "coherenceType": self.coherence_type,
            "stabilityDelta": self.stability_delta,
            "stabilityVariance": self.stability_variance,
            "tensionShift": self.tension_shift,
            "trendConfidence": self.trend_confidence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LatentMeta":
        return cls(
            stability_band=data.get("stabilityBand", "medium"),
            tension_form=data.get("tensionForm", "minimal"),
            coherence_type=data.get("coherenceType", "resolved"),
            stability_delta=float(data.get("stabilityDelta", 0.0)),
            stability_variance=float(data.get("stabilityVariance", 0.0)),
            tension_shift=data.get("tensionShift", "flat"),
            trend_confidence=data.get("trendConfidence", "weak"),
        )


# -----------------------------------------------------------------------------
# Voice Kit
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class VoiceKit:
    """
    Canonical structured description of a derived linguistic identity.

    A successful kit has all eight required fields non-empty (see
    council.fusion.normalize_kit). A failed kit has every field empty and
    `error` set, so the shape stays null-safe on the error path.
    """
    tone: str = ""
    vocabulary: str = ""
    phrasing_style: str = ""
    archetype: str = ""
    sample_phrases: Tuple[str, ...] = ()
    phrases_to_avoid: Tuple[str, ...] = ()
    dna_tags: Tuple[str, ...] = ()
    symbol_anchors: Tuple[str, ...] = ()
    latent_profile: Optional[LatentProfile] = None
    name: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.error is None

    def with_latent_profile(self, profile: Optional[LatentProfile]) -> "VoiceKit":
        """Return a copy with the latent profile attached."""
        return replace(self, latent_profile=profile)

    def with_name(self, name: Optional[str]) -> "VoiceKit":
        return replace(self, name=name)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "tone": self.tone,
            "vocabulary": self.vocabulary,
            "phrasingStyle": self.phrasing_style,
            "archetype": self.archetype,
            "samplePhrases": list(self.sample_phrases),
            "phrasesToAvoid": list(self.phrases_to_avoid),
            "dnaTags": list(self.dna_tags),
            "symbolAnchors": list(self.symbol_anchors),
        }
        if self.name:
            data["name"] = self.name
        if self.latent_profile is not None:
            data["latentProfile"] = self.latent_profile.to_dict()
        if self.error is not None:
            data["error"] = self.error
            data["errorCode"] = self.error_code
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VoiceKit":
        latent = data.get("latentProfile")
        return cls(
            tone=str(data.get("tone") or ""),
            vocabulary=str(data.get("vocabulary") or ""),
            phrasing_style=str(data.get("phrasingStyle") or ""),
            archetype=str(data.get("archetype") or ""),
            sample_phrases=_as_str_tuple(data.get("samplePhrases")),
            phrases_to_avoid=_as_str_tuple(data.get("phrasesToAvoid")),
            dna_tags=_as_str_tuple(data.get("dnaTags")),
            symbol_anchors=_as_str_tuple(data.get("symbolAnchors")),
            latent_profile=LatentProfile.from_dict(latent) if isinstance(latent, dict) else None,
            name=data.get("name") or None,
            error=data.get("error"),
            error_code=data.get("errorCode"),
        )

    @classmethod
    def failed(cls, message: str, code: str) -> "VoiceKit":
        """Error-shaped kit: empty strings, empty lists, `error` populated."""
        return cls(error=message, error_code=code)


def join_or_none(values: Iterable[str]) -> str:
    """Comma-join a sequence for prompt display, 'None' when empty."""
    values = [v for v in values if v]
    return ", ".join(values) if values else "None"


__all__ = [
    "REQUIRED_STRING_FIELDS",
    "REQUIRED_LIST_FIELDS",
    "REQUIRED_FIELDS",
    "LatentProfile",
    "LatentMeta",
    "VoiceKit",
    "clamp_unit",
    "join_or_none",
]
