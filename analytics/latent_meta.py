# analytics/latent_meta.py
"""
PulseCraft — Latent Meta Derivation

Observational signal over one latent profile and its trailing history.
Pure functions, no I/O. Never user-facing, never generative.

Snapshot:
    stabilityBand  - threshold bucket of the current stability index
    tensionForm    - keyword class of the current cognitive tension
    coherenceType  - lookup on (band, form)

Longitudinal (history is oldest → newest and ends with the current profile):
    stabilityDelta    - current minus the second-to-last windowed value
    stabilityVariance - population variance of the window
    tensionShift      - did the last two history tension forms differ
    trendConfidence   - sample size and variance
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

from core.models import LatentMeta, LatentProfile

HistoryItem = Union[LatentProfile, dict]


@dataclass(frozen=True)
class LatentThresholds:
    """Tuning constants for the meta layer."""
    low_band: float = 0.35
    high_band: float = 0.7
    history_window: int = 5
    min_shift_samples: int = 3
    min_trend_samples: int = 3
    strong_variance: float = 0.01


DEFAULT_THRESHOLDS = LatentThresholds()

# Priority order matters: first matching keyword group wins
TENSION_KEYWORDS = (
    ("paradoxical", ("paradox", "without resolution")),
    ("dialectical", ("contradiction", "binary")),
    ("contrast", ("contrast", "paired")),
)

ROUND_PLACES = 4


# -----------------------------------------------------------------------------
# Snapshot
# -----------------------------------------------------------------------------

def compute_stability_band(stability_index: float, thresholds: LatentThresholds = DEFAULT_THRESHOLDS) -> str:
    """Boundaries belong to the higher band."""
    if stability_index < thresholds.low_band:
        return "low"
    if stability_index < thresholds.high_band:
        return "medium"
    return "high"


def compute_tension_form(cognitive_tension: Optional[str]) -> str:
    text = (cognitive_tension or "").lower()
    for form, keywords in TENSION_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return form
    return "minimal"


def compute_coherence_type(stability_band: str, tension_form: str) -> str:
    if stability_band == "high" and tension_form == "paradoxical":
        return "reflective"
    if stability_band == "low" and tension_form != "minimal":
        return "oscillatory"
    return "resolved"


# -----------------------------------------------------------------------------
# Longitudinal
# -----------------------------------------------------------------------------

def _field(item: HistoryItem, attr: str, key: str) -> Any:
    if isinstance(item, LatentProfile):
        return getattr(item, attr)
    if isinstance(item, dict):
        return item.get(key)
    return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def compute_variance(values: Sequence[float]) -> float:
    """Population variance rounded to 4 places; 0 with fewer than 2 values."""
    if len(values) < 2:
        return 0.0
    mean = sum(values) / len(values)
    return round(sum((v - mean) ** 2 for v in values) / len(values), ROUND_PLACES)


def compute_tension_shift(forms: Sequence[str], thresholds: LatentThresholds = DEFAULT_THRESHOLDS) -> str:
    if len(forms) < thresholds.min_shift_samples:
        return "flat"
    return "flat" if forms[-1] == forms[-2] else "increasing"


def compute_trend_confidence(
    sample_size: int,
    variance: float,
    thresholds: LatentThresholds = DEFAULT_THRESHOLDS,
) -> str:
    if sample_size < thresholds.min_trend_samples:
        return "weak"
    if variance < thresholds.strong_variance:
        return "strong"
    return "moderate"


def build_latent_meta(
    current: Optional[LatentProfile],
    history: Sequence[HistoryItem] = (),
    thresholds: LatentThresholds = DEFAULT_THRESHOLDS,
) -> Optional[LatentMeta]:
    """
    Derive LatentMeta for `current` against `history`.

    Args:
        current: The profile just extracted (None → None)
        history: Profiles oldest first, LatentProfile or wire-shape dicts,
            ending with the current profile
        thresholds: Tuning constants

    Returns:
        LatentMeta, or None when there is no current profile
    """
    if current is None:
        return None

    band = compute_stability_band(current.stability_index, thresholds)
    form = compute_tension_form(current.cognitive_tension)

    values: List[float] = [
        float(v) for v in (_field(p, "stability_index", "stabilityIndex") for p in history)
        if _is_number(v)
    ]
    window = values[-thresholds.history_window:] if thresholds.history_window > 0 else []

    delta = round(current.stability_index - window[-2], ROUND_PLACES) if len(window) > 1 else 0.0
    variance = compute_variance(window)

    forms = [compute_tension_form(_field(p, "cognitive_tension", "cognitiveTension")) for p in history]

    return LatentMeta(
        stability_band=band,
        tension_form=form,
        coherence_type=compute_coherence_type(band, form),
        stability_delta=delta,
        stability_variance=variance,
        tension_shift=compute_tension_shift(forms, thresholds),
        trend_confidence=compute_trend_confidence(len(window), variance, thresholds),
    )


__all__ = [
    "LatentThresholds",
    "DEFAULT_THRESHOLDS",
    "compute_stability_band",
    "compute_tension_form",
    "compute_coherence_type",
    "compute_variance",
    "compute_tension_shift",
    "compute_trend_confidence",
    "build_latent_meta",
]
