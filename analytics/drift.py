# analytics/drift.py
"""
PulseCraft — Drift / Resonance Engine

Compares a reference identity vector (the embedding of a mirrored kit)
against vectors of content generated since, and reports how closely the
user is still writing in that voice.

    score = round(mean cosine similarity × 100), clamped to 0..100
    > 75 Resonant, > 50 Flexible, else Divergent

Empty or length-mismatched vectors are incomparable: they contribute
nothing instead of raising. With no reference, or nothing comparable to
it, the result is the "clean_slate" status with no score.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

import numpy as np

STATUS_COMPUTED = "computed"
STATUS_CLEAN_SLATE = "clean_slate"

RESONANT_ABOVE = 75
FLEXIBLE_ABOVE = 50

STATE_INSIGHTS = {
    "Resonant": "Your recent work stays true to your core voice.",
    "Flexible": "Your voice is stretching into new territory while keeping its roots.",
    "Divergent": "Your recent work has moved away from your core voice.",
}


def _comparable(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> bool:
    return bool(a) and bool(b) and len(a) == len(b)


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Dot product over norms.

    Returns 0.0 for absent, empty, length-mismatched or zero-norm vectors;
    never raises.
    """
    if not _comparable(a, b):
        return 0.0
    vec_a = np.asarray(a, dtype=float)
    vec_b = np.asarray(b, dtype=float)
    norm = float(np.linalg.norm(vec_a)) * float(np.linalg.norm(vec_b))
    if norm == 0.0 or not math.isfinite(norm):
        return 0.0
    return float(np.dot(vec_a, vec_b)) / norm


def resonance_state(score: int) -> str:
    if score > RESONANT_ABOVE:
        return "Resonant"
    if score > FLEXIBLE_ABOVE:
        return "Flexible"
    return "Divergent"


@dataclass(frozen=True)
class DriftResult:
    """Outcome of one drift computation."""
    status: str
    score: Optional[int] = None
    state: Optional[str] = None
    compared: int = 0

    @property
    def insight(self) -> Optional[str]:
        return STATE_INSIGHTS.get(self.state) if self.state else None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"status": self.status}
        if self.status == STATUS_COMPUTED:
            data["resonanceScore"] = self.score
            data["state"] = self.state
        return data


def compute_drift(
    reference: Optional[Sequence[float]],
    recent: Sequence[Optional[Sequence[float]]],
) -> DriftResult:
    """
    Average similarity of `reference` against each comparable recent vector.
    """
    if not reference:
        return DriftResult(status=STATUS_CLEAN_SLATE)

    similarities = [cosine_similarity(reference, vec) for vec in recent if _comparable(reference, vec)]
    if not similarities:
        return DriftResult(status=STATUS_CLEAN_SLATE)

    mean = sum(similarities) / len(similarities)
    # half-up rounding
    score = int(math.floor(mean * 100 + 0.5))
    score = max(0, min(100, score))
    return DriftResult(
        status=STATUS_COMPUTED,
        score=score,
        state=resonance_state(score),
        compared=len(similarities),
    )


__all__ = [
    "STATUS_COMPUTED",
    "STATUS_CLEAN_SLATE",
    "STATE_INSIGHTS",
    "cosine_similarity",
    "resonance_state",
    "DriftResult",
    "compute_drift",
]
