# analytics/__init__.py
"""
PulseCraft — Analytics Package

Latent profile parsing, latent meta derivation and drift scoring.
"""

from analytics.drift import DriftResult, compute_drift, cosine_similarity
from analytics.latent_meta import DEFAULT_THRESHOLDS, LatentThresholds, build_latent_meta
from analytics.latent_profile import build_latent_profile

__all__ = [
    "DriftResult",
    "compute_drift",
    "cosine_similarity",
    "LatentThresholds",
    "DEFAULT_THRESHOLDS",
    "build_latent_meta",
    "build_latent_profile",
]
