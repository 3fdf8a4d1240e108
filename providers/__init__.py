# providers/__init__.py
"""
PulseCraft — Provider Package

External LLM and embedding integrations.
"""

from providers.base import (
    ProviderOptions,
    ProviderRole,
    TextProvider,
)
from providers.embeddings import Embedder, OpenAIEmbeddingService
from providers.registry import ProviderSet, build_provider_set

__all__ = [
    "ProviderOptions",
    "ProviderRole",
    "TextProvider",
    "Embedder",
    "OpenAIEmbeddingService",
    "ProviderSet",
    "build_provider_set",
]
