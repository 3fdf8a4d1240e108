# providers/base.py
"""
PulseCraft — Provider Adapter Contract

Every text-generation backend is normalized to one async call:

    await provider.invoke(system_prompt, user_prompt, options) -> str

Adapters do no retrying (council.retry does) and raise ProviderError,
tagged with the provider name, for any transport/auth/quota failure.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from core.errors import ProviderError


class ProviderRole(Enum):
    """How a provider's output is treated by the fan-out engine."""
    STRUCTURED = "structured"  # strict JSON mode, authoritative
    FREEFORM = "freeform"      # unstructured text, supplementary


@dataclass(frozen=True)
class ProviderOptions:
    """Per-call generation options."""
    json_mode: bool = False
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None


class TextProvider(ABC):
    """Uniform async interface over one LLM backend."""

    name: str = "unknown"
    role: ProviderRole = ProviderRole.FREEFORM

    def __init__(self, model: str):
        self.model = model

    @abstractmethod
    async def invoke(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[ProviderOptions] = None,
    ) -> str:
        """
        Generate text.

        Raises:
            ProviderError: on any failure, including an empty completion.
        """

    def _require_text(self, text: Optional[str]) -> str:
        if not text or not text.strip():
            raise ProviderError(self.name, f"Empty response from model={self.model}")
        return text

    def describe(self) -> Dict[str, Any]:
        return {"provider": self.name, "model": self.model, "role": self.role.value}


__all__ = [
    "ProviderRole",
    "ProviderOptions",
    "TextProvider",
    "ProviderError",
]
