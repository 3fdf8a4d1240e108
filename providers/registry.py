# providers/registry.py
"""
PulseCraft — Provider Set

Groups the three fan-out providers plus the cheap classifier, keyed by the
role each plays:

- structure: strict-JSON authoritative source (OpenAI)
- subtext:   emotional/archetypal free text (Anthropic)
- analysis:  structural/keyword free text (Gemini)
- classifier: low-cost intent router (OpenAI mini model)
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

from providers.anthropic_client import AnthropicProvider
from providers.base import TextProvider
from providers.gemini_client import GeminiProvider
from providers.openai_client import OpenAIProvider
from system.config import PulseConfig

logger = logging.getLogger("pulsecraft.providers.registry")


@dataclass
class ProviderSet:
    """The providers one PulseCraftCore instance talks to."""
    structure: TextProvider
    subtext: TextProvider
    analysis: TextProvider
    classifier: Optional[TextProvider] = None

    def by_name(self) -> Dict[str, TextProvider]:
        """Providers indexed by backend name (openai, anthropic, gemini)."""
        return {
            self.structure.name: self.structure,
            self.subtext.name: self.subtext,
            self.analysis.name: self.analysis,
        }

    def get(self, name: str) -> TextProvider:
        providers = self.by_name()
        if name not in providers:
            raise KeyError(f"Unknown provider: {name}. Available: {sorted(providers)}")
        return providers[name]


def build_provider_set(config: Optional[PulseConfig] = None) -> ProviderSet:
    """
    Build the provider set from configuration.

    Raises:
        RuntimeError: if an API key is missing
    """
    if config is None:
        config = PulseConfig.from_env()

    structure = OpenAIProvider(
        api_key=config.openai_api_key,
        model=config.openai_model,
        timeout=config.provider_timeout,
    )
    classifier = OpenAIProvider(
        api_key=config.openai_api_key,
        model=config.classifier_model,
        timeout=config.provider_timeout,
        client=structure.client,
    )
    subtext = AnthropicProvider(
        api_key=config.anthropic_api_key,
        model=config.anthropic_model,
        timeout=config.provider_timeout,
    )
    analysis = GeminiProvider(
        api_key=config.gemini_api_key,
        model=config.gemini_model,
        timeout=config.provider_timeout,
    )

    logger.info(
        "Provider set ready: structure=%s subtext=%s analysis=%s classifier=%s",
        structure.model, subtext.model, analysis.model, classifier.model,
    )
    return ProviderSet(structure=structure, subtext=subtext, analysis=analysis, classifier=classifier)


__all__ = [
    "ProviderSet",
    "build_provider_set",
]
