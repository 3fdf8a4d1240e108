# council/router.py
"""
PulseCraft — Intent Router

Classifies the user's request into one of three intents with the cheap
classifier model, then routes content generation to the provider best
suited for that intent:

    NARRATIVE  → anthropic
    STRUCTURED → gemini
    ACTION     → openai   (also the fallback for anything unclear)

Classification never raises: an invalid label or a provider error yields
ACTION.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from council.prompts import INTENT_SYSTEM_PROMPT, intent_user_prompt
from providers.base import ProviderOptions, TextProvider
from providers.registry import ProviderSet

logger = logging.getLogger("pulsecraft.council.router")


# -----------------------------------------------------------------------------
# Intent
# -----------------------------------------------------------------------------

class Intent(Enum):
    """What kind of writing the request is."""
    NARRATIVE = "NARRATIVE"
    STRUCTURED = "STRUCTURED"
    ACTION = "ACTION"


DEFAULT_INTENT = Intent.ACTION

INTENT_PROVIDERS: Dict[Intent, str] = {
    Intent.NARRATIVE: "anthropic",
    Intent.STRUCTURED: "gemini",
    Intent.ACTION: "openai",
}

CLASSIFIER_OPTIONS = ProviderOptions(temperature=0.0)


def parse_intent(label: Optional[str]) -> Intent:
    """Strip and upper-case a classifier label; anything unknown is ACTION."""
    cleaned = (label or "").strip().upper()
    try:
        return Intent(cleaned)
    except ValueError:
        logger.warning("Classifier returned unexpected label %r. Defaulting to ACTION", cleaned[:40])
        return DEFAULT_INTENT


# -----------------------------------------------------------------------------
# Classification
# -----------------------------------------------------------------------------

async def classify_intent(provider: Optional[TextProvider], text: str) -> Intent:
    """
    Classify text with the given (cheap) provider.

    Only the first 500 characters are sent. Returns ACTION when no
    provider is configured or the call fails.
    """
    if provider is None:
        return DEFAULT_INTENT

    try:
        label = await provider.invoke(INTENT_SYSTEM_PROMPT, intent_user_prompt(text), CLASSIFIER_OPTIONS)
    except Exception as e:
        logger.warning("Intent classification failed (%s). Defaulting to ACTION", e)
        return DEFAULT_INTENT

    intent = parse_intent(label)
    logger.info("Intent classified: %s", intent.value)
    return intent


def provider_for_intent(providers: ProviderSet, intent: Intent) -> TextProvider:
    """
    The provider that generates content for an intent.

    Falls back to the structure provider when the mapped backend is not
    part of the set.
    """
    name = INTENT_PROVIDERS.get(intent, INTENT_PROVIDERS[DEFAULT_INTENT])
    try:
        provider = providers.get(name)
    except KeyError:
        logger.warning("No %s provider configured for %s; using %s", name, intent.value, providers.structure.name)
        return providers.structure
    logger.info("Routing %s content to %s", intent.value, provider.name)
    return provider


__all__ = [
    "Intent",
    "DEFAULT_INTENT",
    "INTENT_PROVIDERS",
    "parse_intent",
    "classify_intent",
    "provider_for_intent",
]
