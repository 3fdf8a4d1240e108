# council/fanout.py
"""
PulseCraft — Fan-Out Extraction Engine

Sends the same input to three providers at once, each with its own role
prompt, and joins on all three:

    structure ─┐
    subtext   ─┼─ asyncio.gather(return_exceptions=True) ─→ FanOutResult
    analysis  ─┘

Every branch runs through the retry wrapper independently. A branch that
still fails is recorded in `failures` and its slot is None; only the
structure branch is load-bearing (extraction and alchemy raise
ExtractionFailed without it). The latent engine never raises.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from core.errors import ExtractionFailed
from council import prompts
from council.retry import RetryPolicy
from providers.base import ProviderOptions, TextProvider
from providers.registry import ProviderSet

logger = logging.getLogger("pulsecraft.council.fanout")

BRANCH_STRUCTURE = "structure"
BRANCH_SUBTEXT = "subtext"
BRANCH_ANALYSIS = "analysis"


@dataclass
class FanOutResult:
    """Raw outputs of one fan-out; a failed branch is None."""
    authoritative: Optional[str]
    supplementary_a: Optional[str]
    supplementary_b: Optional[str]
    failures: Dict[str, BaseException] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class _Branch:
    name: str
    provider: TextProvider
    system_prompt: str
    user_prompt: str
    options: ProviderOptions


def _call(branch: _Branch) -> Callable[[], Awaitable[str]]:
    def factory() -> Awaitable[str]:
        return branch.provider.invoke(branch.system_prompt, branch.user_prompt, branch.options)
    return factory


async def _gather(
    branches: Tuple[_Branch, _Branch, _Branch],
    retry: RetryPolicy,
    label: str,
) -> FanOutResult:
    results: List[Any] = await asyncio.gather(
        *(retry.run(_call(b), label=f"{label}:{b.name}:{b.provider.name}") for b in branches),
        return_exceptions=True,
    )

    outputs: List[Optional[str]] = []
    failures: Dict[str, BaseException] = {}
    for branch, result in zip(branches, results):
        if isinstance(result, BaseException):
            failures[branch.name] = result
            outputs.append(None)
            logger.warning(
                "%s: %s branch (%s) failed: %s",
                label, branch.name, branch.provider.name, result,
            )
        else:
            outputs.append(result)

    return FanOutResult(outputs[0], outputs[1], outputs[2], failures)


def _require_authoritative(result: FanOutResult, label: str) -> FanOutResult:
    error = result.failures.get(BRANCH_STRUCTURE)
    if error is not None:
        logger.error("%s: authoritative branch failed, aborting", label)
        raise ExtractionFailed(f"{label}: {error}", cause=error) from error
    return result


# -----------------------------------------------------------------------------
# Engines
# -----------------------------------------------------------------------------

async def run_extraction_fanout(
    providers: ProviderSet,
    text: str,
    intent: Optional[str] = None,
    retry: Optional[RetryPolicy] = None,
) -> FanOutResult:
    """
    Voice extraction fan-out.

    Args:
        providers: The provider set
        text: Source text
        intent: Optional intent label; adds a focus line to the structure prompt
        retry: Retry policy (defaults: 3 attempts, 1s initial delay)

    Raises:
        ExtractionFailed: if the structure branch failed after retries
    """
    branches = (
        _Branch(
            BRANCH_STRUCTURE, providers.structure,
            prompts.EXTRACTION_STRUCTURE_SYSTEM,
            prompts.extraction_user_prompt(text, intent),
            ProviderOptions(json_mode=True, temperature=prompts.EXTRACTION_STRUCTURE_TEMPERATURE),
        ),
        _Branch(
            BRANCH_SUBTEXT, providers.subtext,
            prompts.EXTRACTION_SUBTEXT_SYSTEM, text,
            ProviderOptions(temperature=prompts.EXTRACTION_SUBTEXT_TEMPERATURE),
        ),
        _Branch(
            BRANCH_ANALYSIS, providers.analysis,
            prompts.EXTRACTION_ANALYSIS_SYSTEM, text,
            ProviderOptions(),
        ),
    )
    logger.info("Starting voice extraction fan-out (%d chars, intent=%s)", len(text), intent)
    result = await _gather(branches, retry or RetryPolicy(), "extraction")
    return _require_authoritative(result, "extraction")


async def run_alchemy_fanout(
    providers: ProviderSet,
    kits: Sequence[Dict[str, Any]],
    prompt: Optional[str] = None,
    retry: Optional[RetryPolicy] = None,
) -> FanOutResult:
    """
    Alchemy fan-out over two or more wire-shape kits.

    `prompt` overrides the structure branch's user prompt; by default it is
    built from the kits.

    Raises:
        ExtractionFailed: if the structure branch failed after retries
    """
    branches = (
        _Branch(
            BRANCH_STRUCTURE, providers.structure,
            prompts.ALCHEMY_STRUCTURE_SYSTEM,
            prompt or prompts.alchemy_structure_prompt(kits),
            ProviderOptions(json_mode=True, temperature=prompts.ALCHEMY_STRUCTURE_TEMPERATURE),
        ),
        _Branch(
            BRANCH_SUBTEXT, providers.subtext,
            prompts.ALCHEMY_SUBTEXT_SYSTEM, prompts.alchemy_archetype_prompt(kits),
            ProviderOptions(temperature=prompts.ALCHEMY_SUBTEXT_TEMPERATURE),
        ),
        _Branch(
            BRANCH_ANALYSIS, providers.analysis,
            prompts.ALCHEMY_ANALYSIS_SYSTEM, prompts.alchemy_bridge_prompt(kits),
            ProviderOptions(),
        ),
    )
    logger.info("Starting alchemy fan-out over %d kits", len(kits))
    result = await _gather(branches, retry or RetryPolicy(), "alchemy")
    return _require_authoritative(result, "alchemy")


async def run_latent_fanout(
    providers: ProviderSet,
    text: str,
    retry: Optional[RetryPolicy] = None,
) -> FanOutResult:
    """Latent-layer fan-out. Never raises; failed branches are None."""
    branches = (
        _Branch(
            BRANCH_STRUCTURE, providers.structure,
            prompts.LATENT_STRUCTURE_SYSTEM, text,
            ProviderOptions(json_mode=True, temperature=prompts.LATENT_STRUCTURE_TEMPERATURE),
        ),
        _Branch(
            BRANCH_SUBTEXT, providers.subtext,
            prompts.LATENT_SUBTEXT_SYSTEM, text,
            ProviderOptions(temperature=prompts.LATENT_SUBTEXT_TEMPERATURE),
        ),
        _Branch(
            BRANCH_ANALYSIS, providers.analysis,
            prompts.LATENT_ANALYSIS_SYSTEM, text,
            ProviderOptions(),
        ),
    )
    logger.info("Running latent layer inference")
    return await _gather(branches, retry or RetryPolicy(), "latent")


__all__ = [
    "FanOutResult",
    "run_extraction_fanout",
    "run_alchemy_fanout",
    "run_latent_fanout",
    "BRANCH_STRUCTURE",
    "BRANCH_SUBTEXT",
    "BRANCH_ANALYSIS",
]
