# council/orchestrator.py
"""
PulseCraft — Core Orchestrator

The public boundary of the core. Every operation:
- validates caller input (ValidationError)
- runs under a hard deadline (with_timeout, default 60s)
- converts any failure into a well-formed result and never raises

Operations:
- extract_voice:      fan-out extraction + latent fan-out → VoiceKit
- mirror_voice:       extract + latent meta vs. history + embedding + telemetry
- fuse_alchemy:       ≥2 kits → alchemy fan-out → VoiceKit
- generate_content:   intent-routed generation from a kit
- compute_user_drift: resonance of recent content against the latest identity
- export_active_kit:  the session's active kit, wire shape
"""

import asyncio
import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from analytics.drift import STATE_INSIGHTS, STATUS_CLEAN_SLATE, compute_drift
from analytics.latent_meta import DEFAULT_THRESHOLDS, LatentThresholds, build_latent_meta
from analytics.latent_profile import build_latent_profile
from core.errors import ExtractionFailed, OperationTimeout, PulseCraftError, ValidationError
from core.models import LatentMeta, VoiceKit
from council import fusion
from council.fanout import run_alchemy_fanout, run_extraction_fanout, run_latent_fanout
from council.prompts import CONTENT_SYSTEM_PROMPT, CONTENT_TEMPERATURE, content_prompt
from council.retry import RetryPolicy, with_timeout
from council.router import Intent, classify_intent, provider_for_intent
from council.state import SessionState
from council.validate import coerce_alchemy_kits, log_kit_warnings, require_text
from providers.base import ProviderOptions
from providers.embeddings import Embedder
from providers.registry import ProviderSet
from system.config import PulseConfig
from telemetry.records import EventType, TelemetryRecord
from telemetry.store import InMemoryTelemetryStore, TelemetryStore

logger = logging.getLogger("pulsecraft.council.orchestrator")

GENERIC_ERROR = "Something went wrong. Please try again."
TIMEOUT_ERROR = "The request took too long. Please try again."
CONTENT_ERROR = "Content generation failed. Please try again."
DRIFT_ERROR = "Drift analysis failed. Please try again."
CLEAN_SLATE_MESSAGE = "Not enough history yet. Mirror a voice and generate content to begin tracking."


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class MirrorResult:
    """Result of mirror_voice: the kit plus its derived meta."""
    kit: VoiceKit
    latent_meta: Optional[LatentMeta] = None
    embedded: bool = False

    @property
    def ok(self) -> bool:
        return self.kit.ok

    def to_dict(self) -> Dict[str, Any]:
        data = self.kit.to_dict()
        if self.latent_meta is not None:
            data["latentMeta"] = self.latent_meta.to_dict()
        return data


@dataclass(frozen=True)
class ContentResult:
    """Result of generate_content. `output` is "" on failure."""
    output: str = ""
    provider: Optional[str] = None
    intent: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error, "errorCode": self.error_code}
        return {"output": self.output, "provider": self.provider, "intent": self.intent}


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------

def _user_message(error: BaseException) -> str:
    if isinstance(error, ValidationError):
        return str(error)
    if isinstance(error, ExtractionFailed):
        return error.user_message
    if isinstance(error, OperationTimeout):
        return TIMEOUT_ERROR
    return GENERIC_ERROR


def _log_failure(operation: str, error: BaseException) -> None:
    if isinstance(error, ValidationError):
        logger.warning("%s rejected input: %s", operation, error)
    elif isinstance(error, PulseCraftError):
        logger.error("%s failed: %s", operation, error)
    else:
        logger.exception("%s failed unexpectedly: %s", operation, error)


def kit_embedding_text(kit: VoiceKit) -> str:
    """Text embedded as the identity reference vector for a kit."""
    data = kit.to_dict()
    data.pop("latentProfile", None)
    return json.dumps(data, sort_keys=True)


# -----------------------------------------------------------------------------
# Core
# -----------------------------------------------------------------------------

class PulseCraftCore:
    """
    One PulseCraft core instance.

    Args:
        providers: Structure / subtext / analysis (+ classifier) providers
        embedder: Embedding service; None disables embeddings
        telemetry: Telemetry store (in-memory if omitted)
        config: Timeouts, retry and window settings
        thresholds: Latent meta tuning constants (window from config)
        retry: Overrides the retry policy built from config
    """

    def __init__(
        self,
        providers: ProviderSet,
        embedder: Optional[Embedder] = None,
        telemetry: Optional[TelemetryStore] = None,
        config: Optional[PulseConfig] = None,
        thresholds: Optional[LatentThresholds] = None,
        retry: Optional[RetryPolicy] = None,
    ):
        self.providers = providers
        self.embedder = embedder
        self.telemetry = telemetry if telemetry is not None else InMemoryTelemetryStore()
        self.config = config or PulseConfig()
        self.thresholds = thresholds or replace(DEFAULT_THRESHOLDS, history_window=self.config.history_window)
        self.retry = retry or RetryPolicy(
            max_attempts=self.config.retry_max_attempts,
            initial_delay_ms=self.config.retry_initial_delay_ms,
        )

    @classmethod
    def from_config(cls, config: Optional[PulseConfig] = None) -> "PulseCraftCore":
        """
        Wire a core from configuration (env vars when config is None).

        Raises:
            RuntimeError: if a provider API key is missing
        """
        from providers.embeddings import OpenAIEmbeddingService
        from providers.registry import build_provider_set
        from telemetry.store import build_telemetry_store

        if config is None:
            config = PulseConfig.from_env()
        embedder = OpenAIEmbeddingService(
            api_key=config.openai_api_key,
            model=config.embedding_model,
            timeout=config.embedding_timeout,
        )
        return cls(
            providers=build_provider_set(config),
            embedder=embedder,
            telemetry=build_telemetry_store(config),
            config=config,
        )

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    async def _embed(self, text: str) -> List[float]:
        if self.embedder is None:
            return []
        return await self.embedder.embed(text)

    async def _record(self, record: TelemetryRecord) -> None:
        try:
            await self.telemetry.insert(record)
        except Exception as e:
            logger.warning("Telemetry write failed for %s: %s", record.user_id, e)

    async def _extract(self, text: str, classify: bool) -> VoiceKit:
        intent: Optional[Intent] = None
        if classify:
            intent = await classify_intent(self.providers.classifier, text)

        extraction, latent = await asyncio.gather(
            run_extraction_fanout(self.providers, text, intent.value if intent else None, self.retry),
            run_latent_fanout(self.providers, text, self.retry),
            return_exceptions=True,
        )
        if isinstance(extraction, BaseException):
            raise extraction
        if isinstance(latent, BaseException):
            logger.warning("Latent fan-out failed: %s", latent)
            latent = None

        kit = fusion.fuse_extraction(
            extraction.authoritative,
            extraction.supplementary_a,
            extraction.supplementary_b,
        )
        if latent is not None:
            kit = kit.with_latent_profile(
                build_latent_profile(latent.authoritative, latent.supplementary_a, latent.supplementary_b)
            )
        log_kit_warnings(kit, "extract_voice")
        logger.info("Voice extracted: archetype=%r", kit.archetype[:60])
        return kit

    async def _latent_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Prior MIRROR_VOICE latent profiles, oldest first."""
        window = max(0, self.thresholds.history_window - 1)
        if window == 0:
            return []
        records = await self.telemetry.find(
            user_id, EventType.MIRROR_VOICE, descending=True, limit=window,
        )
        return [r.latent_profile for r in reversed(records) if isinstance(r.latent_profile, dict)]

    # -------------------------------------------------------------------------
    # Public operations
    # -------------------------------------------------------------------------

    async def extract_voice(self, text: str, classify: bool = False) -> VoiceKit:
        """Extract a VoiceKit from text. Failures return VoiceKit.failed()."""
        try:
            require_text(text, "text for voice extraction")
            return await with_timeout(
                self._extract(text, classify), self.config.operation_timeout, "extract_voice",
            )
        except Exception as e:
            _log_failure("extract_voice", e)
            return VoiceKit.failed(_user_message(e), type(e).__name__)

    async def mirror_voice(
        self,
        user_id: str,
        text: str,
        session: Optional[SessionState] = None,
        classify: bool = False,
    ) -> MirrorResult:
        """
        Extract a kit, derive latent meta against the user's history, embed
        the kit and log a MIRROR_VOICE record. The kit becomes the session's
        active kit.
        """
        async def run() -> MirrorResult:
            kit = await self._extract(text, classify)

            meta: Optional[LatentMeta] = None
            latent_dict: Optional[Dict[str, Any]] = None
            if kit.latent_profile is not None:
                latent_dict = kit.latent_profile.to_dict()
                history = await self._latent_history(user_id)
                meta = build_latent_meta(kit.latent_profile, history + [latent_dict], self.thresholds)

            vector = await self._embed(kit_embedding_text(kit))
            await self._record(TelemetryRecord(
                user_id=user_id,
                event_type=EventType.MIRROR_VOICE,
                input_context=text,
                output_data=kit.to_dict(),
                latent_profile=latent_dict,
                latent_meta=meta.to_dict() if meta else None,
                vector_embedding=tuple(vector),
            ))
            return MirrorResult(kit=kit, latent_meta=meta, embedded=bool(vector))

        try:
            require_text(user_id, "user id")
            require_text(text, "brand input")
            result = await with_timeout(run(), self.config.operation_timeout, "mirror_voice")
        except Exception as e:
            _log_failure("mirror_voice", e)
            if session is not None:
                session.mark_error()
            return MirrorResult(kit=VoiceKit.failed(_user_message(e), type(e).__name__))

        if session is not None:
            session.mark_mirror(result.kit)
        return result

    async def fuse_alchemy(
        self,
        kits: Sequence[Union[VoiceKit, Dict[str, Any]]],
        user_id: Optional[str] = None,
        session: Optional[SessionState] = None,
    ) -> VoiceKit:
        """Synthesize a new kit from two or more kits."""
        async def run(wire_kits: List[Dict[str, Any]]) -> VoiceKit:
            result = await run_alchemy_fanout(self.providers, wire_kits, retry=self.retry)
            kit = fusion.fuse_alchemy(result.authoritative, result.supplementary_a, result.supplementary_b)
            log_kit_warnings(kit, "fuse_alchemy")
            if user_id:
                await self._record(TelemetryRecord(
                    user_id=user_id,
                    event_type=EventType.REFINE_ALCHEMY,
                    input_context=" + ".join(k.get("archetype") or "Untitled" for k in wire_kits),
                    output_data=kit.to_dict(),
                ))
            logger.info("Alchemy complete: archetype=%r", kit.archetype[:60])
            return kit

        try:
            wire_kits = coerce_alchemy_kits(kits)
            kit = await with_timeout(run(wire_kits), self.config.operation_timeout, "fuse_alchemy")
        except Exception as e:
            _log_failure("fuse_alchemy", e)
            if session is not None:
                session.mark_error()
            return VoiceKit.failed(_user_message(e), type(e).__name__)

        if session is not None:
            session.mark_alchemy()
        return kit

    async def generate_content(
        self,
        kit: Union[VoiceKit, Dict[str, Any], None],
        style: str,
        context: str,
        user_id: Optional[str] = None,
        session: Optional[SessionState] = None,
    ) -> ContentResult:
        """Generate styled content from a kit, routed to a provider by intent."""
        async def run(wire_kit: Dict[str, Any]) -> ContentResult:
            intent = await classify_intent(self.providers.classifier, context)
            provider = provider_for_intent(self.providers, intent)
            prompt = content_prompt(wire_kit, style, context)
            options = ProviderOptions(temperature=CONTENT_TEMPERATURE)

            output = await self.retry.run(
                lambda: provider.invoke(CONTENT_SYSTEM_PROMPT, prompt, options),
                label=f"content:{provider.name}",
            )

            if user_id:
                vector = await self._embed(output)
                await self._record(TelemetryRecord(
                    user_id=user_id,
                    event_type=EventType.GENERATE_CONTENT,
                    input_context=context,
                    output_data=output,
                    vector_embedding=tuple(vector),
                ))
            return ContentResult(output=output, provider=provider.name, intent=intent.value)

        try:
            wire_kit = _content_kit(kit)
            require_text(style, "style")
            require_text(context, "context")
            result = await with_timeout(run(wire_kit), self.config.operation_timeout, "generate_content")
        except Exception as e:
            _log_failure("generate_content", e)
            if session is not None:
                session.mark_error()
            message = str(e) if isinstance(e, ValidationError) else (
                TIMEOUT_ERROR if isinstance(e, OperationTimeout) else CONTENT_ERROR
            )
            return ContentResult(error=message, error_code=type(e).__name__)

        if session is not None:
            session.mark_generation()
        return result

    async def compute_user_drift(self, user_id: str) -> Dict[str, Any]:
        """
        Resonance of content generated since the user's latest identity.

        Returns:
            {"status": "computed", "resonanceScore", "state", "journey", "insight"}
            {"status": "clean_slate", "message"}
            {"status": "error", "error"}
        """
        try:
            require_text(user_id, "user id")
            return await with_timeout(self._drift(user_id), self.config.operation_timeout, "compute_user_drift")
        except Exception as e:
            _log_failure("compute_user_drift", e)
            return {"status": "error", "error": str(e) if isinstance(e, ValidationError) else DRIFT_ERROR}

    async def _drift(self, user_id: str) -> Dict[str, Any]:
        window = self.config.drift_window
        identities = await self.telemetry.find(
            user_id, EventType.MIRROR_VOICE, descending=True, limit=window,
        )
        if not identities or not identities[0].vector_embedding:
            return {"status": STATUS_CLEAN_SLATE, "message": CLEAN_SLATE_MESSAGE}

        reference = identities[0]
        recent = await self.telemetry.find(
            user_id, EventType.GENERATE_CONTENT, since=reference.timestamp, descending=True, limit=window,
        )
        result = compute_drift(reference.vector_embedding, [r.vector_embedding for r in recent])
        if result.status == STATUS_CLEAN_SLATE:
            return {"status": STATUS_CLEAN_SLATE, "message": CLEAN_SLATE_MESSAGE}

        journey = [r.archetype for r in reversed(identities) if r.archetype]
        logger.info("Drift for %s: score=%s state=%s (n=%d)", user_id, result.score, result.state, result.compared)
        return {
            **result.to_dict(),
            "journey": journey,
            "insight": STATE_INSIGHTS[result.state],
        }

    def export_active_kit(self, session: Optional[SessionState]) -> Optional[Dict[str, Any]]:
        """The session's active kit (wire shape), or None."""
        if session is None:
            return None
        return session.export_active_kit()


def _content_kit(kit: Union[VoiceKit, Dict[str, Any], None]) -> Dict[str, Any]:
    if isinstance(kit, VoiceKit):
        if not kit.ok:
            raise ValidationError("Cannot generate content from a failed kit")
        return kit.to_dict()
    if isinstance(kit, dict) and kit:
        return kit
    raise ValidationError("Missing kit for content generation")


__all__ = [
    "PulseCraftCore",
    "MirrorResult",
    "ContentResult",
    "kit_embedding_text",
]
