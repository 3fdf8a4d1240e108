# providers/anthropic_client.py
"""
PulseCraft — Anthropic Provider

Free-text backend. In the fan-out it reads emotional subtext and names
emergent archetypes; for content generation it handles NARRATIVE intent.
"""

import logging
from typing import Any, Dict, Optional

import httpx
from anthropic import AnthropicError, APIConnectionError, APIError, APITimeoutError, AsyncAnthropic

from core.errors import ProviderError
from providers.base import ProviderOptions, ProviderRole, TextProvider
from system.config import mask_key

logger = logging.getLogger("pulsecraft.providers.anthropic")

DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7


class AnthropicProvider(TextProvider):
    """Messages API adapter."""

    name = "anthropic"
    role = ProviderRole.FREEFORM

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5-20250929",
        timeout: float = 45.0,
        client: Optional[AsyncAnthropic] = None,
    ):
        super().__init__(model)
        if client is None:
            if not api_key:
                raise RuntimeError(
                    "ANTHROPIC_API_KEY not set. "
                    "Please add ANTHROPIC_API_KEY=... to your .env file."
                )
            logger.info("Initializing Anthropic client model=%s key=%s", model, mask_key(api_key))
            client = AsyncAnthropic(api_key=api_key, timeout=timeout)
        self.client = client
        self.timeout = timeout

    async def invoke(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[ProviderOptions] = None,
    ) -> str:
        options = options or ProviderOptions()
        params: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": options.max_tokens or DEFAULT_MAX_TOKENS,
            "temperature": DEFAULT_TEMPERATURE if options.temperature is None else options.temperature,
            "system": system_prompt,
            "messages": [{"role": "user", "content": user_prompt}],
        }

        try:
            msg = await self.client.messages.create(**params)
        except APITimeoutError as e:
            raise ProviderError(self.name, f"Request timed out after {self.timeout}s (model={self.model})") from e
        except APIConnectionError as e:
            raise ProviderError(self.name, f"Connection failed (model={self.model}): {e}") from e
        except (APIError, AnthropicError, httpx.HTTPError) as e:
            raise ProviderError(self.name, f"API error (model={self.model}): {e}") from e

        text = "".join(
            getattr(block, "text", "") for block in (msg.content or [])
            if getattr(block, "type", "text") == "text"
        )
        return self._require_text(text)


__all__ = ["AnthropicProvider"]
