# providers/openai_client.py
"""
PulseCraft — OpenAI Provider

The authoritative, strict-JSON backend for extraction and alchemy, and the
cheap classifier model for intent routing.

- Reads OPENAI_API_KEY via PulseConfig
- JSON mode through response_format={"type": "json_object"}; never sent for
  plain-text prompts (the API rejects json_object without a JSON prompt)
- Explicit per-request timeout
- Every SDK/network failure surfaces as ProviderError("openai", ...)
"""

import logging
from typing import Any, Dict, Optional

import httpx
from openai import APIConnectionError, APIError, APITimeoutError, AsyncOpenAI, OpenAIError

from core.errors import ProviderError
from providers.base import ProviderOptions, ProviderRole, TextProvider
from system.config import mask_key

logger = logging.getLogger("pulsecraft.providers.openai")


def _token_param(model: str) -> str:
    """gpt-5 and o-series models take max_completion_tokens, not max_tokens."""
    if "gpt-5" in model or "o1" in model or "o3" in model:
        return "max_completion_tokens"
    return "max_tokens"


class OpenAIProvider(TextProvider):
    """Chat Completions adapter."""

    name = "openai"
    role = ProviderRole.STRUCTURED

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        timeout: float = 45.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        super().__init__(model)
        if client is None:
            if not api_key:
                raise RuntimeError(
                    "OPENAI_API_KEY not set. "
                    "Please create a .env file with: OPENAI_API_KEY=sk-..."
                )
            logger.info("Initializing OpenAI client model=%s key=%s timeout=%ss",
                        model, mask_key(api_key), timeout)
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
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
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "timeout": self.timeout,
        }
        if options.temperature is not None:
            params["temperature"] = options.temperature
        if options.max_tokens is not None:
            params[_token_param(self.model)] = options.max_tokens
        if options.json_mode:
            params["response_format"] = {"type": "json_object"}

        logger.debug("invoke model=%s json_mode=%s", self.model, options.json_mode)

        try:
            resp = await self.client.chat.completions.create(**params)
        except APITimeoutError as e:
            raise ProviderError(self.name, f"Request timed out after {self.timeout}s (model={self.model})") from e
        except APIConnectionError as e:
            raise ProviderError(self.name, f"Connection failed (model={self.model}): {e}") from e
        except (APIError, OpenAIError, httpx.HTTPError) as e:
            raise ProviderError(self.name, f"API error (model={self.model}): {e}") from e

        if not resp.choices:
            raise ProviderError(self.name, f"No choices returned (model={self.model})")
        return self._require_text(resp.choices[0].message.content)


__all__ = ["OpenAIProvider"]
