# providers/gemini_client.py
"""
PulseCraft — Gemini Provider

Free-text backend. In the fan-out it supplies bullet-level linguistic
analysis, bridge words for alchemy and recurring motifs for the latent
layer; for content generation it handles STRUCTURED intent.

- API key via PulseConfig (GEMINI_API_KEY or GOOGLE_API_KEY)
- System and user prompt are concatenated; the model has no JSON mode here,
  so callers that need JSON run the output through council.json_extract
"""

import logging
from typing import Any, Dict, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from core.errors import ProviderError
from providers.base import ProviderOptions, ProviderRole, TextProvider
from system.config import mask_key

logger = logging.getLogger("pulsecraft.providers.gemini")


def build_gemini_prompt(system_prompt: str, user_prompt: str) -> str:
    return f"{system_prompt}\n\nUSER REQUEST:\n{user_prompt}"


class GeminiProvider(TextProvider):
    """google-generativeai adapter."""

    name = "gemini"
    role = ProviderRole.FREEFORM

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-pro",
        timeout: float = 45.0,
        client: Optional[Any] = None,
    ):
        super().__init__(model)
        if client is None:
            if not api_key:
                raise RuntimeError(
                    "GEMINI_API_KEY not set. "
                    "Please add GEMINI_API_KEY=... (or GOOGLE_API_KEY) to your .env file."
                )
            genai.configure(api_key=api_key)
            logger.info("Initializing Gemini client model=%s key=%s", model, mask_key(api_key))
            client = genai.GenerativeModel(model)
        self.client = client
        self.timeout = timeout

    async def invoke(
        self,
        system_prompt: str,
        user_prompt: str,
        options: Optional[ProviderOptions] = None,
    ) -> str:
        options = options or ProviderOptions()
        config: Dict[str, Any] = {}
        if options.temperature is not None:
            config["temperature"] = options.temperature
        if options.max_tokens is not None:
            config["max_output_tokens"] = options.max_tokens

        prompt = build_gemini_prompt(system_prompt, user_prompt)

        try:
            response = await self.client.generate_content_async(
                prompt,
                generation_config=genai.GenerationConfig(**config) if config else None,
                request_options={"timeout": self.timeout},
            )
            # .text raises ValueError when the candidate was blocked
            text = response.text if response else ""
        except google_exceptions.DeadlineExceeded as e:
            raise ProviderError(self.name, f"Request timed out after {self.timeout}s (model={self.model})") from e
        except google_exceptions.GoogleAPIError as e:
            raise ProviderError(self.name, f"API error (model={self.model}): {e}") from e
        except ValueError as e:
            raise ProviderError(self.name, f"Unreadable response (model={self.model}): {e}") from e

        return self._require_text(text)


__all__ = [
    "GeminiProvider",
    "build_gemini_prompt",
]
