# providers/embeddings.py
"""
PulseCraft — Embedding Service

Turns a kit or a generated piece of content into a fixed-length vector
for the drift engine. The call is wrapped in its own timeout and never
raises: any failure yields an empty vector, which the drift engine treats
as incomparable.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from openai import AsyncOpenAI

from system.config import mask_key

logger = logging.getLogger("pulsecraft.providers.embeddings")

# Rough character budget for one embedding input
MAX_EMBED_CHARS = 8000


class Embedder(ABC):
    """Async text → vector interface."""

    @abstractmethod
    async def embed(self, text: str) -> List[float]:
        """Return the embedding for `text`, or [] on failure."""


class OpenAIEmbeddingService(Embedder):
    """Embeddings via the OpenAI embeddings endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = "text-embedding-3-small",
        timeout: float = 10.0,
        client: Optional[AsyncOpenAI] = None,
    ):
        if client is None:
            if not api_key:
                raise RuntimeError("OPENAI_API_KEY not set (required for embeddings).")
            logger.info("Initializing embedding client model=%s key=%s", model, mask_key(api_key))
            client = AsyncOpenAI(api_key=api_key)
        self.client = client
        self.model = model
        self.timeout = timeout

    async def _request(self, text: str) -> List[float]:
        resp = await self.client.embeddings.create(model=self.model, input=text)
        return [float(v) for v in resp.data[0].embedding]

    async def embed(self, text: str) -> List[float]:
        if not text or not text.strip():
            return []

        try:
            return await asyncio.wait_for(self._request(text[:MAX_EMBED_CHARS]), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning("Embedding timed out after %ss (model=%s)", self.timeout, self.model)
            return []
        except Exception as e:
            logger.warning("Embedding failed (model=%s): %s", self.model, e)
            return []


__all__ = [
    "Embedder",
    "OpenAIEmbeddingService",
    "MAX_EMBED_CHARS",
]
