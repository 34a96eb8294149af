"""Embedding client boundary + LiteLLM implementation.

Every provider call in the pipeline goes through an ``EmbeddingClient``. The
retriever receives one at construction, so tests substitute a deterministic
fake instead of patching a module-level client.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import litellm

from notefuse.config import SearchConfig
from notefuse.errors import EmbeddingProviderError, Timeout

# Disable LiteLLM verbose logging unless explicitly enabled
litellm.suppress_debug_info = True

logger = logging.getLogger(__name__)


@runtime_checkable
class EmbeddingClient(Protocol):
    """Converts text into a fixed-dimension vector."""

    dimensions: int

    def embed(self, text: str) -> list[float]:
        ...

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        ...


class LiteLLMEmbeddingClient:
    """EmbeddingClient backed by ``litellm.embedding()``.

    Provider errors surface as EmbeddingProviderError, timeouts as Timeout.
    Retries are off by default; callers decide whether to retry.

    Args:
        model: LiteLLM embedding model string (provider/model format).
        dimensions: Expected vector length; any other length is a provider error.
        timeout: Seconds per provider call.
        num_retries: LiteLLM-level retries with exponential backoff.
    """

    def __init__(
        self,
        model: str = "openai/text-embedding-3-small",
        dimensions: int = 1536,
        timeout: float = 30.0,
        num_retries: int = 0,
    ) -> None:
        self.model = model
        self.dimensions = dimensions
        self.timeout = timeout
        self.num_retries = num_retries

    @classmethod
    def from_config(cls, config: SearchConfig, num_retries: int = 0) -> LiteLLMEmbeddingClient:
        """Build a client from ``embedding_model``, ``dimensions`` and ``embed_timeout``."""
        return cls(
            model=config.embedding_model,
            dimensions=config.dimensions,
            timeout=config.embed_timeout,
            num_retries=num_retries,
        )

    def embed(self, text: str) -> list[float]:
        """Embed a single string."""
        return self.embed_many([text])[0]

    def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """Embed several strings in one provider call, preserving input order."""
        if not texts:
            return []
        try:
            response = litellm.embedding(
                model=self.model,
                input=list(texts),
                timeout=self.timeout,
                num_retries=self.num_retries,
            )
        except litellm.exceptions.Timeout as exc:
            raise Timeout(
                f"Embedding call to '{self.model}' timed out after {self.timeout}s"
            ) from exc
        except Exception as exc:
            raise EmbeddingProviderError(
                f"Embedding call to '{self.model}' failed: {exc}"
            ) from exc

        data = sorted(response.data, key=lambda item: item.get("index", 0))
        vectors = [list(item["embedding"]) for item in data]
        if len(vectors) != len(texts):
            raise EmbeddingProviderError(
                f"Provider returned {len(vectors)} embeddings for {len(texts)} inputs"
            )
        for vector in vectors:
            if len(vector) != self.dimensions:
                raise EmbeddingProviderError(
                    f"Provider returned a {len(vector)}-dimensional vector; "
                    f"index expects {self.dimensions}"
                )
        logger.debug("Embedded %d text(s) with %s", len(texts), self.model)
        return vectors
