import logging
import os
from typing import Any, Optional

from faqrag.adapters.base import BaseEmbedder
from faqrag.adapters.utils import (
    OPENROUTER_BASE_URL,
    create_openai_client,
    openrouter_headers,
    provider_call,
)

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 512


class OpenAIEmbedder(BaseEmbedder):
    """OpenAI embedding provider."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        batch_size: int = DEFAULT_BATCH_SIZE,
        **kwargs: Any,
    ):
        api_key = kwargs.pop("api_key", None) or os.environ.get("OPENAI_API_KEY")
        base_url = kwargs.pop("base_url", None)
        default_headers = kwargs.pop("default_headers", None)
        super().__init__(model, **kwargs)

        self.client = create_openai_client(api_key, base_url, default_headers)
        self._batch_size = batch_size
        self._dimensions: Optional[int] = kwargs.get("dimensions")

    def _create_embedding_params(self, input_data: str | list[str]) -> dict[str, Any]:
        """Build parameters for embedding API call."""
        params = {"model": self.model, "input": input_data}
        if self._dimensions is not None:
            params["dimensions"] = self._dimensions
        return params

    def embed(self, text: str) -> list[float]:
        with provider_call("Embedding request"):
            response = self.client.embeddings.create(
                **self._create_embedding_params(text)
            )
        return response.data[0].embedding

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed texts in order, one API call per ``batch_size`` texts."""
        if not texts:
            return []

        results: list[list[float]] = []
        for i in range(0, len(texts), self._batch_size):
            batch = texts[i : i + self._batch_size]
            with provider_call("Embedding request"):
                response = self.client.embeddings.create(
                    **self._create_embedding_params(batch)
                )
            results.extend(item.embedding for item in response.data)
        return results


class OpenRouterEmbedder(OpenAIEmbedder):
    """OpenRouter embedding provider (OpenAI-compatible API)."""

    def __init__(
        self,
        model: str = "openai/text-embedding-3-small",
        app_url: Optional[str] = None,
        **kwargs: Any,
    ):
        kwargs["api_key"] = kwargs.get("api_key") or os.environ.get("OPENROUTER_API_KEY")
        kwargs.setdefault("base_url", OPENROUTER_BASE_URL)
        kwargs.setdefault("default_headers", openrouter_headers(app_url))
        super().__init__(model, **kwargs)
