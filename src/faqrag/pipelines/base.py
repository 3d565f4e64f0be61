import logging
from typing import Any, Callable

from faqrag.adapters import BaseEmbedder, BaseLLM, create_embedder, create_llm
from faqrag.config import Settings
from faqrag.prompts import ANSWER_TEMPERATURE

logger = logging.getLogger(__name__)


def _create_adapter_from_settings(
    settings: Settings,
    model: str,
    create_fn: Callable[..., Any],
    kind: str,
    **extra_kwargs: Any,
) -> Any:
    """Create an embedder or LLM for the provider selected by the settings."""
    logger.info(f"Using {settings.provider} API for {kind}")
    return create_fn(
        settings.provider, model=model, api_key=settings.api_key, **extra_kwargs
    )


def create_embedder_from_settings(settings: Settings) -> BaseEmbedder:
    """Create an embedder instance from settings."""
    return _create_adapter_from_settings(
        settings,
        settings.embedding_model,
        create_embedder,
        "embeddings",
        batch_size=settings.embedding_batch_size,
    )


def create_llm_from_settings(
    settings: Settings, temperature: float = ANSWER_TEMPERATURE
) -> BaseLLM:
    """Create an LLM instance from settings."""
    return _create_adapter_from_settings(
        settings, settings.llm_model, create_llm, "LLM", temperature=temperature
    )
