"""Shared utilities for adapter implementations."""

from contextlib import contextmanager
from typing import Iterator, Optional

from openai import OpenAI, OpenAIError

from faqrag.errors import ProviderError

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
OPENROUTER_APP_TITLE = "FAQ Support Chatbot"


def create_openai_client(
    api_key: Optional[str],
    base_url: Optional[str] = None,
    default_headers: Optional[dict[str, str]] = None,
) -> OpenAI:
    """Create an OpenAI SDK client.

    Retries are disabled: provider failures surface to the caller on the
    first attempt.
    """
    try:
        return OpenAI(
            api_key=api_key,
            base_url=base_url,
            default_headers=default_headers,
            max_retries=0,
        )
    except OpenAIError as e:
        raise ProviderError(f"Could not create API client: {e}") from e


def openrouter_headers(app_url: Optional[str] = None) -> dict[str, str]:
    headers = {"X-Title": OPENROUTER_APP_TITLE}
    if app_url:
        headers["HTTP-Referer"] = app_url
    return headers


@contextmanager
def provider_call(description: str) -> Iterator[None]:
    """Re-raise OpenAI SDK errors as ProviderError."""
    try:
        yield
    except OpenAIError as e:
        raise ProviderError(f"{description} failed: {e}") from e
