import os
from typing import Any, Optional

from faqrag.adapters.base import BaseLLM
from faqrag.adapters.utils import (
    OPENROUTER_BASE_URL,
    create_openai_client,
    openrouter_headers,
    provider_call,
)

DEFAULT_TEMPERATURE = 0.3


class OpenAILLM(BaseLLM):
    """OpenAI chat-completion provider."""

    def __init__(
        self,
        model: str = "gpt-4o-mini",
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: Optional[int] = None,
        **kwargs: Any,
    ):
        api_key = kwargs.pop("api_key", None) or os.environ.get("OPENAI_API_KEY")
        base_url = kwargs.pop("base_url", None)
        default_headers = kwargs.pop("default_headers", None)
        super().__init__(model, **kwargs)

        self.client = create_openai_client(api_key, base_url, default_headers)
        self.temperature = temperature
        self.max_tokens = max_tokens

    def _get_completion_params(
        self, messages: list[dict[str, str]], **kwargs: Any
    ) -> dict[str, Any]:
        """Build parameters for chat completion."""
        params = {
            "model": self.model,
            "messages": messages,
            "temperature": kwargs.get("temperature", self.temperature),
        }
        max_tokens = kwargs.get("max_tokens", self.max_tokens)
        if max_tokens is not None:
            params["max_tokens"] = max_tokens
        return params

    def generate(self, prompt: str, **kwargs: Any) -> str:
        params = self._get_completion_params(
            [{"role": "user", "content": prompt}], **kwargs
        )
        with provider_call("Completion request"):
            response = self.client.chat.completions.create(**params)
        return response.choices[0].message.content or ""


class OpenRouterLLM(OpenAILLM):
    """OpenRouter chat-completion provider (OpenAI-compatible API)."""

    def __init__(
        self,
        model: str = "openai/gpt-4o-mini",
        app_url: Optional[str] = None,
        **kwargs: Any,
    ):
        kwargs["api_key"] = kwargs.get("api_key") or os.environ.get("OPENROUTER_API_KEY")
        kwargs.setdefault("base_url", OPENROUTER_BASE_URL)
        kwargs.setdefault("default_headers", openrouter_headers(app_url))
        super().__init__(model, **kwargs)
