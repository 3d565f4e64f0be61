from unittest.mock import MagicMock

import pytest
from openai import OpenAIError

from faqrag.adapters import (
    OpenAIEmbedder,
    OpenAILLM,
    OpenRouterEmbedder,
    OpenRouterLLM,
    create_embedder,
    create_llm,
    list_embedder_providers,
    list_llm_providers,
)
from faqrag.errors import ProviderError


def _completion_response(content: str | None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


class TestOpenAILLM:
    def test_generate_returns_response(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion_response(
            "Generated response"
        )

        llm = OpenAILLM(model="gpt-4o-mini", api_key="test-key")
        llm.client = mock_client

        result = llm.generate("test prompt")

        assert result == "Generated response"
        mock_client.chat.completions.create.assert_called_once_with(
            model="gpt-4o-mini",
            messages=[{"role": "user", "content": "test prompt"}],
            temperature=0.3,
        )

    def test_generate_temperature_override(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion_response("ok")

        llm = OpenAILLM(model="gpt-4o-mini", api_key="test-key")
        llm.client = mock_client
        llm.generate("test prompt", temperature=0.2)

        assert mock_client.chat.completions.create.call_args.kwargs["temperature"] == 0.2

    def test_generate_with_max_tokens(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion_response("ok")

        llm = OpenAILLM(model="gpt-4o-mini", api_key="test-key", max_tokens=100)
        llm.client = mock_client
        llm.generate("test")

        assert mock_client.chat.completions.create.call_args.kwargs["max_tokens"] == 100

    def test_generate_empty_content_returns_empty_string(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.return_value = _completion_response(None)

        llm = OpenAILLM(api_key="test-key")
        llm.client = mock_client

        assert llm.generate("test") == ""

    def test_provider_error_is_wrapped(self) -> None:
        mock_client = MagicMock()
        mock_client.chat.completions.create.side_effect = OpenAIError("unauthorized")

        llm = OpenAILLM(api_key="test-key")
        llm.client = mock_client

        with pytest.raises(ProviderError, match="unauthorized"):
            llm.generate("test")

    def test_client_does_not_retry(self) -> None:
        llm = OpenAILLM(api_key="test-key")
        assert llm.client.max_retries == 0


class TestOpenRouterLLM:
    def test_uses_openrouter_endpoint(self) -> None:
        llm = OpenRouterLLM(model="openai/gpt-4o-mini", api_key="or-key", temperature=0.2)

        assert str(llm.client.base_url).startswith("https://openrouter.ai/api/v1")
        assert llm.temperature == 0.2
        assert llm.model == "openai/gpt-4o-mini"

    def test_app_url_sets_referer(self) -> None:
        llm = OpenRouterLLM(api_key="or-key", app_url="https://faq.example.com")
        assert llm.client.default_headers["HTTP-Referer"] == "https://faq.example.com"


class TestRegistry:
    def test_providers_registered(self) -> None:
        assert set(list_embedder_providers()) >= {"openai", "openrouter"}
        assert set(list_llm_providers()) >= {"openai", "openrouter"}

    def test_create_by_provider(self) -> None:
        assert isinstance(
            create_embedder("openai", model="text-embedding-3-small", api_key="k"),
            OpenAIEmbedder,
        )
        assert isinstance(
            create_embedder("openrouter", model="openai/text-embedding-3-small", api_key="k"),
            OpenRouterEmbedder,
        )
        assert isinstance(create_llm("openrouter", model="m", api_key="k"), OpenRouterLLM)

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_llm("unknown", model="m")
        with pytest.raises(ValueError, match="Unknown embedder provider"):
            create_embedder("unknown", model="m")
