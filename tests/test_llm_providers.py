"""Tests for LLM provider modules."""

import os
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from hunksplit import config as _config
from hunksplit import global_config
from hunksplit.config import LLMProvider
from hunksplit.llm import get_provider
from hunksplit.llm.base import RawLLMResult
from hunksplit.llm.exceptions import LLMError, MissingAPIKeyError


def _chat_completion(text: str, prompt_tokens: int = 12, completion_tokens: int = 34):
    """Shape of an OpenAI-compatible chat completion."""
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=text))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


class TestGetProvider:
    """Tests for get_provider factory function."""

    @pytest.mark.parametrize(
        "provider, module, class_name",
        [
            (LLMProvider.ANTHROPIC, "anthropic_provider", "AnthropicProvider"),
            (LLMProvider.OPENAI, "openai_provider", "OpenAIProvider"),
            (LLMProvider.GOOGLE, "google_provider", "GoogleProvider"),
            (LLMProvider.COHERE, "cohere_provider", "CohereProvider"),
            (LLMProvider.GROQ, "groq_provider", "GroqProvider"),
            (LLMProvider.OPENROUTER, "openrouter_provider", "OpenRouterProvider"),
        ],
    )
    def test_returns_provider(self, provider, module, class_name):
        """Test that each provider enum maps to its class."""
        instance = get_provider(provider)
        assert type(instance).__name__ == class_name
        assert type(instance).__module__ == f"hunksplit.llm.{module}"

    def test_custom_model(self):
        """Test provider with custom model."""
        provider = get_provider(LLMProvider.OPENAI, model="gpt-4.1-mini")
        assert provider.model == "gpt-4.1-mini"

    def test_defaults_from_active_config(self, monkeypatch):
        """Test that provider and model default to the active config."""
        monkeypatch.setattr(_config, "ACTIVE_PROVIDER", LLMProvider.GROQ)
        monkeypatch.setattr(_config, "ACTIVE_MODEL", "llama-3.1-8b-instant")

        provider = get_provider()

        assert type(provider).__name__ == "GroqProvider"
        assert provider.model == "llama-3.1-8b-instant"

    def test_unsupported_provider_raises_error(self):
        """Test that an unknown provider raises ValueError."""
        with pytest.raises(ValueError, match="Unsupported provider"):
            get_provider("not-a-provider")


class TestApiKeyResolution:
    """Tests for API key lookup."""

    def test_missing_api_key_raises_error(self):
        """Test that a missing key names the setup command."""
        provider = get_provider(LLMProvider.ANTHROPIC)

        with pytest.raises(MissingAPIKeyError, match="hunksplit config set-key anthropic"):
            provider.get_api_key()

    def test_gets_api_key_from_env(self):
        """Test that the environment variable wins."""
        global_config.save_credential("OPENAI_API_KEY", "from-file")
        provider = get_provider(LLMProvider.OPENAI)

        with patch.dict(os.environ, {"OPENAI_API_KEY": "from-env"}):
            assert provider.get_api_key() == "from-env"

    def test_falls_back_to_credentials_file(self):
        """Test that the credentials file is used when env is unset."""
        global_config.save_credential("COHERE_API_KEY", "from-file")
        provider = get_provider(LLMProvider.COHERE)

        assert provider.get_api_key() == "from-file"

    def test_missing_key_stops_before_any_call(self, mocker):
        """Test that no client is built without a key."""
        mock_client = mocker.patch("hunksplit.llm.groq_provider.Groq")
        provider = get_provider(LLMProvider.GROQ)

        with pytest.raises(MissingAPIKeyError):
            provider.generate_raw("system", "user")
        mock_client.assert_not_called()


class TestAnthropicProvider:
    """Tests for AnthropicProvider."""

    def test_generate_raw(self, mocker, monkeypatch):
        """Test the request sent and the result returned."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        monkeypatch.setattr(_config, "MAX_TOKENS", 1234)
        client = mocker.patch("hunksplit.llm.anthropic_provider.Anthropic").return_value
        client.messages.create.return_value = SimpleNamespace(
            content=[
                SimpleNamespace(type="thinking", text="ignored"),
                SimpleNamespace(type="text", text='{"commits": []}'),
            ],
            usage=SimpleNamespace(input_tokens=10, output_tokens=5),
        )

        result = get_provider(LLMProvider.ANTHROPIC, model="claude-x").generate_raw("sys", "usr")

        assert result == RawLLMResult('{"commits": []}', "claude-x", 10, 5)
        kwargs = client.messages.create.call_args.kwargs
        assert kwargs["system"] == "sys"
        assert kwargs["messages"] == [{"role": "user", "content": "usr"}]
        assert kwargs["max_tokens"] == 1234

    def test_api_failure_wrapped(self, mocker, monkeypatch):
        """Test that SDK errors become LLMError."""
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant")
        client = mocker.patch("hunksplit.llm.anthropic_provider.Anthropic").return_value
        client.messages.create.side_effect = RuntimeError("overloaded")

        with pytest.raises(LLMError, match="Anthropic API call failed: overloaded"):
            get_provider(LLMProvider.ANTHROPIC).generate_raw("sys", "usr")


class TestOpenAICompatibleProviders:
    """Tests for OpenAI, OpenRouter and Groq."""

    def test_openai(self, mocker, monkeypatch):
        """Test the OpenAI chat request."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        client_class = mocker.patch("hunksplit.llm.openai_provider.OpenAI")
        client = client_class.return_value
        client.chat.completions.create.return_value = _chat_completion("plan")

        result = get_provider(LLMProvider.OPENAI, model="gpt-4o").generate_raw("sys", "usr")

        assert result.raw_response == "plan"
        assert (result.input_tokens, result.output_tokens) == (12, 34)
        client_class.assert_called_once_with(api_key="sk-openai")
        messages = client.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "usr"},
        ]

    def test_openrouter_base_url(self, mocker, monkeypatch):
        """Test that OpenRouter points the OpenAI client at its endpoint."""
        from hunksplit.llm.openrouter_provider import OPENROUTER_BASE_URL

        monkeypatch.setenv("OPENROUTER_API_KEY", "sk-or")
        client_class = mocker.patch("hunksplit.llm.openrouter_provider.OpenAI")
        client_class.return_value.chat.completions.create.return_value = _chat_completion("ok")

        get_provider(LLMProvider.OPENROUTER, model="openai/gpt-4o").generate_raw("sys", "usr")

        assert client_class.call_args.kwargs["base_url"] == OPENROUTER_BASE_URL

    def test_groq(self, mocker, monkeypatch):
        """Test the Groq chat request."""
        monkeypatch.setenv("GROQ_API_KEY", "gsk")
        client = mocker.patch("hunksplit.llm.groq_provider.Groq").return_value
        client.chat.completions.create.return_value = _chat_completion("groq plan", 1, 2)

        result = get_provider(LLMProvider.GROQ, model="llama").generate_raw("sys", "usr")

        assert result == RawLLMResult("groq plan", "llama", 1, 2)

    def test_empty_content(self, mocker, monkeypatch):
        """Test that a null message content becomes an empty string."""
        monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
        client = mocker.patch("hunksplit.llm.openai_provider.OpenAI").return_value
        client.chat.completions.create.return_value = _chat_completion(None)

        assert get_provider(LLMProvider.OPENAI).generate_raw("s", "u").raw_response == ""


class TestCohereProvider:
    """Tests for CohereProvider."""

    def test_generate_raw(self, mocker, monkeypatch):
        """Test the Cohere v2 chat request."""
        monkeypatch.setenv("COHERE_API_KEY", "co")
        client = mocker.patch("hunksplit.llm.cohere_provider.cohere.ClientV2").return_value
        client.chat.return_value = SimpleNamespace(
            message=SimpleNamespace(content=[SimpleNamespace(text="cohere plan")]),
            usage=SimpleNamespace(tokens=SimpleNamespace(input_tokens=7.0, output_tokens=3.0)),
        )

        result = get_provider(LLMProvider.COHERE, model="command-r").generate_raw("sys", "usr")

        assert result == RawLLMResult("cohere plan", "command-r", 7, 3)


class TestGoogleProvider:
    """Tests for GoogleProvider."""

    def _response(self, text="plan", finish_reason="STOP", candidates=True):
        return SimpleNamespace(
            candidates=[SimpleNamespace(finish_reason=finish_reason)] if candidates else [],
            text=text,
            usage_metadata=SimpleNamespace(
                prompt_token_count=20, candidates_token_count=5, thoughts_token_count=15
            ),
        )

    @pytest.fixture
    def client(self, mocker, monkeypatch):
        monkeypatch.setenv("GOOGLE_API_KEY", "g-key")
        return mocker.patch("hunksplit.llm.google_provider.genai.Client").return_value

    def test_generate_raw(self, client, monkeypatch):
        """Test the request config and token accounting."""
        monkeypatch.setattr(_config, "MAX_TOKENS", 1000)
        client.models.generate_content.return_value = self._response()

        result = get_provider(LLMProvider.GOOGLE, model="gemini-2.0-flash").generate_raw("sys", "usr")

        assert result == RawLLMResult("plan", "gemini-2.0-flash", 20, 20)
        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.system_instruction == "sys"
        assert config.max_output_tokens == 1000

    def test_thinking_model_gets_more_tokens(self, client, monkeypatch):
        """Test that thinking models get a larger output budget."""
        monkeypatch.setattr(_config, "MAX_TOKENS", 1000)
        client.models.generate_content.return_value = self._response()

        get_provider(LLMProvider.GOOGLE, model="gemini-2.5-pro").generate_raw("sys", "usr")

        config = client.models.generate_content.call_args.kwargs["config"]
        assert config.max_output_tokens == 3000

    @pytest.mark.parametrize(
        "response_kwargs, message",
        [
            ({"candidates": False}, "no candidates"),
            ({"finish_reason": "FinishReason.SAFETY"}, "blocked"),
            ({"finish_reason": "FinishReason.MAX_TOKENS"}, "truncated"),
            ({"text": "   "}, "empty response"),
        ],
    )
    def test_unusable_responses(self, client, response_kwargs, message):
        """Test that blocked, truncated or empty responses raise LLMError."""
        client.models.generate_content.return_value = self._response(**response_kwargs)

        with pytest.raises(LLMError, match=message):
            get_provider(LLMProvider.GOOGLE).generate_raw("sys", "usr")
