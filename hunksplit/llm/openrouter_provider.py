"""OpenRouter backend: the OpenAI client pointed at OpenRouter's endpoint."""

from openai import OpenAI

from hunksplit.config import LLMProvider
from hunksplit.llm.openai_provider import OpenAIProvider

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenRouterProvider(OpenAIProvider):
    """OpenRouter LLM provider (many vendors' models behind one API key)."""

    provider = LLMProvider.OPENROUTER
    display_name = "OpenRouter"

    def _client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key, base_url=OPENROUTER_BASE_URL)

    def _request_options(self) -> dict:
        return {"extra_headers": {"X-Title": "hunksplit"}}
