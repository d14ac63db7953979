"""LLM backends used by the split planner.

``get_provider`` returns the backend selected in ~/.hunksplit/config.yaml
(or an explicit one). Keys may also come from a ``.env`` file.
"""

import importlib
from typing import Optional

from dotenv import load_dotenv

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult
from hunksplit.llm.exceptions import (
    JSONParseError,
    LLMError,
    MissingAPIKeyError,
    PlanParseError,
)
from hunksplit.llm.parsing import extract_json_object, parse_json_object

load_dotenv()

# Imported lazily so only the selected SDK is loaded
_BACKENDS = {
    LLMProvider.ANTHROPIC: ("anthropic_provider", "AnthropicProvider"),
    LLMProvider.OPENAI: ("openai_provider", "OpenAIProvider"),
    LLMProvider.GOOGLE: ("google_provider", "GoogleProvider"),
    LLMProvider.COHERE: ("cohere_provider", "CohereProvider"),
    LLMProvider.GROQ: ("groq_provider", "GroqProvider"),
    LLMProvider.OPENROUTER: ("openrouter_provider", "OpenRouterProvider"),
}


def get_provider(
    provider: Optional[LLMProvider] = None,
    model: Optional[str] = None,
) -> BaseLLMProvider:
    """Instantiate a backend, defaulting to the active provider and model.

    Raises:
        ValueError: For a provider without a backend.
    """
    provider = provider or _config.ACTIVE_PROVIDER
    try:
        module_name, class_name = _BACKENDS[provider]
    except KeyError:
        raise ValueError(f"Unsupported provider: {provider}") from None

    module = importlib.import_module(f"hunksplit.llm.{module_name}")
    return getattr(module, class_name)(model=model or _config.ACTIVE_MODEL)


__all__ = [
    "BaseLLMProvider",
    "RawLLMResult",
    "LLMError",
    "MissingAPIKeyError",
    "JSONParseError",
    "PlanParseError",
    "extract_json_object",
    "parse_json_object",
    "get_provider",
]
