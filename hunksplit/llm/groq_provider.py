"""Groq backend (OpenAI-compatible chat endpoint)."""

from groq import Groq

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult, chat_messages
from hunksplit.llm.openai_provider import result_from_chat_completion


class GroqProvider(BaseLLMProvider):
    """Groq LLM provider (fast inference for open models)."""

    provider = LLMProvider.GROQ
    display_name = "Groq"

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Call Groq's OpenAI-compatible chat endpoint."""
        response = Groq(api_key=api_key).chat.completions.create(
            model=self.model,
            messages=chat_messages(system_prompt, user_prompt),
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
        )
        return result_from_chat_completion(response, self.model)
