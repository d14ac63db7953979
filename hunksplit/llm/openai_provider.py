"""OpenAI chat completions backend."""

from openai import OpenAI

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult, chat_messages


def result_from_chat_completion(response, model: str) -> RawLLMResult:
    """Map an OpenAI-shaped chat completion (also Groq, OpenRouter) to a result."""
    usage = response.usage
    return RawLLMResult(
        raw_response=response.choices[0].message.content or "",
        model=model,
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
    )


class OpenAIProvider(BaseLLMProvider):
    """OpenAI GPT LLM provider.

    Subclasses for OpenAI-compatible services override ``_client`` and
    ``_request_options``.
    """

    provider = LLMProvider.OPENAI
    display_name = "OpenAI"

    def _client(self, api_key: str) -> OpenAI:
        return OpenAI(api_key=api_key)

    def _request_options(self) -> dict:
        return {}

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Call the chat completions endpoint.

        Args:
            api_key: Key for the service behind ``_client``.
            system_prompt: Sent as the system message.
            user_prompt: Sent as the user message.

        Returns:
            The first choice's text with prompt and completion token counts.
        """
        response = self._client(api_key).chat.completions.create(
            model=self.model,
            messages=chat_messages(system_prompt, user_prompt),
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
            **self._request_options(),
        )
        return result_from_chat_completion(response, self.model)
