"""Cohere v2 chat backend."""

import cohere

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult, chat_messages


class CohereProvider(BaseLLMProvider):
    """Cohere Command LLM provider."""

    provider = LLMProvider.COHERE
    display_name = "Cohere"

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Call the v2 chat endpoint.

        Args:
            api_key: Cohere API key.
            system_prompt: Sent as the system message.
            user_prompt: Sent as the user message.

        Returns:
            The first content block's text with billed token counts.
        """
        response = cohere.ClientV2(api_key=api_key).chat(
            model=self.model,
            messages=chat_messages(system_prompt, user_prompt),
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
        )
        # Token counts arrive as floats
        tokens = response.usage.tokens
        return RawLLMResult(
            raw_response=response.message.content[0].text,
            model=self.model,
            input_tokens=int(tokens.input_tokens or 0),
            output_tokens=int(tokens.output_tokens or 0),
        )
