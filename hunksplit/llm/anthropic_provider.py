"""Anthropic Messages API backend."""

from anthropic import Anthropic

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult


class AnthropicProvider(BaseLLMProvider):
    """Anthropic Claude LLM provider."""

    provider = LLMProvider.ANTHROPIC
    display_name = "Anthropic"

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Call the Messages API.

        Args:
            api_key: Anthropic API key.
            system_prompt: Sent as the top-level ``system`` field.
            user_prompt: Sent as the single user message.

        Returns:
            The concatenated text blocks with input and output token counts.
        """
        message = Anthropic(api_key=api_key).messages.create(
            model=self.model,
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
            max_tokens=_config.MAX_TOKENS,
            temperature=_config.TEMPERATURE,
        )
        # Only text blocks; thinking blocks are skipped
        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        return RawLLMResult(
            raw_response=text,
            model=self.model,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
