"""Google Gemini backend."""

from google import genai
from google.genai import types

from hunksplit import config as _config
from hunksplit.config import LLMProvider
from hunksplit.llm.base import BaseLLMProvider, RawLLMResult
from hunksplit.llm.exceptions import LLMError

# Reasoning consumes part of max_output_tokens on these
THINKING_MODELS = (
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash-thinking",
)
THINKING_TOKEN_MULTIPLIER = 3


def _count(usage, field: str) -> int:
    return getattr(usage, field, 0) or 0


class GoogleProvider(BaseLLMProvider):
    """Google Gemini LLM provider."""

    provider = LLMProvider.GOOGLE
    display_name = "Google Gemini"

    def output_token_budget(self) -> int:
        """Output token limit, enlarged for thinking models.

        Returns:
            MAX_TOKENS, times THINKING_TOKEN_MULTIPLIER for thinking models.
        """
        name = self.model.lower()
        if any(thinking in name for thinking in THINKING_MODELS):
            return _config.MAX_TOKENS * THINKING_TOKEN_MULTIPLIER
        return _config.MAX_TOKENS

    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Call generate_content.

        Args:
            api_key: Google API key.
            system_prompt: Sent as ``system_instruction``.
            user_prompt: Sent as the contents.

        Returns:
            The response text; output tokens include thinking tokens.

        Raises:
            LLMError: If the response has no candidates, was blocked, was
                truncated, or is empty.
        """
        response = genai.Client(api_key=api_key).models.generate_content(
            model=self.model,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_prompt,
                max_output_tokens=self.output_token_budget(),
                temperature=_config.TEMPERATURE,
            ),
        )
        text = self._usable_text(response)

        usage = getattr(response, "usage_metadata", None)
        return RawLLMResult(
            raw_response=text,
            model=self.model,
            input_tokens=_count(usage, "prompt_token_count"),
            output_tokens=_count(usage, "candidates_token_count") + _count(usage, "thoughts_token_count"),
        )

    def _usable_text(self, response) -> str:
        if not response.candidates:
            raise LLMError("Gemini response had no candidates")

        reason = str(getattr(response.candidates[0], "finish_reason", "") or "")
        if "SAFETY" in reason:
            raise LLMError(f"Gemini response blocked ({reason})")
        if "MAX_TOKENS" in reason:
            raise LLMError("Gemini response truncated at the output token limit; raise max_tokens")

        if not (response.text or "").strip():
            raise LLMError("Gemini returned an empty response")
        return response.text
