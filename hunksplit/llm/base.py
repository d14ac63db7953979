"""Provider interface: one raw text completion per call."""

import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from hunksplit import config as _config
from hunksplit.config import API_KEY_ENV_VARS, LLMProvider
from hunksplit.global_config import get_credential
from hunksplit.llm.exceptions import LLMError, MissingAPIKeyError


@dataclass
class RawLLMResult:
    """Unparsed completion text plus token accounting."""

    raw_response: str
    model: str
    input_tokens: int = 0
    output_tokens: int = 0


def chat_messages(system_prompt: str, user_prompt: str) -> list:
    """System and user turns in the OpenAI-style message format."""
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


class BaseLLMProvider(ABC):
    """A text-completion backend.

    Subclasses set ``provider`` and ``display_name`` and implement
    ``_complete``. Model, max tokens and temperature come from
    ``hunksplit.config`` at call time so ``load_config`` changes apply.
    """

    provider: LLMProvider
    display_name: str
    model: str

    def __init__(self, model: Optional[str] = None):
        """Initialize the provider.

        Args:
            model: The model to use. Defaults to ACTIVE_MODEL from config.
        """
        self.model = model or _config.ACTIVE_MODEL

    def get_api_key(self) -> str:
        """Get the API key for this provider.

        Checks in order:
        1. Environment variable (including values loaded from .env)
        2. ~/.hunksplit/credentials file

        Returns:
            The API key string.

        Raises:
            MissingAPIKeyError: If neither source has it.
        """
        env_var = API_KEY_ENV_VARS[self.provider]
        key = os.getenv(env_var) or get_credential(env_var)
        if key:
            return key

        raise MissingAPIKeyError(
            f"No {self.display_name} API key. Provide one with either:\n"
            f"  export {env_var}=<key>\n"
            f"  hunksplit config set-key {self.provider.value}"
        )

    def generate_raw(self, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Run one completion and return its text unparsed.

        Args:
            system_prompt: Instructions for the model.
            user_prompt: The request itself.

        Returns:
            A RawLLMResult with the response text and token usage.

        Raises:
            MissingAPIKeyError: Before any request, if no key is configured.
            LLMError: If the request fails or the response is unusable.
        """
        api_key = self.get_api_key()
        try:
            return self._complete(api_key, system_prompt, user_prompt)
        except LLMError:
            raise
        except Exception as e:
            raise LLMError(f"{self.display_name} API call failed: {e}") from e

    @abstractmethod
    def _complete(self, api_key: str, system_prompt: str, user_prompt: str) -> RawLLMResult:
        """Make the SDK request for one completion.

        Args:
            api_key: Key returned by get_api_key.
            system_prompt: Instructions for the model.
            user_prompt: The request itself.

        Returns:
            A RawLLMResult with the response text and token usage.

        Raises:
            LLMError: If the response is unusable. Any other exception is
                wrapped by generate_raw.
        """
        pass
