"""Errors raised by LLM backends and response parsing.

Contains:
- LLMError: Base class; any failed or unusable completion
- MissingAPIKeyError: No key configured for the selected provider
- JSONParseError: The reply holds no decodable JSON object
- PlanParseError: The JSON decodes but is not a split plan
"""


class LLMError(Exception):
    """A backend call failed or returned something unusable."""

    pass


class MissingAPIKeyError(LLMError):
    """No API key in the environment or the credentials file."""

    pass


class JSONParseError(LLMError):
    """The response holds no parseable JSON object."""

    pass


class PlanParseError(JSONParseError):
    """The JSON object does not have the split plan shape."""

    pass
