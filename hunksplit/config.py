"""hunksplit settings.

Built-in defaults, overlaid by ~/.hunksplit/config.yaml through
``load_config()``. Edit the file with the ``hunksplit config`` commands.
"""

from enum import Enum


class LLMProvider(Enum):
    """Supported LLM providers."""

    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GOOGLE = "google"
    COHERE = "cohere"
    GROQ = "groq"
    OPENROUTER = "openrouter"


class Granularity(Enum):
    """How finely the working tree is cut into addressable units."""

    HUNK = "hunk"
    FILE = "file"


# ============================================================
# DEFAULTS
# ============================================================
# Used for any setting config.yaml leaves out

DEFAULT_PROVIDER = LLMProvider.ANTHROPIC
DEFAULT_MODEL = "claude-sonnet-4-20250514"
DEFAULT_MAX_TOKENS = 8192
DEFAULT_TEMPERATURE = 0.2

DEFAULT_GRANULARITY = Granularity.HUNK
DEFAULT_LOCK_RETRIES = 3
DEFAULT_LOCK_RETRY_DELAY = 1.0
DEFAULT_MAX_PLAN_ATTEMPTS = 2
DEFAULT_EXCERPT_LINES = 8


# ============================================================
# ACTIVE VALUES
# ============================================================

# Overwritten by load_config()
ACTIVE_PROVIDER = DEFAULT_PROVIDER
ACTIVE_MODEL = DEFAULT_MODEL
MAX_TOKENS = DEFAULT_MAX_TOKENS
TEMPERATURE = DEFAULT_TEMPERATURE

GRANULARITY = DEFAULT_GRANULARITY
LOCK_RETRIES = DEFAULT_LOCK_RETRIES
LOCK_RETRY_DELAY = DEFAULT_LOCK_RETRY_DELAY
MAX_PLAN_ATTEMPTS = DEFAULT_MAX_PLAN_ATTEMPTS
EXCERPT_LINES = DEFAULT_EXCERPT_LINES


def _at_least(value, cast, floor):
    return max(floor, cast(value))


def load_config() -> None:
    """Apply ~/.hunksplit/config.yaml over the defaults.

    The CLI calls this once per invocation; everything else reads the
    module-level values at use time.
    """
    global ACTIVE_PROVIDER, ACTIVE_MODEL, MAX_TOKENS, TEMPERATURE
    global GRANULARITY, LOCK_RETRIES, LOCK_RETRY_DELAY, MAX_PLAN_ATTEMPTS, EXCERPT_LINES

    # global_config imports this module
    from hunksplit import global_config

    ACTIVE_PROVIDER = global_config.get_active_provider() or ACTIVE_PROVIDER
    ACTIVE_MODEL = global_config.get_active_model() or ACTIVE_MODEL

    max_tokens = global_config.get_max_tokens()
    if max_tokens is not None:
        MAX_TOKENS = int(max_tokens)
    temperature = global_config.get_temperature()
    if temperature is not None:
        TEMPERATURE = float(temperature)

    split = global_config.get_split_config()
    try:
        GRANULARITY = Granularity(str(split.get("granularity", GRANULARITY.value)).lower())
    except ValueError:
        pass  # unknown mode: keep the current one

    if split.get("lock_retries") is not None:
        LOCK_RETRIES = _at_least(split["lock_retries"], int, 1)
    if split.get("lock_retry_delay") is not None:
        LOCK_RETRY_DELAY = _at_least(split["lock_retry_delay"], float, 0.0)
    if split.get("max_plan_attempts") is not None:
        MAX_PLAN_ATTEMPTS = _at_least(split["max_plan_attempts"], int, 1)
    if split.get("excerpt_lines") is not None:
        EXCERPT_LINES = _at_least(split["excerpt_lines"], int, 1)


# ============================================================
# PROVIDER CATALOGUE
# ============================================================

AVAILABLE_MODELS = {
    LLMProvider.ANTHROPIC: [
        "claude-sonnet-4-20250514",
        "claude-3-5-sonnet-latest",
        "claude-3-5-haiku-latest",
    ],
    LLMProvider.OPENAI: [
        "gpt-4.1",
        "gpt-4.1-mini",
        "gpt-4o",
        "gpt-4o-mini",
    ],
    LLMProvider.GOOGLE: [
        "gemini-2.5-pro",
        "gemini-2.5-flash",
        "gemini-2.0-flash",
    ],
    LLMProvider.COHERE: [
        "command-r-plus",
        "command-r",
    ],
    LLMProvider.GROQ: [
        "llama-3.3-70b-versatile",
        "llama-3.1-8b-instant",
    ],
    LLMProvider.OPENROUTER: [
        "anthropic/claude-sonnet-4",
        "openai/gpt-4o",
        "google/gemini-2.0-flash-exp",
        "deepseek/deepseek-chat",
        "qwen/qwen-2.5-coder-32b-instruct",
    ],
}

API_KEY_ENV_VARS = {
    provider: f"{provider.name}_API_KEY" for provider in LLMProvider
}


def get_api_key_env_var(provider: LLMProvider) -> str:
    return API_KEY_ENV_VARS[provider]
