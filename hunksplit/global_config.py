"""Global configuration management for hunksplit.

Handles user-level configuration stored in ~/.hunksplit/:
- config.yaml: Provider, model and split settings
- credentials: API keys for LLM providers, one KEY=value per line
"""

import os
import stat
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from hunksplit import config as _config
from hunksplit.config import Granularity, LLMProvider


class GlobalConfigError(Exception):
    """Raised when ~/.hunksplit/ cannot be read or written."""

    pass


_CONFIG_DIR = Path.home() / ".hunksplit"

_CREDENTIALS_HEADER = (
    "# hunksplit API credentials\n"
    "# One PROVIDER_API_KEY=value per line\n"
    "\n"
)


def get_global_config_dir() -> Path:
    return _CONFIG_DIR


def ensure_global_config_dir() -> Path:
    """Create ~/.hunksplit/ if needed and return it."""
    _CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    return _CONFIG_DIR


def get_config_file_path() -> Path:
    return _CONFIG_DIR / "config.yaml"


def get_credentials_file_path() -> Path:
    return _CONFIG_DIR / "credentials"


def is_configured() -> bool:
    return get_config_file_path().exists()


# ============================================================
# config.yaml
# ============================================================


def load_global_config() -> Dict[str, Any]:
    """Read config.yaml.

    Returns:
        The parsed mapping, or an empty dict if the file does not exist.

    Raises:
        GlobalConfigError: If the file is unreadable, malformed, or not a mapping.
    """
    path = get_config_file_path()
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to load config from {path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GlobalConfigError(f"Config file {path} must contain a mapping")
    return data


def save_global_config(data: Dict[str, Any]) -> None:
    """Write config.yaml, keeping key order."""
    ensure_global_config_dir()
    path = get_config_file_path()
    try:
        path.write_text(
            yaml.safe_dump(data, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
    except (OSError, yaml.YAMLError) as e:
        raise GlobalConfigError(f"Failed to save config to {path}: {e}")


def _update_global_config(change: Callable[[Dict[str, Any]], None]) -> None:
    data = load_global_config()
    change(data)
    save_global_config(data)


def _setting(key: str) -> Any:
    return load_global_config().get(key)


def get_active_provider() -> Optional[LLMProvider]:
    """Configured provider, or None when unset or unknown."""
    value = _setting("provider")
    if not value:
        return None
    try:
        return LLMProvider(value)
    except ValueError:
        return None


def get_active_model() -> Optional[str]:
    return _setting("model")


def get_max_tokens() -> Optional[int]:
    return _setting("max_tokens")


def get_temperature() -> Optional[float]:
    return _setting("temperature")


def set_provider_and_model(provider: LLMProvider, model: str) -> None:
    def change(data: Dict[str, Any]) -> None:
        data["provider"] = provider.value
        data["model"] = model

    _update_global_config(change)


def get_split_config() -> dict:
    """The ``split:`` section (granularity, lock retry, planner attempts).

    Returns:
        The section, or an empty dict if absent.

    Raises:
        GlobalConfigError: If the section is not a mapping.
    """
    section = _setting("split") or {}
    if not isinstance(section, dict):
        raise GlobalConfigError("The 'split' section of config.yaml must be a mapping")
    return section


def set_granularity(granularity: Granularity) -> None:
    """Persist the default split granularity."""

    def change(data: Dict[str, Any]) -> None:
        section = data.get("split") or {}
        section["granularity"] = granularity.value
        data["split"] = section

    _update_global_config(change)


def initialize_default_config(overwrite: bool = False) -> None:
    """Write config.yaml from the built-in defaults.

    An existing file is kept unless ``overwrite`` is set.
    """
    if is_configured() and not overwrite:
        return

    save_global_config({
        "provider": _config.DEFAULT_PROVIDER.value,
        "model": _config.DEFAULT_MODEL,
        "max_tokens": _config.DEFAULT_MAX_TOKENS,
        "temperature": _config.DEFAULT_TEMPERATURE,
        "split": {
            "granularity": _config.DEFAULT_GRANULARITY.value,
            "lock_retries": _config.DEFAULT_LOCK_RETRIES,
            "lock_retry_delay": _config.DEFAULT_LOCK_RETRY_DELAY,
            "max_plan_attempts": _config.DEFAULT_MAX_PLAN_ATTEMPTS,
            "excerpt_lines": _config.DEFAULT_EXCERPT_LINES,
        },
    })


# ============================================================
# credentials
# ============================================================


def _parse_credentials(text: str) -> Dict[str, str]:
    credentials: Dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        name, value = line.split("=", 1)
        credentials[name.strip()] = value.strip()
    return credentials


def load_credentials() -> Dict[str, str]:
    """Map of environment variable name to API key from the credentials file."""
    path = get_credentials_file_path()
    if not path.exists():
        return {}
    try:
        return _parse_credentials(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise GlobalConfigError(f"Failed to load credentials from {path}: {e}")


def save_credential(env_var: str, api_key: str) -> None:
    """Add or replace one API key, keeping the others.

    Args:
        env_var: Variable name the key is stored under (e.g. "ANTHROPIC_API_KEY").
        api_key: The key itself.
    """
    ensure_global_config_dir()
    path = get_credentials_file_path()

    credentials = load_credentials()
    credentials[env_var] = api_key
    body = "".join(f"{name}={value}\n" for name, value in credentials.items())

    try:
        path.write_text(_CREDENTIALS_HEADER + body, encoding="utf-8")
        # Owner read/write only
        os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)
    except OSError as e:
        raise GlobalConfigError(f"Failed to save credential to {path}: {e}")


def get_credential(env_var: str) -> Optional[str]:
    return load_credentials().get(env_var)
