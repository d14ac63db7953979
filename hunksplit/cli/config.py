"""`hunksplit config` subcommands: provider, model, API keys and split defaults."""

from typing import NoReturn, Optional

import typer

from hunksplit import global_config
from hunksplit.config import (
    API_KEY_ENV_VARS,
    AVAILABLE_MODELS,
    DEFAULT_EXCERPT_LINES,
    DEFAULT_LOCK_RETRIES,
    DEFAULT_LOCK_RETRY_DELAY,
    DEFAULT_MAX_PLAN_ATTEMPTS,
    Granularity,
    LLMProvider,
)
from hunksplit.global_config import GlobalConfigError

config_app = typer.Typer(
    name="config",
    help="Manage global hunksplit configuration in ~/.hunksplit/",
    add_completion=False,
)

_PROVIDER_NAMES = ", ".join(p.value for p in LLMProvider)
_GRANULARITY_NAMES = ", ".join(g.value for g in Granularity)


def _fail(message: str, hint: Optional[str] = None) -> NoReturn:
    typer.echo(message, err=True)
    if hint:
        typer.echo(hint)
    raise typer.Exit(1)


def _parse_provider(name: str) -> LLMProvider:
    try:
        return LLMProvider(name.lower())
    except ValueError:
        _fail(f"Invalid provider: {name}", f"Valid providers: {_PROVIDER_NAMES}")


def _mask(secret: str) -> str:
    if len(secret) <= 12:
        return "***"
    return f"{secret[:8]}...{secret[-4:]}"


def _echo_models(provider: LLMProvider, numbered: bool = False) -> None:
    for index, model in enumerate(AVAILABLE_MODELS[provider], 1):
        typer.echo(f"  {index}. {model}" if numbered else f"  • {model}")


def _prompt_for_model(provider: LLMProvider) -> str:
    models = AVAILABLE_MODELS[provider]
    typer.echo(f"Models for {provider.value}:")
    _echo_models(provider, numbered=True)

    choice = typer.prompt(f"Choose a model [1-{len(models)}]", type=int, default=1)
    if not 1 <= choice <= len(models):
        _fail(f"No model number {choice}. Nothing changed.")
    return models[choice - 1]


def _persist(action, *args) -> None:
    try:
        action(*args)
    except (GlobalConfigError, OSError) as e:
        _fail(f"Error: {e}")


@config_app.command("show")
def config_show() -> None:
    """Show the active provider, model and split settings."""
    try:
        if not global_config.is_configured():
            typer.echo("No configuration found. Using built-in defaults.")
            typer.echo("Run 'hunksplit config set-provider <provider>' to create one.")
            return
        data = global_config.load_global_config()
        split = global_config.get_split_config()
    except GlobalConfigError as e:
        _fail(f"Error reading configuration: {e}")

    typer.echo(f"Configuration file: {global_config.get_config_file_path()}")
    typer.echo()
    typer.echo("  LLM:")
    typer.echo(f"    Provider: {data.get('provider', 'not set')}")
    typer.echo(f"    Model: {data.get('model', 'not set')}")
    typer.echo(f"    Max Tokens: {data.get('max_tokens', 'default')}")
    typer.echo(f"    Temperature: {data.get('temperature', 'default')}")
    typer.echo()
    typer.echo("  Split:")
    typer.echo(f"    Granularity: {split.get('granularity', Granularity.HUNK.value)}")
    typer.echo(f"    Lock retries: {split.get('lock_retries', DEFAULT_LOCK_RETRIES)}")
    typer.echo(f"    Lock retry delay: {split.get('lock_retry_delay', DEFAULT_LOCK_RETRY_DELAY)}s")
    typer.echo(f"    Max plan attempts: {split.get('max_plan_attempts', DEFAULT_MAX_PLAN_ATTEMPTS)}")
    typer.echo(f"    Excerpt lines: {split.get('excerpt_lines', DEFAULT_EXCERPT_LINES)}")

    provider = global_config.get_active_provider()
    if provider is None:
        return
    env_var = API_KEY_ENV_VARS[provider]
    try:
        stored = global_config.get_credential(env_var)
    except GlobalConfigError as e:
        _fail(f"Error reading credentials: {e}")
    typer.echo()
    typer.echo(f"  API key ({env_var}): {_mask(stored) if stored else 'not set'}")


@config_app.command("set-key")
def config_set_key(
    provider: str = typer.Argument(..., help=f"Provider name ({_PROVIDER_NAMES})"),
) -> None:
    """Store an API key in ~/.hunksplit/credentials."""
    llm_provider = _parse_provider(provider)
    secret = typer.prompt(f"{llm_provider.value} API key", hide_input=True)

    _persist(global_config.save_credential, API_KEY_ENV_VARS[llm_provider], secret)
    typer.echo(f"✓ API key saved for {llm_provider.value}")


@config_app.command("set-provider")
def config_set_provider(
    provider: str = typer.Argument(..., help=f"Provider name ({_PROVIDER_NAMES})"),
    model: Optional[str] = typer.Option(
        None,
        "--model",
        "-m",
        help="Model name (prompts with the known models if omitted)",
    ),
) -> None:
    """Choose the LLM provider and model used for planning."""
    llm_provider = _parse_provider(provider)

    if not model:
        model = _prompt_for_model(llm_provider)
    elif model not in AVAILABLE_MODELS[llm_provider]:
        typer.echo(f"{model} is not a known {llm_provider.value} model.")
        if not typer.confirm("Use it anyway?", default=False):
            raise typer.Exit(0)

    _persist(global_config.set_provider_and_model, llm_provider, model)
    typer.echo(f"✓ Provider: {llm_provider.value}")
    typer.echo(f"✓ Model: {model}")


@config_app.command("list-providers")
def config_list_providers() -> None:
    """List supported LLM providers."""
    for llm_provider in LLMProvider:
        typer.echo(f"  • {llm_provider.value} ({API_KEY_ENV_VARS[llm_provider]})")


@config_app.command("list-models")
def config_list_models(
    provider: Optional[str] = typer.Argument(None, help="Provider name (all providers if omitted)"),
) -> None:
    """List known models for one provider or for all of them."""
    providers = [_parse_provider(provider)] if provider else list(LLMProvider)
    for llm_provider in providers:
        typer.echo(f"{llm_provider.value}:")
        _echo_models(llm_provider)


@config_app.command("set-granularity")
def config_set_granularity(
    granularity: str = typer.Argument(..., help=f"One of: {_GRANULARITY_NAMES}"),
) -> None:
    """Set whether split plans address hunks or whole files by default."""
    try:
        value = Granularity(granularity.lower())
    except ValueError:
        _fail(f"Invalid granularity: {granularity}", f"Valid values: {_GRANULARITY_NAMES}")

    _persist(global_config.set_granularity, value)
    typer.echo(f"✓ Granularity set to: {value.value}")


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config.yaml"),
) -> None:
    """Write ~/.hunksplit/config.yaml with the built-in defaults."""
    path = global_config.get_config_file_path()
    if global_config.is_configured() and not force:
        if not typer.confirm(f"{path} already exists. Overwrite with defaults?", default=False):
            typer.echo("Keeping existing configuration.")
            raise typer.Exit(0)

    _persist(global_config.initialize_default_config, True)
    typer.echo(f"✓ Wrote defaults to {path}")
    typer.echo("Next: 'hunksplit config set-key <provider>' to store an API key.")
