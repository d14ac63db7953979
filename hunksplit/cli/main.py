"""Top-level callback: --version and verbosity."""

from typing import Optional

import typer

from hunksplit import __version__
from hunksplit.logging_utils import configure_logging


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hunksplit {__version__}")
        raise typer.Exit()


def main_command(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase log output (-v for info, -vv for debug)",
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit",
    ),
) -> None:
    """hunksplit: split uncommitted changes into a stack of atomic commits."""
    configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
