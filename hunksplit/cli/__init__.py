"""CLI entry point for hunksplit.

This module provides the main CLI application that combines all commands
and subcommands into a single unified interface.
"""

import typer

from hunksplit.cli.config import config_app
from hunksplit.cli.main import main_command
from hunksplit.cli.split import split_command

# Main application
app = typer.Typer(
    name="hunksplit",
    help="hunksplit: split uncommitted changes into atomic commits",
    add_completion=False,
)

# Add subcommand groups
app.add_typer(config_app, name="config")

# Add individual commands
app.command("split")(split_command)

# Set the main callback (--version, -v)
app.callback(invoke_without_command=True)(main_command)
