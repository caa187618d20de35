"""CLI entry point for commitpost.

This module provides the main CLI application that combines all commands
into a single unified interface.
"""

import typer

from commitpost.cli.install import install_command
from commitpost.cli.main import main_command
from commitpost.cli.serve import serve_command
from commitpost.cli.validate import validate_command

# Main application
app = typer.Typer(
    name="commitpost",
    help="commitpost: post release commits to Bluesky or Twitter/X",
    add_completion=False,
)

app.command("install")(install_command)
app.command("validate")(validate_command)
app.command("serve")(serve_command)

# Default behavior (post HEAD) plus --version and --verbose
app.callback(invoke_without_command=True)(main_command)


__all__ = [
    "app",
    "install_command",
    "main_command",
    "serve_command",
    "validate_command",
]
