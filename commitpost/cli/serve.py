"""CLI command for running the webhook server."""

import typer
import uvicorn

from commitpost.errors import ConfigError
from commitpost.server import create_app
from commitpost.cli.utils import find_repo_root_safe, resolve_settings


def serve_command(
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
    port: int = typer.Option(8000, "--port", help="Port to listen on"),
) -> None:
    """Run the GitHub webhook server."""
    try:
        settings = resolve_settings(find_repo_root_safe())
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not settings.webhook_secret:
        typer.echo("Warning: GITHUB_WEBHOOK_SECRET is not set; every webhook will get a 500.", err=True)

    uvicorn.run(create_app(settings), host=host, port=port)
