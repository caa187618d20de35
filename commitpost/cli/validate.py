"""CLI command for checking credentials."""

import asyncio

import typer

from commitpost.config import Settings
from commitpost.errors import ConfigError
from commitpost.publishers import get_publisher
from commitpost.validate import ValidationReport, check_authentication, check_credentials
from commitpost.cli.utils import find_repo_root_safe, resolve_settings


async def _authenticate(settings: Settings, report: ValidationReport) -> ValidationReport:
    publisher = get_publisher(settings)
    try:
        return await check_authentication(publisher, report)
    finally:
        await publisher.aclose()


def validate_command(
    test_auth: bool = typer.Option(
        False,
        "--test-auth",
        help="Also authenticate against the backend",
    ),
) -> None:
    """Check that credentials for the configured backend are present."""
    repo_root = find_repo_root_safe()

    try:
        settings = resolve_settings(repo_root, require_credentials=False)
    except ConfigError as e:
        typer.echo(f"✗ {e}", err=True)
        raise typer.Exit(1)

    report = check_credentials(settings)

    env_file = (repo_root / ".env") if repo_root is not None else None
    if env_file is not None and env_file.exists():
        typer.echo(f"✓ .env file: {env_file}")
    else:
        typer.echo("⚠ .env file: not found (using process environment)")

    typer.echo(f"Backend: {settings.backend.value}")
    for label, passed, detail in report.checks:
        typer.echo(f"{'✓' if passed else '✗'} {label}: {detail}")

    if test_auth and report.ok:
        asyncio.run(_authenticate(settings, report))
        if report.auth_ok:
            typer.echo("✓ Authentication: SUCCESS")
        else:
            typer.echo("✗ Authentication: FAILED")
            typer.echo(f"  {report.auth_error}")

    typer.echo()
    if report.ok:
        typer.echo("✓ Configuration is valid!")
        if not test_auth:
            typer.echo("Run with --test-auth to verify credentials against the backend")
    else:
        typer.echo("✗ Configuration has issues. Please fix the errors above.")
        raise typer.Exit(1)
