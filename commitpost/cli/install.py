"""CLI command for installing the git hook."""

import typer

from commitpost.git import GitError, get_repo_root
from commitpost.installer import DEFAULT_HOOK_NAME, HookExistsError, install


def install_command(
    hook: str = typer.Option(
        DEFAULT_HOOK_NAME,
        "--hook",
        help="Git hook to install (e.g. pre-push, post-commit)",
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite an existing hook",
    ),
) -> None:
    """Install a git hook that posts qualifying commits."""
    hook = hook.strip()
    if not hook:
        typer.echo("Missing value for --hook.", err=True)
        raise typer.Exit(1)

    try:
        repo_root = get_repo_root()
    except GitError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    try:
        result = install(repo_root, hook_name=hook, force=force)
    except HookExistsError as e:
        typer.echo(f"✗ {e}", err=True)
        typer.echo("  Use --force to overwrite it, or --hook to pick another hook.", err=True)
        raise typer.Exit(1)

    if result.env_created:
        typer.echo(f"✓ Created .env template at {result.env_path}")
        typer.echo("  Edit it and add your credentials.")
    else:
        typer.echo(f"✓ .env already exists at {result.env_path}")
    typer.echo(f"✓ Installed {hook} hook at {result.hook_path}")
    typer.echo()
    typer.echo("Next: run 'commitpost validate --test-auth', then try BLUESKY_DRYRUN=on commitpost")
