"""Default CLI command: post the HEAD commit of the current repository."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from commitpost import __version__
from commitpost.config import Settings
from commitpost.dedupe import LocalFileStore, get_dedupe_file
from commitpost.errors import AuthFailed, ConfigError, PostFailed
from commitpost.git import GitError, get_git_dir, get_repo_root, read_latest_commit
from commitpost.llm import summarizer_from_settings
from commitpost.models import CommitRecord
from commitpost.pipeline import STATUS_DRY_RUN, STATUS_POSTED, Outcome, run_pipeline
from commitpost.publishers import get_publisher
from commitpost.cli.utils import configure_logging, resolve_settings

logger = logging.getLogger(__name__)


async def _post(commit: CommitRecord, settings: Settings, store: LocalFileStore) -> Outcome:
    publisher = get_publisher(settings)
    try:
        return await run_pipeline(
            commit,
            settings,
            store,
            publisher,
            summarizer=summarizer_from_settings(settings),
        )
    finally:
        await publisher.aclose()


def report_outcome(outcome: Outcome) -> None:
    """Print the user-facing status lines for an outcome."""
    sha = outcome.commit.short_sha
    if outcome.status == STATUS_DRY_RUN:
        for line in outcome.result.preview:
            typer.echo(line)
    elif outcome.status == STATUS_POSTED:
        typer.echo(f"[posted] {sha} — {outcome.result.uri or 'ok'}")
    else:
        typer.echo(f"[skip] {sha} — {outcome.reason}")


def post_head_commit(cwd: Optional[Path] = None) -> int:
    """Post the repository's HEAD commit if it qualifies.

    Returns:
        Process exit code: 0 on success or skip, 1 on any failure.
    """
    try:
        repo_root = get_repo_root(cwd)
        settings = resolve_settings(repo_root)
        commit = read_latest_commit(repo_root)
        store = LocalFileStore(get_dedupe_file(get_git_dir(repo_root)))
    except (ConfigError, GitError) as e:
        typer.echo(f"[error] {e}", err=True)
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        typer.echo(f"[error] unexpected error: {e}", err=True)
        return 1

    if settings.force:
        typer.echo("[force] bypassing trigger gates")

    try:
        outcome = asyncio.run(_post(commit, settings, store))
    except AuthFailed as e:
        typer.echo(f"[error] authentication failed: {e}", err=True)
        return 1
    except PostFailed as e:
        typer.echo(f"[error] post failed: {e}", err=True)
        return 1
    except Exception as e:
        logger.debug("Unexpected failure", exc_info=True)
        typer.echo(f"[error] unexpected error: {e}", err=True)
        return 1

    report_outcome(outcome)
    return 0


def main_command(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show the version and exit",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log pipeline decisions",
    ),
) -> None:
    """Post the latest commit to Bluesky or Twitter/X when it qualifies."""
    if version:
        typer.echo(f"commitpost {__version__}")
        raise typer.Exit(0)

    configure_logging(verbose)

    # If a subcommand is invoked, don't run the default behavior
    if ctx.invoked_subcommand is not None:
        return

    raise typer.Exit(post_head_commit())
