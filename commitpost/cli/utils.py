"""Shared helpers for CLI commands."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from commitpost.config import Settings, load_settings
from commitpost.file_config import load_file_config
from commitpost.git import GitError, get_repo_root

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def configure_logging(verbose: bool) -> None:
    """Configure root logging: warnings by default, info with --verbose."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format=LOG_FORMAT,
    )


def find_repo_root_safe() -> Optional[Path]:
    """Return the repository root, or None outside a git repository."""
    try:
        return get_repo_root()
    except GitError:
        return None


def load_environment(repo_root: Optional[Path]) -> None:
    """Load .env from the repository root, then the current directory.

    Existing environment variables are never overridden.
    """
    if repo_root is not None:
        load_dotenv(repo_root / ".env", override=False)
    load_dotenv(override=False)


def resolve_settings(repo_root: Optional[Path], require_credentials: bool = True) -> Settings:
    """Resolve settings from the environment layered over the repo config file.

    Raises:
        ConfigError: If the config file or a value is invalid, or credentials
            are missing and required.
    """
    load_environment(repo_root)
    file_config = load_file_config(repo_root) if repo_root is not None else {}
    return load_settings(os.environ, file_config, require_credentials=require_credentials)
