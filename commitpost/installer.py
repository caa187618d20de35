"""Git hook installation.

Contains:
- resolve_hook_dir: GIT_HOOK_DIR, core.hooksPath, or .git/hooks
- hook_script: the shell script the hook runs
- install_hook / install_env_template: write files into the repository
"""

import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from commitpost.errors import CommitPostError
from commitpost.git import get_config_value

DEFAULT_HOOK_NAME = "pre-push"
ENV_FILE_NAME = ".env"

HOOK_SCRIPT = """#!/usr/bin/env bash
# Installed by commitpost: posts release commits to social media.
set -euo pipefail

repo_root="$(git rev-parse --show-toplevel)"
cd "$repo_root"

if ! command -v commitpost >/dev/null 2>&1; then
  echo "commitpost not found; skipping post" >&2
  exit 0
fi

exec commitpost
"""

ENV_TEMPLATE = """# Backend: bluesky (default) or twitter
# COMMITPOST_BACKEND=bluesky

# Bluesky credentials (required for the bluesky backend)
BSKY_HANDLE=your-handle.bsky.social
BSKY_APP_PASSWORD=your-app-password

# Optional: Bluesky service URL (defaults to https://bsky.social)
# BLUESKY_SERVICE=https://bsky.social

# Twitter/X OAuth 1.0a credentials (required for the twitter backend)
# X_API_KEY=
# X_API_SECRET=
# X_ACCESS_TOKEN=
# X_ACCESS_TOKEN_SECRET=

# Optional: preview posts without publishing
# BLUESKY_DRYRUN=on

# Optional: which commits trigger a post
# keyword_or_version (default), keyword_and_version, version, keyword
# TRIGGER_GATE=keyword_or_version

# Optional: AI summarization (on by default when a key is set)
# AI_PROVIDER=openai
# OPENAI_API_KEY=sk-...
# ANTHROPIC_API_KEY=
# AI_SUMMARY=on
"""


class HookExistsError(CommitPostError):
    """Raised when a hook already exists and overwriting was not requested."""

    pass


@dataclass
class InstallResult:
    hook_path: Path
    env_path: Path
    env_created: bool


def _resolve_path(repo_root: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if path.is_absolute():
        return path
    return repo_root / path


def resolve_hook_dir(repo_root: Path, env: Optional[Mapping[str, str]] = None) -> Path:
    """Find the directory hooks should be written to.

    Precedence: ``GIT_HOOK_DIR``, then ``core.hooksPath``, then
    ``<repo>/.git/hooks``. Relative values resolve against the repo root.
    """
    env = os.environ if env is None else env
    override = env.get("GIT_HOOK_DIR", "").strip()
    if override:
        return _resolve_path(repo_root, override)

    hooks_path = get_config_value("core.hooksPath", cwd=repo_root)
    if hooks_path:
        return _resolve_path(repo_root, hooks_path)

    return repo_root / ".git" / "hooks"


def install_hook(hook_dir: Path, hook_name: str = DEFAULT_HOOK_NAME, force: bool = False) -> Path:
    """Write the hook script and mark it executable.

    Args:
        hook_dir: Directory to write the hook into (created if missing).
        hook_name: Hook file name, e.g. ``pre-push`` or ``post-commit``.
        force: Overwrite an existing hook.

    Returns:
        Path to the installed hook.

    Raises:
        HookExistsError: If the hook exists and force is False.
    """
    hook_path = hook_dir / hook_name
    if hook_path.exists() and not force:
        raise HookExistsError(f"A {hook_name} hook already exists at {hook_path}")

    hook_dir.mkdir(parents=True, exist_ok=True)
    hook_path.write_text(HOOK_SCRIPT)
    mode = hook_path.stat().st_mode
    hook_path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return hook_path


def install_env_template(repo_root: Path) -> tuple[Path, bool]:
    """Create a .env template at the repository root unless one exists.

    Returns:
        (path, created)
    """
    env_path = repo_root / ENV_FILE_NAME
    if env_path.exists():
        return env_path, False
    env_path.write_text(ENV_TEMPLATE)
    return env_path, True


def install(
    repo_root: Path,
    hook_name: str = DEFAULT_HOOK_NAME,
    force: bool = False,
    env: Optional[Mapping[str, str]] = None,
) -> InstallResult:
    """Install the .env template and the git hook into a repository."""
    env_path, env_created = install_env_template(repo_root)
    hook_path = install_hook(resolve_hook_dir(repo_root, env), hook_name, force)
    return InstallResult(hook_path=hook_path, env_path=env_path, env_created=env_created)
