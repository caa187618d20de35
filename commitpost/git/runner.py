"""Git command runner and repository utilities.

Contains:
- _run_git_command: Run a git command and return its output
- get_repo_root: Get the root directory of the current git repository
- get_git_dir: Get the repository control directory (usually .git)
- get_config_value: Read a single git config value
"""

import subprocess
from pathlib import Path
from typing import Optional

from commitpost.git.exceptions import GitError


def _run_git_command(args: list[str], cwd: Optional[Path] = None) -> str:
    """Run a git command and return its output.

    Args:
        args: List of arguments to pass to git.
        cwd: Directory to run git in. Defaults to the current directory.

    Returns:
        The stdout of the git command.

    Raises:
        GitError: If the command fails. The message includes git's stderr.
    """
    try:
        result = subprocess.run(
            ["git"] + args,
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
        return result.stdout.strip()
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise GitError(f"Git command failed: git {' '.join(args)}\n{stderr}")
    except FileNotFoundError:
        raise GitError("Git is not installed or not in PATH.")


def get_repo_root(cwd: Optional[Path] = None) -> Path:
    """Get the root directory of the current git repository.

    Returns:
        Path to the repository root.

    Raises:
        GitError: If not in a git repository.
    """
    try:
        root = _run_git_command(["rev-parse", "--show-toplevel"], cwd=cwd)
        return Path(root)
    except GitError as e:
        raise GitError(f"Not in a git repository. Please run this command from within a git repo.\n{e}")


def get_git_dir(cwd: Optional[Path] = None) -> Path:
    """Get the repository control directory.

    Handles worktrees and relative output from ``git rev-parse --git-dir``.

    Returns:
        Absolute path to the git directory.
    """
    git_dir = Path(_run_git_command(["rev-parse", "--git-dir"], cwd=cwd))
    if not git_dir.is_absolute():
        git_dir = (cwd or Path.cwd()) / git_dir
    return git_dir


def get_config_value(key: str, cwd: Optional[Path] = None) -> Optional[str]:
    """Read a git config value.

    Args:
        key: Config key such as ``remote.origin.url``.

    Returns:
        The value, or None if the key is unset.
    """
    try:
        value = _run_git_command(["config", "--get", key], cwd=cwd)
    except GitError:
        # git config exits 1 for unset keys
        return None
    return value or None
