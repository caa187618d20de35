"""Read the latest commit from the local repository.

Contains:
- parse_github_remote: Turn a GitHub SSH/HTTPS remote URL into owner/repo
- get_branch: Get the current branch name
- read_latest_commit: Build a CommitRecord for HEAD
"""

import re
from pathlib import Path
from typing import Optional

from commitpost.git.exceptions import GitError
from commitpost.git.runner import _run_git_command, get_config_value
from commitpost.models import CommitRecord

# Separators chosen so they cannot collide with normal commit text
MESSAGE_SEPARATOR = "---COMMITPOST-MESSAGE---"
AUTHOR_SEPARATOR = "---COMMITPOST-AUTHOR---"

_GITHUB_REMOTE_RE = re.compile(r"github\.com[:/](.+?)/(.+?)(?:\.git)?/?$")


def parse_github_remote(remote_url: str) -> Optional[str]:
    """Parse a GitHub remote URL into an ``owner/repo`` identifier.

    Supports ``git@github.com:owner/repo.git`` and
    ``https://github.com/owner/repo(.git)``.

    Args:
        remote_url: The remote URL from git config.

    Returns:
        The repository identifier, or None for non-GitHub remotes.
    """
    match = _GITHUB_REMOTE_RE.search(remote_url.strip())
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"


def get_branch(cwd: Optional[Path] = None) -> str:
    """Get the current branch name.

    Returns:
        The branch name, or 'HEAD' when detached.
    """
    return _run_git_command(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd)


def read_latest_commit(cwd: Optional[Path] = None) -> CommitRecord:
    """Read sha, message, author, branch and GitHub remote for HEAD.

    A single ``git log`` call returns sha, message and author separated by
    marker lines; branch and remote need their own commands.

    Returns:
        A CommitRecord for the HEAD commit. ``repo`` and ``commit_url`` are
        None when origin is not a GitHub remote.

    Raises:
        GitError: If a git command fails or the output cannot be parsed.
    """
    output = _run_git_command(
        ["log", "-1", f"--pretty=%H%n{MESSAGE_SEPARATOR}%n%B%n{AUTHOR_SEPARATOR}%n%an"],
        cwd=cwd,
    )

    head, sep, rest = output.partition(f"\n{MESSAGE_SEPARATOR}\n")
    if not sep:
        raise GitError("Failed to parse git log output")

    message, sep, author = rest.rpartition(f"\n{AUTHOR_SEPARATOR}\n")
    if not sep:
        raise GitError("Failed to parse message and author from git log")

    sha = head.strip()
    if not re.fullmatch(r"[0-9a-f]{40}", sha):
        raise GitError(f"Unexpected commit id in git log output: {sha!r}")

    branch = get_branch(cwd=cwd)

    repo = None
    html_url = None
    remote_url = get_config_value("remote.origin.url", cwd=cwd)
    if remote_url:
        repo = parse_github_remote(remote_url)
        if repo:
            html_url = f"https://github.com/{repo}"

    return CommitRecord(
        sha=sha,
        message=message.strip(),
        author=author.strip(),
        branch=branch,
        ref=f"refs/heads/{branch}",
        repo=repo,
        html_url=html_url,
    )
