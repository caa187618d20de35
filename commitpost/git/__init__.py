"""Git collaborator for commitpost.

This package provides:
- exceptions: GitError
- runner: _run_git_command, get_repo_root, get_git_dir, get_config_value
- commit: read_latest_commit, parse_github_remote, get_branch
"""

from commitpost.git.exceptions import GitError

from commitpost.git.runner import (
    _run_git_command,
    get_config_value,
    get_git_dir,
    get_repo_root,
)

from commitpost.git.commit import (
    get_branch,
    parse_github_remote,
    read_latest_commit,
)


__all__ = [
    "GitError",
    "_run_git_command",
    "get_config_value",
    "get_git_dir",
    "get_repo_root",
    "get_branch",
    "parse_github_remote",
    "read_latest_commit",
]
