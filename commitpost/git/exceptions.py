"""Git-related exception classes.

Contains:
- GitError: Raised when a git command fails or its output cannot be parsed
"""


class GitError(Exception):
    """Custom exception for git-related errors."""

    pass
