"""Append-only local file store used by the CLI / git hook.

One posted commit sha per line. Safe for a single writer on a single
machine only; concurrent writers are not coordinated.
"""

from pathlib import Path

from commitpost.dedupe.base import DedupeStore
from commitpost.models import DedupeKey, PostRecord

DEDUPE_FILE_NAME = "commitpost-posted"


def get_dedupe_file(git_dir: Path) -> Path:
    """Return the dedupe file path inside the repository control directory.

    Args:
        git_dir: The repository's .git directory.

    Returns:
        Path to .git/commitpost-posted.
    """
    return git_dir / DEDUPE_FILE_NAME


class LocalFileStore(DedupeStore):
    """Dedupe store backed by an append-only text file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def seen(self, key: DedupeKey) -> bool:
        if not self.path.exists():
            return False
        with open(self.path, "r") as f:
            return any(line.strip() == key.sha for line in f)

    def claim(self, key: DedupeKey) -> bool:
        # Single process, single commit per run: nothing to reserve.
        return not self.seen(key)

    def record(self, key: DedupeKey, record: PostRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a") as f:
            f.write(f"{key.sha}\n")

    def release(self, key: DedupeKey) -> None:
        pass
