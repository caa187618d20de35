"""Pydantic models for the parts of a GitHub push payload we read."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from commitpost.models import CommitRecord


class PayloadModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class CommitAuthor(PayloadModel):
    name: Optional[str] = None
    username: Optional[str] = None


class HeadCommit(PayloadModel):
    id: str
    message: str = ""
    author: Optional[CommitAuthor] = None


class Repository(PayloadModel):
    full_name: str
    default_branch: Optional[str] = None
    html_url: Optional[str] = None


class PushEvent(PayloadModel):
    """A GitHub ``push`` webhook event."""

    ref: str = ""
    repository: Repository
    head_commit: Optional[HeadCommit] = None

    def to_commit(self) -> Optional[CommitRecord]:
        """Build the CommitRecord for the head commit, or None for a branch delete."""
        if self.head_commit is None:
            return None

        author = self.head_commit.author
        author_name = (author.name or author.username) if author else None
        branch = self.ref[len("refs/heads/"):] if self.ref.startswith("refs/heads/") else None

        return CommitRecord(
            sha=self.head_commit.id,
            message=self.head_commit.message,
            author=author_name or "unknown",
            branch=branch,
            ref=self.ref,
            repo=self.repository.full_name,
            default_branch=self.repository.default_branch,
            html_url=self.repository.html_url or f"https://github.com/{self.repository.full_name}",
        )
