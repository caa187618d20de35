"""Data models for commitpost.

Contains Pydantic models shared by the CLI and the webhook server:
- RepoEnrichment: Optional GitHub repository metadata
- CommitRecord: One evaluated commit
- DedupeKey: Identity of a commit for at-most-once posting
- ExternalEmbed: Link card attached to a post
- PostDraft: Composed, length-bounded post
- PublishResult: Outcome of a publish call
- PostRecord: What the shared dedupe store keeps after a successful post
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

SHORT_SHA_LENGTH = 7


def abbreviate_sha(sha: str) -> str:
    """Return the abbreviated commit identifier used in posts and tags."""
    return sha[:SHORT_SHA_LENGTH]


class RepoEnrichment(BaseModel):
    """Repository metadata fetched from the GitHub API."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    html_url: str
    homepage: Optional[str] = None
    topics: list[str] = Field(default_factory=list)


class CommitRecord(BaseModel):
    """A single commit, built fresh per invocation and never mutated."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str
    author: str = "unknown"
    branch: Optional[str] = None
    ref: Optional[str] = None  # e.g. refs/heads/main
    repo: Optional[str] = None  # owner/repo
    default_branch: Optional[str] = None
    html_url: Optional[str] = None  # repository URL
    enrichment: Optional[RepoEnrichment] = None

    @computed_field
    @property
    def short_sha(self) -> str:
        return abbreviate_sha(self.sha)

    @computed_field
    @property
    def commit_url(self) -> Optional[str]:
        # Post text never carries the full 40-char sha
        if not self.html_url:
            return None
        return f"{self.html_url.rstrip('/')}/commit/{self.short_sha}"


class DedupeKey(BaseModel):
    """Identity of a commit for the dedupe store.

    The local file store only uses ``sha``; the shared store scopes the sha
    by namespace (the backend name) and repository.
    """

    model_config = ConfigDict(frozen=True)

    namespace: str
    repo: str = ""
    sha: str

    def as_string(self) -> str:
        """Return the composite key used as the shared store's primary key."""
        return f"{self.namespace}/{self.repo}/{self.sha}"


class ExternalEmbed(BaseModel):
    """External link card (title, url, description)."""

    model_config = ConfigDict(frozen=True)

    uri: str
    title: str
    description: str = ""


class PostDraft(BaseModel):
    """Composed post text, bounded to the target network's limit."""

    model_config = ConfigDict(frozen=True)

    text: str
    limit: int
    embed: Optional[ExternalEmbed] = None
    hashtags: list[str] = Field(default_factory=list)


class PublishResult(BaseModel):
    """Outcome of a publish call."""

    backend: str
    post_id: Optional[str] = None
    uri: Optional[str] = None
    dry_run: bool = False
    preview: list[str] = Field(default_factory=list)


class PostRecord(BaseModel):
    """Metadata persisted once a post has been confirmed by the backend."""

    post_id: Optional[str] = None
    uri: Optional[str] = None
    posted_at: str  # ISO format timestamp
    preview: str = ""
