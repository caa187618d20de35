"""Shared test fixtures and configuration."""

import tempfile
from pathlib import Path

import httpx
import pytest

from commitpost.config import Settings
from commitpost.dedupe import SQLDedupeStore
from commitpost.errors import AuthFailed
from commitpost.models import CommitRecord, PostDraft, PublishResult
from commitpost.publishers import BasePublisher


SAMPLE_SHA = "4f2a9c1e7b3d5a8f0c6e2b9d1a7f3c5e8b0d2a4f"


def _not_found(request: httpx.Request) -> httpx.Response:
    return httpx.Response(404, json={"message": "Not Found"})


class FakePublisher(BasePublisher):
    """Publisher that records drafts instead of calling a network."""

    backend_name = "bluesky"

    def __init__(self, settings, error=None, client=None):
        super().__init__(settings, client or httpx.AsyncClient(transport=httpx.MockTransport(_not_found)))
        self.error = error
        self.drafts = []
        self.authenticated = False

    async def authenticate(self):
        if isinstance(self.error, AuthFailed):
            raise self.error
        self.authenticated = True

    async def submit(self, draft: PostDraft) -> PublishResult:
        self.drafts.append(draft)
        if self.error is not None:
            raise self.error
        n = len(self.drafts)
        return PublishResult(
            backend=self.backend_name,
            post_id=f"post{n}",
            uri=f"at://did:plc:test/app.bsky.feed.post/post{n}",
        )


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_repo_root(temp_dir):
    """Create a mock git repository root directory."""
    # Create .git directory to simulate a git repo
    git_dir = temp_dir / ".git"
    git_dir.mkdir()
    return temp_dir


@pytest.fixture
def sample_sha():
    return SAMPLE_SHA


@pytest.fixture
def make_settings():
    """Factory for Settings with working Bluesky credentials."""

    def _make(**overrides) -> Settings:
        values = {
            "bluesky_identifier": "ada.bsky.social",
            "bluesky_password": "abcd-efgh-ijkl-mnop",
            "webhook_secret": "s3cret",
            "enrichment": False,
            "ai_summary": False,
        }
        values.update(overrides)
        return Settings(**values)

    return _make


@pytest.fixture
def make_commit():
    """Factory for CommitRecord pushed to octo/widget main."""

    def _make(**overrides) -> CommitRecord:
        values = {
            "sha": SAMPLE_SHA,
            "message": "fix: release v1.2.3",
            "author": "Ada",
            "branch": "main",
            "ref": "refs/heads/main",
            "repo": "octo/widget",
            "default_branch": "main",
            "html_url": "https://github.com/octo/widget",
        }
        values.update(overrides)
        return CommitRecord(**values)

    return _make


@pytest.fixture
def sql_store():
    """In-memory shared dedupe store."""
    store = SQLDedupeStore.from_url("sqlite://")
    yield store
    store.close()


@pytest.fixture
def make_publisher():
    """Factory for FakePublisher."""
    return FakePublisher
