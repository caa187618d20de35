"""Base class for social network publishers."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

import httpx

from commitpost.config import HTTP_TIMEOUT_SECONDS, Settings
from commitpost.models import PostDraft, PublishResult

logger = logging.getLogger(__name__)


def dry_run_preview(draft: PostDraft) -> list[str]:
    """Describe what would be posted, one line per field."""
    lines = [f"[dryrun] would post: {draft.text}"]
    if draft.embed is not None:
        lines.extend(
            [
                "[dryrun] with embed card:",
                f"  Title: {draft.embed.title}",
                f"  URL: {draft.embed.uri}",
                f"  Description: {draft.embed.description}",
            ]
        )
    return lines


class BasePublisher(ABC):
    """Abstract base class for publishers.

    Subclasses implement ``authenticate`` and ``submit``; callers use
    ``publish``, which honours dry-run without touching the network.
    """

    backend_name: str = ""

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=HTTP_TIMEOUT_SECONDS)

    @property
    def dry_run(self) -> bool:
        return self.settings.dry_run

    @abstractmethod
    async def authenticate(self) -> None:
        """Verify credentials with the backend.

        Raises:
            AuthFailed: If the backend rejects the credentials.
        """
        pass

    @abstractmethod
    async def submit(self, draft: PostDraft) -> PublishResult:
        """Create the post on the backend.

        Raises:
            AuthFailed: If the backend rejects the credentials.
            PostFailed: If the post could not be created.
        """
        pass

    async def publish(self, draft: PostDraft) -> PublishResult:
        """Publish a draft, or describe it when dry-run is on."""
        if self.dry_run:
            return PublishResult(
                backend=self.backend_name,
                dry_run=True,
                preview=dry_run_preview(draft),
            )
        return await self.submit(draft)

    async def aclose(self) -> None:
        """Close the HTTP client if this publisher created it."""
        if self._owns_client:
            await self.client.aclose()
