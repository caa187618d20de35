"""Publishers for commitpost.

This package provides:
- base: BasePublisher with dry-run handling
- bluesky: AT-Protocol publisher with a reusable session
- twitter: OAuth 1.0a publisher
- oauth1: request signing helpers
"""

from typing import Optional

import httpx

from commitpost.config import Backend, Settings
from commitpost.publishers.base import BasePublisher, dry_run_preview
from commitpost.publishers.bluesky import BlueskyPublisher, SessionHolder
from commitpost.publishers.twitter import TwitterPublisher


def get_publisher(settings: Settings, client: Optional[httpx.AsyncClient] = None) -> BasePublisher:
    """Get the publisher for the configured backend.

    Args:
        settings: Resolved settings.
        client: Optional shared HTTP client.

    Returns:
        A publisher instance.

    Raises:
        ValueError: If the backend is not supported.
    """
    if settings.backend == Backend.BLUESKY:
        return BlueskyPublisher(settings, client)
    elif settings.backend == Backend.TWITTER:
        return TwitterPublisher(settings, client)
    else:
        raise ValueError(f"Unsupported backend: {settings.backend}")


__all__ = [
    "BasePublisher",
    "BlueskyPublisher",
    "SessionHolder",
    "TwitterPublisher",
    "dry_run_preview",
    "get_publisher",
]
