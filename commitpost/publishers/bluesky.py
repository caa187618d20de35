"""Bluesky publisher over AT-Protocol XRPC.

Contains:
- SessionHolder: lazily filled, resettable session for one account
- build_facets: link and hashtag facets with UTF-8 byte offsets
- BlueskyPublisher: createSession + createRecord with one re-auth retry
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import httpx

from commitpost.config import Settings
from commitpost.errors import AuthFailed, PostFailed
from commitpost.models import ExternalEmbed, PostDraft, PublishResult
from commitpost.publishers.base import BasePublisher

logger = logging.getLogger(__name__)

CREATE_SESSION = "com.atproto.server.createSession"
CREATE_RECORD = "com.atproto.repo.createRecord"
POST_COLLECTION = "app.bsky.feed.post"

# Token errors that warrant a fresh session rather than a failure
SESSION_ERRORS = {"ExpiredToken", "InvalidToken", "AuthenticationRequired"}

URL_RE = re.compile(r"https?://[^\s…]+")
HASHTAG_RE = re.compile(r"(?:^|(?<=\s))#([^\d\s#][^\s#]*)")
TRAILING_PUNCTUATION = ".,;:!?)\"'"


@dataclass
class SessionHolder:
    """Authenticated session state, shared across publishes by one publisher."""

    access_jwt: Optional[str] = None
    did: Optional[str] = None
    handle: Optional[str] = None

    @property
    def active(self) -> bool:
        return bool(self.access_jwt and self.did)

    def set(self, access_jwt: str, did: str, handle: Optional[str] = None) -> None:
        self.access_jwt = access_jwt
        self.did = did
        self.handle = handle

    def reset(self) -> None:
        self.access_jwt = None
        self.did = None
        self.handle = None


def _byte_index(text: str, start: int, end: int) -> dict:
    return {
        "byteStart": len(text[:start].encode("utf-8")),
        "byteEnd": len(text[:end].encode("utf-8")),
    }


def build_facets(text: str) -> list[dict]:
    """Detect links and hashtags and describe them as rich-text facets.

    Offsets are UTF-8 byte positions, as AT-Protocol requires.
    """
    facets = []

    for match in URL_RE.finditer(text):
        url = match.group(0).rstrip(TRAILING_PUNCTUATION)
        start = match.start()
        facets.append(
            {
                "index": _byte_index(text, start, start + len(url)),
                "features": [{"$type": "app.bsky.richtext.facet#link", "uri": url}],
            }
        )

    for match in HASHTAG_RE.finditer(text):
        tag = match.group(1).rstrip(TRAILING_PUNCTUATION)
        if not tag:
            continue
        start = match.start(1) - 1
        facets.append(
            {
                "index": _byte_index(text, start, start + len(tag) + 1),
                "features": [{"$type": "app.bsky.richtext.facet#tag", "tag": tag}],
            }
        )

    facets.sort(key=lambda facet: facet["index"]["byteStart"])
    return facets


def build_external_embed(embed: ExternalEmbed) -> dict:
    return {
        "$type": "app.bsky.embed.external",
        "external": {
            "uri": embed.uri,
            "title": embed.title,
            "description": embed.description,
        },
    }


def build_post_record(draft: PostDraft, created_at: Optional[str] = None) -> dict:
    """Build the ``app.bsky.feed.post`` record for a draft."""
    record = {
        "$type": POST_COLLECTION,
        "text": draft.text,
        "createdAt": created_at or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    facets = build_facets(draft.text)
    if facets:
        record["facets"] = facets
    if draft.embed is not None:
        record["embed"] = build_external_embed(draft.embed)
    return record


def _error_name(response: httpx.Response) -> str:
    try:
        return str(response.json().get("error", ""))
    except ValueError:
        return ""


def _is_session_error(response: httpx.Response) -> bool:
    if response.status_code == 401:
        return True
    return response.status_code == 400 and _error_name(response) in SESSION_ERRORS


class BlueskyPublisher(BasePublisher):
    """Posts to Bluesky using an app password."""

    backend_name = "bluesky"

    def __init__(
        self,
        settings: Settings,
        client: Optional[httpx.AsyncClient] = None,
        session: Optional[SessionHolder] = None,
    ):
        super().__init__(settings, client)
        self.session = session if session is not None else SessionHolder()

    def _xrpc_url(self, method: str) -> str:
        return f"{self.settings.bluesky_service.rstrip('/')}/xrpc/{method}"

    async def authenticate(self) -> None:
        """Create a session and store it in the SessionHolder.

        Raises:
            AuthFailed: If the service rejects the identifier or app password.
        """
        try:
            response = await self.client.post(
                self._xrpc_url(CREATE_SESSION),
                json={
                    "identifier": self.settings.bluesky_identifier,
                    "password": self.settings.bluesky_password,
                },
            )
        except httpx.HTTPError as e:
            raise AuthFailed(f"Bluesky login request failed: {e}")

        if response.status_code != 200:
            raise AuthFailed(
                f"Bluesky login failed ({response.status_code}): {_error_name(response) or response.text}"
            )

        try:
            data = response.json()
            self.session.set(data["accessJwt"], data["did"], data.get("handle"))
        except (KeyError, TypeError, ValueError) as e:
            raise AuthFailed(f"Bluesky login returned an unusable session: {e!r}")

        logger.info("Authenticated to Bluesky as %s", self.session.handle or self.session.did)

    async def _create_record(self, draft: PostDraft) -> httpx.Response:
        try:
            return await self.client.post(
                self._xrpc_url(CREATE_RECORD),
                headers={"Authorization": f"Bearer {self.session.access_jwt}"},
                json={
                    "repo": self.session.did,
                    "collection": POST_COLLECTION,
                    "record": build_post_record(draft),
                },
            )
        except httpx.HTTPError as e:
            raise PostFailed(f"Bluesky post request failed: {e}")

    async def submit(self, draft: PostDraft) -> PublishResult:
        """Create the post, re-authenticating once if the session was rejected.

        Raises:
            AuthFailed: If (re-)authentication fails.
            PostFailed: If the record could not be created.
        """
        if not self.session.active:
            await self.authenticate()

        response = await self._create_record(draft)

        if _is_session_error(response):
            logger.info("Bluesky session rejected, re-authenticating once")
            self.session.reset()
            await self.authenticate()
            response = await self._create_record(draft)
            if _is_session_error(response):
                self.session.reset()
                raise AuthFailed(
                    f"Bluesky session rejected after re-authentication ({response.status_code}): "
                    f"{_error_name(response) or response.text}"
                )

        if response.status_code != 200:
            raise PostFailed(
                f"Bluesky post failed ({response.status_code}): {_error_name(response) or response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise PostFailed(f"Bluesky post returned an unreadable body: {e}")
        uri = data.get("uri")
        return PublishResult(
            backend=self.backend_name,
            post_id=uri.rsplit("/", 1)[-1] if uri else data.get("cid"),
            uri=uri,
        )
