"""Twitter/X publisher signed with OAuth 1.0a."""

import logging
from typing import Optional

import httpx

from commitpost.config import Settings
from commitpost.errors import AuthFailed, PostFailed
from commitpost.models import PostDraft, PublishResult
from commitpost.publishers.base import BasePublisher
from commitpost.publishers.oauth1 import authorization_header

logger = logging.getLogger(__name__)

VERIFY_CREDENTIALS_ENDPOINT = "https://api.twitter.com/1.1/account/verify_credentials.json"
STATUS_URL_TEMPLATE = "https://twitter.com/i/web/status/{id}"


class TwitterPublisher(BasePublisher):
    """Posts a status update. No retry: every failure is final."""

    backend_name = "twitter"

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        super().__init__(settings, client)

    def _authorization(self, method: str, url: str, params: dict) -> str:
        return authorization_header(
            method,
            url,
            params,
            consumer_key=self.settings.twitter_api_key,
            consumer_secret=self.settings.twitter_api_secret,
            token=self.settings.twitter_access_token,
            token_secret=self.settings.twitter_access_token_secret,
        )

    @staticmethod
    def _raise_for_status(response: httpx.Response, action: str) -> None:
        if response.status_code in (401, 403):
            raise AuthFailed(f"Twitter/X {action} unauthorized ({response.status_code}): {response.text}")
        if response.status_code >= 300:
            raise PostFailed(f"Twitter/X {action} failed ({response.status_code}): {response.text}")

    async def authenticate(self) -> None:
        """Check the OAuth credentials against verify_credentials.

        Raises:
            AuthFailed: If the credentials are rejected or unreachable.
        """
        url = VERIFY_CREDENTIALS_ENDPOINT
        try:
            response = await self.client.get(
                url, headers={"Authorization": self._authorization("GET", url, {})}
            )
        except httpx.HTTPError as e:
            raise AuthFailed(f"Twitter/X credential check failed: {e}")
        try:
            self._raise_for_status(response, "credential check")
        except PostFailed as e:
            raise AuthFailed(str(e))

    async def submit(self, draft: PostDraft) -> PublishResult:
        """Post ``status=<text>`` as a form-encoded body.

        Raises:
            AuthFailed: On 401/403.
            PostFailed: On any other failure.
        """
        url = self.settings.twitter_endpoint
        params = {"status": draft.text}

        try:
            response = await self.client.post(
                url,
                data=params,
                headers={"Authorization": self._authorization("POST", url, params)},
            )
        except httpx.HTTPError as e:
            raise PostFailed(f"Twitter/X post request failed: {e}")

        self._raise_for_status(response, "post")

        data = response.json()
        post_id = data.get("id_str") or (str(data["id"]) if data.get("id") is not None else None)
        return PublishResult(
            backend=self.backend_name,
            post_id=post_id,
            uri=STATUS_URL_TEMPLATE.format(id=post_id) if post_id else None,
        )
