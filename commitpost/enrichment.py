"""GitHub repository metadata used to enrich posts.

Enrichment is best effort: any failure is logged and yields None, and the
post is composed without topics or a link card.
"""

import logging
from typing import Optional

import httpx

from commitpost.config import DEFAULT_GITHUB_API
from commitpost.errors import EnrichmentError
from commitpost.models import RepoEnrichment

logger = logging.getLogger(__name__)

USER_AGENT = "commitpost"


def parse_repo_payload(repo: str, data: dict) -> RepoEnrichment:
    """Build RepoEnrichment from a GitHub ``GET /repos/{repo}`` response body."""
    homepage = data.get("homepage")
    if not isinstance(homepage, str) or not homepage.strip():
        homepage = None
    else:
        homepage = homepage.strip()

    name = data.get("name") or repo.split("/")[-1] or repo
    return RepoEnrichment(
        name=name,
        description=data.get("description") or "",
        html_url=data.get("html_url") or f"https://github.com/{repo}",
        homepage=homepage,
        topics=[str(topic) for topic in data.get("topics") or []],
    )


async def request_repo(client: httpx.AsyncClient, url: str, headers: dict) -> dict:
    """GET a repository resource and return its JSON object.

    Raises:
        EnrichmentError: On transport errors, non-2xx status or a non-object body.
    """
    try:
        response = await client.get(url, headers=headers)
        response.raise_for_status()
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        raise EnrichmentError(str(e)) from e

    if not isinstance(data, dict):
        raise EnrichmentError("unexpected response body")
    return data


async def fetch_repo_enrichment(
    client: httpx.AsyncClient,
    repo: Optional[str],
    token: str = "",
    api_base: str = DEFAULT_GITHUB_API,
) -> Optional[RepoEnrichment]:
    """Fetch repository metadata from the GitHub REST API.

    Args:
        client: HTTP client (carries the timeout).
        repo: Repository in ``owner/repo`` form.
        token: Optional GitHub token for higher rate limits and private repos.
        api_base: GitHub API base URL.

    Returns:
        RepoEnrichment, or None when the repo is unknown or the call fails.
    """
    if not repo:
        return None

    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"

    try:
        data = await request_repo(client, f"{api_base.rstrip('/')}/repos/{repo}", headers)
    except EnrichmentError as e:
        logger.warning("Repository enrichment failed for %s: %s", repo, e)
        return None

    return parse_repo_payload(repo, data)
