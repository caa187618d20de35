"""Shared posting pipeline used by the CLI hook and the webhook server.

Order: trigger evaluation, dedupe seen-check, claim, enrichment,
composition, publish, then record (or release on failure). Dry runs
never claim or record. Dedupe store calls run in a worker thread so a
blocking database never stalls the event loop.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

import httpx

from commitpost.composer import compose_post
from commitpost.config import Settings
from commitpost.dedupe import DedupeStore
from commitpost.enrichment import fetch_repo_enrichment
from commitpost.llm import BaseSummarizer
from commitpost.models import CommitRecord, DedupeKey, PostDraft, PostRecord, PublishResult, RepoEnrichment
from commitpost.publishers import BasePublisher
from commitpost.trigger import Decision, evaluate

logger = logging.getLogger(__name__)

STATUS_POSTED = "posted"
STATUS_DRY_RUN = "dry_run"
STATUS_SKIP = "skip"

REASON_ALREADY_POSTED = "already_posted"


@dataclass
class Outcome:
    """What happened to one commit."""

    status: str
    commit: CommitRecord
    reason: Optional[str] = None
    decision: Optional[Decision] = None
    details: dict = field(default_factory=dict)
    draft: Optional[PostDraft] = None
    result: Optional[PublishResult] = None

    def as_response(self) -> dict:
        """Serialize for the webhook JSON response."""
        body = {"status": self.status, "sha": self.commit.short_sha}
        if self.reason:
            body["reason"] = self.reason
        body.update(self.details)
        if self.result is not None:
            if self.result.uri:
                body["uri"] = self.result.uri
            if self.result.post_id:
                body["post_id"] = self.result.post_id
            if self.result.dry_run:
                body["preview"] = self.result.preview
        return body


def dedupe_key(commit: CommitRecord, settings: Settings) -> DedupeKey:
    """Scope a commit by backend and repository."""
    return DedupeKey(namespace=settings.backend.value, repo=commit.repo or "", sha=commit.sha)


async def resolve_enrichment(
    commit: CommitRecord,
    settings: Settings,
    client: httpx.AsyncClient,
) -> Optional[RepoEnrichment]:
    if commit.enrichment is not None:
        return commit.enrichment
    if not settings.enrichment:
        return None
    return await fetch_repo_enrichment(client, commit.repo, token=settings.github_token)


async def run_pipeline(
    commit: CommitRecord,
    settings: Settings,
    store: DedupeStore,
    publisher: BasePublisher,
    summarizer: Optional[BaseSummarizer] = None,
    server: bool = False,
) -> Outcome:
    """Evaluate, compose and publish one commit at most once.

    Args:
        commit: The commit to announce.
        settings: Resolved settings.
        store: Dedupe store for the current mode.
        publisher: Publisher for the configured backend.
        summarizer: Optional AI summarizer.
        server: Whether the commit came from a webhook push.

    Returns:
        The Outcome. Skips are outcomes, never exceptions.

    Raises:
        AuthFailed: If the backend rejects the credentials.
        PostFailed: If the backend rejects the post.
    """
    evaluation = evaluate(commit, settings, server=server)
    if not evaluation.proceed:
        logger.info("Skipping %s: %s", commit.short_sha, evaluation.reason)
        return Outcome(
            STATUS_SKIP,
            commit,
            reason=evaluation.reason,
            decision=evaluation.decision,
            details=dict(evaluation.details),
        )
    if evaluation.forced:
        logger.info("Force enabled, bypassing trigger gates for %s", commit.short_sha)

    key = dedupe_key(commit, settings)
    if await asyncio.to_thread(store.seen, key):
        logger.info("Skipping %s: already posted", commit.short_sha)
        return Outcome(STATUS_SKIP, commit, reason=REASON_ALREADY_POSTED, decision=Decision.SKIP_ALREADY_POSTED)

    if settings.dry_run:
        draft = await _compose(commit, settings, publisher, summarizer)
        result = await publisher.publish(draft)
        return Outcome(STATUS_DRY_RUN, commit, decision=Decision.PROCEED, draft=draft, result=result)

    if not await asyncio.to_thread(store.claim, key):
        logger.info("Skipping %s: claimed by another delivery", commit.short_sha)
        return Outcome(STATUS_SKIP, commit, reason=REASON_ALREADY_POSTED, decision=Decision.SKIP_ALREADY_POSTED)

    try:
        draft = await _compose(commit, settings, publisher, summarizer)
        result = await publisher.publish(draft)
    except Exception:
        await asyncio.to_thread(store.release, key)
        raise

    record = PostRecord(
        post_id=result.post_id,
        uri=result.uri,
        posted_at=datetime.now(timezone.utc).isoformat(),
        preview=draft.text,
    )
    await asyncio.to_thread(store.record, key, record)
    logger.info("Posted %s to %s: %s", commit.short_sha, result.backend, result.uri or "ok")
    return Outcome(STATUS_POSTED, commit, decision=Decision.PROCEED, draft=draft, result=result)


async def _compose(
    commit: CommitRecord,
    settings: Settings,
    publisher: BasePublisher,
    summarizer: Optional[BaseSummarizer],
) -> PostDraft:
    enrichment = await resolve_enrichment(commit, settings, publisher.client)
    return await compose_post(commit, enrichment, settings, summarizer)
