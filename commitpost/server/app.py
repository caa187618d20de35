"""FastAPI application receiving GitHub push webhooks.

Routes:
- POST /webhook: verify, evaluate and post the pushed head commit
- GET /health: liveness probe
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from commitpost.config import Settings
from commitpost.dedupe import DedupeStore, SQLDedupeStore
from commitpost.errors import AuthFailed, PostFailed, SignatureError
from commitpost.llm import BaseSummarizer, summarizer_from_settings
from commitpost.pipeline import STATUS_SKIP, run_pipeline
from commitpost.publishers import BasePublisher, get_publisher
from commitpost.server.models import PushEvent
from commitpost.signature import SIGNATURE_HEADER, require_signature

logger = logging.getLogger(__name__)

EVENT_HEADER = "X-GitHub-Event"


def _error(status_code: int, reason: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"status": "error", "reason": reason})


def create_app(
    settings: Settings,
    store: Optional[DedupeStore] = None,
    publisher: Optional[BasePublisher] = None,
    summarizer: Optional[BaseSummarizer] = None,
) -> FastAPI:
    """Create the webhook application.

    One publisher (and so one Bluesky session) serves every request.

    Args:
        settings: Resolved settings.
        store: Dedupe store. Defaults to SQLDedupeStore at settings.dedupe_db_url.
        publisher: Publisher. Defaults to the configured backend's publisher.
        summarizer: Summarizer. Defaults to the configured provider, if enabled.

    Returns:
        The FastAPI app.
    """
    store = store or SQLDedupeStore.from_url(settings.dedupe_db_url)
    publisher = publisher or get_publisher(settings)
    if summarizer is None:
        summarizer = summarizer_from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Webhook server ready: backend=%s account=%s gate=%s dry_run=%s",
            settings.backend.value,
            settings.identity,
            settings.gate.value,
            settings.dry_run,
        )
        yield
        await publisher.aclose()
        store.close()

    app = FastAPI(title="commitpost", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.publisher = publisher
    app.state.summarizer = summarizer

    @app.get("/health")
    async def health():
        return {"ok": True, "now": datetime.now(timezone.utc).isoformat()}

    @app.post("/webhook")
    async def webhook(request: Request):
        if not settings.webhook_secret:
            logger.error("GITHUB_WEBHOOK_SECRET is not configured")
            return _error(500, "webhook_secret_not_configured")

        body = await request.body()
        try:
            require_signature(settings.webhook_secret, body, request.headers.get(SIGNATURE_HEADER))
        except SignatureError as e:
            logger.warning("Rejected webhook: %s", e)
            return _error(401, "bad_signature")

        event = request.headers.get(EVENT_HEADER, "")
        if event != "push":
            return JSONResponse(status_code=202, content={"status": "ignored", "event": event})

        try:
            payload = json.loads(body)
        except ValueError:
            return _error(400, "invalid_json")

        try:
            push = PushEvent.model_validate(payload)
        except ValidationError:
            return _error(400, "invalid_payload")

        commit = push.to_commit()
        if commit is None:
            return {"status": STATUS_SKIP, "reason": "no_head_commit"}

        try:
            outcome = await run_pipeline(
                commit,
                settings,
                store,
                publisher,
                summarizer=summarizer,
                server=True,
            )
        except AuthFailed as e:
            logger.error("Authentication failed for %s: %s", commit.short_sha, e)
            return _error(502, "auth_failed")
        except PostFailed as e:
            logger.error("Post failed for %s: %s", commit.short_sha, e)
            return _error(502, "post_failed")

        logger.info("Webhook %s %s: %s", commit.repo, commit.short_sha, outcome.status)
        return outcome.as_response()

    return app
