"""Tests for commitpost.pipeline module."""

import asyncio

import httpx
import pytest

from commitpost.dedupe import SQLDedupeStore
from commitpost.errors import AuthFailed, PostFailed
from commitpost.models import RepoEnrichment
from commitpost.pipeline import (
    REASON_ALREADY_POSTED,
    STATUS_DRY_RUN,
    STATUS_POSTED,
    STATUS_SKIP,
    dedupe_key,
    run_pipeline,
)
from commitpost.trigger import Decision


def _run(commit, settings, store, publisher, server=False):
    return asyncio.run(run_pipeline(commit, settings, store, publisher, server=server))


class TestRunPipeline:
    """Tests for run_pipeline function."""

    def test_posts_and_records(self, make_settings, make_commit, make_publisher, sql_store, sample_sha):
        """Test a qualifying commit is published once and recorded."""
        settings = make_settings()
        publisher = make_publisher(settings)
        commit = make_commit()

        outcome = _run(commit, settings, sql_store, publisher)

        assert outcome.status == STATUS_POSTED
        assert len(publisher.drafts) == 1
        assert "v1.2.3" in publisher.drafts[0].text
        assert sample_sha not in publisher.drafts[0].text
        row = sql_store.get(dedupe_key(commit, settings))
        assert row.status == "posted"
        assert row.post_uri == outcome.result.uri

    def test_second_run_is_skipped(self, make_settings, make_commit, make_publisher, sql_store):
        """Test a recorded commit is never published again."""
        settings = make_settings()
        publisher = make_publisher(settings)

        _run(make_commit(), settings, sql_store, publisher)
        outcome = _run(make_commit(), settings, sql_store, publisher)

        assert outcome.status == STATUS_SKIP
        assert outcome.reason == REASON_ALREADY_POSTED
        assert outcome.decision == Decision.SKIP_ALREADY_POSTED
        assert len(publisher.drafts) == 1

    def test_pending_claim_is_skipped(self, make_settings, make_commit, make_publisher, sql_store):
        """Test a commit claimed by a concurrent delivery is skipped."""
        settings = make_settings()
        publisher = make_publisher(settings)
        commit = make_commit()
        sql_store.claim(dedupe_key(commit, settings))

        outcome = _run(commit, settings, sql_store, publisher)

        assert outcome.reason == REASON_ALREADY_POSTED
        assert publisher.drafts == []

    def test_trigger_skip(self, make_settings, make_commit, make_publisher, sql_store, mocker):
        """Test a non-qualifying commit never touches the store."""
        settings = make_settings()
        publisher = make_publisher(settings)
        claim = mocker.spy(sql_store, "claim")

        outcome = _run(make_commit(message="fix typo"), settings, sql_store, publisher)

        assert outcome.status == STATUS_SKIP
        assert outcome.reason == "no_trigger"
        claim.assert_not_called()
        assert publisher.drafts == []

    def test_skip_details_in_response(self, make_settings, make_commit, make_publisher, sql_store):
        """Test branch skip details are included in the response body."""
        settings = make_settings()
        commit = make_commit(ref="refs/heads/feature")

        outcome = _run(commit, settings, sql_store, make_publisher(settings), server=True)

        assert outcome.as_response() == {
            "status": "skip",
            "sha": commit.short_sha,
            "reason": "wrong_branch",
            "ref": "refs/heads/feature",
            "expected": "refs/heads/main",
        }

    def test_dry_run_never_claims_or_records(self, make_settings, make_commit, make_publisher, sql_store, mocker):
        """Test dry run previews without claiming or recording."""
        settings = make_settings(dry_run=True)
        publisher = make_publisher(settings)
        claim = mocker.spy(sql_store, "claim")
        record = mocker.spy(sql_store, "record")

        outcome = _run(make_commit(), settings, sql_store, publisher)

        assert outcome.status == STATUS_DRY_RUN
        assert outcome.result.preview[0].startswith("[dryrun] would post: fix: release v1.2.3")
        assert publisher.drafts == []
        claim.assert_not_called()
        record.assert_not_called()
        assert "preview" in outcome.as_response()

    @pytest.mark.parametrize("error", [PostFailed("rejected"), AuthFailed("bad password")])
    def test_failure_releases_claim(self, make_settings, make_commit, make_publisher, sql_store, error):
        """Test a failed publish releases the claim and re-raises."""
        settings = make_settings()
        commit = make_commit()
        key = dedupe_key(commit, settings)

        with pytest.raises(type(error)):
            _run(commit, settings, sql_store, make_publisher(settings, error=error))

        assert sql_store.get(key) is None
        assert sql_store.claim(key)

    @pytest.mark.parametrize("shared_db", [False, True])
    def test_concurrent_deliveries_publish_once(self, make_settings, make_commit, make_publisher, sql_store, temp_dir, shared_db):
        """Test two simultaneous deliveries of one commit publish exactly once."""
        settings = make_settings()
        store = SQLDedupeStore.from_url(f"sqlite:///{temp_dir / 'dedupe.db'}") if shared_db else sql_store

        class SlowPublisher(make_publisher):
            async def submit(self, draft):
                await asyncio.sleep(0.05)
                return await super().submit(draft)

        publisher = SlowPublisher(settings)

        async def deliver_twice():
            return await asyncio.gather(
                run_pipeline(make_commit(), settings, store, publisher, server=True),
                run_pipeline(make_commit(), settings, store, publisher, server=True),
            )

        try:
            outcomes = asyncio.run(deliver_twice())
        finally:
            if shared_db:
                store.close()

        assert sorted(outcome.status for outcome in outcomes) == [STATUS_POSTED, STATUS_SKIP]
        skipped = next(outcome for outcome in outcomes if outcome.status == STATUS_SKIP)
        assert skipped.reason == REASON_ALREADY_POSTED
        assert len(publisher.drafts) == 1

    def test_retry_after_failure(self, make_settings, make_commit, make_publisher, sql_store):
        """Test a later delivery can post after a failure."""
        settings = make_settings()

        with pytest.raises(PostFailed):
            _run(make_commit(), settings, sql_store, make_publisher(settings, error=PostFailed("x")))
        outcome = _run(make_commit(), settings, sql_store, make_publisher(settings))

        assert outcome.status == STATUS_POSTED

    def test_enrichment_fetched_when_enabled(self, make_settings, make_commit, make_publisher, sql_store):
        """Test topics and the embed come from the GitHub API."""
        def handler(request):
            assert request.url.path == "/repos/octo/widget"
            return httpx.Response(
                200,
                json={"name": "widget", "html_url": "https://github.com/octo/widget", "topics": ["python"]},
            )

        settings = make_settings(enrichment=True)
        publisher = make_publisher(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        _run(make_commit(), settings, sql_store, publisher)

        draft = publisher.drafts[0]
        assert "#Python" in draft.text
        assert draft.embed.uri == "https://github.com/octo/widget"

    def test_preset_enrichment_used(self, make_settings, make_commit, make_publisher, sql_store):
        """Test enrichment already on the commit skips the API call."""
        enrichment = RepoEnrichment(name="widget", html_url="https://github.com/octo/widget", topics=["cli"])
        settings = make_settings(enrichment=True)

        def handler(request):
            raise AssertionError("no request expected")

        publisher = make_publisher(settings, client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        _run(make_commit(enrichment=enrichment), settings, sql_store, publisher)

        assert publisher.drafts[0].hashtags == ["#Cli"]

    def test_local_store_records_sha(self, make_settings, make_commit, make_publisher, temp_dir, sample_sha):
        """Test the CLI file store gets the sha after a post."""
        from commitpost.dedupe import LocalFileStore

        settings = make_settings()
        store = LocalFileStore(temp_dir / "commitpost-posted")

        _run(make_commit(), settings, store, make_publisher(settings))

        assert (temp_dir / "commitpost-posted").read_text() == f"{sample_sha}\n"
