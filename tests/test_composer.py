"""Tests for commitpost.composer and commitpost.hashtags modules."""

import asyncio

import pytest

from commitpost.composer import (
    ELLIPSIS,
    build_byline,
    build_embed,
    build_post_text,
    compose_post,
    fit_text,
    sanitize_headline,
)
from commitpost.config import Backend
from commitpost.hashtags import topic_to_hashtag, topics_to_hashtags
from commitpost.llm import BaseSummarizer, LLMError
from commitpost.models import RepoEnrichment


class StubSummarizer(BaseSummarizer):
    """Summarizer returning a canned reply and recording its inputs."""

    def __init__(self, reply="", error=None):
        super().__init__(api_key="test-key", model="stub", max_tokens=10, temperature=0, timeout=1)
        self.reply = reply
        self.error = error
        self.calls = []

    async def _complete(self, system_prompt, user_prompt):
        self.calls.append((system_prompt, user_prompt))
        if self.error is not None:
            raise self.error
        return self.reply


def _enrichment(**overrides):
    values = {
        "name": "widget",
        "description": "A tiny widget",
        "html_url": "https://github.com/octo/widget",
        "topics": [],
    }
    values.update(overrides)
    return RepoEnrichment(**values)


class TestTopicToHashtag:
    """Tests for topic_to_hashtag function."""

    @pytest.mark.parametrize(
        "topic,expected",
        [
            ("typescript", "#TypeScript"),
            ("javascript", "#JavaScript"),
            ("nodejs", "#NodeJS"),
            ("github", "#GitHub"),
            ("webassembly", "#WebAssembly"),
            ("postgresql", "#PostgreSQL"),
            ("mongodb", "#MongoDB"),
            ("graphql", "#GraphQL"),
        ],
    )
    def test_brand_spellings(self, topic, expected):
        """Test known brands use their canonical spelling."""
        assert topic_to_hashtag(topic) == expected

    def test_pascal_case_segments(self):
        """Test hyphenated topics become PascalCase."""
        assert topic_to_hashtag("bluesky-client") == "#BlueskyClient"
        assert topic_to_hashtag("deno") == "#Deno"

    def test_brand_lookup_ignores_case(self):
        """Test brand matching is case-insensitive."""
        assert topic_to_hashtag("GraphQL") == "#GraphQL"

    def test_drops_empty_and_duplicate_topics(self):
        """Test topics_to_hashtags skips blanks and repeats."""
        assert topics_to_hashtags(["python", "", "python", "cli"]) == ["#Python", "#Cli"]


class TestSanitizeHeadline:
    """Tests for sanitize_headline function."""

    def test_uses_first_line(self):
        """Test only the first line is kept."""
        assert sanitize_headline("  fix: release v1.2.3  \n\nLong body") == "fix: release v1.2.3"

    def test_strips_hash_tokens(self):
        """Test 7-40 char hex tokens are removed and whitespace collapsed."""
        message = "Revert 4f2a9c1 and ABCDEF0123 fix"

        assert sanitize_headline(message) == "Revert and fix"

    def test_keeps_short_hex_words(self):
        """Test words shorter than 7 hex chars survive."""
        assert sanitize_headline("add cafe beef") == "add cafe beef"

    def test_keeps_versions(self):
        """Test semantic versions are not treated as hashes."""
        assert sanitize_headline("release v1.2.3") == "release v1.2.3"


class TestFitText:
    """Tests for fit_text function."""

    def test_under_limit_unchanged(self):
        """Test text within the limit is returned as-is."""
        assert fit_text("short", 300) == "short"

    def test_exact_limit_unchanged(self):
        """Test text exactly at the limit is not cut."""
        text = "x" * 280

        assert fit_text(text, 280) == text

    def test_over_limit_cut_with_ellipsis(self):
        """Test long text is cut to exactly the limit ending in an ellipsis."""
        result = fit_text("x" * 400, 300)

        assert len(result) == 300
        assert result.endswith(ELLIPSIS)
        assert result[:-1] == "x" * 299


class TestBuildPostText:
    """Tests for build_post_text function."""

    def test_assembles_parts_in_order(self, make_commit, sample_sha):
        """Test summary, byline, commit URL and trace tag are joined with spaces."""
        commit = make_commit()

        text = build_post_text(commit, "fix: release v1.2.3", [], 300)

        assert text == (
            "fix: release v1.2.3 — octo/widget by Ada (4f2a9c1) "
            "https://github.com/octo/widget/commit/4f2a9c1 #gh_4f2a9c1"
        )
        assert sample_sha not in text

    def test_includes_hashtags(self, make_commit):
        """Test topic hashtags follow the summary."""
        text = build_post_text(make_commit(), "Shipped", ["#Python", "#Cli"], 300)

        assert text.startswith("Shipped #Python #Cli — octo/widget")

    def test_omits_unknown_repo_and_url(self, make_commit):
        """Test commits without a GitHub remote still get a byline and tag."""
        commit = make_commit(repo=None, html_url=None)

        text = build_post_text(commit, "Shipped", [], 300)

        assert text == "Shipped — by Ada (4f2a9c1) #gh_4f2a9c1"

    def test_truncates_to_limit(self, make_commit):
        """Test an oversized post is cut to the limit."""
        text = build_post_text(make_commit(), "word " * 100, [], 280)

        assert len(text) == 280
        assert text.endswith(ELLIPSIS)

    def test_byline_with_repo(self, make_commit):
        """Test the byline format."""
        assert build_byline(make_commit()) == "— octo/widget by Ada (4f2a9c1)"


class TestBuildEmbed:
    """Tests for build_embed function."""

    def test_no_enrichment(self):
        """Test no card without repository metadata."""
        assert build_embed(None) is None

    def test_prefers_homepage(self):
        """Test the homepage wins over the repository URL."""
        embed = build_embed(_enrichment(homepage="https://widget.dev"))

        assert embed.uri == "https://widget.dev"
        assert embed.title == "widget"
        assert embed.description == "A tiny widget"

    def test_falls_back_to_repo_url_and_default_description(self):
        """Test defaults when homepage and description are empty."""
        embed = build_embed(_enrichment(description=""))

        assert embed.uri == "https://github.com/octo/widget"
        assert embed.description == "GitHub repository"


class TestComposePost:
    """Tests for compose_post function."""

    def test_without_summarizer(self, make_settings, make_commit):
        """Test the sanitized headline is used directly."""
        draft = asyncio.run(compose_post(make_commit(), None, make_settings()))

        assert draft.text.startswith("fix: release v1.2.3 — octo/widget")
        assert draft.limit == 300
        assert draft.embed is None
        assert draft.hashtags == []

    def test_twitter_limit(self, make_settings, make_commit):
        """Test the Twitter/X backend uses a 280 character limit."""
        settings = make_settings(backend=Backend.TWITTER)

        draft = asyncio.run(compose_post(make_commit(message="x" * 400), None, settings))

        assert draft.limit == 280
        assert len(draft.text) == 280

    def test_topics_become_hashtags_and_embed(self, make_settings, make_commit):
        """Test enrichment supplies hashtags and a link card."""
        enrichment = _enrichment(topics=["python", "bluesky-client"])

        draft = asyncio.run(compose_post(make_commit(), enrichment, make_settings()))

        assert draft.hashtags == ["#Python", "#BlueskyClient"]
        assert "#Python #BlueskyClient" in draft.text
        assert draft.embed.title == "widget"

    def test_summarizer_output_used(self, make_settings, make_commit):
        """Test the condensed text replaces the headline."""
        summarizer = StubSummarizer(reply='"I shipped v1.2.3 with fixes"')

        draft = asyncio.run(compose_post(make_commit(), None, make_settings(), summarizer))

        assert draft.text.startswith("I shipped v1.2.3 with fixes —")

    def test_summarizer_told_about_topics(self, make_settings, make_commit):
        """Test the prompt forbids hashtags when topics exist."""
        summarizer = StubSummarizer(reply="Shipped")
        enrichment = _enrichment(topics=["python"])

        asyncio.run(compose_post(make_commit(), enrichment, make_settings(), summarizer))

        system_prompt, _ = summarizer.calls[0]
        assert "DO NOT add hashtags" in system_prompt

    def test_summarizer_hashes_stripped(self, make_settings, make_commit, sample_sha):
        """Test hashes echoed by the model are removed."""
        summarizer = StubSummarizer(reply=f"Shipped {sample_sha}")

        draft = asyncio.run(compose_post(make_commit(), None, make_settings(), summarizer))

        assert sample_sha not in draft.text
        assert draft.text.startswith("Shipped —")

    def test_summarizer_failure_falls_back(self, make_settings, make_commit):
        """Test an LLMError keeps the original headline."""
        summarizer = StubSummarizer(error=LLMError("boom"))

        draft = asyncio.run(compose_post(make_commit(), None, make_settings(), summarizer))

        assert draft.text.startswith("fix: release v1.2.3 —")

    def test_empty_summary_falls_back(self, make_settings, make_commit):
        """Test an empty model reply keeps the original headline."""
        summarizer = StubSummarizer(reply="   ")

        draft = asyncio.run(compose_post(make_commit(), None, make_settings(), summarizer))

        assert draft.text.startswith("fix: release v1.2.3 —")
