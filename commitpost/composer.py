"""Post composition: turn a commit into a length-bounded post draft.

Contains:
- sanitize_headline: first line of the message with hash-like tokens removed
- build_post_text / fit_text: the pure assembly and truncation steps
- build_embed: external link card from repository metadata
- compose_post: the full pipeline, including optional AI condensation
"""

import logging
import re
from typing import Optional

from commitpost.config import Settings
from commitpost.hashtags import topics_to_hashtags
from commitpost.llm import BaseSummarizer, LLMError
from commitpost.models import CommitRecord, ExternalEmbed, PostDraft, RepoEnrichment

logger = logging.getLogger(__name__)

ELLIPSIS = "…"
HASH_TOKEN_RE = re.compile(r"\b[0-9a-f]{7,40}\b", re.IGNORECASE)
WHITESPACE_RE = re.compile(r"\s+")
DEFAULT_EMBED_DESCRIPTION = "GitHub repository"


def strip_commit_hashes(text: str) -> str:
    """Remove likely git SHAs (7 to 40 hex chars) and collapse whitespace."""
    without_hashes = HASH_TOKEN_RE.sub("", text)
    return WHITESPACE_RE.sub(" ", without_hashes).strip()


def sanitize_headline(message: str) -> str:
    """Return the trimmed first line of a commit message without hash tokens."""
    first_line = message.split("\n", 1)[0].strip()
    return strip_commit_hashes(first_line)


def build_byline(commit: CommitRecord) -> str:
    """Build the attribution segment, e.g. ``— owner/repo by Ada (abc1234)``."""
    if commit.repo:
        return f"— {commit.repo} by {commit.author} ({commit.short_sha})"
    return f"— by {commit.author} ({commit.short_sha})"


def fit_text(text: str, limit: int) -> str:
    """Hard-truncate text to ``limit`` characters, ending in an ellipsis when cut.

    Text already within the limit is returned unchanged.
    """
    if len(text) <= limit:
        return text
    if limit <= 0:
        return ""
    return text[: limit - 1] + ELLIPSIS


def build_post_text(
    commit: CommitRecord,
    summary: str,
    hashtags: list[str],
    limit: int,
) -> str:
    """Assemble the post text from its parts and bound it to ``limit``.

    Parts, in order: summary, topic hashtags, byline, commit URL, and the
    ``#gh_<short-sha>`` traceability tag. Empty parts are skipped and the
    rest joined with single spaces.
    """
    parts = [
        summary,
        " ".join(hashtags),
        build_byline(commit),
        commit.commit_url or "",
        f"#gh_{commit.short_sha}",
    ]
    text = " ".join(part for part in parts if part)
    return fit_text(text, limit)


def build_embed(enrichment: Optional[RepoEnrichment]) -> Optional[ExternalEmbed]:
    """Build the link card, preferring the project homepage over the repo URL."""
    if enrichment is None:
        return None
    return ExternalEmbed(
        uri=enrichment.homepage or enrichment.html_url,
        title=enrichment.name,
        description=enrichment.description or DEFAULT_EMBED_DESCRIPTION,
    )


async def condense(
    text: str,
    has_topics: bool,
    summarizer: Optional[BaseSummarizer],
) -> str:
    """Run the optional summarizer, falling back to the input on any failure."""
    if summarizer is None or not text:
        return text
    try:
        return strip_commit_hashes(await summarizer.summarize(text, has_topics))
    except LLMError as e:
        logger.warning("AI summary failed, using commit headline: %s", e)
        return text


async def compose_post(
    commit: CommitRecord,
    enrichment: Optional[RepoEnrichment],
    settings: Settings,
    summarizer: Optional[BaseSummarizer] = None,
) -> PostDraft:
    """Compose the post for a commit.

    Args:
        commit: The commit being announced.
        enrichment: Repository metadata, if it could be fetched.
        settings: Resolved settings; selects the character limit.
        summarizer: Optional AI summarizer.

    Returns:
        A PostDraft whose text never exceeds the backend's limit.
    """
    headline = sanitize_headline(commit.message)
    topics = enrichment.topics if enrichment else []
    hashtags = topics_to_hashtags(topics)

    summary = await condense(headline, bool(hashtags), summarizer)
    limit = settings.char_limit

    return PostDraft(
        text=build_post_text(commit, summary, hashtags, limit),
        limit=limit,
        embed=build_embed(enrichment),
        hashtags=hashtags,
    )
