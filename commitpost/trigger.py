"""Trigger evaluation: decide whether a commit should be posted.

Contains:
- has_semver / has_publish_keyword: message signal detectors
- repo_matches_pattern / repo_allowed: allowlist matching
- evaluate: the ordered gate returning an Evaluation
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from commitpost.config import Settings, TriggerGate
from commitpost.models import CommitRecord

SEMVER_RE = re.compile(
    r"\b(?:v|V)?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?\b"
)

# "@" must not follow a word character, so "email@publish.com" is not a marker
PUBLISH_KEYWORD_RE = re.compile(r"\B@publish\b", re.IGNORECASE)


class Decision(Enum):
    """Outcome of evaluating a commit."""

    PROCEED = "proceed"
    SKIP_NO_TRIGGER = "skip_no_trigger"
    SKIP_BRANCH = "skip_branch"
    SKIP_REPO_NOT_ALLOWED = "skip_repo_not_allowed"
    SKIP_ALREADY_POSTED = "skip_already_posted"


@dataclass(frozen=True)
class Evaluation:
    """A Decision plus the reason reported to logs and webhook callers."""

    decision: Decision
    reason: Optional[str] = None
    details: dict = field(default_factory=dict)
    forced: bool = False

    @property
    def proceed(self) -> bool:
        return self.decision == Decision.PROCEED


def has_semver(message: str) -> bool:
    """Check whether the message contains a semantic version anywhere."""
    return SEMVER_RE.search(message) is not None


def has_publish_keyword(message: str) -> bool:
    """Check whether the message contains the @publish marker."""
    return PUBLISH_KEYWORD_RE.search(message) is not None


def repo_matches_pattern(pattern: str, repo: str) -> bool:
    """Match ``owner/repo`` against ``*``, ``owner/*``, ``*/repo`` or ``owner/repo``.

    Non-wildcard segments compare case-sensitively.
    """
    if pattern == "*":
        return True
    pattern_owner, _, pattern_name = pattern.partition("/")
    repo_owner, _, repo_name = repo.partition("/")
    owner_ok = pattern_owner == "*" or pattern_owner == repo_owner
    name_ok = pattern_name == "*" or pattern_name == repo_name
    return owner_ok and name_ok


def repo_allowed(repo: str, patterns: Iterable[str]) -> bool:
    """Check a repository against the allowlist. Empty allowlist allows all."""
    patterns = list(patterns)
    if not patterns:
        return True
    return any(repo_matches_pattern(pattern, repo) for pattern in patterns)


def _check_gate(message: str, gate: TriggerGate) -> Optional[str]:
    """Return the skip reason for the configured gate, or None if satisfied."""
    keyword = has_publish_keyword(message)
    version = has_semver(message)

    if gate == TriggerGate.KEYWORD_AND_VERSION:
        if not keyword:
            return "no_publish_keyword"
        if not version:
            return "no_semver"
    elif gate == TriggerGate.VERSION:
        if not version:
            return "no_semver"
    elif gate == TriggerGate.KEYWORD:
        if not keyword:
            return "no_publish_keyword"
    elif not (keyword or version):
        return "no_trigger"
    return None


def evaluate(commit: CommitRecord, settings: Settings, server: bool = False) -> Evaluation:
    """Decide whether a commit should be posted.

    Rules apply in a fixed order and stop at the first failure:

    1. Repository allowlist (server mode only).
    2. Force bypass: skips rules 3 and 4.
    3. Branch filter (server mode only): the push must target
       ``refs/heads/<branch_only or default branch>``.
    4. Trigger gate on the commit message, per ``settings.gate``.

    Dedupe is not consulted here; the caller turns a seen key into
    ``Decision.SKIP_ALREADY_POSTED``.

    Args:
        commit: The commit to evaluate.
        settings: Resolved settings.
        server: Whether the commit came from a webhook push.

    Returns:
        An Evaluation describing the decision.
    """
    if server and not repo_allowed(commit.repo or "", settings.repo_allowlist):
        return Evaluation(Decision.SKIP_REPO_NOT_ALLOWED, "repo_not_allowed")

    if settings.force:
        return Evaluation(Decision.PROCEED, forced=True)

    if server:
        target_branch = settings.branch_only or commit.default_branch or ""
        expected = f"refs/heads/{target_branch}"
        if commit.ref != expected:
            return Evaluation(
                Decision.SKIP_BRANCH,
                "wrong_branch",
                {"ref": commit.ref, "expected": expected},
            )

    reason = _check_gate(commit.message, settings.gate)
    if reason:
        return Evaluation(Decision.SKIP_NO_TRIGGER, reason)

    return Evaluation(Decision.PROCEED)
