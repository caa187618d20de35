"""Exception classes shared across commitpost.

Contains:
- CommitPostError: Base exception for all commitpost errors
- ConfigError: Required configuration is missing or invalid
- SignatureError: Webhook signature did not verify
- PublishError: Base for publisher failures
- AuthFailed: The social backend rejected the credentials
- PostFailed: The social backend rejected the post
- EnrichmentError: Repository metadata could not be fetched

Git failures live in commitpost.git.exceptions and summarizer failures in
commitpost.llm.exceptions.
"""


class CommitPostError(Exception):
    """Base exception for commitpost errors."""

    pass


class ConfigError(CommitPostError):
    """Raised when required configuration (usually credentials) is missing."""

    pass


class SignatureError(CommitPostError):
    """Raised when a webhook request fails signature verification."""

    pass


class PublishError(CommitPostError):
    """Base exception for publisher failures."""

    pass


class AuthFailed(PublishError):
    """Raised when the social backend rejects the configured credentials."""

    pass


class PostFailed(PublishError):
    """Raised when the social backend rejects the post itself."""

    pass


class EnrichmentError(CommitPostError):
    """Raised when repository metadata cannot be fetched."""

    pass
