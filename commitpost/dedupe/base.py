"""Abstract dedupe store interface."""

from abc import ABC, abstractmethod

from commitpost.models import DedupeKey, PostRecord


class DedupeStore(ABC):
    """At-most-once bookkeeping for posted commits.

    Callers check ``seen`` before doing any work, ``claim`` immediately
    before publishing, then ``record`` after a confirmed publish or
    ``release`` after a failed one.
    """

    @abstractmethod
    def seen(self, key: DedupeKey) -> bool:
        """Return True if a post for this key has been recorded."""
        pass

    @abstractmethod
    def claim(self, key: DedupeKey) -> bool:
        """Atomically reserve the key for publishing.

        Returns:
            True if this caller now owns the key, False if it was already
            recorded or is being published by someone else.
        """
        pass

    @abstractmethod
    def record(self, key: DedupeKey, record: PostRecord) -> None:
        """Mark the key as posted. Only call after a confirmed publish."""
        pass

    @abstractmethod
    def release(self, key: DedupeKey) -> None:
        """Drop an unfinished claim so a later attempt can retry."""
        pass

    def close(self) -> None:
        """Release any resources held by the store."""
        pass
