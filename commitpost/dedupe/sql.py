"""Shared dedupe store backed by SQLAlchemy.

Uses the primary key of ``posted_commits`` as the atomic
set-if-not-exists primitive: a claim is an INSERT of a ``pending`` row, and
a duplicate INSERT fails with IntegrityError for every other contender.
Works with SQLite (default) or any SQLAlchemy URL shared by several
server instances.
"""

import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Iterator, Optional

from sqlalchemy import DateTime, Engine, String, Text, create_engine, delete, event, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from commitpost.dedupe.base import DedupeStore
from commitpost.models import DedupeKey, PostRecord

logger = logging.getLogger(__name__)

STATUS_PENDING = "pending"
STATUS_POSTED = "posted"

# A pending claim older than this is considered abandoned (crashed worker)
DEFAULT_STALE_AFTER = timedelta(minutes=10)


class Base(DeclarativeBase):
    """Base class for dedupe ORM models."""

    pass


class PostedCommitRow(Base):
    """One commit claimed or posted to one backend."""

    __tablename__ = "posted_commits"

    key: Mapped[str] = mapped_column(String(512), primary_key=True)
    namespace: Mapped[str] = mapped_column(String(64), nullable=False)
    repo: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    sha: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    claimed_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    posted_at: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    post_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    post_uri: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preview: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


def _utcnow() -> datetime:
    # Naive UTC: SQLite drops tzinfo on round-trip
    return datetime.now(timezone.utc).replace(tzinfo=None)


def create_dedupe_engine(url: str) -> Engine:
    """Create a SQLAlchemy engine for the dedupe store.

    ``sqlite://`` and ``sqlite:///:memory:`` share a single connection so
    every session sees the same in-memory database.

    Args:
        url: SQLAlchemy database URL.

    Returns:
        Configured SQLAlchemy Engine.
    """
    if url in ("sqlite://", "sqlite:///:memory:"):
        engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    elif url.startswith("sqlite"):
        engine = create_engine(url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(url)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def set_sqlite_pragma(dbapi_conn, connection_record):  # type: ignore[no-untyped-def]
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA busy_timeout=5000")
            cursor.close()

    return engine


class SQLDedupeStore(DedupeStore):
    """Dedupe store with an atomic claim, suitable for the webhook server."""

    def __init__(self, engine: Engine, stale_after: timedelta = DEFAULT_STALE_AFTER):
        self.engine = engine
        self.stale_after = stale_after
        self._sessions = sessionmaker(bind=engine, expire_on_commit=False)
        # Serializes callers sharing one in-memory SQLite connection
        self._lock = threading.Lock()
        Base.metadata.create_all(engine)

    @classmethod
    def from_url(cls, url: str) -> "SQLDedupeStore":
        return cls(create_dedupe_engine(url))

    @contextmanager
    def _session(self) -> Iterator[Session]:
        with self._lock, self._sessions() as session:
            yield session

    def get(self, key: DedupeKey) -> Optional[PostedCommitRow]:
        """Return the stored row for a key, if any."""
        with self._session() as session:
            return session.get(PostedCommitRow, key.as_string())

    def seen(self, key: DedupeKey) -> bool:
        row = self.get(key)
        return row is not None and row.status == STATUS_POSTED

    def claim(self, key: DedupeKey) -> bool:
        row = PostedCommitRow(
            key=key.as_string(),
            namespace=key.namespace,
            repo=key.repo,
            sha=key.sha,
            status=STATUS_PENDING,
            claimed_at=_utcnow(),
        )
        with self._session() as session:
            session.add(row)
            try:
                session.commit()
                return True
            except IntegrityError:
                session.rollback()

        return self._take_over_stale(key)

    def _take_over_stale(self, key: DedupeKey) -> bool:
        """Steal a pending claim abandoned longer than ``stale_after``.

        The conditional UPDATE succeeds for at most one contender.
        """
        now = _utcnow()
        cutoff = now - self.stale_after
        with self._session() as session:
            result = session.execute(
                update(PostedCommitRow)
                .where(
                    PostedCommitRow.key == key.as_string(),
                    PostedCommitRow.status == STATUS_PENDING,
                    PostedCommitRow.claimed_at < cutoff,
                )
                .values(claimed_at=now)
            )
            session.commit()
            taken = result.rowcount == 1

        if taken:
            logger.warning("Took over stale claim for %s", key.as_string())
        return taken

    def record(self, key: DedupeKey, record: PostRecord) -> None:
        with self._session() as session:
            row = session.get(PostedCommitRow, key.as_string())
            if row is None:
                row = PostedCommitRow(
                    key=key.as_string(),
                    namespace=key.namespace,
                    repo=key.repo,
                    sha=key.sha,
                    claimed_at=_utcnow(),
                )
                session.add(row)
            row.status = STATUS_POSTED
            row.posted_at = record.posted_at
            row.post_id = record.post_id
            row.post_uri = record.uri
            row.preview = record.preview
            session.commit()

    def release(self, key: DedupeKey) -> None:
        with self._session() as session:
            session.execute(
                delete(PostedCommitRow).where(
                    PostedCommitRow.key == key.as_string(),
                    PostedCommitRow.status == STATUS_PENDING,
                )
            )
            session.commit()

    def close(self) -> None:
        self.engine.dispose()
