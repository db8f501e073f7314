"""Content store abstraction and local SQLite implementation.

The content store is where accepted claims land as draft obituaries for
human review. The pipeline needs three operations from it:

    exists_by_url(url) -> bool    Cross-run dedup check on sourceUrl
    exists_by_slug(slug) -> bool  Slug collision check before a write
    create(draft) -> str          Persist one draft, return its id

SanityStore (sanity.py) is the production backend. SQLiteStore keeps the
same document layout in a local file for development runs and tests.

Database Schema:
    obituaries table:
        - id (TEXT, PK): Generated document id
        - source_url (TEXT, UNIQUE): Original content URL (dedup key)
        - slug (TEXT, UNIQUE): URL-safe identifier
        - claim_date (TEXT): YYYY-MM-DD
        - created_at (INTEGER): Insert timestamp (Unix epoch)
        - document (TEXT): Full stored document as JSON

Features:
    - WAL mode for concurrent read/write access
    - Uniqueness of slug and sourceUrl enforced at write time
    - Context manager support for auto-cleanup
"""

import json
import logging
import sqlite3
import time
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from models.draft import ObituaryDraft

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """A content store operation failed."""


class StoreNotConfigured(StoreError):
    """The content store has no usable credentials."""


class ContentStore(ABC):
    """Interface the publisher uses to talk to a content store."""

    @property
    def is_configured(self) -> bool:
        return True

    @abstractmethod
    async def exists_by_url(self, source_url: str) -> bool:
        """Return True if a document with this sourceUrl already exists.

        Raises:
            StoreError: If the lookup itself fails
        """

    @abstractmethod
    async def exists_by_slug(self, slug: str) -> bool:
        """Return True if a document already uses this slug.

        Raises:
            StoreError: If the lookup itself fails
        """

    @abstractmethod
    async def create(self, draft: ObituaryDraft) -> str:
        """Persist a draft and return the new document id.

        Raises:
            StoreError: If the draft could not be written
        """

    async def close(self) -> None:
        """Release any held resources."""

    async def __aenter__(self) -> "ContentStore":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class SQLiteStore(ContentStore):
    """SQLite-backed content store.

    Example:
        >>> async with SQLiteStore("obituaries.db") as store:
        ...     if not await store.exists_by_url(draft.source_url):
        ...         doc_id = await store.create(draft)
    """

    SCHEMA = """
    -- One row per draft obituary
    CREATE TABLE IF NOT EXISTS obituaries (
        id TEXT PRIMARY KEY,               -- Generated document id
        source_url TEXT NOT NULL UNIQUE,   -- Dedup key across runs
        slug TEXT NOT NULL UNIQUE,         -- URL-safe identifier
        claim_date TEXT NOT NULL,          -- YYYY-MM-DD
        created_at INTEGER NOT NULL,       -- When we stored it (Unix epoch)
        document TEXT NOT NULL             -- Stored document as JSON
    );

    -- Index for listing recent drafts
    CREATE INDEX IF NOT EXISTS idx_created ON obituaries(created_at);
    """

    path: Path
    conn: sqlite3.Connection

    def __init__(self, path: Path | str):
        """Open (or create) the database file and set up the schema.

        Args:
            path: Path to SQLite database file
        """
        self.path = Path(path)
        self.conn = sqlite3.connect(str(self.path))
        self.conn.row_factory = sqlite3.Row  # Enable dict-like row access

        # WAL mode allows concurrent readers during writes
        self.conn.execute("PRAGMA journal_mode=WAL")
        self.conn.executescript(self.SCHEMA)
        self.conn.commit()
        logger.debug("Database initialized | path=%s", self.path)

    async def exists_by_url(self, source_url: str) -> bool:
        try:
            cursor = self.conn.execute(
                "SELECT 1 FROM obituaries WHERE source_url = ? LIMIT 1",
                (source_url,)
            )
            return cursor.fetchone() is not None
        except sqlite3.Error as e:
            raise StoreError(f"Lookup failed: {e}") from e

    async def exists_by_slug(self, slug: str) -> bool:
        try:
            cursor = self.conn.execute("SELECT 1 FROM obituaries WHERE slug = ? LIMIT 1", (slug,))
            return cursor.fetchone() is not None
        except sqlite3.Error as e:
            raise StoreError(f"Slug lookup failed: {e}") from e

    async def create(self, draft: ObituaryDraft) -> str:
        doc_id = uuid.uuid4().hex
        document = {"_id": doc_id, **draft.to_document()}
        try:
            self.conn.execute(
                """
                INSERT INTO obituaries (id, source_url, slug, claim_date, created_at, document)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (doc_id, draft.source_url, draft.slug, draft.date, int(time.time()), json.dumps(document)),
            )
            self.conn.commit()
        except sqlite3.IntegrityError as e:
            self.conn.rollback()
            raise StoreError(f"Duplicate draft rejected | slug={draft.slug}: {e}") from e
        except sqlite3.Error as e:
            self.conn.rollback()
            raise StoreError(f"Insert failed: {e}") from e

        logger.debug("Draft stored | id=%s slug=%s", doc_id, draft.slug)
        return doc_id

    def stats(self) -> dict[str, int]:
        """Get database statistics.

        Returns:
            Dictionary with the total draft count
        """
        cursor = self.conn.execute("SELECT COUNT(*) as total FROM obituaries")
        row = cursor.fetchone()
        return {"total": row["total"] or 0}

    async def close(self) -> None:
        """Close the database connection."""
        self.conn.close()

    def __enter__(self) -> "SQLiteStore":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit."""
        self.conn.close()
