"""SQLite-backed catalog of stashed documents and topics."""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, Optional

from research_friend.storage.schema import MIGRATIONS, SCHEMA_VERSION

DB_FILENAME = "stash.db"

_DOCUMENT_COLUMNS = "d.id, d.filename, d.file_type, d.summary, d.store_path, d.char_count, d.created_at"


class StashStore:
    """SQLite-backed storage for stash metadata."""

    def __init__(self, stash_root: Path | str):
        self.stash_root = Path(stash_root)
        self.path = self.stash_root / DB_FILENAME

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def initialize(self) -> None:
        """Create the stash root and apply pending migrations."""
        self.stash_root.mkdir(parents=True, exist_ok=True)
        with self.connection() as conn:
            current = conn.execute("PRAGMA user_version").fetchone()[0]
            for version in range(current + 1, SCHEMA_VERSION + 1):
                if version in MIGRATIONS:
                    conn.executescript(MIGRATIONS[version])
            if current != SCHEMA_VERSION:
                conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")

    def get_schema_version(self) -> int:
        with self.connection() as conn:
            return conn.execute("PRAGMA user_version").fetchone()[0]

    # Topics

    @staticmethod
    def _get_or_create_topic(
        conn: sqlite3.Connection, name: str, description: Optional[str] = None
    ) -> int:
        row = conn.execute("SELECT id FROM topics WHERE name = ?", (name,)).fetchone()
        if row:
            return row["id"]
        cursor = conn.execute(
            "INSERT INTO topics (name, description) VALUES (?, ?)", (name, description)
        )
        return cursor.lastrowid

    def get_or_create_topic(self, name: str, description: Optional[str] = None) -> int:
        """Return the id of topic ``name``, creating it if needed."""
        with self.connection() as conn:
            return self._get_or_create_topic(conn, name, description)

    def get_topics(self) -> list[dict]:
        with self.connection() as conn:
            cursor = conn.execute("SELECT id, name, description FROM topics ORDER BY name")
            return [dict(row) for row in cursor]

    def get_topics_with_counts(self) -> list[dict]:
        """Topics with their document counts, busiest first."""
        with self.connection() as conn:
            cursor = conn.execute(
                """SELECT t.id, t.name, t.description, COUNT(dt.doc_id) AS doc_count
                   FROM topics t
                   LEFT JOIN document_topics dt ON t.id = dt.topic_id
                   GROUP BY t.id
                   ORDER BY doc_count DESC, t.name"""
            )
            return [dict(row) for row in cursor]

    @classmethod
    def _link_topics(
        cls,
        conn: sqlite3.Connection,
        doc_id: int,
        primary_topic: str,
        secondary_topics: list[str],
    ) -> None:
        conn.execute(
            "INSERT INTO document_topics (doc_id, topic_id, is_primary) VALUES (?, ?, 1)",
            (doc_id, cls._get_or_create_topic(conn, primary_topic)),
        )
        seen = {primary_topic}
        for name in secondary_topics:
            if name in seen:
                continue
            seen.add(name)
            conn.execute(
                "INSERT INTO document_topics (doc_id, topic_id, is_primary) VALUES (?, ?, 0)",
                (doc_id, cls._get_or_create_topic(conn, name)),
            )

    # Documents

    def insert_document(
        self,
        filename: str,
        file_type: str,
        summary: Optional[str],
        store_path: str,
        char_count: int,
        primary_topic: str,
        secondary_topics: Optional[list[str]] = None,
    ) -> int:
        """Insert a document with its topics in one transaction and return its id."""
        with self.connection() as conn:
            cursor = conn.execute(
                """INSERT INTO documents (filename, file_type, summary, store_path, char_count)
                   VALUES (?, ?, ?, ?, ?)""",
                (filename, file_type, summary, store_path, char_count),
            )
            doc_id = cursor.lastrowid
            self._link_topics(conn, doc_id, primary_topic, secondary_topics or [])
            return doc_id

    def update_document(
        self,
        doc_id: int,
        summary: Optional[str],
        store_path: str,
        char_count: int,
        primary_topic: str,
        secondary_topics: Optional[list[str]] = None,
    ) -> None:
        """Replace a document's summary, location and topics."""
        with self.connection() as conn:
            conn.execute(
                """UPDATE documents SET summary = ?, store_path = ?, char_count = ?
                   WHERE id = ?""",
                (summary, store_path, char_count, doc_id),
            )
            conn.execute("DELETE FROM document_topics WHERE doc_id = ?", (doc_id,))
            self._link_topics(conn, doc_id, primary_topic, secondary_topics or [])

    def get_document(self, doc_id: int) -> Optional[dict]:
        """Return a document with its topics, or None."""
        with self.connection() as conn:
            row = conn.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents d WHERE d.id = ?", (doc_id,)
            ).fetchone()
            if row is None:
                return None

            topics = conn.execute(
                """SELECT t.name, t.description, dt.is_primary
                   FROM document_topics dt JOIN topics t ON dt.topic_id = t.id
                   WHERE dt.doc_id = ?
                   ORDER BY dt.is_primary DESC, t.name""",
                (doc_id,),
            )
            doc = dict(row)
            doc["topics"] = [
                {
                    "name": t["name"],
                    "description": t["description"],
                    "is_primary": bool(t["is_primary"]),
                }
                for t in topics
            ]
            return doc

    def get_document_by_store_path(self, store_path: str) -> Optional[dict]:
        with self.connection() as conn:
            row = conn.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents d WHERE d.store_path = ?",
                (store_path,),
            ).fetchone()
            return dict(row) if row else None

    def get_all_documents(self) -> list[dict]:
        """All documents, newest first."""
        with self.connection() as conn:
            cursor = conn.execute(
                f"SELECT {_DOCUMENT_COLUMNS} FROM documents d ORDER BY d.created_at DESC, d.id DESC"
            )
            return [dict(row) for row in cursor]

    def get_documents_by_topic(self, topic: str, limit: int = 50, offset: int = 0) -> list[dict]:
        with self.connection() as conn:
            cursor = conn.execute(
                f"""SELECT {_DOCUMENT_COLUMNS}, dt.is_primary
                    FROM documents d
                    JOIN document_topics dt ON d.id = dt.doc_id
                    JOIN topics t ON dt.topic_id = t.id
                    WHERE t.name = ?
                    ORDER BY d.created_at DESC, d.id DESC
                    LIMIT ? OFFSET ?""",
                (topic, limit, offset),
            )
            return [dict(row) for row in cursor]

    def search_by_filename(self, terms: list[str], topic: Optional[str] = None) -> list[dict]:
        """Documents whose filename contains ANY of ``terms`` (case-insensitive)."""
        if not terms:
            return []

        patterns: list[Any] = [f"%{term}%" for term in terms]
        like_clauses = " OR ".join("LOWER(d.filename) LIKE LOWER(?)" for _ in terms)

        with self.connection() as conn:
            if topic:
                cursor = conn.execute(
                    f"""SELECT DISTINCT {_DOCUMENT_COLUMNS}
                        FROM documents d
                        JOIN document_topics dt ON d.id = dt.doc_id
                        JOIN topics t ON dt.topic_id = t.id
                        WHERE ({like_clauses}) AND t.name = ?
                        ORDER BY d.created_at DESC, d.id DESC""",
                    (*patterns, topic),
                )
            else:
                cursor = conn.execute(
                    f"""SELECT {_DOCUMENT_COLUMNS}
                        FROM documents d
                        WHERE {like_clauses}
                        ORDER BY d.created_at DESC, d.id DESC""",
                    patterns,
                )
            return [dict(row) for row in cursor]
