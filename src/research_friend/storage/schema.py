"""Database schema for the stash catalog."""

SCHEMA_VERSION = 1

# Applied in order; PRAGMA user_version records the last one applied.
MIGRATIONS: dict[int, str] = {
    1: """
-- Topics documents are filed under
CREATE TABLE topics (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT UNIQUE NOT NULL,
    description TEXT,
    created_at TEXT DEFAULT (datetime('now'))
);

-- Stashed documents; store_path is relative to the stash root
CREATE TABLE documents (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    filename TEXT NOT NULL,
    file_type TEXT NOT NULL,
    summary TEXT,
    store_path TEXT NOT NULL,
    char_count INTEGER,
    created_at TEXT DEFAULT (datetime('now'))
);

CREATE TABLE document_topics (
    doc_id INTEGER NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    topic_id INTEGER NOT NULL REFERENCES topics(id) ON DELETE RESTRICT,
    is_primary BOOLEAN NOT NULL DEFAULT FALSE,
    PRIMARY KEY (doc_id, topic_id)
);

-- At most one primary topic per document
CREATE UNIQUE INDEX idx_one_primary_per_doc
    ON document_topics(doc_id) WHERE is_primary = TRUE;

CREATE INDEX idx_documents_store_path ON documents(store_path);
""",
}
