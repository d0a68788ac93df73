"""SQLite schema and pragmas for the document store."""

from __future__ import annotations

import sqlite3


PRAGMA_BUSY_TIMEOUT_MS = 5000


def apply_runtime_pragmas(connection: sqlite3.Connection) -> None:
    """Apply runtime pragmas recommended for concurrent local access."""

    connection.execute("PRAGMA journal_mode=WAL;")
    connection.execute(f"PRAGMA busy_timeout={PRAGMA_BUSY_TIMEOUT_MS};")
    connection.execute("PRAGMA synchronous=NORMAL;")
    connection.execute("PRAGMA foreign_keys=ON;")


def ensure_schema(connection: sqlite3.Connection) -> None:
    """Create document tables, FTS index, and sync triggers if missing."""

    connection.executescript(
        """
        CREATE TABLE IF NOT EXISTS documents (
            seq INTEGER PRIMARY KEY,
            id TEXT NOT NULL UNIQUE,
            namespace TEXT NOT NULL DEFAULT 'default',
            language TEXT NOT NULL DEFAULT 'simple',
            raw_content TEXT NOT NULL,
            lexical_text TEXT NOT NULL,
            token_count INTEGER NOT NULL DEFAULT 0,
            embedding BLOB NOT NULL,
            dimension INTEGER NOT NULL CHECK(dimension > 0),
            created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(
            lexical_text,
            content='documents',
            content_rowid='seq',
            tokenize='unicode61 remove_diacritics 2'
        );

        CREATE TABLE IF NOT EXISTS store_state (
            id INTEGER PRIMARY KEY CHECK(id = 1),
            dimension INTEGER NOT NULL,
            model TEXT,
            updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_documents_namespace ON documents(namespace, language);

        CREATE TRIGGER IF NOT EXISTS documents_ai AFTER INSERT ON documents BEGIN
            INSERT INTO documents_fts(rowid, lexical_text)
            VALUES (new.seq, new.lexical_text);
        END;

        CREATE TRIGGER IF NOT EXISTS documents_ad AFTER DELETE ON documents BEGIN
            INSERT INTO documents_fts(documents_fts, rowid, lexical_text)
            VALUES ('delete', old.seq, old.lexical_text);
        END;

        CREATE TRIGGER IF NOT EXISTS documents_au AFTER UPDATE ON documents BEGIN
            INSERT INTO documents_fts(documents_fts, rowid, lexical_text)
            VALUES ('delete', old.seq, old.lexical_text);
            INSERT INTO documents_fts(rowid, lexical_text)
            VALUES (new.seq, new.lexical_text);
        END;
        """
    )


def drop_schema(connection: sqlite3.Connection) -> None:
    """Remove every hydex table, index and trigger."""

    connection.executescript(
        """
        DROP TRIGGER IF EXISTS documents_ai;
        DROP TRIGGER IF EXISTS documents_ad;
        DROP TRIGGER IF EXISTS documents_au;
        DROP TABLE IF EXISTS documents_fts;
        DROP INDEX IF EXISTS idx_documents_namespace;
        DROP TABLE IF EXISTS documents;
        DROP TABLE IF EXISTS store_state;
        """
    )


def optimize_fts(connection: sqlite3.Connection) -> None:
    """Run FTS optimize maintenance command."""

    connection.execute("INSERT INTO documents_fts(documents_fts) VALUES ('optimize');")
