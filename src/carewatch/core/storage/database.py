"""SQLite database management for CareWatch.

Handles connection lifecycle, schema creation, and migrations.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

logger = logging.getLogger(__name__)

# Current schema version
SCHEMA_VERSION = 2

# ---------------------------------------------------------------------------
# Schema DDL
# ---------------------------------------------------------------------------

_SCHEMA_V1 = """
-- User directory (elderly users and caretakers); owned by the account service
CREATE TABLE IF NOT EXISTS users (
    id            TEXT PRIMARY KEY,
    name          TEXT NOT NULL,
    role          TEXT NOT NULL CHECK (role IN ('elderly', 'caretaker')),
    caretaker_id  TEXT REFERENCES users(id),
    current_mood  TEXT NOT NULL DEFAULT 'neutral',
    last_active   TEXT,
    is_active     INTEGER NOT NULL DEFAULT 1,
    created_at    TEXT NOT NULL DEFAULT (datetime('now'))
);

-- One row per user per day; the last check-in of the day overwrites
CREATE TABLE IF NOT EXISTS mood_entries (
    id                 TEXT PRIMARY KEY,
    user_id            TEXT NOT NULL,
    entry_date         TEXT NOT NULL,

    -- Legacy two-tier fields
    mood               TEXT NOT NULL DEFAULT 'neutral',
    mood_score         INTEGER NOT NULL DEFAULT 5,

    -- Classification snapshot
    detected_mood      TEXT,
    confidence         TEXT,
    emotions_json      TEXT NOT NULL DEFAULT '[]',
    reason             TEXT NOT NULL DEFAULT '',
    analysis_source    TEXT,

    -- Encrypted JSON list of {question, answer, category}
    responses_enc      TEXT,

    created_at         TEXT NOT NULL,
    updated_at         TEXT NOT NULL,
    UNIQUE (user_id, entry_date)
);

-- Caretaker alerts; weak references to the user and mood entry
CREATE TABLE IF NOT EXISTS notifications (
    id               TEXT PRIMARY KEY,
    caretaker_id     TEXT NOT NULL,
    elderly_user_id  TEXT NOT NULL,
    type             TEXT NOT NULL DEFAULT 'mood_alert',
    detected_mood    TEXT NOT NULL,
    risk_level       TEXT NOT NULL,
    message          TEXT NOT NULL,
    emotions_json    TEXT NOT NULL DEFAULT '[]',
    is_read          INTEGER NOT NULL DEFAULT 0,
    mood_entry_id    TEXT,
    created_at       TEXT NOT NULL
);

-- Indexes for common query patterns
CREATE INDEX IF NOT EXISTS idx_users_caretaker        ON users(caretaker_id);
CREATE INDEX IF NOT EXISTS idx_entries_user_date      ON mood_entries(user_id, entry_date DESC);
CREATE INDEX IF NOT EXISTS idx_notifications_unread   ON notifications(caretaker_id, is_read);
CREATE INDEX IF NOT EXISTS idx_notifications_recent   ON notifications(caretaker_id, created_at DESC);
"""

# ---------------------------------------------------------------------------
# V2: Audit log table (analysis provenance, no raw answers)
# ---------------------------------------------------------------------------

_SCHEMA_V2 = """
CREATE TABLE IF NOT EXISTS audit_log (
    id              TEXT PRIMARY KEY,
    timestamp       TEXT NOT NULL DEFAULT (datetime('now')),
    action          TEXT NOT NULL,
    tool_name       TEXT,
    tool_input_hash TEXT,
    llm_provider    TEXT,
    llm_disclosed   INTEGER DEFAULT 0,
    mood_entry_id   TEXT,
    duration_ms     REAL,
    status          TEXT NOT NULL DEFAULT 'success',
    error_type      TEXT,
    metadata_json   TEXT
);

CREATE INDEX IF NOT EXISTS idx_audit_timestamp ON audit_log(timestamp);
CREATE INDEX IF NOT EXISTS idx_audit_action    ON audit_log(action);
CREATE INDEX IF NOT EXISTS idx_audit_tool      ON audit_log(tool_name);
"""


_MIGRATIONS: tuple[tuple[int, str, str], ...] = (
    (1, _SCHEMA_V1, "users, mood entries, notifications"),
    (2, _SCHEMA_V2, "audit_log table"),
)


class DatabaseError(Exception):
    """Raised when the database is used before it is opened."""


class CareDatabase:
    """Owns the single SQLite connection shared by the repositories.

    ``":memory:"`` gives a throwaway database, which is what the tests use.
    File paths may start with ``~``; missing parent directories are created.

    Usage::

        with CareDatabase("~/.carewatch/carewatch.db") as db:
            MoodRepository(db, encryptor).get_entries(user_id)
    """

    def __init__(self, db_path: str = ":memory:") -> None:
        self._db_path = db_path
        self._conn: sqlite3.Connection | None = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseError("Database not initialized. Call initialize() first.")
        return self._conn

    def _connect(self) -> sqlite3.Connection:
        target = self._db_path
        if target != ":memory:":
            path = Path(target).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            target = str(path)
        # Tool handlers may run on worker threads; all writes commit immediately.
        conn = sqlite3.connect(target, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    def initialize(self) -> None:
        """Open the connection and bring the schema up to date. Idempotent."""
        if self._conn is not None:
            return
        self._conn = self._connect()
        self._migrate()
        logger.info("Care database initialized: %s", self._db_path)

    def _migrate(self) -> None:
        conn = self.connection
        conn.execute(
            """CREATE TABLE IF NOT EXISTS schema_version (
                version    INTEGER NOT NULL,
                applied_at TEXT NOT NULL DEFAULT (datetime('now'))
            )"""
        )
        current = self.get_schema_version()

        for version, ddl, label in _MIGRATIONS:
            if version > current:
                conn.executescript(ddl)
                logger.info("Applied schema migration V%d: %s", version, label)

        if current < SCHEMA_VERSION:
            conn.execute("INSERT INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
            conn.commit()
            logger.info("Schema updated from version %d to %d", current, SCHEMA_VERSION)

    def get_schema_version(self) -> int:
        (version,) = self.connection.execute(
            "SELECT MAX(version) FROM schema_version"
        ).fetchone()
        return version or 0

    def close(self) -> None:
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("Care database closed")

    def __enter__(self) -> CareDatabase:
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
