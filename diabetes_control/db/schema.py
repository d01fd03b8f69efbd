"""
SQLite schema DDL for the submission history log.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**:
safe to call on an already-initialized database (e.g. on every CLI run or in
tests).

Tables
------
  history_entries — one row per questionnaire submission.  The answer set and
                    recommendation are stored as JSON; scores are
                    denormalised into columns so they can be read (and
                    exported) without decoding the JSON.

The table is append-only: two triggers abort any UPDATE or DELETE.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_HISTORY_ENTRIES = """
CREATE TABLE IF NOT EXISTS history_entries (
    entry_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    recorded_at       TEXT    NOT NULL,
    answers_json      TEXT    NOT NULL,
    result_json       TEXT    NOT NULL,
    result_source     TEXT    NOT NULL DEFAULT 'local'
                              CHECK (result_source IN ('local', 'advisory')),
    tier              TEXT    NOT NULL
                              CHECK (tier IN ('positive', 'warning', 'alert')),
    overall_score     INTEGER CHECK (overall_score   BETWEEN 0 AND 10),
    knowledge_score   INTEGER CHECK (knowledge_score BETWEEN 0 AND 10),
    medication_score  INTEGER CHECK (medication_score BETWEEN 0 AND 10),
    monitoring_score  INTEGER CHECK (monitoring_score BETWEEN 0 AND 10),
    lifestyle_score   INTEGER CHECK (lifestyle_score BETWEEN 0 AND 10),
    created_at        TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_HISTORY_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_history_recorded_at
    ON history_entries(recorded_at);
"""

# Trigger bodies contain semicolons, so they are executed whole (not split).
_TRIGGER_NO_UPDATE = """
CREATE TRIGGER IF NOT EXISTS trg_history_entries_no_update
BEFORE UPDATE ON history_entries
BEGIN
    SELECT RAISE(ABORT, 'history_entries is append-only');
END;
"""

_TRIGGER_NO_DELETE = """
CREATE TRIGGER IF NOT EXISTS trg_history_entries_no_delete
BEFORE DELETE ON history_entries
BEGIN
    SELECT RAISE(ABORT, 'history_entries is append-only');
END;
"""

_ALL_DDL: list[str] = [
    _DDL_HISTORY_ENTRIES,
    _DDL_HISTORY_INDEXES,
]

_ALL_TRIGGERS: list[str] = [
    _TRIGGER_NO_UPDATE,
    _TRIGGER_NO_DELETE,
]

ALL_TABLE_NAMES = [
    "history_entries",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create all tables, indexes, and triggers.

    Idempotent: safe to call on an already-initialized database.
    Each statement uses ``IF NOT EXISTS`` guards.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        # Each block may contain multiple semicolon-separated statements
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    for trigger in _ALL_TRIGGERS:
        conn.execute(trigger.strip())

    conn.commit()
    logger.debug("Schema applied: %d table(s) created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return table names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_triggers(conn: sqlite3.Connection) -> list[str]:
    """Return trigger names present in the database, sorted alphabetically."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='trigger' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]
