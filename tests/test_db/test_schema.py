"""Tests for the history schema and its append-only triggers."""

from __future__ import annotations

import sqlite3

import pytest

from diabetes_control.db.schema import (
    ALL_TABLE_NAMES,
    apply_schema,
    get_existing_tables,
    get_existing_triggers,
)

_INSERT = """
INSERT INTO history_entries (recorded_at, answers_json, result_json, result_source, tier,
                             overall_score)
VALUES ('2026-03-07T09:30:00+00:00', '{}', '{}', 'local', 'warning', ?);
"""


class TestApplySchema:
    def test_all_tables_created(self, in_memory_db):
        tables = get_existing_tables(in_memory_db)
        for expected_table in ALL_TABLE_NAMES:
            assert expected_table in tables

    def test_idempotent_double_apply(self, in_memory_db):
        apply_schema(in_memory_db)
        assert "history_entries" in get_existing_tables(in_memory_db)

    def test_recorded_at_index(self, in_memory_db):
        rows = in_memory_db.execute(
            "SELECT name FROM sqlite_master WHERE type='index';"
        ).fetchall()
        assert "idx_history_recorded_at" in [r[0] for r in rows]

    def test_triggers_created(self, in_memory_db):
        triggers = get_existing_triggers(in_memory_db)
        assert "trg_history_entries_no_update" in triggers
        assert "trg_history_entries_no_delete" in triggers


class TestAppendOnly:
    def test_update_rejected(self, in_memory_db):
        in_memory_db.execute(_INSERT, (7,))
        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            in_memory_db.execute("UPDATE history_entries SET overall_score = 9;")

    def test_delete_rejected(self, in_memory_db):
        in_memory_db.execute(_INSERT, (7,))
        with pytest.raises(sqlite3.DatabaseError, match="append-only"):
            in_memory_db.execute("DELETE FROM history_entries;")


class TestConstraints:
    def test_score_out_of_range_rejected(self, in_memory_db):
        with pytest.raises(sqlite3.IntegrityError):
            in_memory_db.execute(_INSERT, (11,))

    def test_null_score_allowed(self, in_memory_db):
        in_memory_db.execute(_INSERT, (None,))
        row = in_memory_db.execute("SELECT overall_score FROM history_entries;").fetchone()
        assert row[0] is None
