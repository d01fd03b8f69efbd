"""
Repository for the append-only submission history.

There is intentionally no update or delete method: entries are immutable once
appended (the schema triggers enforce the same rule at the SQL level).
Reads always return entries in insertion order (``entry_id`` ascending).
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from diabetes_control.db.repositories.base import BaseRepository
from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.history import HistoryEntry, HistoryScores
from diabetes_control.models.recommendation import RecommendationResult
from diabetes_control.utils.time_utils import parse_iso, to_iso

logger = logging.getLogger(__name__)


class HistoryRepository(BaseRepository):
    """Read/append access to ``history_entries``."""

    def insert(self, entry: HistoryEntry) -> int:
        """Insert a history entry and return its ``entry_id``.

        Any ``entry_id`` already set on ``entry`` is ignored; the database
        assigns a new one.
        """
        cursor = self.execute(
            """
            INSERT INTO history_entries (
                recorded_at, answers_json, result_json, result_source, tier,
                overall_score, knowledge_score, medication_score,
                monitoring_score, lifestyle_score
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                to_iso(entry.recorded_at),
                entry.answers.model_dump_json(by_alias=True),
                entry.result.model_dump_json(),
                entry.result.source,
                entry.result.tier.value,
                entry.scores.overall,
                entry.scores.knowledge,
                entry.scores.medication,
                entry.scores.monitoring,
                entry.scores.lifestyle,
            ),
        )
        entry_id = int(cursor.lastrowid)
        logger.debug("Appended history entry %d (%s)", entry_id, entry.result.source)
        return entry_id

    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """Append ``entry`` and return the full updated history, oldest first."""
        self.insert(entry)
        return self.read_all()

    def read_all(self) -> list[HistoryEntry]:
        """Return every entry in insertion order."""
        rows = self.fetchall("SELECT * FROM history_entries ORDER BY entry_id ASC;")
        return [_row_to_entry(r) for r in rows]

    def get_by_id(self, entry_id: int) -> Optional[HistoryEntry]:
        row = self.fetchone(
            "SELECT * FROM history_entries WHERE entry_id = ?;", (entry_id,)
        )
        return _row_to_entry(row) if row else None

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM history_entries;")
        return int(row["n"]) if row else 0


def _row_to_entry(row: sqlite3.Row) -> HistoryEntry:
    return HistoryEntry(
        entry_id=row["entry_id"],
        recorded_at=parse_iso(row["recorded_at"]),
        answers=AnswerSet.model_validate_json(row["answers_json"]),
        result=RecommendationResult.model_validate_json(row["result_json"]),
        scores=HistoryScores(
            overall=row["overall_score"],
            knowledge=row["knowledge_score"],
            medication=row["medication_score"],
            monitoring=row["monitoring_score"],
            lifestyle=row["lifestyle_score"],
        ),
    )
