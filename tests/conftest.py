"""
Shared pytest fixtures for the DiabetesControl test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the history
    schema applied. Created anew for each test that requests it.
  - ``history_store``: A ``SQLiteHistoryStore`` over a file in ``tmp_path``.
  - Sample answer sets covering the three message tiers, and a
    ``make_entry`` factory for history entries with chosen scores.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Callable, Generator, Optional

import pytest

from diabetes_control.db.history_store import SQLiteHistoryStore
from diabetes_control.db.schema import apply_schema
from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.history import HistoryEntry, HistoryScores
from diabetes_control.models.recommendation import RecommendationResult
from diabetes_control.recommendations.scorer import score

BASE_TIME = datetime(2026, 3, 7, 9, 30, 0, tzinfo=timezone.utc)


# ── Database fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the schema applied."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


@pytest.fixture
def history_store(tmp_path) -> SQLiteHistoryStore:
    """A file-backed history store; each operation opens its own connection."""
    return SQLiteHistoryStore(db_path=str(tmp_path / "history.db"))


# ── Sample answer sets ────────────────────────────────────────────────────────

@pytest.fixture
def good_answers() -> AnswerSet:
    """Areas 8/9/9/8 → overall 9 (8.5 rounded up), positive, no advice."""
    return AnswerSet.model_validate(
        {
            "ageRange": "50-60",
            "knowledgeAboutDiabetes": "yes",
            "medicationFrequency": "daily",
            "healthyHabits": "Hago ejercicio tres veces por semana",
            "glucoseMonitoring": "every12Hours",
            "usesHealthApp": "yes",
            "appHelpfulReason": "Ya uso una app para registrar mi glucosa",
            "desiredFeatures": ["glucoseTracking", "exerciseRoutines"],
        }
    )


@pytest.fixture
def moderate_answers() -> AnswerSet:
    """Areas 8/6/7/7 → overall 7, warning, medication advice + app advice."""
    return AnswerSet.model_validate(
        {
            "ageRange": "45-50",
            "knowledgeAboutDiabetes": "yes",
            "medicationFrequency": "almostAlways",
            "healthyHabits": "Sigo una dieta baja en azúcar",
            "glucoseMonitoring": "everyDay",
            "usesHealthApp": "no",
            "appHelpfulReason": "",
            "desiredFeatures": ["medicationReminders"],
        }
    )


@pytest.fixture
def poor_answers() -> AnswerSet:
    """Areas 4/3/3/4 → overall 4 (3.5 rounded up), alert, advice for every area."""
    return AnswerSet.model_validate(
        {
            "ageRange": "40-45",
            "knowledgeAboutDiabetes": "no",
            "medicationFrequency": "rarely",
            "healthyHabits": "",
            "glucoseMonitoring": "rarely",
            "usesHealthApp": "no",
            "appHelpfulReason": "",
            "desiredFeatures": [],
        }
    )


@pytest.fixture
def local_result(moderate_answers) -> RecommendationResult:
    return score(moderate_answers)


# ── History entry factory ─────────────────────────────────────────────────────

@pytest.fixture
def make_entry(moderate_answers, local_result) -> Callable[..., HistoryEntry]:
    """Return a factory building entries with explicit scores.

    ``make_entry(index, overall=..., knowledge=..., ...)`` places the entry
    ``index`` days after ``BASE_TIME``.  Unspecified scores are ``None``.
    """

    def _make(
        index: int = 0,
        overall: Optional[int] = None,
        knowledge: Optional[int] = None,
        medication: Optional[int] = None,
        monitoring: Optional[int] = None,
        lifestyle: Optional[int] = None,
    ) -> HistoryEntry:
        return HistoryEntry(
            recorded_at=BASE_TIME + timedelta(days=index),
            answers=moderate_answers,
            result=local_result,
            scores=HistoryScores(
                overall=overall,
                knowledge=knowledge,
                medication=medication,
                monitoring=monitoring,
                lifestyle=lifestyle,
            ),
        )

    return _make
