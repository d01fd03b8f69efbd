"""
History log model.

A ``HistoryEntry`` records one submission: when it happened, what was
answered, what the scorer returned, and a denormalised copy of the scores at
that moment.  Entries are append-only; nothing in the system updates or
deletes them once stored.

``HistoryScores`` allows missing values because older or externally produced
entries may lack an area score.  The trend analyzer substitutes
``DEFAULT_HISTORY_SCORE`` for any missing value.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.recommendation import RecommendationResult
from diabetes_control.taxonomy.questionnaire_taxonomy import Area

DEFAULT_HISTORY_SCORE = 5


class HistoryScores(BaseModel):
    """Scores captured at submission time; any field may be ``None``."""

    model_config = ConfigDict(frozen=True)

    overall: Optional[int] = None
    knowledge: Optional[int] = None
    medication: Optional[int] = None
    monitoring: Optional[int] = None
    lifestyle: Optional[int] = None

    def area_or_default(self, area: Area | str, default: int = DEFAULT_HISTORY_SCORE) -> int:
        value = getattr(self, Area(area).value)
        return default if value is None else value

    def overall_or_default(self, default: int = DEFAULT_HISTORY_SCORE) -> int:
        return default if self.overall is None else self.overall

    @classmethod
    def from_result(cls, result: RecommendationResult) -> "HistoryScores":
        return cls(overall=result.score, **result.areas.as_dict())


class HistoryEntry(BaseModel):
    """One append-only history record.

    Attributes:
        entry_id: Auto-assigned DB PK; ``None`` before insertion.
        recorded_at: UTC timestamp of the submission.
        answers: The submitted questionnaire.
        result: The recommendation shown for it.
        scores: Scores at submission time.
    """

    model_config = ConfigDict(frozen=True)

    entry_id: Optional[int] = None
    recorded_at: datetime
    answers: AnswerSet
    result: RecommendationResult
    scores: HistoryScores

    @classmethod
    def create(
        cls,
        answers: AnswerSet,
        result: RecommendationResult,
        recorded_at: datetime,
    ) -> "HistoryEntry":
        """Build a new (not yet stored) entry from a scored submission."""
        return cls(
            recorded_at=recorded_at,
            answers=answers,
            result=result,
            scores=HistoryScores.from_result(result),
        )
