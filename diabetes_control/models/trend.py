"""
Trend report models produced by ``analysis.trends.analyze_trends``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from diabetes_control.taxonomy.questionnaire_taxonomy import Area, TrendDirection


class AreaTrend(BaseModel):
    """Score series and fitted trend for one area.

    Attributes:
        scores: Area score per history entry, oldest first (missing → 5).
        slope: Least-squares slope of score against entry index.
        trend: Slope classification.
        latest_score: Score from the most recent entry.
    """

    model_config = ConfigDict(frozen=True)

    scores: tuple[int, ...]
    slope: float
    trend: TrendDirection
    latest_score: int


class TrendReport(BaseModel):
    """Trend analysis over a submission history of at least two entries.

    Attributes:
        dates: ``day/month`` chart labels, one per entry, oldest first.
        overall_scores: Overall score per entry (missing → 5).
        overall_slope: Least-squares slope of the overall scores.
        overall_trend: Classification of ``overall_slope``.
        areas: Per-area trend, keyed in canonical area order.
        strength_areas: Two highest-scoring areas by latest score.
        improvement_areas: Two lowest-scoring areas, weakest first.
    """

    model_config = ConfigDict(frozen=True)

    dates: tuple[str, ...]
    overall_scores: tuple[int, ...]
    overall_slope: float
    overall_trend: TrendDirection
    areas: dict[Area, AreaTrend]
    strength_areas: tuple[Area, ...]
    improvement_areas: tuple[Area, ...]
