"""
Trend detection over the submission history.

Slope
-----
Each score series (overall and one per area) is fitted with an ordinary
least-squares line against the entry index 0..n-1::

    slope = Σ (x_i − x̄)(y_i − ȳ) / Σ (x_i − x̄)²

With two points this is simply the secant slope.  A zero denominator (only
possible for a single point) yields slope 0.

Classification
--------------
    slope >  +TREND_THRESHOLD → IMPROVING
    slope <  −TREND_THRESHOLD → WORSENING
    otherwise                 → STABLE

Area ranking
------------
Areas are sorted by their latest score, descending.  The sort is stable, so
ties keep canonical area order.  The first two are strength areas; the last
two, reversed so the weakest comes first, are improvement areas.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from diabetes_control.models.history import HistoryEntry
from diabetes_control.models.trend import AreaTrend, TrendReport
from diabetes_control.taxonomy.questionnaire_taxonomy import Area, TrendDirection
from diabetes_control.utils.time_utils import format_day_month

logger = logging.getLogger(__name__)

TREND_THRESHOLD = 0.2
MIN_ENTRIES_FOR_TREND = 2
RANKED_AREA_COUNT = 2


def regression_slope(scores: Sequence[float]) -> float:
    """Least-squares slope of ``scores`` against their index.

    Returns 0.0 for fewer than two points.
    """
    n = len(scores)
    if n < 2:
        return 0.0

    mean_x = (n - 1) / 2.0
    mean_y = sum(scores) / n

    numerator = 0.0
    denominator = 0.0
    for i, y in enumerate(scores):
        dx = i - mean_x
        numerator += dx * (y - mean_y)
        denominator += dx * dx

    return numerator / denominator if denominator != 0 else 0.0


def classify_slope(slope: float, threshold: float = TREND_THRESHOLD) -> TrendDirection:
    """Map a slope onto a ``TrendDirection``."""
    if slope > threshold:
        return TrendDirection.IMPROVING
    if slope < -threshold:
        return TrendDirection.WORSENING
    return TrendDirection.STABLE


def rank_areas(latest_scores: dict[Area, int]) -> tuple[list[Area], list[Area]]:
    """Split areas into strengths (highest first) and improvements (lowest first).

    Args:
        latest_scores: Latest score per area, in canonical area order.

    Returns:
        ``(strength_areas, improvement_areas)``, two areas each.
    """
    ordered = sorted(latest_scores, key=lambda area: latest_scores[area], reverse=True)
    strengths = ordered[:RANKED_AREA_COUNT]
    improvements = list(reversed(ordered[-RANKED_AREA_COUNT:]))
    return strengths, improvements


def analyze_trends(history: Sequence[HistoryEntry]) -> Optional[TrendReport]:
    """Compute the trend report for an ordered history.

    Args:
        history: Entries oldest first, as returned by the history store.

    Returns:
        ``TrendReport``, or ``None`` when fewer than two entries exist.
    """
    if not history or len(history) < MIN_ENTRIES_FOR_TREND:
        return None

    dates = tuple(format_day_month(entry.recorded_at) for entry in history)
    overall_scores = tuple(entry.scores.overall_or_default() for entry in history)
    overall_slope = regression_slope(overall_scores)

    areas: dict[Area, AreaTrend] = {}
    for area in Area:
        area_scores = tuple(entry.scores.area_or_default(area) for entry in history)
        slope = regression_slope(area_scores)
        areas[area] = AreaTrend(
            scores=area_scores,
            slope=round(slope, 4),
            trend=classify_slope(slope),
            latest_score=area_scores[-1],
        )

    strengths, improvements = rank_areas(
        {area: trend.latest_score for area, trend in areas.items()}
    )

    report = TrendReport(
        dates=dates,
        overall_scores=overall_scores,
        overall_slope=round(overall_slope, 4),
        overall_trend=classify_slope(overall_slope),
        areas=areas,
        strength_areas=tuple(strengths),
        improvement_areas=tuple(improvements),
    )
    logger.debug(
        "Trend over %d entries: overall slope=%.3f (%s)",
        len(history), overall_slope, report.overall_trend.value,
    )
    return report
