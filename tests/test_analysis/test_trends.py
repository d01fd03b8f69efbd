"""
Tests for diabetes_control/analysis/trends.py.

Covers slope fitting, the ±0.2 classification band, missing-score
defaulting, the strength/improvement partition, and date labels.
"""

from __future__ import annotations

import pytest

from diabetes_control.analysis.trends import (
    analyze_trends,
    classify_slope,
    rank_areas,
    regression_slope,
)
from diabetes_control.taxonomy.questionnaire_taxonomy import Area, TrendDirection


def _series(make_entry, values: list[int]):
    """History whose overall and area scores all follow ``values``."""
    return [
        make_entry(
            i,
            overall=v,
            knowledge=v,
            medication=v,
            monitoring=v,
            lifestyle=v,
        )
        for i, v in enumerate(values)
    ]


# ── regression_slope / classify_slope ─────────────────────────────────────────

class TestRegressionSlope:
    def test_increasing(self):
        assert regression_slope([4, 5, 6, 7]) == pytest.approx(1.0)

    def test_decreasing(self):
        assert regression_slope([7, 6, 5, 4]) == pytest.approx(-1.0)

    def test_flat(self):
        assert regression_slope([5, 5, 5, 5]) == 0.0

    def test_two_points_is_secant(self):
        assert regression_slope([3, 8]) == pytest.approx(5.0)

    def test_fewer_than_two_points(self):
        assert regression_slope([]) == 0.0
        assert regression_slope([7]) == 0.0

    def test_least_squares_not_endpoints(self):
        # endpoints alone would give (6 - 5) / 3
        assert regression_slope([5, 5, 5, 6]) == pytest.approx(0.3)


class TestClassifySlope:
    @pytest.mark.parametrize(
        "slope, expected",
        [
            (1.0, TrendDirection.IMPROVING),
            (0.21, TrendDirection.IMPROVING),
            (0.2, TrendDirection.STABLE),
            (0.0, TrendDirection.STABLE),
            (-0.2, TrendDirection.STABLE),
            (-0.21, TrendDirection.WORSENING),
            (-1.0, TrendDirection.WORSENING),
        ],
    )
    def test_band(self, slope, expected):
        assert classify_slope(slope) == expected

    def test_direction_values(self):
        assert TrendDirection.IMPROVING.value == "positive"
        assert TrendDirection.STABLE.value == "stable"
        assert TrendDirection.WORSENING.value == "negative"


# ── rank_areas ────────────────────────────────────────────────────────────────

class TestRankAreas:
    def test_strengths_and_improvements(self):
        strengths, improvements = rank_areas(
            {
                Area.KNOWLEDGE: 8,
                Area.MEDICATION: 9,
                Area.MONITORING: 7,
                Area.LIFESTYLE: 4,
            }
        )
        assert strengths == [Area.MEDICATION, Area.KNOWLEDGE]
        assert improvements == [Area.LIFESTYLE, Area.MONITORING]

    def test_ties_keep_canonical_order(self):
        strengths, improvements = rank_areas({area: 5 for area in Area})
        assert strengths == [Area.KNOWLEDGE, Area.MEDICATION]
        assert improvements == [Area.LIFESTYLE, Area.MONITORING]

    def test_partition_covers_all_areas(self):
        strengths, improvements = rank_areas(
            {Area.KNOWLEDGE: 2, Area.MEDICATION: 10, Area.MONITORING: 6, Area.LIFESTYLE: 6}
        )
        assert set(strengths) | set(improvements) == set(Area)
        assert not set(strengths) & set(improvements)


# ── analyze_trends ────────────────────────────────────────────────────────────

class TestAnalyzeTrends:
    def test_none_for_empty_history(self):
        assert analyze_trends([]) is None

    def test_none_for_single_entry(self, make_entry):
        assert analyze_trends([make_entry(0, overall=7)]) is None

    @pytest.mark.parametrize(
        "values, expected",
        [
            ([4, 5, 6, 7], TrendDirection.IMPROVING),
            ([7, 6, 5, 4], TrendDirection.WORSENING),
            ([5, 5, 5, 5], TrendDirection.STABLE),
        ],
    )
    def test_overall_and_area_trends(self, make_entry, values, expected):
        report = analyze_trends(_series(make_entry, values))
        assert report is not None
        assert report.overall_trend == expected
        assert report.overall_scores == tuple(values)
        for area in Area:
            assert report.areas[area].trend == expected
            assert report.areas[area].scores == tuple(values)

    def test_two_entries_are_enough(self, make_entry):
        report = analyze_trends(_series(make_entry, [5, 6]))
        assert report is not None
        assert report.overall_trend == TrendDirection.IMPROVING

    def test_missing_scores_default_to_five(self, make_entry):
        history = [make_entry(0), make_entry(1, overall=8, knowledge=9)]
        report = analyze_trends(history)
        assert report.overall_scores == (5, 8)
        assert report.areas[Area.KNOWLEDGE].scores == (5, 9)
        assert report.areas[Area.LIFESTYLE].scores == (5, 5)
        assert report.areas[Area.LIFESTYLE].trend == TrendDirection.STABLE

    def test_zero_score_is_not_missing(self, make_entry):
        history = [
            make_entry(0, overall=0, knowledge=0),
            make_entry(1, overall=0, knowledge=0),
        ]
        report = analyze_trends(history)
        assert report.overall_scores == (0, 0)
        assert report.areas[Area.KNOWLEDGE].latest_score == 0

    def test_latest_score_and_ranking(self, make_entry):
        history = [
            make_entry(0, overall=5, knowledge=5, medication=5, monitoring=5, lifestyle=5),
            make_entry(1, overall=7, knowledge=8, medication=9, monitoring=7, lifestyle=4),
        ]
        report = analyze_trends(history)
        assert report.areas[Area.MEDICATION].latest_score == 9
        assert report.strength_areas == (Area.MEDICATION, Area.KNOWLEDGE)
        assert report.improvement_areas == (Area.LIFESTYLE, Area.MONITORING)

    def test_areas_in_canonical_order(self, make_entry):
        report = analyze_trends(_series(make_entry, [5, 6]))
        assert list(report.areas) == list(Area)

    def test_date_labels_are_day_month(self, make_entry):
        # conftest BASE_TIME is 7 March
        report = analyze_trends(_series(make_entry, [5, 6, 7]))
        assert report.dates == ("7/3", "8/3", "9/3")

    def test_history_order_is_respected(self, make_entry):
        history = _series(make_entry, [4, 5, 6, 7])
        report = analyze_trends(list(reversed(history)))
        assert report.overall_trend == TrendDirection.WORSENING
