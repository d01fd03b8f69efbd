"""
File export helpers for recommendation reports and the submission history.

All functions write to disk and return the written ``Path``.  Parent
directories are created as needed.

CSV exports are flat (one row per submission, no nested values) so they open
directly in a spreadsheet.  ``flatten_history_for_export()`` is the adapter
from ``HistoryEntry`` models to those rows.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Sequence

from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.history import HistoryEntry
from diabetes_control.models.recommendation import RecommendationResult
from diabetes_control.reporting.formatters import format_recommendation_report
from diabetes_control.utils.time_utils import to_iso, utcnow

logger = logging.getLogger(__name__)

REPORT_FILENAME_PREFIX = "DiabetesControl_Recomendaciones"

HISTORY_EXPORT_COLUMNS: list[str] = [
    "entry_id",
    "recorded_at",
    "source",
    "tier",
    "title",
    "overall_score",
    "knowledge_score",
    "medication_score",
    "monitoring_score",
    "lifestyle_score",
    "recommendation_count",
    "age_range",
    "knowledge_about_diabetes",
    "medication_frequency",
    "glucose_monitoring",
    "uses_health_app",
    "desired_features",
    "healthy_habits",
    "app_helpful_reason",
]


def report_filename(day: date) -> str:
    """Return ``DiabetesControl_Recomendaciones_<YYYY-MM-DD>.txt``."""
    return f"{REPORT_FILENAME_PREFIX}_{day.isoformat()}.txt"


def export_recommendation_report(
    answers: AnswerSet,
    result: RecommendationResult,
    output_dir: Path,
    generated_at: Optional[datetime] = None,
) -> Path:
    """Write the recommendation document for one submission.

    A report generated later on the same day overwrites the earlier one.

    Args:
        answers:      The submitted questionnaire.
        result:       Its recommendation.
        output_dir:   Destination directory.
        generated_at: Report timestamp; defaults to now (UTC).

    Returns:
        Path of the written text file.
    """
    generated_at = generated_at or utcnow()
    path = Path(output_dir) / report_filename(generated_at.date())
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        format_recommendation_report(answers, result, generated_at), encoding="utf-8"
    )
    logger.info("Recommendation report written to %s", path)
    return path


def export_to_csv(
    records: list[dict],
    path: Path,
    fieldnames: list[str] | None = None,
) -> Path:
    """Write ``records`` to a UTF-8 CSV file.

    Args:
        records:    List of row dicts.
        path:       Destination file path.
        fieldnames: Column order.  If None, uses the keys of the first record.

    Returns:
        ``path`` as written.  An empty ``records`` list writes only the
        header when ``fieldnames`` is given, otherwise an empty file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if not records and not fieldnames:
        path.write_text("", encoding="utf-8")
        return path
    cols = fieldnames or list(records[0].keys())
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=cols, extrasaction="ignore")
        writer.writeheader()
        writer.writerows(records)
    return path


def export_to_json(
    data: dict | list,
    path: Path,
) -> Path:
    """Write ``data`` to a pretty-printed UTF-8 JSON file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(data, indent=2, default=str, ensure_ascii=False), encoding="utf-8"
    )
    return path


def flatten_history_for_export(entries: Sequence[HistoryEntry]) -> list[dict]:
    """Flatten history entries into rows keyed by ``HISTORY_EXPORT_COLUMNS``.

    Missing scores are exported as empty cells, not defaulted.  Desired
    features are joined with ``;``.
    """
    rows: list[dict] = []
    for entry in entries:
        answers = entry.answers
        scores = entry.scores
        rows.append(
            {
                "entry_id":                 entry.entry_id if entry.entry_id is not None else "",
                "recorded_at":              to_iso(entry.recorded_at),
                "source":                   entry.result.source,
                "tier":                     entry.result.tier.value,
                "title":                    entry.result.title,
                "overall_score":            _blank_if_none(scores.overall),
                "knowledge_score":          _blank_if_none(scores.knowledge),
                "medication_score":         _blank_if_none(scores.medication),
                "monitoring_score":         _blank_if_none(scores.monitoring),
                "lifestyle_score":          _blank_if_none(scores.lifestyle),
                "recommendation_count":     len(entry.result.recommendations),
                "age_range":                answers.age_range.value,
                "knowledge_about_diabetes": answers.knowledge_about_diabetes.value,
                "medication_frequency":     answers.medication_frequency.value,
                "glucose_monitoring":       answers.glucose_monitoring.value,
                "uses_health_app":          answers.uses_health_app.value,
                "desired_features":         ";".join(f.value for f in answers.desired_features),
                "healthy_habits":           answers.healthy_habits,
                "app_helpful_reason":       answers.app_helpful_reason,
            }
        )
    return rows


def history_to_json_records(entries: Sequence[HistoryEntry]) -> list[dict]:
    """Return entries as JSON-ready dicts with camelCase answer keys."""
    return [entry.model_dump(mode="json", by_alias=True) for entry in entries]


def _blank_if_none(value: Optional[int]) -> int | str:
    return "" if value is None else value
