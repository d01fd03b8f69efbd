"""Tests for diabetes_control.reporting.export."""

from __future__ import annotations

import csv
import json
from datetime import date, datetime, timezone

from diabetes_control.recommendations.scorer import score
from diabetes_control.reporting.export import (
    HISTORY_EXPORT_COLUMNS,
    export_recommendation_report,
    export_to_csv,
    export_to_json,
    flatten_history_for_export,
    history_to_json_records,
    report_filename,
)


def test_report_filename() -> None:
    assert report_filename(date(2026, 10, 17)) == "DiabetesControl_Recomendaciones_2026-10-17.txt"


def test_export_recommendation_report(tmp_path, good_answers) -> None:
    generated_at = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
    path = export_recommendation_report(
        good_answers, score(good_answers), tmp_path / "reports", generated_at
    )
    assert path.name == "DiabetesControl_Recomendaciones_2026-10-17.txt"
    text = path.read_text(encoding="utf-8")
    assert "Puntuación General: 9/10" in text


def test_export_to_csv_roundtrip(tmp_path) -> None:
    path = export_to_csv([{"a": 1, "b": "x"}, {"a": 2, "b": "y"}], tmp_path / "out" / "t.csv")
    with path.open(encoding="utf-8") as f:
        rows = list(csv.DictReader(f))
    assert rows == [{"a": "1", "b": "x"}, {"a": "2", "b": "y"}]


def test_export_to_csv_empty_with_fieldnames(tmp_path) -> None:
    path = export_to_csv([], tmp_path / "empty.csv", fieldnames=["a", "b"])
    assert path.read_text(encoding="utf-8").strip() == "a,b"


def test_export_to_csv_empty_without_fieldnames(tmp_path) -> None:
    path = export_to_csv([], tmp_path / "empty.csv")
    assert path.read_text(encoding="utf-8") == ""


def test_export_to_json_keeps_accents(tmp_path) -> None:
    path = export_to_json({"area": "Medicación"}, tmp_path / "t.json")
    assert "Medicación" in path.read_text(encoding="utf-8")


def test_flatten_history(make_entry) -> None:
    rows = flatten_history_for_export([make_entry(0, overall=6, knowledge=8), make_entry(1)])
    assert len(rows) == 2
    assert list(rows[0]) == HISTORY_EXPORT_COLUMNS
    assert rows[0]["overall_score"] == 6
    assert rows[0]["medication_score"] == ""
    assert rows[0]["desired_features"] == "medicationReminders"
    assert rows[0]["recorded_at"].startswith("2026-03-07T09:30:00")
    assert rows[1]["overall_score"] == ""


def test_history_json_records(make_entry, tmp_path) -> None:
    records = history_to_json_records([make_entry(0, overall=6)])
    path = export_to_json(records, tmp_path / "history.json")
    loaded = json.loads(path.read_text(encoding="utf-8"))
    assert loaded[0]["scores"]["overall"] == 6
    assert loaded[0]["answers"]["medicationFrequency"] == "almostAlways"
    assert loaded[0]["result"]["tier"] == "warning"
