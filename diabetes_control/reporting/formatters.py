"""
Plain-text formatters for recommendation and trend reports.

All formatters take models and return multi-line strings that can be passed
to ``typer.echo()`` or written to disk.  No third-party dependencies.

Score bars
----------
Area and overall scores are drawn as fixed-width ASCII bars with a level
word next to them::

    Conocimiento     [################----]   8  Bueno
    Medicación       [######--------------]   3  Bajo

    level: score >= 7 → Bueno, score >= 4 → Regular, otherwise → Bajo
"""

from __future__ import annotations

import textwrap
from datetime import datetime
from typing import Optional, Sequence

from diabetes_control.advisory.prompt import NOT_SPECIFIED
from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.history import HistoryEntry
from diabetes_control.models.recommendation import MAX_SCORE, RecommendationResult
from diabetes_control.models.trend import TrendReport
from diabetes_control.recommendations.scorer import round_half_up
from diabetes_control.taxonomy.questionnaire_taxonomy import (
    AGE_RANGE_LABELS,
    DESIRED_FEATURE_LABELS,
    GLUCOSE_MONITORING_LABELS,
    MEDICATION_FREQUENCY_LABELS,
    YES_NO_LABELS,
    Area,
    DesiredFeature,
    RecommendationTier,
    area_label,
    trend_label,
)

BAR_WIDTH = 20
GOOD_LEVEL = 7
FAIR_LEVEL = 4
WRAP_WIDTH = 76

APP_NAME = "DiabetesControl"
NO_FEATURES_SELECTED = "Ninguna seleccionada"
TREND_HINT = "Complete el cuestionario al menos dos veces para ver gráficos de tendencias."
DISCLAIMER = (
    "Esta información no sustituye el consejo médico profesional. Consulte siempre "
    "a su médico para el manejo de su diabetes. Las recomendaciones se basan en sus "
    "respuestas y pueden cambiar según su situación médica específica."
)

_TIER_TAGS: dict[RecommendationTier, str] = {
    RecommendationTier.POSITIVE: "[BUENO]",
    RecommendationTier.WARNING:  "[ATENCIÓN]",
    RecommendationTier.ALERT:    "[ALERTA]",
}


# ── Bars ──────────────────────────────────────────────────────────────────────


def score_level(score: int) -> str:
    """Return the level word for a 0–10 score."""
    if score >= GOOD_LEVEL:
        return "Bueno"
    if score >= FAIR_LEVEL:
        return "Regular"
    return "Bajo"


def render_bar(score: int, max_score: int = MAX_SCORE, width: int = BAR_WIDTH) -> str:
    """Return ``[####----]`` with the filled part proportional to ``score``."""
    filled = round_half_up(score / max_score * width) if max_score > 0 else 0
    filled = max(0, min(width, filled))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def _wrap(text: str, indent: str = "  ") -> list[str]:
    return textwrap.wrap(
        text, width=WRAP_WIDTH, initial_indent=indent, subsequent_indent=indent
    ) or [indent.rstrip()]


# ── Answers summary ───────────────────────────────────────────────────────────


def answers_summary_rows(answers: AnswerSet) -> list[tuple[str, str]]:
    """Return ``(question, answer)`` pairs with Spanish display labels.

    Desired features are one ``- label`` line each, in fixed feature order.
    """
    features = "\n".join(
        f"- {DESIRED_FEATURE_LABELS[feature]}"
        for feature in DesiredFeature
        if answers.has_feature(feature)
    )
    return [
        ("Rango de edad", AGE_RANGE_LABELS[answers.age_range]),
        ("Conocimiento sobre diabetes tipo 1", YES_NO_LABELS[answers.knowledge_about_diabetes]),
        ("Frecuencia de medicación", MEDICATION_FREQUENCY_LABELS[answers.medication_frequency]),
        ("Hábitos saludables", answers.healthy_habits or NOT_SPECIFIED),
        ("Control de glucosa", GLUCOSE_MONITORING_LABELS[answers.glucose_monitoring]),
        ("Uso de apps de salud", YES_NO_LABELS[answers.uses_health_app]),
        ("Opinión sobre aplicaciones para diabetes", answers.app_helpful_reason or NOT_SPECIFIED),
        ("Funciones deseadas en una app", features or NO_FEATURES_SELECTED),
    ]


# ── Recommendation report ─────────────────────────────────────────────────────


def format_recommendation_report(
    answers: AnswerSet,
    result: RecommendationResult,
    generated_at: datetime,
) -> str:
    """Format the full recommendation document for one submission.

    Sections, in order: header, recommendation (tier, title, message,
    numbered advice), personalised insights (only when present), area
    evaluation bars with the overall score, answers summary, disclaimer.

    Args:
        answers:      The submitted questionnaire.
        result:       Its recommendation.
        generated_at: Timestamp printed in the header and footer.

    Returns:
        Multi-line string ending with a newline.
    """
    lines: list[str] = []
    lines.append(APP_NAME)
    lines.append("Resultados del Cuestionario y Recomendaciones")
    lines.append(f"Fecha: {generated_at.strftime('%d/%m/%Y')}")

    lines.append("")
    lines.append("=== Recomendaciones ===")
    lines.append(f"  {_TIER_TAGS.get(result.tier, '')} {result.title}".rstrip())
    lines.extend(_wrap(result.message))
    lines.append("")
    lines.append("  Recomendaciones específicas:")
    if result.recommendations:
        for index, rec in enumerate(result.recommendations, start=1):
            lines.extend(
                textwrap.wrap(
                    f"{index}. {rec}",
                    width=WRAP_WIDTH,
                    initial_indent="    ",
                    subsequent_indent="       ",
                )
            )
    else:
        lines.append("    (ninguna)")

    if result.glucose_insights or result.medication_insights:
        lines.append("")
        lines.append("=== Análisis Personalizado ===")
        if result.glucose_insights:
            lines.append("  Sobre su control de glucosa:")
            lines.extend(_wrap(result.glucose_insights, indent="    "))
        if result.medication_insights:
            lines.append("  Sobre su medicación:")
            lines.extend(_wrap(result.medication_insights, indent="    "))

    lines.append("")
    lines.append("=== Evaluación por Áreas ===")
    for area in Area:
        value = result.areas.get(area)
        lines.append(
            f"  {area_label(area):<16} {render_bar(value)}  {value:>2}  {score_level(value)}"
        )
    lines.append(f"  Puntuación General: {result.score}/{result.max_score}")

    lines.append("")
    lines.append("=== Resumen de Respuestas ===")
    for question, answer in answers_summary_rows(answers):
        answer_lines = answer.splitlines() or [""]
        lines.append(f"  {question}:")
        for answer_line in answer_lines:
            lines.extend(_wrap(answer_line, indent="    "))

    lines.append("")
    lines.append("Nota importante:")
    lines.extend(_wrap(DISCLAIMER))
    lines.append("")
    lines.append(f"{APP_NAME} - Generado el {generated_at.strftime('%d/%m/%Y %H:%M')}")
    return "\n".join(lines) + "\n"


# ── Trend report ──────────────────────────────────────────────────────────────


def format_trend_report(report: Optional[TrendReport]) -> str:
    """Format the trend report as an ASCII chart with area trends.

    Shows the hint text instead when ``report`` is ``None`` (fewer than two
    submissions)::

        === Evolución de su Control de Diabetes ===
          Puntaje General: Mejorando (pendiente +0.50)
            3/10   [##########----------]   5
            4/10   [############--------]   6
    """
    lines: list[str] = ["", "=== Evolución de su Control de Diabetes ==="]

    if report is None:
        lines.append(f"  {TREND_HINT}")
        return "\n".join(lines)

    lines.append(
        f"  Puntaje General: {trend_label(report.overall_trend)} "
        f"(pendiente {report.overall_slope:+.2f})"
    )
    for label, value in zip(report.dates, report.overall_scores):
        lines.append(f"    {label:<6} {render_bar(value)}  {value:>2}")

    lines.append("")
    lines.append("  Áreas de Control")
    for area, area_trend in report.areas.items():
        lines.append(
            f"    {area_label(area):<16} {render_bar(area_trend.latest_score)}  "
            f"{area_trend.latest_score:>2}  {trend_label(area_trend.trend)}"
        )

    lines.append("")
    lines.append("  Áreas Fuertes:")
    for area in report.strength_areas:
        lines.append(f"    - {area_label(area)}")
    lines.append("  Áreas a Mejorar:")
    for area in report.improvement_areas:
        lines.append(f"    - {area_label(area)}")
    return "\n".join(lines)


# ── History table ─────────────────────────────────────────────────────────────


def format_history_table(entries: Sequence[HistoryEntry]) -> str:
    """Format the stored history as one row per submission, oldest first."""
    lines: list[str] = ["", "=== Historial de Cuestionarios ==="]
    if not entries:
        lines.append("  (sin registros; use 'submit' para registrar un cuestionario)")
        return "\n".join(lines)

    header = (
        f"  {'ID':>4}  {'Fecha':<16}  {'Origen':<8}  {'Nivel':<8}  "
        f"{'Total':>5}  {'Con':>3}  {'Med':>3}  {'Mon':>3}  {'Est':>3}"
    )
    lines.append(header)
    lines.append("  " + "-" * (len(header) - 2))

    def _cell(value: Optional[int]) -> str:
        return "-" if value is None else str(value)

    for entry in entries:
        s = entry.scores
        lines.append(
            f"  {entry.entry_id if entry.entry_id is not None else '':>4}  "
            f"{entry.recorded_at.strftime('%Y-%m-%d %H:%M'):<16}  "
            f"{entry.result.source:<8}  {entry.result.tier.value:<8}  "
            f"{_cell(s.overall):>5}  {_cell(s.knowledge):>3}  {_cell(s.medication):>3}  "
            f"{_cell(s.monitoring):>3}  {_cell(s.lifestyle):>3}"
        )
    lines.append(f"  {len(entries)} registro(s)")
    return "\n".join(lines)


# ── Sharing ───────────────────────────────────────────────────────────────────


def format_share_text(result: RecommendationResult) -> str:
    """Return the plain-text body used when sharing a recommendation."""
    return (
        "Recomendaciones para mi diabetes:\n\n"
        f"{result.title}\n\n"
        f"{result.message}\n\n"
        "Recomendaciones:\n"
        + "\n".join(result.recommendations)
    )
