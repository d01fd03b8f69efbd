"""
Rule-based questionnaire scoring: converts an ``AnswerSet`` into a
``RecommendationResult`` with per-area scores, a message tier, and targeted
advice.

Area scores (integer 0–10)
--------------------------
knowledge:
    yes → 8, no → 4.

medication:
    daily → 9, almostAlways → 6, anything else → 3.

monitoring:
    every12Hours → 9, everyDay → 7, anything else → 3.

lifestyle (case-insensitive scan of the free-text habits, first match wins):
    1. exercise keyword (ejercicio, deporte, caminar) → 8
    2. diet keyword (dieta, alimentación, comer)       → 7
    3. more than 20 characters of text                 → 6
    4. otherwise                                       → 4

Overall score
-------------
    overall = round_half_up(mean(knowledge, medication, monitoring, lifestyle))

Tier determination (first match wins)
-------------------------------------
    1. POSITIVE : overall >= 8
    2. WARNING  : overall >= 5
    3. ALERT    : everything else

Recommendation list
-------------------
Each area scoring below 7 contributes its two fixed advice strings, always in
the order knowledge → medication → monitoring → lifestyle.  A respondent who
does not use a health app gets one final app suggestion.
"""

from __future__ import annotations

import math
from typing import Optional

from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.recommendation import MAX_SCORE, AreaScores, RecommendationResult
from diabetes_control.recommendations.insights import glucose_insight, medication_insight
from diabetes_control.taxonomy.questionnaire_taxonomy import (
    Area,
    GlucoseMonitoring,
    MedicationFrequency,
    RecommendationTier,
    YesNo,
)

AREA_ADVICE_THRESHOLD = 7

_MEDICATION_SCORES: dict[str, int] = {
    MedicationFrequency.DAILY:         9,
    MedicationFrequency.ALMOST_ALWAYS: 6,
}
_MEDICATION_DEFAULT = 3

_MONITORING_SCORES: dict[str, int] = {
    GlucoseMonitoring.EVERY_12_HOURS: 9,
    GlucoseMonitoring.EVERY_DAY:      7,
}
_MONITORING_DEFAULT = 3

_EXERCISE_KEYWORDS: tuple[str, ...] = ("ejercicio", "deporte", "caminar")
_DIET_KEYWORDS: tuple[str, ...] = ("dieta", "alimentación", "comer")

_TIER_TEXT: dict[RecommendationTier, tuple[str, str]] = {
    RecommendationTier.POSITIVE: (
        "¡Excelente control de su diabetes!",
        "Está haciendo un gran trabajo en el manejo de su diabetes. Continúe con estos "
        "buenos hábitos y manténgase en contacto con su equipo médico para seguir "
        "mejorando su calidad de vida.",
    ),
    RecommendationTier.WARNING: (
        "Control moderado de su diabetes",
        "Está en el camino correcto, pero hay aspectos que podrían mejorar. Con pequeños "
        "ajustes en su rutina diaria, puede lograr un mejor control de su diabetes y "
        "prevenir complicaciones futuras.",
    ),
    RecommendationTier.ALERT: (
        "Control insuficiente de su diabetes",
        "Es importante mejorar el control de su diabetes. Los resultados muestran que hay "
        "áreas que requieren atención inmediata. No se desanime, con el apoyo adecuado y "
        "cambios en sus hábitos, puede mejorar significativamente su salud.",
    ),
}

_AREA_ADVICE: dict[Area, tuple[str, str]] = {
    Area.KNOWLEDGE: (
        "Considere participar en programas educativos sobre diabetes para ampliar sus "
        "conocimientos sobre la enfermedad.",
        "Busque información confiable en asociaciones de diabetes reconocidas y consulte "
        "regularmente con su médico para aclarar dudas.",
    ),
    Area.MEDICATION: (
        "Establezca recordatorios diarios para no olvidar tomar su medicación según lo "
        "prescrito por su médico.",
        "Utilice un pastillero organizador semanal para facilitar el seguimiento de su "
        "medicación.",
    ),
    Area.MONITORING: (
        "Monitoree su glucosa con mayor frecuencia, idealmente al menos dos veces al día "
        "(mañana y noche).",
        "Lleve un registro detallado de sus niveles de glucosa para identificar patrones "
        "y compartirlo con su médico.",
    ),
    Area.LIFESTYLE: (
        "Incorpore actividad física regular a su rutina, como caminar 30 minutos diarios.",
        "Siga una dieta equilibrada, limitando los carbohidratos refinados y controlando "
        "el tamaño de las porciones.",
    ),
}

HEALTH_APP_ADVICE = (
    "Considere usar aplicaciones móviles específicas para diabetes que le ayuden a "
    "registrar y controlar sus niveles de glucosa, medicación y hábitos diarios."
)


# ── Area lookups ──────────────────────────────────────────────────────────────

def score_knowledge(knowledge_about_diabetes: str) -> int:
    return 8 if knowledge_about_diabetes == YesNo.YES else 4


def score_medication(medication_frequency: str) -> int:
    return _MEDICATION_SCORES.get(medication_frequency, _MEDICATION_DEFAULT)


def score_monitoring(glucose_monitoring: str) -> int:
    return _MONITORING_SCORES.get(glucose_monitoring, _MONITORING_DEFAULT)


def score_lifestyle(healthy_habits: str | None) -> int:
    """Score the free-text habits description.

    Keyword matching is case-insensitive; the length rule counts characters
    of the text as written.
    """
    text = healthy_habits or ""
    lowered = text.lower()
    if any(word in lowered for word in _EXERCISE_KEYWORDS):
        return 8
    if any(word in lowered for word in _DIET_KEYWORDS):
        return 7
    if len(text) > 20:
        return 6
    return 4


def compute_area_scores(answers: AnswerSet) -> AreaScores:
    """Apply the fixed lookup tables to every area."""
    return AreaScores(
        knowledge=score_knowledge(answers.knowledge_about_diabetes),
        medication=score_medication(answers.medication_frequency),
        monitoring=score_monitoring(answers.glucose_monitoring),
        lifestyle=score_lifestyle(answers.healthy_habits),
    )


# ── Aggregation ───────────────────────────────────────────────────────────────

def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (``round()`` is banker's)."""
    return int(math.floor(value + 0.5))


def overall_score(areas: AreaScores) -> int:
    """Rounded mean of the four area scores, always in [0, 10]."""
    values = areas.values()
    return _clamp(round_half_up(sum(values) / len(values)), 0, MAX_SCORE)


def determine_tier(score: int) -> RecommendationTier:
    """Map an overall score to its message tier.

    Rules (evaluated in order, first match wins):
        1. POSITIVE : score >= 8
        2. WARNING  : score >= 5
        3. ALERT    : everything else
    """
    if score >= 8:
        return RecommendationTier.POSITIVE
    if score >= 5:
        return RecommendationTier.WARNING
    return RecommendationTier.ALERT


def tier_text(tier: RecommendationTier) -> tuple[str, str]:
    """Return the fixed ``(title, message)`` pair for ``tier``."""
    return _TIER_TEXT[tier]


def build_recommendations(areas: AreaScores, uses_health_app: str) -> list[str]:
    """Assemble advice strings for every area below the threshold.

    Returns:
        Advice in canonical area order, followed by the app suggestion when
        the respondent does not use a health app.  Empty when nothing applies.
    """
    recommendations: list[str] = []
    for area in Area:
        if areas.get(area) < AREA_ADVICE_THRESHOLD:
            recommendations.extend(_AREA_ADVICE[area])
    if uses_health_app == YesNo.NO:
        recommendations.append(HEALTH_APP_ADVICE)
    return recommendations


# ── Entry point ───────────────────────────────────────────────────────────────

def score(
    answers: AnswerSet,
    external_analysis: Optional[RecommendationResult] = None,
) -> RecommendationResult:
    """Score a questionnaire, preferring a supplied advisory analysis.

    When ``external_analysis`` is given it is returned as-is, except that a
    missing or empty glucose/medication insight is filled in by the local
    insight generators.  Otherwise the full rule-based scoring runs.

    Args:
        answers:           The submitted questionnaire.
        external_analysis: Optional precomputed advisory result.

    Returns:
        A ``RecommendationResult``.
    """
    if external_analysis is not None:
        return external_analysis.model_copy(
            update={
                "glucose_insights": external_analysis.glucose_insights
                or glucose_insight(answers.glucose_monitoring),
                "medication_insights": external_analysis.medication_insights
                or medication_insight(answers.medication_frequency),
            }
        )

    areas = compute_area_scores(answers)
    total = overall_score(areas)
    tier = determine_tier(total)
    title, message = tier_text(tier)

    return RecommendationResult(
        tier=tier,
        title=title,
        message=message,
        recommendations=tuple(build_recommendations(areas, answers.uses_health_app)),
        areas=areas,
        score=total,
        max_score=MAX_SCORE,
        glucose_insights=glucose_insight(answers.glucose_monitoring),
        medication_insights=medication_insight(answers.medication_frequency),
        source="local",
    )


# ── Helper ────────────────────────────────────────────────────────────────────

def _clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))
