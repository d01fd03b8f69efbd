"""
Questionnaire taxonomy for DiabetesControl.

Every closed-domain answer in the questionnaire, plus the tags the scorer
and trend analyzer emit, is a ``StrEnum``.  String values match the form
values submitted by the questionnaire (``"almostAlways"``, ``"every12Hours"``
...) so raw JSON answers validate directly into these enums.

  - ``AgeRange``, ``YesNo``, ``MedicationFrequency``, ``GlucoseMonitoring``,
    ``DesiredFeature`` — the *inputs*.
  - ``Area``                — the four scored areas, in canonical order.
  - ``RecommendationTier``  — positive / warning / alert message tier.
  - ``TrendDirection``      — improving / stable / worsening slope class.

Spanish display labels live next to the enums so the prompt builder and the
report formatters share one source of truth.

This module has NO imports from any other ``diabetes_control`` package.
"""

from enum import StrEnum


class AgeRange(StrEnum):
    """Age bracket of the respondent."""

    AGE_40_45 = "40-45"
    AGE_45_50 = "45-50"
    AGE_50_60 = "50-60"


class YesNo(StrEnum):
    """Binary answer used for the knowledge and app-usage questions."""

    YES = "yes"
    NO = "no"


class MedicationFrequency(StrEnum):
    """How consistently the respondent takes prescribed medication."""

    DAILY = "daily"
    ALMOST_ALWAYS = "almostAlways"
    RARELY = "rarely"


class GlucoseMonitoring(StrEnum):
    """How often the respondent checks blood glucose."""

    EVERY_12_HOURS = "every12Hours"
    EVERY_DAY = "everyDay"
    RARELY = "rarely"


class DesiredFeature(StrEnum):
    """Feature a respondent would like in a diabetes app."""

    GLUCOSE_TRACKING = "glucoseTracking"
    MEDICATION_REMINDERS = "medicationReminders"
    MEAL_PLANS = "mealPlans"
    EXERCISE_ROUTINES = "exerciseRoutines"
    HEALTHCARE_CONTACTS = "healthcareContacts"


class Area(StrEnum):
    """Scored self-management area.  Declaration order is the canonical order."""

    KNOWLEDGE = "knowledge"
    MEDICATION = "medication"
    MONITORING = "monitoring"
    LIFESTYLE = "lifestyle"


class RecommendationTier(StrEnum):
    """Message tier chosen from the overall score."""

    POSITIVE = "positive"
    """Overall >= 8: good control."""

    WARNING = "warning"
    """Overall >= 5: moderate control."""

    ALERT = "alert"
    """Overall < 5: insufficient control."""


class TrendDirection(StrEnum):
    """Classification of a least-squares slope over the submission history."""

    IMPROVING = "positive"
    STABLE = "stable"
    WORSENING = "negative"


# ── Display labels (Spanish UI) ───────────────────────────────────────────────

AGE_RANGE_LABELS: dict[AgeRange, str] = {
    AgeRange.AGE_40_45: "40-45 años",
    AgeRange.AGE_45_50: "45-50 años",
    AgeRange.AGE_50_60: "50-60 años",
}

YES_NO_LABELS: dict[YesNo, str] = {
    YesNo.YES: "Sí",
    YesNo.NO: "No",
}

MEDICATION_FREQUENCY_LABELS: dict[MedicationFrequency, str] = {
    MedicationFrequency.DAILY: "Todos los días",
    MedicationFrequency.ALMOST_ALWAYS: "Casi siempre",
    MedicationFrequency.RARELY: "Rara vez",
}

GLUCOSE_MONITORING_LABELS: dict[GlucoseMonitoring, str] = {
    GlucoseMonitoring.EVERY_12_HOURS: "Cada 12 horas",
    GlucoseMonitoring.EVERY_DAY: "Cada día",
    GlucoseMonitoring.RARELY: "Casi nunca lo hago",
}

DESIRED_FEATURE_LABELS: dict[DesiredFeature, str] = {
    DesiredFeature.GLUCOSE_TRACKING: "Registro de niveles de glucosa",
    DesiredFeature.MEDICATION_REMINDERS: "Recordatorios de medicación",
    DesiredFeature.MEAL_PLANS: "Planes de alimentación",
    DesiredFeature.EXERCISE_ROUTINES: "Rutinas de ejercicio",
    DesiredFeature.HEALTHCARE_CONTACTS: "Contacto de profesionales de salud",
}

AREA_LABELS: dict[Area, str] = {
    Area.KNOWLEDGE: "Conocimiento",
    Area.MEDICATION: "Medicación",
    Area.MONITORING: "Monitoreo",
    Area.LIFESTYLE: "Estilo de vida",
}

TREND_LABELS: dict[TrendDirection, str] = {
    TrendDirection.IMPROVING: "Mejorando",
    TrendDirection.STABLE: "Estable",
    TrendDirection.WORSENING: "Empeorando",
}


def area_label(area: str) -> str:
    """Return the Spanish display name for an area, or the input unchanged."""
    try:
        return AREA_LABELS[Area(area)]
    except ValueError:
        return area


def trend_label(direction: str) -> str:
    """Return the Spanish display text for a trend direction.

    Unknown values render as "Estable", matching the chart legend default.
    """
    try:
        return TREND_LABELS[TrendDirection(direction)]
    except ValueError:
        return TREND_LABELS[TrendDirection.STABLE]
