"""
Prompt construction for the remote advisory call.

``build_prompt()`` is deterministic string interpolation of an ``AnswerSet``
using the Spanish display labels from the questionnaire taxonomy.  The system
message pins the JSON response shape that ``parse_advisory_content()``
expects.
"""

from __future__ import annotations

from diabetes_control.models.answers import AnswerSet
from diabetes_control.taxonomy.questionnaire_taxonomy import (
    AGE_RANGE_LABELS,
    DESIRED_FEATURE_LABELS,
    GLUCOSE_MONITORING_LABELS,
    MEDICATION_FREQUENCY_LABELS,
    YES_NO_LABELS,
    DesiredFeature,
)

NOT_SPECIFIED = "No especificado"

SYSTEM_PROMPT = (
    "Eres un asistente especializado en diabetes tipo 1 que analiza respuestas de "
    "cuestionarios para proporcionar recomendaciones personalizadas. Usa un tono "
    "empático y comprensivo. Tu objetivo es clasificar los hábitos del paciente en "
    "'buenos hábitos', 'hábitos irregulares' o 'falta de control' basado en sus "
    "respuestas. Proporciona recomendaciones específicas y adaptadas. Devuelve tu "
    "respuesta en formato JSON con la siguiente estructura: { tipo: "
    "'positive'|'warning'|'alert', titulo: string, mensaje: string, recomendaciones: "
    "string[], area_conocimiento: 0-10, area_medicacion: 0-10, area_monitoreo: 0-10, "
    "area_estilo_vida: 0-10, glucoseInsights: string, medicationInsights: string }"
)


def format_desired_features(answers: AnswerSet) -> str:
    """Render selected features as ``- label`` lines in fixed feature order."""
    return "".join(
        f"- {DESIRED_FEATURE_LABELS[feature]}\n"
        for feature in DesiredFeature
        if answers.has_feature(feature)
    )


def build_prompt(answers: AnswerSet) -> str:
    """Build the user prompt describing one questionnaire response."""
    return (
        "\n"
        "Analiza las siguientes respuestas de un paciente con diabetes tipo 1:\n"
        "\n"
        f"Rango de edad: {AGE_RANGE_LABELS[answers.age_range]}\n"
        "\n"
        "Conocimiento sobre diabetes tipo 1: "
        f"{YES_NO_LABELS[answers.knowledge_about_diabetes]}\n"
        "\n"
        "Frecuencia de medicación: "
        f"{MEDICATION_FREQUENCY_LABELS[answers.medication_frequency]}\n"
        "\n"
        f"Hábitos saludables: {answers.healthy_habits or NOT_SPECIFIED}\n"
        "\n"
        f"Control de glucosa: {GLUCOSE_MONITORING_LABELS[answers.glucose_monitoring]}\n"
        "\n"
        f"Uso de apps de salud: {YES_NO_LABELS[answers.uses_health_app]}\n"
        "\n"
        "Opinión sobre aplicaciones para diabetes: "
        f"{answers.app_helpful_reason or NOT_SPECIFIED}\n"
        "\n"
        "Funciones deseadas en una app:\n"
        f"{format_desired_features(answers)}"
        "\n"
        "Proporciona un análisis detallado, califica las áreas en una escala de 0-10 y "
        "da recomendaciones personalizadas con un tono empático y comprensivo.\n"
    )
