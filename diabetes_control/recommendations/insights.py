"""
Narrative insight generators.

One fixed sentence per answer tier for glucose monitoring and for medication
adherence.  ``rarely`` and any unrecognised value share the default sentence.
"""

from __future__ import annotations

from diabetes_control.taxonomy.questionnaire_taxonomy import (
    GlucoseMonitoring,
    MedicationFrequency,
)

_GLUCOSE_INSIGHTS: dict[str, str] = {
    GlucoseMonitoring.EVERY_12_HOURS: (
        "Su frecuencia de monitoreo de glucosa es excelente. Monitorear cada 12 horas "
        "le permite tener un control detallado de sus niveles durante el día y la noche, "
        "facilitando ajustes rápidos en su tratamiento cuando sea necesario. Esta práctica "
        "es fundamental para prevenir complicaciones a largo plazo."
    ),
    GlucoseMonitoring.EVERY_DAY: (
        "Monitorear su glucosa diariamente es un buen hábito. Para optimizar su control, "
        "considere aumentar la frecuencia a dos veces al día (mañana y noche) para entender "
        "mejor cómo su cuerpo responde a los alimentos, actividades y medicamentos a lo "
        "largo del día."
    ),
}

_GLUCOSE_INSIGHT_DEFAULT = (
    "El monitoreo poco frecuente de glucosa limita su capacidad para controlar "
    "efectivamente su diabetes. Sin información regular sobre sus niveles, es difícil "
    "hacer ajustes oportunos en su tratamiento. Recomendamos encarecidamente aumentar la "
    "frecuencia a al menos una vez al día, idealmente por la mañana en ayunas."
)

_MEDICATION_INSIGHTS: dict[str, str] = {
    MedicationFrequency.DAILY: (
        "Su compromiso con la toma diaria de medicación es excelente y fundamental para el "
        "control efectivo de la diabetes. Esta adherencia consistente ayuda a mantener "
        "niveles estables de glucosa y reduce significativamente el riesgo de "
        "complicaciones a largo plazo."
    ),
    MedicationFrequency.ALMOST_ALWAYS: (
        "Aunque toma su medicación con bastante regularidad, las dosis ocasionalmente "
        "omitidas pueden afectar el control de su glucosa. Intente identificar las razones "
        "de estos olvidos y establezca sistemas (como alarmas o asociación con rutinas "
        "diarias) para alcanzar una adherencia completa."
    ),
}

_MEDICATION_INSIGHT_DEFAULT = (
    "La baja adherencia a la medicación es una preocupación importante. Sin la "
    "medicación adecuada, el riesgo de complicaciones aumenta significativamente. Es "
    "crucial entender que la medicación para la diabetes no es opcional sino esencial "
    "para su salud. Hable con su médico sobre las dificultades que experimenta y explore "
    "opciones de tratamiento que puedan ser más fáciles de seguir."
)


def glucose_insight(glucose_monitoring: str | None) -> str:
    """Return the narrative insight for a glucose-monitoring tier."""
    return _GLUCOSE_INSIGHTS.get(glucose_monitoring or "", _GLUCOSE_INSIGHT_DEFAULT)


def medication_insight(medication_frequency: str | None) -> str:
    """Return the narrative insight for a medication-adherence tier."""
    return _MEDICATION_INSIGHTS.get(medication_frequency or "", _MEDICATION_INSIGHT_DEFAULT)
