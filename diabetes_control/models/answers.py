"""
Questionnaire answer model.

``AnswerSet`` is one complete questionnaire response.  It is frozen: once a
response is submitted it is scored, stored, and exported exactly as given.

Field aliases match the camelCase keys produced by the questionnaire form
(``knowledgeAboutDiabetes``, ``desiredFeatures`` ...), so a raw JSON export of
the form validates directly::

    AnswerSet.model_validate(json.loads(path.read_text()))

``model_dump(by_alias=True, mode="json")`` produces the same shape back and
is what the history store persists.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from diabetes_control.taxonomy.questionnaire_taxonomy import (
    AgeRange,
    DesiredFeature,
    GlucoseMonitoring,
    MedicationFrequency,
    YesNo,
)


class AnswerSet(BaseModel):
    """A single submitted questionnaire.

    Defaults mirror the questionnaire's initial form state.

    Attributes:
        age_range: Respondent age bracket.
        knowledge_about_diabetes: Whether the respondent knows about type 1 diabetes.
        medication_frequency: Medication adherence tier.
        healthy_habits: Free-text description of healthy habits ("" if blank).
        glucose_monitoring: Glucose monitoring frequency tier.
        uses_health_app: Whether the respondent already uses a health app.
        app_helpful_reason: Free-text opinion on diabetes apps ("" if blank).
        desired_features: Features the respondent would like in an app.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    age_range: AgeRange = Field(AgeRange.AGE_40_45, alias="ageRange")
    knowledge_about_diabetes: YesNo = Field(YesNo.YES, alias="knowledgeAboutDiabetes")
    medication_frequency: MedicationFrequency = Field(
        MedicationFrequency.DAILY, alias="medicationFrequency"
    )
    healthy_habits: str = Field("", alias="healthyHabits")
    glucose_monitoring: GlucoseMonitoring = Field(
        GlucoseMonitoring.EVERY_DAY, alias="glucoseMonitoring"
    )
    uses_health_app: YesNo = Field(YesNo.NO, alias="usesHealthApp")
    app_helpful_reason: str = Field("", alias="appHelpfulReason")
    desired_features: tuple[DesiredFeature, ...] = Field(
        (DesiredFeature.GLUCOSE_TRACKING, DesiredFeature.MEDICATION_REMINDERS),
        alias="desiredFeatures",
    )

    @field_validator("healthy_habits", "app_helpful_reason", mode="before")
    @classmethod
    def blank_text_for_missing(cls, v: Any) -> str:
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)

    @field_validator("desired_features", mode="before")
    @classmethod
    def dedupe_features(cls, v: Any) -> Any:
        if v is None:
            return ()
        if isinstance(v, (list, tuple, set, frozenset)):
            seen: list[Any] = []
            for feature in v:
                if feature not in seen:
                    seen.append(feature)
            return tuple(seen)
        return v

    def has_feature(self, feature: DesiredFeature) -> bool:
        """Return ``True`` if ``feature`` was selected."""
        return feature in self.desired_features
