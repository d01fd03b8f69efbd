"""
Scoring output models.

``AreaScores`` holds the four 0–10 area scores; ``RecommendationResult`` is
the full outcome of scoring one questionnaire, whether produced locally by
the rule-based scorer or by the remote advisory service.

Both models are frozen: a result is persisted alongside its answers in the
history log and must never change afterwards.
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from diabetes_control.taxonomy.questionnaire_taxonomy import Area, RecommendationTier

MAX_SCORE = 10

ResultSource = Literal["local", "advisory"]


class AreaScores(BaseModel):
    """Integer score in [0, 10] for each self-management area."""

    model_config = ConfigDict(frozen=True)

    knowledge: int
    medication: int
    monitoring: int
    lifestyle: int

    @field_validator("knowledge", "medication", "monitoring", "lifestyle")
    @classmethod
    def validate_range(cls, v: int) -> int:
        if not 0 <= v <= MAX_SCORE:
            raise ValueError(f"area score must be in [0, {MAX_SCORE}], got {v}.")
        return v

    def get(self, area: Area | str) -> int:
        """Return the score for ``area``."""
        return getattr(self, Area(area).value)

    def as_dict(self) -> dict[str, int]:
        """Return ``{area: score}`` in canonical area order."""
        return {area.value: self.get(area) for area in Area}

    def values(self) -> list[int]:
        return [self.get(area) for area in Area]


class RecommendationResult(BaseModel):
    """Scored recommendation for one questionnaire submission.

    Attributes:
        tier: Message tier (positive / warning / alert).
        title: Short headline bound to the tier.
        message: Paragraph bound to the tier.
        recommendations: Ordered advice strings.
        areas: Per-area scores.
        score: Overall score in [0, ``max_score``].
        max_score: Scale maximum (always 10).
        glucose_insights: Narrative sentence about glucose monitoring, or ``None``.
        medication_insights: Narrative sentence about medication adherence, or ``None``.
        source: ``"local"`` for rule-based scoring, ``"advisory"`` for a remote analysis.
    """

    model_config = ConfigDict(frozen=True)

    tier: RecommendationTier
    title: str
    message: str
    recommendations: tuple[str, ...] = ()
    areas: AreaScores
    score: int
    max_score: int = MAX_SCORE
    glucose_insights: Optional[str] = None
    medication_insights: Optional[str] = None
    source: ResultSource = "local"

    @model_validator(mode="after")
    def validate_score_range(self) -> "RecommendationResult":
        if not 0 <= self.score <= self.max_score:
            raise ValueError(
                f"score must be in [0, {self.max_score}], got {self.score}."
            )
        return self
