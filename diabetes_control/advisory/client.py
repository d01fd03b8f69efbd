"""
Remote advisory client — language-model refinement of questionnaire scoring.

API:   OpenAI-compatible chat completions endpoint
       (default ``https://api.openai.com/v1/chat/completions``).

Credential setup (.env, gitignored):
  OPENAI_API_KEY=sk-...

The env var name is configurable via ``[advisory] api_key_env`` in
``config/default.toml``.

Request:
  POST {api_url}
    → Auth: Bearer {api_key}
    → Body: {"model": ..., "messages": [system, user], "temperature": ...,
             "response_format": {"type": "json_object"}}
    → Returns: {"choices": [{"message": {"content": "<JSON string>"}}]}

Failure contract
----------------
Every failure mode (missing credential, transport error, non-2xx status,
malformed envelope, unparsable content) raises ``AdvisoryError``.  Callers
catch exactly that and fall back to local scoring.  Individually missing or
malformed fields inside an otherwise parsable analysis are defaulted, not
rejected (see ``parse_advisory_content``).
"""

from __future__ import annotations

import json
import logging
import math
import os
from typing import Any, ClassVar, Optional, TYPE_CHECKING

import httpx

from diabetes_control.advisory.prompt import SYSTEM_PROMPT, build_prompt
from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.recommendation import MAX_SCORE, AreaScores, RecommendationResult
from diabetes_control.recommendations.scorer import overall_score, round_half_up
from diabetes_control.taxonomy.questionnaire_taxonomy import RecommendationTier

if TYPE_CHECKING:
    from diabetes_control.config import AdvisoryConfig

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Análisis de sus respuestas"
DEFAULT_MESSAGE = (
    "Basado en sus respuestas, hemos realizado un análisis de sus hábitos y "
    "conocimientos sobre diabetes."
)
DEFAULT_AREA_SCORE = 5

# Response key → AreaScores field
_AREA_KEYS: dict[str, str] = {
    "area_conocimiento": "knowledge",
    "area_medicacion":   "medication",
    "area_monitoreo":    "monitoring",
    "area_estilo_vida":  "lifestyle",
}


class AdvisoryError(RuntimeError):
    """Raised when the advisory call cannot produce a usable analysis."""


class AdvisoryClient:
    """Client for the remote questionnaire analysis.

    Usage (real API, requires OPENAI_API_KEY in .env)::

        client = AdvisoryClient.from_config(config.advisory)
        result = client.analyze(answers)

    Usage (tests, with an injected transport)::

        http = httpx.Client(transport=httpx.MockTransport(handler))
        client = AdvisoryClient(api_key="test", http_client=http)

    Attributes:
        api_key: Bearer credential, or ``None`` when not configured.
        api_url: Chat completions endpoint.
        model: Model identifier sent with each request.
        temperature: Sampling temperature.
        timeout_seconds: Transport timeout for the single request.
    """

    DEFAULT_API_URL: ClassVar[str] = "https://api.openai.com/v1/chat/completions"
    DEFAULT_MODEL: ClassVar[str] = "gpt-4o"

    def __init__(
        self,
        api_key: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        model: str = DEFAULT_MODEL,
        temperature: float = 0.7,
        timeout_seconds: float = 30.0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.api_key = api_key
        self.api_url = api_url
        self.model = model
        self.temperature = temperature
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    @classmethod
    def from_config(
        cls,
        config: "AdvisoryConfig",
        http_client: Optional[httpx.Client] = None,
    ) -> "AdvisoryClient":
        """Build a client from the ``[advisory]`` config section.

        The credential is read from the environment variable named by
        ``config.api_key_env``; a missing variable leaves ``api_key`` unset
        and every ``analyze()`` call will raise ``AdvisoryError``.
        """
        return cls(
            api_key=os.environ.get(config.api_key_env) or None,
            api_url=config.api_url,
            model=config.model,
            temperature=config.temperature,
            timeout_seconds=config.timeout_seconds,
            http_client=http_client,
        )

    def build_request(self, answers: AnswerSet) -> dict[str, Any]:
        """Return the JSON request body for ``answers``."""
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(answers)},
            ],
            "temperature": self.temperature,
            "response_format": {"type": "json_object"},
        }

    def analyze(self, answers: AnswerSet) -> RecommendationResult:
        """Request a remote analysis of ``answers``.

        Makes exactly one HTTP request; never retries.

        Returns:
            ``RecommendationResult`` with ``source="advisory"``.

        Raises:
            AdvisoryError: On any failure (see module docstring).
        """
        if not self.api_key:
            raise AdvisoryError("Advisory API key is missing.")

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        body = self.build_request(answers)
        logger.debug("Advisory request: model=%s url=%s", self.model, self.api_url)

        try:
            if self._http_client is not None:
                resp = self._http_client.post(
                    self.api_url, json=body, headers=headers, timeout=self.timeout_seconds
                )
            else:
                resp = httpx.post(
                    self.api_url, json=body, headers=headers, timeout=self.timeout_seconds
                )
            resp.raise_for_status()
            envelope = resp.json()
        except httpx.HTTPStatusError as exc:
            raise AdvisoryError(
                f"Advisory API error: {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise AdvisoryError(f"Advisory transport error: {exc}") from exc
        except ValueError as exc:
            raise AdvisoryError("Advisory response body is not valid JSON.") from exc

        content = _extract_message_content(envelope)
        try:
            return parse_advisory_content(content)
        except AdvisoryError:
            raise
        except Exception as exc:
            raise AdvisoryError(f"Advisory analysis could not be parsed: {exc}") from exc


# ── Response parsing ──────────────────────────────────────────────────────────

def _extract_message_content(envelope: Any) -> str:
    """Pull ``choices[0].message.content`` out of a chat completions response."""
    try:
        content = envelope["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise AdvisoryError("Invalid response format from advisory API.") from exc
    if not content or not isinstance(content, str):
        raise AdvisoryError("Invalid response format from advisory API.")
    return content


def parse_advisory_content(content: str | dict[str, Any]) -> RecommendationResult:
    """Convert an advisory analysis payload into a ``RecommendationResult``.

    Field defaults (applied one field at a time):
      - ``tipo``            → ``warning`` unless one of the three tiers.
      - ``titulo``          → ``DEFAULT_TITLE`` unless a non-empty string.
      - ``mensaje``         → ``DEFAULT_MESSAGE`` unless a non-empty string.
      - ``recomendaciones`` → ``[]`` unless a list; non-string items dropped.
      - ``area_*``          → 5 unless numeric; numbers are rounded half-up
                              and clamped into [0, 10].
      - insights            → ``None`` unless a non-empty string.

    The overall score is the rounded mean of the (defaulted) area scores.

    Args:
        content: JSON string or already-decoded dict.

    Raises:
        AdvisoryError: If ``content`` is not a JSON object.
    """
    if isinstance(content, str):
        try:
            raw = json.loads(content)
        except json.JSONDecodeError as exc:
            raise AdvisoryError("Advisory analysis is not valid JSON.") from exc
    else:
        raw = content

    if not isinstance(raw, dict):
        raise AdvisoryError("Advisory analysis must be a JSON object.")

    areas = AreaScores(
        **{field: _coerce_area_score(raw.get(key)) for key, field in _AREA_KEYS.items()}
    )
    recommendations = raw.get("recomendaciones")
    if not isinstance(recommendations, list):
        recommendations = []

    return RecommendationResult(
        tier=_coerce_tier(raw.get("tipo")),
        title=_non_empty_str(raw.get("titulo")) or DEFAULT_TITLE,
        message=_non_empty_str(raw.get("mensaje")) or DEFAULT_MESSAGE,
        recommendations=tuple(r for r in recommendations if isinstance(r, str) and r.strip()),
        areas=areas,
        score=overall_score(areas),
        max_score=MAX_SCORE,
        glucose_insights=_non_empty_str(raw.get("glucoseInsights")),
        medication_insights=_non_empty_str(raw.get("medicationInsights")),
        source="advisory",
    )


def _coerce_tier(value: Any) -> RecommendationTier:
    try:
        return RecommendationTier(value)
    except (TypeError, ValueError):
        return RecommendationTier.WARNING


def _coerce_area_score(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return DEFAULT_AREA_SCORE
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return DEFAULT_AREA_SCORE
    if not math.isfinite(number):
        return DEFAULT_AREA_SCORE
    return max(0, min(MAX_SCORE, round_half_up(number)))


def _non_empty_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None
