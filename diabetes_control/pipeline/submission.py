"""
SubmissionService: the end-to-end flow for one questionnaire submission.

Flow
----
  1. ``evaluate``: ask the advisory client (if one is configured) for an
     analysis; on ``AdvisoryError`` log a warning and score locally.  The
     result always passes through ``scorer.score`` so missing insights are
     filled in.
  2. Append a ``HistoryEntry`` to the injected ``HistoryStore``.  A
     ``sqlite3.Error`` or ``OSError`` is logged and the history for this
     submission is treated as empty.
  3. With at least two entries, compute the ``TrendReport``.

The service never raises for advisory or persistence failures; the caller
always gets a ``SubmissionOutcome`` with a result.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, TYPE_CHECKING

from diabetes_control.advisory.client import AdvisoryError
from diabetes_control.analysis.trends import analyze_trends
from diabetes_control.models.answers import AnswerSet
from diabetes_control.models.history import HistoryEntry
from diabetes_control.models.recommendation import RecommendationResult
from diabetes_control.models.trend import TrendReport
from diabetes_control.recommendations.scorer import score
from diabetes_control.utils.time_utils import ensure_utc, utcnow

if TYPE_CHECKING:
    from diabetes_control.advisory.client import AdvisoryClient
    from diabetes_control.db.history_store import HistoryStore

logger = logging.getLogger(__name__)


# ── Result type ───────────────────────────────────────────────────────────────

@dataclass
class SubmissionOutcome:
    """Everything produced by one submission.

    Attributes:
        result:   The recommendation shown to the respondent.
        history:  Full history after the append, oldest first.  Empty if the
                  store could not be written or read.
        trends:   Trend report, or ``None`` with fewer than two entries.
        stored:   ``True`` if the entry was persisted.
    """

    result:  RecommendationResult
    history: list[HistoryEntry] = field(default_factory=list)
    trends:  Optional[TrendReport] = None
    stored:  bool = False


# ── Service ───────────────────────────────────────────────────────────────────

class SubmissionService:
    """Score, persist and analyse questionnaire submissions.

    Args:
        store:    History store (injected; the service holds no global state).
        advisory: Optional remote advisory client.  ``None`` means local
                  scoring only.
    """

    def __init__(
        self,
        store: "HistoryStore",
        advisory: Optional["AdvisoryClient"] = None,
    ) -> None:
        self.store = store
        self.advisory = advisory

    def evaluate(self, answers: AnswerSet) -> RecommendationResult:
        """Return the recommendation for ``answers``.

        Makes at most one advisory call; any advisory failure falls back to
        the local scorer.
        """
        external: Optional[RecommendationResult] = None
        if self.advisory is not None:
            try:
                external = self.advisory.analyze(answers)
            except AdvisoryError as exc:
                logger.warning("Advisory analysis unavailable, scoring locally: %s", exc)

        result = score(answers, external)
        logger.info(
            "Scored submission: source=%s tier=%s score=%d/%d",
            result.source, result.tier.value, result.score, result.max_score,
        )
        return result

    def submit(
        self,
        answers: AnswerSet,
        now: Optional[datetime] = None,
    ) -> SubmissionOutcome:
        """Evaluate ``answers``, append to history and compute trends.

        Args:
            answers: The submitted questionnaire.
            now:     Submission timestamp; defaults to the current UTC time.

        Returns:
            ``SubmissionOutcome``.
        """
        result = self.evaluate(answers)
        recorded_at = ensure_utc(now) if now is not None else utcnow()
        entry = HistoryEntry.create(answers, result, recorded_at)

        try:
            history = self.store.append(entry)
            stored = True
        except (sqlite3.Error, OSError) as exc:
            logger.error("Could not save submission to history: %s", exc)
            history = []
            stored = False

        trends = analyze_trends(history)
        logger.info(
            "Submission recorded: stored=%s history_size=%d trends=%s",
            stored, len(history), trends.overall_trend.value if trends else "n/a",
        )
        return SubmissionOutcome(result=result, history=history, trends=trends, stored=stored)

    def load_history(self) -> list[HistoryEntry]:
        """Return the stored history, or ``[]`` if it cannot be read."""
        try:
            return self.store.read_all()
        except (sqlite3.Error, OSError) as exc:
            logger.error("Could not read submission history: %s", exc)
            return []

    def current_trends(self) -> Optional[TrendReport]:
        """Trend report over the stored history (``None`` below two entries)."""
        return analyze_trends(self.load_history())
