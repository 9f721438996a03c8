"""Mood analysis pipeline.

``MoodAnalyzer`` turns answers into a ClassificationResult:
prompt -> classification endpoint -> JSON recovery -> validation, with the
keyword classifier standing in whenever the endpoint fails or its output is
unusable. ``MoodAnalysisService`` adds the side effects: the daily upsert,
the user's dashboard mood, the caretaker alert and the audit record.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Sequence

from carewatch.core.llm.client import ClassificationClient, UpstreamError
from carewatch.core.llm.response import extract_json_object
from carewatch.domains.mood.domain_logic.fallback import classify_by_keywords
from carewatch.domains.mood.domain_logic.mood_models import (
    ClassificationResult,
    QuestionAnswer,
    current_mood_for,
    unknown_result,
)
from carewatch.domains.mood.domain_logic.prompt_builder import build_mood_prompt
from carewatch.domains.mood.domain_logic.validator import validate_classification

if TYPE_CHECKING:
    from carewatch.core.audit.logger import AuditLogger
    from carewatch.core.storage.directory import UserDirectory
    from carewatch.core.storage.repository import MoodRepository
    from carewatch.domains.mood.domain_logic.alerts import AlertDispatcher

logger = logging.getLogger(__name__)


class InputError(ValueError):
    """The analysis request is unusable (no answers, malformed answers)."""


class MoodAnalyzer:
    """Classifies a check-in; never fails for a non-empty submission."""

    def __init__(self, client: ClassificationClient) -> None:
        self._client = client

    @property
    def provider_name(self) -> str:
        return self._client.provider_name

    @property
    def discloses_answers(self) -> bool:
        """Whether answers leave the process; the mock provider keeps them local."""
        return self.provider_name != "mock"

    async def analyze(self, question_answers: Sequence[QuestionAnswer]) -> ClassificationResult:
        if not question_answers:
            return unknown_result()

        prompt = build_mood_prompt(question_answers)
        try:
            raw = await self._client.classify(prompt)
        except UpstreamError as exc:
            logger.warning("AI analysis failed, using fallback: %s", exc)
            return classify_by_keywords(question_answers)

        validated = validate_classification(extract_json_object(raw))
        if validated is None:
            logger.info("Could not parse AI response, using fallback")
            return classify_by_keywords(question_answers)

        logger.info("AI analysis successful: %s", validated.mood)
        return validated


@dataclass
class AnalysisSummary:
    """What the caller gets back for one analysis request."""

    mood: str
    confidence: str
    emotions_detected: list[str] = field(default_factory=list)
    reason: str = ""
    analysis_source: str = "fallback"
    entry_id: str = ""

    @classmethod
    def from_result(cls, result: ClassificationResult, entry_id: str) -> AnalysisSummary:
        return cls(
            mood=result.mood,
            confidence=result.confidence,
            emotions_detected=list(result.emotions_detected),
            reason=result.reason,
            analysis_source=result.analysis_source,
            entry_id=entry_id,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "mood": self.mood,
            "confidence": self.confidence,
            "emotionsDetected": list(self.emotions_detected),
            "reason": self.reason,
            "analysisSource": self.analysis_source,
            "entryId": self.entry_id,
        }


def coerce_question_answers(items: Sequence[Any] | None) -> list[QuestionAnswer]:
    """Turn request payload items into QuestionAnswer objects.

    Raises:
        InputError: If there are no items, or an item lacks a question or answer.
    """
    if not items:
        raise InputError("Question answers are required for mood analysis")

    question_answers: list[QuestionAnswer] = []
    for i, item in enumerate(items, start=1):
        if isinstance(item, QuestionAnswer):
            qa = item
        elif isinstance(item, dict):
            qa = QuestionAnswer.from_dict(item)
        else:
            raise InputError(f"Response #{i} must be an object with question and answer")
        if not qa.question.strip() or not qa.answer.strip():
            raise InputError(f"Response #{i} needs both a question and an answer")
        question_answers.append(qa)
    return question_answers


class MoodAnalysisService:
    """Inbound entry point: analyze, persist, update the dashboard, alert.

    Usage::

        service = MoodAnalysisService(analyzer, mood_repo, directory, dispatcher)
        summary = await service.submit(user_id, [{"question": "...", "answer": "..."}])
    """

    def __init__(
        self,
        analyzer: MoodAnalyzer,
        repository: MoodRepository,
        directory: UserDirectory,
        dispatcher: AlertDispatcher,
        audit_logger: AuditLogger | None = None,
    ) -> None:
        self._analyzer = analyzer
        self._repo = repository
        self._directory = directory
        self._dispatcher = dispatcher
        self._audit = audit_logger

    async def submit(
        self,
        user_id: str,
        question_answers: Sequence[Any] | None,
        *,
        now: datetime | None = None,
    ) -> AnalysisSummary:
        """Analyze a check-in and store it as the user's entry for today.

        Raises:
            InputError: Before anything is persisted, for an empty or malformed request.
            NotFoundError: Before anything is persisted, if the user is not in the directory.
        """
        answers = coerce_question_answers(question_answers)
        self._directory.require_user(user_id)
        start = time.monotonic()
        logger.info("Analyzing mood for user %s with %d answers", user_id, len(answers))

        result = await self._analyzer.analyze(answers)

        entry = self._repo.upsert_entry(
            user_id, now or datetime.now(timezone.utc), result, answers
        )
        self._directory.record_check_in(user_id, current_mood_for(result.mood))
        self._dispatcher.maybe_notify(user_id, result, entry.id)

        if self._audit is not None:
            self._audit.log_analysis(
                user_id=user_id,
                question_answers=[qa.to_dict() for qa in answers],
                llm_provider=self._analyzer.provider_name,
                llm_disclosed=self._analyzer.discloses_answers,
                mood_entry_id=entry.id,
                duration_ms=(time.monotonic() - start) * 1000,
                analysis_source=result.analysis_source,
                detected_mood=result.mood,
            )

        return AnalysisSummary.from_result(result, entry.id)
