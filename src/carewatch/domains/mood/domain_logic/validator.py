"""Validation of parsed model output into a ClassificationResult."""

from __future__ import annotations

import logging
from typing import Any

from carewatch.domains.mood.domain_logic.mood_models import (
    CONFIDENCES,
    MAX_EMOTIONS,
    MAX_REASON_LENGTH,
    MOODS,
    ClassificationResult,
)

logger = logging.getLogger(__name__)

_CANONICAL_MOODS: dict[str, str] = {m.lower(): m for m in MOODS}

DEFAULT_REASON = "Analysis completed"


def validate_classification(parsed: Any) -> ClassificationResult | None:
    """Accept a parsed object only if its mood is one of the four canonical labels.

    The mood is matched case-insensitively and returned in canonical casing;
    near-misses ("Fine", "Depresed") are rejected, not coerced. The other
    fields are sanitized rather than rejected.
    """
    if not isinstance(parsed, dict):
        return None

    raw_mood = parsed.get("mood")
    mood = _CANONICAL_MOODS.get(raw_mood.lower()) if isinstance(raw_mood, str) else None
    if mood is None:
        logger.info("Rejected model output with mood %r", raw_mood)
        return None

    confidence = parsed.get("confidence")
    if confidence not in CONFIDENCES:
        confidence = "medium"

    raw_emotions = parsed.get("emotionsDetected")
    emotions = (
        [e for e in raw_emotions if isinstance(e, str)][:MAX_EMOTIONS]
        if isinstance(raw_emotions, list)
        else []
    )

    reason = parsed.get("reason")
    reason = reason[:MAX_REASON_LENGTH] if isinstance(reason, str) else DEFAULT_REASON

    return ClassificationResult(
        mood=mood,
        confidence=confidence,
        emotions_detected=emotions,
        reason=reason,
        analysis_source="ai",
    )
