"""Mood analysis data models and constants."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

Mood = Literal["Normal", "Stressed", "Depressed", "Highly Depressed"]
Confidence = Literal["low", "medium", "high"]
AnalysisSource = Literal["ai", "fallback"]

MOODS: tuple[str, ...] = ("Normal", "Stressed", "Depressed", "Highly Depressed")
CONFIDENCES: tuple[str, ...] = ("low", "medium", "high")

# Only produced for an empty submission; never part of MOODS.
UNKNOWN_MOOD = "Unknown"

ALERT_MOODS: frozenset[str] = frozenset({"Depressed", "Highly Depressed"})

MAX_EMOTIONS = 10
MAX_REASON_LENGTH = 500

# (legacy mood, legacy 1-10 score) still read by the older dashboards
_LEGACY_MOOD: dict[str, tuple[str, int]] = {
    "Normal": ("happy", 8),
    "Stressed": ("neutral", 4),
    "Depressed": ("sad", 2),
    "Highly Depressed": ("sad", 1),
}

_CURRENT_MOOD: dict[str, str] = {
    "Normal": "happy",
    "Stressed": "stressed",
    "Depressed": "depressed",
    "Highly Depressed": "depressed",
    UNKNOWN_MOOD: "neutral",
}


@dataclass
class QuestionAnswer:
    """One answered check-in question."""

    question: str
    answer: str
    category: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QuestionAnswer:
        return cls(
            question=str(data.get("question") or ""),
            answer=str(data.get("answer") or ""),
            category=str(data.get("category") or ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {"question": self.question, "answer": self.answer, "category": self.category}


@dataclass
class ClassificationResult:
    """Canonical output of the mood analysis pipeline."""

    mood: str
    confidence: str = "medium"
    emotions_detected: list[str] = field(default_factory=list)
    reason: str = ""
    analysis_source: str = "fallback"

    @property
    def needs_alert(self) -> bool:
        return self.mood in ALERT_MOODS

    def to_dict(self) -> dict[str, Any]:
        return {
            "mood": self.mood,
            "confidence": self.confidence,
            "emotionsDetected": list(self.emotions_detected),
            "reason": self.reason,
            "analysisSource": self.analysis_source,
        }


def unknown_result() -> ClassificationResult:
    """Sentinel result for a submission with no answers."""
    return ClassificationResult(
        mood=UNKNOWN_MOOD,
        confidence="low",
        emotions_detected=[],
        reason="No responses provided for analysis",
        analysis_source="fallback",
    )


def legacy_mood_for(mood: str) -> tuple[str, int]:
    """Map a canonical mood to the legacy (mood, score) pair."""
    return _LEGACY_MOOD.get(mood, ("neutral", 5))


def current_mood_for(mood: str) -> str:
    """Map a canonical mood to the user's dashboard ``current_mood``."""
    return _CURRENT_MOOD.get(mood, "neutral")
