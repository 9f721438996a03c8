"""Data models for the persistence layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class MoodEntry:
    """The check-in result of one user for one day.

    ``entry_date`` is an ISO date (``YYYY-MM-DD``) in the reference timezone.
    ``responses`` is stored encrypted.
    """

    id: str
    user_id: str
    entry_date: str

    # Legacy two-tier fields
    mood: str = "neutral"
    mood_score: int = 5

    # Classification snapshot
    detected_mood: str | None = None
    confidence: str | None = None
    emotions_detected: list[str] = field(default_factory=list)
    reason: str = ""
    analysis_source: str | None = None

    responses: list[dict[str, str]] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "date": self.entry_date,
            "mood": self.mood,
            "moodScore": self.mood_score,
            "detectedMood": self.detected_mood,
            "confidence": self.confidence,
            "emotionsDetected": list(self.emotions_detected),
            "reason": self.reason,
            "analysisSource": self.analysis_source,
            "responses": list(self.responses),
        }


@dataclass
class Notification:
    """A caretaker alert raised by a concerning check-in."""

    id: str
    caretaker_id: str
    elderly_user_id: str
    detected_mood: str
    risk_level: str  # 'low' | 'medium' | 'high' | 'critical'
    message: str
    type: str = "mood_alert"
    emotions_detected: list[str] = field(default_factory=list)
    is_read: bool = False
    mood_entry_id: str | None = None
    created_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "caretakerId": self.caretaker_id,
            "elderlyUserId": self.elderly_user_id,
            "detectedMood": self.detected_mood,
            "riskLevel": self.risk_level,
            "message": self.message,
            "emotionsDetected": list(self.emotions_detected),
            "isRead": self.is_read,
            "moodEntryId": self.mood_entry_id,
            "createdAt": self.created_at,
        }


@dataclass
class UserRecord:
    """Directory view of a user; accounts themselves live elsewhere."""

    id: str
    name: str
    role: str  # 'elderly' | 'caretaker'
    caretaker_id: str | None = None
    current_mood: str = "neutral"
    last_active: str | None = None
    is_active: bool = True
