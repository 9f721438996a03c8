"""Mood history over a weekly or monthly window."""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from typing import Any

from carewatch.core.storage.repository import MoodRepository

PERIOD_DAYS: dict[str, int] = {"weekly": 7, "monthly": 30}

_LEGACY_MOODS: tuple[str, ...] = ("happy", "sad", "neutral")


class MoodHistory:
    """Builds a day-by-day mood timeline with summary statistics.

    Usage::

        history = MoodHistory(mood_repo)
        report = history.build(user_id, period="monthly")
    """

    def __init__(self, repository: MoodRepository) -> None:
        self._repo = repository

    def build(
        self,
        user_id: str,
        period: str = "weekly",
        *,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Timeline from ``period`` days ago to today, one row per day.

        Days without a check-in appear with ``mood`` and ``moodScore`` set to
        None. Unknown periods fall back to ``weekly``.
        """
        if period not in PERIOD_DAYS:
            period = "weekly"
        now = now or datetime.now(timezone.utc)

        today = date.fromisoformat(self._repo.day_key(now))
        start = today - timedelta(days=PERIOD_DAYS[period])

        entries = self._repo.get_entries(
            user_id, since=start.isoformat(), until=today.isoformat()
        )
        by_day = {e.entry_date: e for e in entries}

        days: list[dict[str, Any]] = []
        current = start
        while current <= today:
            key = current.isoformat()
            entry = by_day.get(key)
            days.append({
                "date": key,
                "mood": entry.mood if entry else None,
                "moodScore": entry.mood_score if entry else None,
                "detectedMood": entry.detected_mood if entry else None,
                "emotions": list(entry.emotions_detected) if entry else [],
                "responses": list(entry.responses) if entry else [],
            })
            current += timedelta(days=1)

        return {
            "period": period,
            "startDate": start.isoformat(),
            "endDate": today.isoformat(),
            "entries": days,
            "summary": summarize(entries),
        }


def summarize(entries: list[Any]) -> dict[str, Any]:
    """Counts, average legacy score and predominant legacy mood."""
    scores = [e.mood_score for e in entries if e.mood_score]
    average = sum(scores) / len(scores) if scores else 0.0

    mood_counts = {m: 0 for m in _LEGACY_MOODS}
    for e in entries:
        if e.mood in mood_counts:
            mood_counts[e.mood] += 1

    predominant = "none"
    if entries:
        # Ties go to the later mood in _LEGACY_MOODS.
        best = _LEGACY_MOODS[0]
        for mood in _LEGACY_MOODS[1:]:
            if mood_counts[mood] >= mood_counts[best]:
                best = mood
        predominant = best

    return {
        "totalEntries": len(entries),
        "averageScore": math.floor(average * 10 + 0.5) / 10,
        "moodCounts": mood_counts,
        "predominantMood": predominant,
    }
