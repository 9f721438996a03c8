"""Caretaker alerts for concerning check-ins."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from carewatch.core.storage.models import Notification
from carewatch.domains.mood.domain_logic.mood_models import ClassificationResult

if TYPE_CHECKING:
    from carewatch.core.storage.directory import UserDirectory
    from carewatch.core.storage.repository import NotificationRepository

logger = logging.getLogger(__name__)

_RISK_LEVELS: dict[str, str] = {
    "Highly Depressed": "critical",
    "Depressed": "high",
    "Stressed": "medium",
}


def risk_level_for(mood: str) -> str:
    """Alert tier for a mood: critical / high / medium, ``low`` otherwise."""
    return _RISK_LEVELS.get(mood, "low")


def build_alert_message(elderly_name: str, mood: str) -> str:
    """Human-readable alert text for the caretaker's inbox."""
    if mood == "Highly Depressed":
        return (
            f"URGENT: {elderly_name} is showing signs of severe depression. "
            "Immediate attention recommended."
        )
    if mood == "Depressed":
        return (
            f"ALERT: {elderly_name} appears to be experiencing depression. "
            "Please check in with them soon."
        )
    if mood == "Stressed":
        return (
            f"NOTE: {elderly_name} is showing signs of stress and anxiety. "
            "Consider reaching out."
        )
    return f"{elderly_name} completed their daily check-in. Mood: {mood}."


class AlertDispatcher:
    """Creates a caretaker notification when a check-in is Depressed or worse.

    Every qualifying call creates a new notification; repeated analyses on
    the same day are not collapsed.
    """

    def __init__(
        self,
        directory: UserDirectory,
        notifications: NotificationRepository,
    ) -> None:
        self._directory = directory
        self._notifications = notifications

    def maybe_notify(
        self,
        elderly_user_id: str,
        result: ClassificationResult,
        mood_entry_id: str | None,
    ) -> Notification | None:
        if not result.needs_alert:
            logger.debug("Mood %s is not concerning; no alert", result.mood)
            return None

        elderly = self._directory.get_user(elderly_user_id)
        caretaker = self._directory.caretaker_for(elderly_user_id)
        if elderly is None or caretaker is None:
            logger.info("No caretaker assigned to user %s; no alert", elderly_user_id)
            return None

        risk_level = risk_level_for(result.mood)
        notification = self._notifications.create(Notification(
            id="",
            caretaker_id=caretaker.id,
            elderly_user_id=elderly_user_id,
            detected_mood=result.mood,
            risk_level=risk_level,
            message=build_alert_message(elderly.name, result.mood),
            emotions_detected=list(result.emotions_detected),
            mood_entry_id=mood_entry_id,
        ))
        logger.info(
            "Alert created for caretaker %s: %s (%s)",
            caretaker.id,
            result.mood,
            risk_level,
        )
        return notification
