"""MCP tools for mood check-ins: analysis, history, single-day details."""

from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any

from fastmcp import Context, FastMCP

from carewatch.core.storage.repository import NotFoundError
from carewatch.domains.mood.domain_logic.analyzer import InputError

if TYPE_CHECKING:
    from carewatch.core.storage.directory import UserDirectory
    from carewatch.core.storage.repository import MoodRepository
    from carewatch.domains.mood.domain_logic.analyzer import MoodAnalysisService
    from carewatch.domains.mood.domain_logic.history import MoodHistory

logger = logging.getLogger(__name__)


def _parse_day(value: str, repository: MoodRepository) -> str:
    """Normalize a date or timestamp to the ``YYYY-MM-DD`` key of its day.

    Accepts ISO dates, ISO timestamps (a trailing ``Z`` means UTC; aware
    timestamps are moved into the reference timezone) and unpadded dates
    such as ``2024-5-1``.

    Raises:
        ValueError: If ``value`` is not a recognizable date.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return repository.day_key(datetime.fromisoformat(text))
    except ValueError:
        pass

    parts = text.split("-")
    if len(parts) != 3:
        raise ValueError(f"Invalid date: {value!r}")
    year, month, day = (int(part) for part in parts)
    return date(year, month, day).isoformat()


def _user_not_found(user_id: str) -> str:
    return json.dumps({"status": "not_found", "message": f"User not found: {user_id}"})


def register_mood_tools(
    mcp: FastMCP,
    service: MoodAnalysisService,
    repository: MoodRepository,
    history: MoodHistory,
    directory: UserDirectory,
) -> None:
    """Register mood analysis and history tools on the MCP server."""

    @mcp.tool
    async def analyze_mood(
        ctx: Context,
        user_id: str,
        question_answers: list[dict[str, Any]],
    ) -> str:
        """Analyze today's check-in answers and store the result.

        The answers are classified as Normal, Stressed, Depressed or Highly
        Depressed. If the AI endpoint is down or answers nonsense, a
        keyword-based classifier is used instead (``analysisSource`` tells
        which). A Depressed or worse result alerts the user's caretaker.

        Args:
            user_id: The elderly user submitting the check-in.
            question_answers: List of {"question", "answer", "category"} objects.
        """
        try:
            summary = await service.submit(user_id, question_answers)
        except InputError as exc:
            return json.dumps({"status": "error", "message": str(exc)})
        except NotFoundError:
            return _user_not_found(user_id)

        return json.dumps({"status": "ok", "data": summary.to_dict()})

    @mcp.tool
    async def get_mood_history(
        ctx: Context,
        user_id: str,
        period: str = "weekly",
    ) -> str:
        """Day-by-day mood history for a user.

        Args:
            user_id: The elderly user.
            period: 'weekly' (last 7 days, default) or 'monthly' (last 30 days).
        """
        if directory.get_user(user_id) is None:
            return _user_not_found(user_id)
        report = history.build(user_id, period)
        return json.dumps({"status": "ok", "data": report})

    @mcp.tool
    async def get_checkin_details(
        ctx: Context,
        user_id: str,
        date: str = "",
    ) -> str:
        """Questions, answers and classification of one day's check-in.

        Args:
            user_id: The elderly user.
            date: Day to look up (YYYY-MM-DD or an ISO timestamp). Defaults to today.
        """
        if directory.get_user(user_id) is None:
            return _user_not_found(user_id)

        if date:
            try:
                entry_date = _parse_day(date, repository)
            except ValueError:
                return json.dumps({"status": "error", "message": f"Invalid date: {date}"})
        else:
            entry_date = repository.day_key(datetime.now(timezone.utc))

        entry = repository.get_entry(user_id, entry_date)
        if entry is None:
            return json.dumps({
                "status": "not_found",
                "message": "No check-in found for this date",
                "date": entry_date,
            })
        return json.dumps({"status": "ok", "data": entry.to_dict()})
