"""MCP tools for the check-in question bank."""

from __future__ import annotations

import json
from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from fastmcp import Context, FastMCP

from carewatch.domains.mood.domain_logic.question_selector import (
    NoQuestionsAvailable,
    select_daily_questions,
)

if TYPE_CHECKING:
    from carewatch.domains.mood.domain_logic.question_bank import QuestionBank


def register_question_tools(
    mcp: FastMCP,
    bank: QuestionBank,
    day_boundary_tz: str = "UTC",
) -> None:
    """Register question bank tools on the MCP server."""
    tz = ZoneInfo(day_boundary_tz)

    @mcp.tool
    async def get_daily_questions(ctx: Context, date: str = "") -> str:
        """Today's five check-in questions; the same set all day.

        Args:
            date: Day to select for (YYYY-MM-DD). Defaults to today.
        """
        day = date or datetime.now(tz).date().isoformat()
        try:
            questions = select_daily_questions(bank.active(), day)
        except NoQuestionsAvailable as exc:
            return json.dumps({"status": "not_found", "message": str(exc)})

        return json.dumps({
            "status": "ok",
            "date": day,
            "count": len(questions),
            "data": {"questions": [q.to_dict() for q in questions]},
        })

    @mcp.tool
    async def list_questions(ctx: Context) -> str:
        """All active check-in questions, grouped by category."""
        questions = bank.active_by_category()
        return json.dumps({
            "status": "ok",
            "count": len(questions),
            "data": {"questions": [q.to_dict() for q in questions]},
        })
