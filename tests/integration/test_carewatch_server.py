"""Integration tests for the CareWatch MCP server."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timezone

import pytest
from fastmcp import Client

from carewatch.core.llm.providers.mock import MockProvider
from carewatch.core.server.app import create_app


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _payload(result) -> dict:
    """Decode the JSON text of a tool result."""
    content = getattr(result, "content", result)
    return json.loads(content[0].text)


ALL_EXPECTED_TOOLS = [
    "health_check",
    "analyze_mood",
    "get_mood_history",
    "get_checkin_details",
    "get_daily_questions",
    "list_questions",
    "list_notifications",
    "mark_notification_read",
    "mark_all_notifications_read",
]

DEPRESSED_CONTENT = (
    '{"mood":"Depressed","confidence":"high","emotionsDetected":["lonely"],'
    '"reason":"Withdrawn"}'
)

ANSWERS = [
    {"question": "Did you see anyone today?", "answer": "Nobody came by", "category": "social"},
    {"question": "How did you sleep?", "answer": "Hardly at all", "category": "sleep"},
]


@pytest.fixture
def make_client(care_db, field_encryptor):
    def _make(content: str = DEPRESSED_CONTENT) -> Client:
        mcp = create_app(
            database_override=care_db,
            encryptor_override=field_encryptor,
            provider_override=MockProvider(content),
        )
        return Client(mcp)

    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def test_server_starts_and_lists_tools(client):
    """Server should start and expose all registered tools."""
    async def _check():
        async with client:
            tools = await client.list_tools()
            tool_names = [t.name for t in tools]
            for expected in ALL_EXPECTED_TOOLS:
                assert expected in tool_names, f"Missing tool: {expected}"
    _run(_check())


def test_health_check_returns_ok(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("health_check", {}))
            assert data["status"] == "ok"
            assert data["llm_provider"] == "mock"
            assert data["questions_loaded"] == 55
            assert data["day_boundary_tz"] == "UTC"
    _run(_check())


def test_create_app_requires_encryption_key(care_db, monkeypatch):
    monkeypatch.setenv("ENCRYPTION_KEY", "")
    with pytest.raises(RuntimeError, match="ENCRYPTION_KEY"):
        create_app(database_override=care_db)


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------

def test_analyze_mood_stores_and_alerts(client, elderly_user, caretaker):
    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "analyze_mood", {"user_id": elderly_user.id, "question_answers": ANSWERS}
            ))
            assert data["status"] == "ok"
            assert data["data"]["mood"] == "Depressed"
            assert data["data"]["analysisSource"] == "ai"

            details = _payload(await client.call_tool(
                "get_checkin_details", {"user_id": elderly_user.id}
            ))
            assert details["status"] == "ok"
            assert details["data"]["id"] == data["data"]["entryId"]
            assert len(details["data"]["responses"]) == 2

            inbox = _payload(await client.call_tool(
                "list_notifications", {"caretaker_id": caretaker.id}
            ))
            assert inbox["data"]["unreadCount"] == 1
            alert = inbox["data"]["notifications"][0]
            assert alert["riskLevel"] == "high"
            assert alert["elderlyUser"] == {"id": elderly_user.id, "name": "Walter Brennan"}
    _run(_check())


def test_analyze_mood_rejects_empty_answers(client, elderly_user, mood_repository):
    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "analyze_mood", {"user_id": elderly_user.id, "question_answers": []}
            ))
            assert data["status"] == "error"
            assert "required" in data["message"]
    _run(_check())
    assert mood_repository.count_entries() == 0


def test_unusable_model_output_uses_fallback(make_client, elderly_user):
    client = make_client("I'm not sure how they feel.")

    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "analyze_mood",
                {"user_id": elderly_user.id, "question_answers": [
                    {"question": "How are you?", "answer": "I am worried"},
                ]},
            ))
            assert data["data"]["analysisSource"] == "fallback"
            assert data["data"]["mood"] == "Stressed"
    _run(_check())


def test_checkin_details_not_found(client, elderly_user):
    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "get_checkin_details", {"user_id": elderly_user.id, "date": "2020-01-01"}
            ))
            assert data["status"] == "not_found"
            assert data["message"] == "No check-in found for this date"
    _run(_check())


def test_checkin_details_accepts_loose_dates(client, elderly_user):
    today = datetime.now(timezone.utc).date()

    async def _check():
        async with client:
            stored = _payload(await client.call_tool(
                "analyze_mood", {"user_id": elderly_user.id, "question_answers": ANSWERS}
            ))
            for spelled in (
                f"{today.year}-{today.month}-{today.day}",
                f"{today.isoformat()}T12:00:00Z",
            ):
                data = _payload(await client.call_tool(
                    "get_checkin_details", {"user_id": elderly_user.id, "date": spelled}
                ))
                assert data["status"] == "ok", spelled
                assert data["data"]["id"] == stored["data"]["entryId"]
    _run(_check())


def test_checkin_details_invalid_date(client, elderly_user):
    async def _check():
        async with client:
            for bad in ("not-a-date", "2024-13-01", "yesterday"):
                data = _payload(await client.call_tool(
                    "get_checkin_details", {"user_id": elderly_user.id, "date": bad}
                ))
                assert data["status"] == "error", bad
                assert bad in data["message"]
    _run(_check())


def test_unknown_user_is_not_found(client, care_db):
    async def _check():
        async with client:
            for tool, args in (
                ("analyze_mood", {"user_id": "ghost", "question_answers": ANSWERS}),
                ("get_mood_history", {"user_id": "ghost"}),
                ("get_checkin_details", {"user_id": "ghost"}),
                ("list_notifications", {"caretaker_id": "ghost"}),
            ):
                data = _payload(await client.call_tool(tool, args))
                assert data["status"] == "not_found", tool
                assert "ghost" in data["message"]
    _run(_check())

    (entries,) = care_db.connection.execute("SELECT COUNT(*) FROM mood_entries").fetchone()
    assert entries == 0

def test_mood_history(client, elderly_user):
    today = datetime.now(timezone.utc).date().isoformat()

    async def _check():
        async with client:
            await client.call_tool(
                "analyze_mood", {"user_id": elderly_user.id, "question_answers": ANSWERS}
            )
            data = _payload(await client.call_tool(
                "get_mood_history", {"user_id": elderly_user.id, "period": "monthly"}
            ))
            report = data["data"]
            assert report["period"] == "monthly"
            assert report["endDate"] == today
            assert report["summary"]["totalEntries"] == 1
            assert report["entries"][-1]["detectedMood"] == "Depressed"
    _run(_check())


# ---------------------------------------------------------------------------
# Questions
# ---------------------------------------------------------------------------

def test_daily_questions_are_stable(client):
    async def _check():
        async with client:
            first = _payload(await client.call_tool("get_daily_questions", {"date": "2024-05-01"}))
            second = _payload(await client.call_tool("get_daily_questions", {"date": "2024-05-01"}))
            assert first == second
            assert first["count"] == 5
            ids = [q["id"] for q in first["data"]["questions"]]
            assert ids == ["q010", "q024", "q043", "q014", "q045"]
    _run(_check())


def test_daily_questions_default_to_today(client):
    today = datetime.now(timezone.utc).date().isoformat()

    async def _check():
        async with client:
            data = _payload(await client.call_tool("get_daily_questions", {}))
            assert data["date"] == today
    _run(_check())


def test_list_questions(client):
    async def _check():
        async with client:
            data = _payload(await client.call_tool("list_questions", {}))
            assert data["count"] == 55
    _run(_check())


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

def test_mark_notifications_read(client, elderly_user, caretaker):
    async def _check():
        async with client:
            for _ in range(2):
                await client.call_tool(
                    "analyze_mood", {"user_id": elderly_user.id, "question_answers": ANSWERS}
                )
            inbox = _payload(await client.call_tool(
                "list_notifications", {"caretaker_id": caretaker.id}
            ))
            assert inbox["data"]["unreadCount"] == 2
            first_id = inbox["data"]["notifications"][0]["id"]

            marked = _payload(await client.call_tool(
                "mark_notification_read",
                {"caretaker_id": caretaker.id, "notification_id": first_id},
            ))
            assert marked["data"] == {"id": first_id, "isRead": True}

            cleared = _payload(await client.call_tool(
                "mark_all_notifications_read", {"caretaker_id": caretaker.id}
            ))
            assert cleared["updated"] == 1
    _run(_check())


def test_mark_unknown_notification(client, caretaker):
    async def _check():
        async with client:
            data = _payload(await client.call_tool(
                "mark_notification_read",
                {"caretaker_id": caretaker.id, "notification_id": "missing"},
            ))
            assert data["status"] == "not_found"
    _run(_check())
