"""Shared test fixtures for CareWatch tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

import pytest

# ---------------------------------------------------------------------------
# Test hermeticity
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _force_hermetic_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LLM_PROVIDER", "mock")
    monkeypatch.setenv("ANTHROPIC_API_KEY", "")
    monkeypatch.setenv("OPENAI_API_KEY", "")
    monkeypatch.setenv("DAY_BOUNDARY_TZ", "UTC")
    monkeypatch.setenv("QUESTION_BANK_PATH", "")

# Allow running tests without `pip install -e .` by making `src/` importable.
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_SRC_DIR = _PROJECT_ROOT / "src"
if str(_SRC_DIR) not in sys.path:
    sys.path.insert(0, str(_SRC_DIR))

from carewatch.core.llm.provider import ProviderResponse  # noqa: E402

# ---------------------------------------------------------------------------
# Scripted provider
# ---------------------------------------------------------------------------

HANG = object()
"""Outcome marker: the provider call never returns (until cancelled)."""


class ScriptedProvider:
    """Provider that plays back a fixed list of outcomes, one per call.

    Each outcome is a string (returned as content), an exception instance
    (raised), or ``HANG``. The last outcome repeats once the list runs out.
    """

    name = "scripted"

    def __init__(self, *outcomes: Any) -> None:
        if not outcomes:
            raise ValueError("ScriptedProvider needs at least one outcome")
        self._outcomes = list(outcomes)
        self.prompts: list[str] = []
        self.cancelled = 0

    @property
    def call_count(self) -> int:
        return len(self.prompts)

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 300,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        self.prompts.append(prompt)
        index = min(len(self.prompts), len(self._outcomes)) - 1
        outcome = self._outcomes[index]

        if outcome is HANG:
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
        if isinstance(outcome, BaseException):
            raise outcome
        return ProviderResponse(content=outcome, model="scripted", latency_ms=1.0)


@pytest.fixture
def scripted_provider():
    """Factory for ScriptedProvider instances."""
    return ScriptedProvider


@pytest.fixture
def hang_marker():
    return HANG


# ---------------------------------------------------------------------------
# In-memory storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def care_db():
    """Create an in-memory CareDatabase for testing."""
    from carewatch.core.storage.database import CareDatabase

    db = CareDatabase(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def field_encryptor():
    """Create a FieldEncryptor with a test key."""
    from cryptography.fernet import Fernet

    from carewatch.core.storage.encryption import FieldEncryptor

    return FieldEncryptor(Fernet.generate_key().decode())


@pytest.fixture
def mood_repository(care_db, field_encryptor):
    """MoodRepository cutting days in UTC."""
    from carewatch.core.storage.repository import MoodRepository

    return MoodRepository(care_db, field_encryptor, day_boundary_tz="UTC")


@pytest.fixture
def notification_repository(care_db):
    from carewatch.core.storage.repository import NotificationRepository

    return NotificationRepository(care_db)


@pytest.fixture
def user_directory(care_db):
    from carewatch.core.storage.directory import UserDirectory

    return UserDirectory(care_db)


@pytest.fixture
def caretaker(user_directory):
    return user_directory.add_user("Priya Nair", "caretaker", user_id="caretaker-1")


@pytest.fixture
def elderly_user(user_directory, caretaker):
    """An elderly user with an assigned caretaker."""
    return user_directory.add_user(
        "Walter Brennan", "elderly", caretaker_id=caretaker.id, user_id="elderly-1"
    )


@pytest.fixture
def unassigned_user(user_directory):
    """An elderly user with no caretaker."""
    return user_directory.add_user("Edith Crane", "elderly", user_id="elderly-2")


@pytest.fixture
def audit_logger(care_db):
    """Create an AuditLogger backed by in-memory SQLite."""
    from carewatch.core.audit.logger import AuditLogger

    return AuditLogger(care_db)
