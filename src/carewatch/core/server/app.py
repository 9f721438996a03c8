"""CareWatch MCP server — application factory.

This module provides:
- create_app() for testability (integration tests create fresh server instances)
- Module-level `mcp` variable for FastMCP discovery
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from carewatch.core.audit.logger import AuditLogger
from carewatch.core.config.settings import Settings, get_settings
from carewatch.core.llm.client import AIClientConfig, ClassificationClient
from carewatch.core.llm.provider import LLMProvider, create_provider
from carewatch.core.storage.database import CareDatabase
from carewatch.core.storage.directory import UserDirectory
from carewatch.core.storage.encryption import FieldEncryptor
from carewatch.core.storage.repository import MoodRepository, NotificationRepository
from carewatch.domains.mood.domain_logic.alerts import AlertDispatcher
from carewatch.domains.mood.domain_logic.analyzer import MoodAnalysisService, MoodAnalyzer
from carewatch.domains.mood.domain_logic.history import MoodHistory
from carewatch.domains.mood.domain_logic.question_bank import QuestionBank, load_question_bank
from carewatch.domains.mood.tools.mood_tools import register_mood_tools
from carewatch.domains.mood.tools.notification_tools import register_notification_tools
from carewatch.domains.mood.tools.question_tools import register_question_tools

logger = logging.getLogger(__name__)


def _build_provider(settings: Settings) -> LLMProvider:
    """Pick the provider named in settings; hosted providers without a key degrade to mock."""
    provider_name = settings.llm_provider
    api_key = ""
    model = ""

    if provider_name == "ollama":
        model = settings.ollama_model
    elif provider_name == "anthropic":
        api_key = settings.anthropic_api_key
        model = settings.anthropic_model
    elif provider_name == "openai":
        api_key = settings.openai_api_key
        model = settings.openai_model

    if provider_name in ("anthropic", "openai") and not api_key:
        logger.warning(
            "No API key configured for provider '%s'; falling back to mock provider",
            provider_name,
        )
        provider_name = "mock"

    return create_provider(
        provider_name,
        api_key=api_key,
        model=model,
        url=settings.ollama_url,
        timeout_seconds=settings.llm_timeout_seconds,
    )


def create_app(
    *,
    database_override: CareDatabase | None = None,
    encryptor_override: FieldEncryptor | None = None,
    provider_override: LLMProvider | None = None,
    question_bank_override: QuestionBank | None = None,
) -> FastMCP:
    """Create and configure the CareWatch MCP server.

    This is the main application factory. It:
    1. Creates the FastMCP server instance
    2. Opens the database and the encrypted repositories
    3. Builds the classification client from an explicit AIClientConfig
    4. Wires the analysis pipeline, alert dispatcher and audit logger
    5. Loads the question bank
    6. Registers all tools

    Raises:
        RuntimeError: If no ENCRYPTION_KEY is configured and no encryptor is injected.
    """
    settings = get_settings()

    server = FastMCP(
        "CareWatch",
        instructions=(
            "CareWatch — daily mood check-ins for elderly users. Provides the "
            "daily question set, AI-assisted mood analysis with a rule-based "
            "fallback, mood history, and the caretaker alert inbox."
        ),
    )

    # --- Storage ---
    if encryptor_override is not None:
        encryptor = encryptor_override
    elif settings.encryption_key:
        encryptor = FieldEncryptor(settings.encryption_key)
    else:
        raise RuntimeError(
            "No ENCRYPTION_KEY configured. Generate one with "
            "`python -c 'from cryptography.fernet import Fernet; "
            "print(Fernet.generate_key().decode())'`."
        )

    if database_override is not None:
        database = database_override
    else:
        database = CareDatabase(settings.db_path)
    database.initialize()
    logger.info(
        "Care database ready: %s (schema v%d)",
        settings.db_path if database_override is None else "<override>",
        database.get_schema_version(),
    )

    mood_repo = MoodRepository(database, encryptor, day_boundary_tz=settings.day_boundary_tz)
    notification_repo = NotificationRepository(database)
    directory = UserDirectory(database)
    audit_logger = AuditLogger(database)

    # --- Classification endpoint ---
    provider = provider_override or _build_provider(settings)
    client = ClassificationClient(
        provider,
        AIClientConfig(
            timeout_seconds=settings.llm_timeout_seconds,
            max_attempts=settings.llm_max_attempts,
            max_tokens=settings.llm_max_tokens,
            temperature=settings.llm_temperature,
        ),
    )
    logger.info("Classification provider: %s", client.provider_name)

    # --- Pipeline ---
    dispatcher = AlertDispatcher(directory, notification_repo)
    service = MoodAnalysisService(
        MoodAnalyzer(client), mood_repo, directory, dispatcher, audit_logger
    )

    bank = question_bank_override or load_question_bank(settings.question_bank_path or None)

    @server.tool
    def health_check() -> dict:
        """Check server health and return basic status information."""
        return {
            "status": "ok",
            "server": "CareWatch",
            "version": "0.1.0",
            "llm_provider": client.provider_name,
            "questions_loaded": len(bank),
            "mood_entries_stored": mood_repo.count_entries(),
            "notifications_stored": notification_repo.count(),
            "day_boundary_tz": settings.day_boundary_tz,
        }

    register_mood_tools(server, service, mood_repo, MoodHistory(mood_repo), directory)
    register_question_tools(server, bank, settings.day_boundary_tz)
    register_notification_tools(server, notification_repo, directory, audit_logger)
    logger.info("CareWatch tools registered")

    return server


# Lazy: only created when this module is loaded directly (not when tests import create_app).
def __getattr__(name: str):
    if name == "mcp":
        global mcp  # noqa: PLW0603
        mcp = create_app()
        return mcp
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
