"""Application settings loaded from environment variables."""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """CareWatch server configuration."""

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    # Server
    # Default to loopback: there is no auth layer in front of the tools.
    carewatch_host: str = "127.0.0.1"
    carewatch_port: int = 8001
    carewatch_log_level: str = "info"
    carewatch_allow_insecure_bind: bool = False

    # Classification endpoint
    llm_provider: Literal["ollama", "anthropic", "openai", "mock"] = "ollama"
    ollama_url: str = "http://localhost:11434/api/generate"
    ollama_model: str = "llama3"
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o"

    # llama3 on CPU can take minutes per completion
    llm_timeout_seconds: float = 180.0
    llm_max_attempts: int = 2
    llm_max_tokens: int = 300
    llm_temperature: float = 0.3

    # Storage
    db_path: str = "~/.carewatch/carewatch.db"
    encryption_key: str = ""

    # IANA zone used to cut days for check-ins and the daily question set
    day_boundary_tz: str = "UTC"

    # Empty means the packaged seed file
    question_bank_path: str = ""


def get_settings() -> Settings:
    """Create and return a Settings instance."""
    return Settings()
