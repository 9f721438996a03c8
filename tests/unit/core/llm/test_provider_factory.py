"""Tests for provider construction from settings."""

from __future__ import annotations

import pytest

from carewatch.core.config.settings import get_settings
from carewatch.core.llm.provider import create_provider
from carewatch.core.llm.providers import MockProvider, OllamaProvider
from carewatch.core.server.app import _build_provider


class TestCreateProvider:
    def test_ollama_defaults(self):
        provider = create_provider("ollama")
        assert isinstance(provider, OllamaProvider)
        assert provider.url == "http://localhost:11434/api/generate"
        assert provider.model == "llama3"

    def test_ollama_overrides(self):
        provider = create_provider(
            "ollama", model="mistral", url="http://gpu-box:11434/api/generate", timeout_seconds=30
        )
        assert provider.model == "mistral"
        assert provider.url == "http://gpu-box:11434/api/generate"
        assert provider.timeout_seconds == 30

    def test_mock(self):
        assert isinstance(create_provider("mock"), MockProvider)

    def test_unknown(self):
        with pytest.raises(ValueError, match="Unknown LLM provider"):
            create_provider("llamafile")


class TestBuildProviderFromSettings:
    def test_hosted_provider_without_key_degrades_to_mock(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "anthropic")
        assert isinstance(_build_provider(get_settings()), MockProvider)

    def test_ollama_from_env(self, monkeypatch):
        monkeypatch.setenv("LLM_PROVIDER", "ollama")
        monkeypatch.setenv("OLLAMA_MODEL", "phi3")
        monkeypatch.setenv("LLM_TIMEOUT_SECONDS", "45")
        provider = _build_provider(get_settings())
        assert isinstance(provider, OllamaProvider)
        assert provider.model == "phi3"
        assert provider.timeout_seconds == 45.0
