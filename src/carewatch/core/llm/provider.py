"""Text-generation provider protocol — the opaque classification endpoint."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass
class ProviderResponse:
    """Response from a text-generation provider."""

    content: str
    model: str
    latency_ms: float
    input_tokens: int = 0
    output_tokens: int = 0


@runtime_checkable
class LLMProvider(Protocol):
    """Anything that turns a prompt into free text."""

    name: str

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 300,
        temperature: float = 0.3,
    ) -> ProviderResponse: ...


def create_provider(
    provider_name: str,
    *,
    api_key: str = "",
    model: str = "",
    url: str = "",
    timeout_seconds: float = 180.0,
) -> LLMProvider:
    """Factory function to create a provider by name.

    Args:
        provider_name: "ollama", "anthropic", "openai", or "mock"
        api_key: API key for hosted providers.
        model: Model identifier override.
        url: Generate endpoint for the ollama provider.
        timeout_seconds: Transport-level timeout passed to the provider.

    Returns:
        An LLMProvider instance.
    """
    if provider_name == "ollama":
        from carewatch.core.llm.providers.ollama import OllamaProvider

        return OllamaProvider(
            url=url or "http://localhost:11434/api/generate",
            model=model or "llama3",
            timeout_seconds=timeout_seconds,
        )
    elif provider_name == "anthropic":
        from carewatch.core.llm.providers.anthropic import AnthropicProvider

        return AnthropicProvider(
            api_key=api_key,
            model=model or "claude-sonnet-4-5-20250929",
            timeout_seconds=timeout_seconds,
        )
    elif provider_name == "openai":
        from carewatch.core.llm.providers.openai import OpenAIProvider

        return OpenAIProvider(
            api_key=api_key, model=model or "gpt-4o", timeout_seconds=timeout_seconds
        )
    elif provider_name == "mock":
        from carewatch.core.llm.providers.mock import MockProvider

        return MockProvider()
    else:
        raise ValueError(f"Unknown LLM provider: {provider_name}")
