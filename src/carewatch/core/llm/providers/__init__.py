"""Text-generation provider implementations."""

from carewatch.core.llm.providers.anthropic import AnthropicProvider
from carewatch.core.llm.providers.mock import MockProvider
from carewatch.core.llm.providers.ollama import OllamaProvider
from carewatch.core.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "MockProvider", "OllamaProvider", "OpenAIProvider"]
