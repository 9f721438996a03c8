"""Anthropic Messages API provider for mood classification."""

from __future__ import annotations

import logging
import time

from carewatch.core.llm.provider import ProviderResponse

logger = logging.getLogger(__name__)

_SYSTEM = "Reply with a single JSON object and nothing else."


class AnthropicProvider:
    """Sends the classification prompt as one user turn.

    The SDK's own retries are disabled; ``ClassificationClient`` owns the
    retry budget and the per-attempt timeout.
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5-20250929",
        timeout_seconds: float = 180.0,
    ) -> None:
        import anthropic

        self.client = anthropic.AsyncAnthropic(
            api_key=api_key, timeout=timeout_seconds, max_retries=0
        )
        self.model = model

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 300,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        start = time.monotonic()
        message = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens,
            temperature=temperature,
            system=_SYSTEM,
            messages=[{"role": "user", "content": prompt}],
        )
        latency_ms = (time.monotonic() - start) * 1000

        text = "".join(
            block.text for block in message.content if getattr(block, "type", "") == "text"
        )
        logger.debug("Anthropic raw response: %.200s", text)
        return ProviderResponse(
            content=text,
            model=self.model,
            latency_ms=latency_ms,
            input_tokens=message.usage.input_tokens,
            output_tokens=message.usage.output_tokens,
        )
