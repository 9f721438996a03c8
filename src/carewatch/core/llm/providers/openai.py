"""OpenAI chat-completions provider for mood classification."""

from __future__ import annotations

import logging
import time

from carewatch.core.llm.provider import ProviderResponse

logger = logging.getLogger(__name__)


class OpenAIProvider:
    """Sends the classification prompt as one user turn in JSON mode.

    The SDK's own retries are disabled; ``ClassificationClient`` owns the
    retry budget and the per-attempt timeout.
    """

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        timeout_seconds: float = 180.0,
    ) -> None:
        import openai

        self.client = openai.AsyncOpenAI(
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
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=temperature,
            response_format={"type": "json_object"},
        )
        latency_ms = (time.monotonic() - start) * 1000

        text = ""
        if completion.choices:
            text = completion.choices[0].message.content or ""
        logger.debug("OpenAI raw response: %.200s", text)

        usage = completion.usage
        return ProviderResponse(
            content=text,
            model=self.model,
            latency_ms=latency_ms,
            input_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            output_tokens=getattr(usage, "completion_tokens", 0) or 0,
        )
