"""Ollama text-completion provider (``/api/generate``)."""

from __future__ import annotations

import logging
import time

import httpx

from carewatch.core.llm.provider import ProviderResponse

logger = logging.getLogger(__name__)


class OllamaProvider:
    """Provider for a self-hosted Ollama endpoint.

    A fresh ``httpx.AsyncClient`` is opened per request inside ``async with``
    so the connection is released on success, error and cancellation alike.
    """

    name = "ollama"

    def __init__(
        self,
        url: str = "http://localhost:11434/api/generate",
        model: str = "llama3",
        timeout_seconds: float = 180.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 300,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature,
                "num_predict": max_tokens,
            },
        }

        start = time.monotonic()
        async with httpx.AsyncClient(
            timeout=self.timeout_seconds, transport=self._transport
        ) as client:
            response = await client.post(self.url, json=payload)
            response.raise_for_status()
            data = response.json()
        elapsed_ms = (time.monotonic() - start) * 1000

        if not isinstance(data, dict):
            data = {}
        content = data.get("response") or ""
        logger.debug("Ollama raw response: %.200s", content)
        return ProviderResponse(
            content=content,
            model=self.model,
            latency_ms=elapsed_ms,
            input_tokens=data.get("prompt_eval_count", 0),
            output_tokens=data.get("eval_count", 0),
        )
