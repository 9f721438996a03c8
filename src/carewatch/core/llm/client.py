"""Classification client — bounded-time, bounded-retry calls to the provider."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from carewatch.core.llm.provider import LLMProvider, ProviderResponse

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AIClientConfig:
    """Call parameters for the classification endpoint.

    ``max_attempts`` counts the first call, so 2 means one retry. A second
    retry is never made.
    """

    timeout_seconds: float = 180.0
    max_attempts: int = 2
    max_tokens: int = 300
    temperature: float = 0.3

    def __post_init__(self) -> None:
        if self.timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        if not 1 <= self.max_attempts <= 2:
            raise ValueError("max_attempts must be 1 or 2")


class ClassificationClient:
    """Sends a prompt to the provider and returns the raw generated text.

    Each attempt runs under ``asyncio.wait_for`` so a slow upstream call is
    cancelled once the timeout elapses. Attempts are strictly sequential and
    nothing is cached between calls.

    Usage::

        client = ClassificationClient(OllamaProvider(), AIClientConfig(timeout_seconds=180))
        raw = await client.classify(prompt)
    """

    def __init__(self, provider: LLMProvider, config: AIClientConfig | None = None) -> None:
        self.provider = provider
        self.config = config or AIClientConfig()

    @property
    def provider_name(self) -> str:
        return getattr(self.provider, "name", type(self.provider).__name__)

    async def classify(self, prompt: str) -> str:
        """Return the generated text for ``prompt``.

        Raises:
            UpstreamTimeout: If the final attempt timed out.
            UpstreamError: If the final attempt failed for any other reason.
        """
        last_error: UpstreamError | None = None

        for attempt in range(1, self.config.max_attempts + 1):
            logger.info(
                "Calling %s classification endpoint (attempt %d/%d)",
                self.provider_name,
                attempt,
                self.config.max_attempts,
            )
            try:
                response: ProviderResponse = await asyncio.wait_for(
                    self.provider.generate(
                        prompt,
                        max_tokens=self.config.max_tokens,
                        temperature=self.config.temperature,
                    ),
                    timeout=self.config.timeout_seconds,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                last_error = UpstreamTimeout(
                    f"{self.provider_name} did not respond within "
                    f"{self.config.timeout_seconds:g}s"
                )
                last_error.__cause__ = exc
            except Exception as exc:
                last_error = UpstreamError(
                    f"{self.provider_name} request failed: {type(exc).__name__}: {exc}"
                )
                last_error.__cause__ = exc
            else:
                logger.info(
                    "Classification endpoint answered: model=%s, tokens=%d+%d, latency=%.0fms",
                    response.model,
                    response.input_tokens,
                    response.output_tokens,
                    response.latency_ms,
                )
                return response.content

            if attempt < self.config.max_attempts:
                logger.warning("Retrying after error: %s", last_error)

        assert last_error is not None
        logger.error("Classification endpoint failed: %s", last_error)
        raise last_error


# ------------------------------------------------------------------
# Exceptions
# ------------------------------------------------------------------

class UpstreamError(Exception):
    """The classification endpoint failed (transport error, non-2xx, bad body)."""


class UpstreamTimeout(UpstreamError):
    """The classification endpoint did not answer in time."""
