"""Mock provider for testing and offline runs."""

from __future__ import annotations

from carewatch.core.llm.provider import ProviderResponse

DEFAULT_MOCK_CONTENT = (
    '{"mood":"Normal","confidence":"medium","emotionsDetected":[],'
    '"reason":"Mock classification."}'
)


class MockProvider:
    """Mock provider — returns a canned response."""

    name = "mock"

    def __init__(self, response_content: str = DEFAULT_MOCK_CONTENT) -> None:
        self.response_content = response_content
        self.last_prompt: str = ""
        self.call_count: int = 0

    async def generate(
        self,
        prompt: str,
        max_tokens: int = 300,
        temperature: float = 0.3,
    ) -> ProviderResponse:
        self.last_prompt = prompt
        self.call_count += 1
        return ProviderResponse(
            content=self.response_content,
            model="mock",
            latency_ms=0.0,
            input_tokens=len(prompt.split()),
            output_tokens=len(self.response_content.split()),
        )
