"""Tests for OllamaProvider against an httpx mock transport."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from carewatch.core.llm.providers.ollama import OllamaProvider


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio required)."""
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def _provider(handler, **kwargs) -> OllamaProvider:
    return OllamaProvider(
        url="http://ollama.test/api/generate",
        model="llama3",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestRequest:
    def test_payload_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"response": "{}"})

        _run(_provider(handler).generate("How is Walter?", max_tokens=300, temperature=0.3))

        assert seen["url"] == "http://ollama.test/api/generate"
        assert seen["body"] == {
            "model": "llama3",
            "prompt": "How is Walter?",
            "stream": False,
            "options": {"temperature": 0.3, "num_predict": 300},
        }


class TestResponse:
    def test_returns_response_field(self):
        def handler(request):
            return httpx.Response(
                200,
                json={"response": '{"mood":"Normal"}', "prompt_eval_count": 40, "eval_count": 12},
            )

        result = _run(_provider(handler).generate("p"))
        assert result.content == '{"mood":"Normal"}'
        assert result.model == "llama3"
        assert result.input_tokens == 40
        assert result.output_tokens == 12
        assert result.latency_ms >= 0

    def test_missing_response_field_gives_empty_content(self):
        result = _run(_provider(lambda request: httpx.Response(200, json={})).generate("p"))
        assert result.content == ""

    def test_non_object_body_gives_empty_content(self):
        result = _run(_provider(lambda request: httpx.Response(200, json=[1, 2])).generate("p"))
        assert result.content == ""

    def test_non_2xx_raises(self):
        provider = _provider(lambda request: httpx.Response(500, text="model not loaded"))
        with pytest.raises(httpx.HTTPStatusError):
            _run(provider.generate("p"))

    def test_name(self):
        assert OllamaProvider.name == "ollama"
