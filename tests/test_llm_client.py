"""Tests for the Anthropic Messages API client."""

from __future__ import annotations

import json

import httpx
import pytest

from salesdesk.ai.llm_client import (
    AnthropicClient,
    LLMConfigurationError,
    LLMRequestError,
    LLMUpstreamError,
    initialize_ai_client,
)


@pytest.fixture
def llm(httpserver) -> AnthropicClient:
    return AnthropicClient(
        api_key="test-key",
        base_url=httpserver.url_for("/"),
        model="claude-test",
        api_version="2023-06-01",
        timeout=5,
    )


class TestComplete:
    def test_request_shape(self, llm, httpserver, llm_reply):
        httpserver.expect_request("/v1/messages", method="POST").respond_with_json(llm_reply("Hello"))

        assert llm.generate("system text", "user text", max_tokens=2000) == "Hello"

        request, _ = httpserver.log[0]
        assert request.headers["x-api-key"] == "test-key"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert json.loads(request.data) == {
            "model": "claude-test",
            "max_tokens": 2000,
            "system": "system text",
            "messages": [{"role": "user", "content": "user text"}],
            "temperature": 0,
        }

    def test_empty_content_is_empty_string(self, llm, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_json({"content": []})
        assert llm.generate("s", "u") == ""

    def test_upstream_error_message_passed_through(self, llm, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_json(
            {"type": "error", "error": {"type": "rate_limit_error", "message": "Rate limited"}},
            status=429,
        )
        with pytest.raises(LLMUpstreamError) as excinfo:
            llm.generate("s", "u")
        assert excinfo.value.status_code == 429
        assert excinfo.value.message == "Rate limited"

    def test_upstream_error_without_body(self, llm, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_data("boom", status=500)
        with pytest.raises(LLMUpstreamError) as excinfo:
            llm.generate("s", "u")
        assert excinfo.value.status_code == 500
        assert excinfo.value.message == "API error: 500"

    def test_error_prefix(self, llm, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_data("", status=503)
        with pytest.raises(LLMUpstreamError) as excinfo:
            llm.generate("s", "u", error_prefix="Anthropic API error")
        assert excinfo.value.message == "Anthropic API error: 503"

    def test_invalid_json_reply(self, llm, httpserver):
        httpserver.expect_request("/v1/messages").respond_with_data("not json", status=200)
        with pytest.raises(LLMRequestError):
            llm.generate("s", "u")

    def test_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        llm = AnthropicClient(api_key="k", base_url="http://llm.invalid", transport=httpx.MockTransport(refuse))
        with pytest.raises(LLMRequestError):
            llm.generate("s", "u")

    def test_missing_key(self, httpserver):
        llm = AnthropicClient(api_key=None, base_url=httpserver.url_for("/"))
        with pytest.raises(LLMConfigurationError, match="API key not configured"):
            llm.generate("s", "u")
        assert len(httpserver.log) == 0


def test_initialize_from_config():
    client = initialize_ai_client({
        "ANTHROPIC_API_KEY": None,
        "ANTHROPIC_API_URL": "https://example.test/",
        "ANTHROPIC_MODEL": "m",
        "ANTHROPIC_VERSION": "v",
        "LLM_REQUEST_TIMEOUT": 3,
    })
    assert client.is_configured is False
    assert client.base_url == "https://example.test"
    assert client.timeout == 3
