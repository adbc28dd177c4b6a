"""Unit tests for the optional LLM review: prompt, retry policy and provider client.

Uses httpx.MockTransport for deterministic HTTP simulation; nothing leaves
the process.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any
from unittest.mock import MagicMock, call, patch

import httpx
import pytest
from analyzer_engine.config import LlmConfig, LlmProvider, RetryConfig
from analyzer_engine.errors import LlmError
from analyzer_engine.llm import LlmClient, build_review_prompt, has_llm_access, retry_with_backoff
from analyzer_engine.llm.client import ANTHROPIC_URL, OPENAI_URL
from analyzer_engine.parser import parse_queries
from analyzer_engine.schema import parse_schema

USERS_DDL = "CREATE TABLE users (id INT PRIMARY KEY, email VARCHAR(255)); CREATE INDEX idx_email ON users(email);"

OPENAI_OK = (200, {"choices": [{"message": {"role": "assistant", "content": "Use idx_email."}}]})
ANTHROPIC_OK = (200, {"content": [{"type": "text", "text": "Use idx_email."}]})
OLLAMA_OK = (200, {"model": "llama3.2", "response": "Use idx_email.", "done": True})


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sleep() -> Iterator[MagicMock]:
    with patch("analyzer_engine.llm.retry.time.sleep") as mocked:
        yield mocked


def _transport(*replies: Any) -> tuple[httpx.MockTransport, list[httpx.Request]]:
    """Mock transport answering with *replies* in order, repeating the last one.

    A reply is either an exception to raise or a ``(status, body)`` pair,
    where a dict body is sent as JSON and a string body as plain text.
    """
    requests: list[httpx.Request] = []
    pending = list(replies)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        reply = pending.pop(0) if len(pending) > 1 else pending[0]
        if isinstance(reply, Exception):
            raise reply
        status, body = reply
        if isinstance(body, dict):
            return httpx.Response(status, json=body)
        return httpx.Response(status, text=body)

    return httpx.MockTransport(handler), requests


def _client(
    provider: LlmProvider,
    transport: httpx.MockTransport,
    retry: RetryConfig | None = None,
    **overrides: Any,
) -> LlmClient:
    fields: dict[str, Any] = {"provider": provider, "api_key": "sk-test", **overrides}
    return LlmClient(
        LlmConfig(**fields),
        retry or RetryConfig(max_retries=2),
        http_client=httpx.Client(transport=transport),
    )


# ---------------------------------------------------------------------------
# Prompt
# ---------------------------------------------------------------------------


class TestReviewPrompt:
    def test_schema_and_queries(self):
        queries = parse_queries("SELECT id FROM users WHERE email = 'x'")
        prompt = build_review_prompt(queries, parse_schema(USERS_DDL))
        assert prompt.startswith("You are a database performance expert.")
        assert "Database Schema:\n\nTable: users" in prompt
        assert "INDEX idx_email ON (email)" in prompt
        assert "SQL Queries:" in prompt
        assert "WHERE columns: email" in prompt
        assert prompt.endswith("Provide specific, actionable recommendations.")

    def test_schema_block_omitted_without_schema(self):
        prompt = build_review_prompt(parse_queries("DELETE FROM sessions"))
        assert "Database Schema:" not in prompt
        assert "Query #1 (Delete):" in prompt

    def test_plain_text(self):
        prompt = build_review_prompt(parse_queries("SELECT * FROM users"), parse_schema(USERS_DDL))
        assert "\x1b[" not in prompt


# ---------------------------------------------------------------------------
# retry_with_backoff
# ---------------------------------------------------------------------------


class TestRetryWithBackoff:
    def test_succeeds_first_try(self, sleep: MagicMock):
        fn = MagicMock(return_value="ok")
        assert retry_with_backoff(fn, RetryConfig()) == "ok"
        assert fn.call_count == 1
        sleep.assert_not_called()

    def test_transient_failures_back_off(self, sleep: MagicMock):
        fn = MagicMock(
            side_effect=[
                LlmError("timeout", retryable=True),
                LlmError("503", retryable=True),
                "ok",
            ]
        )
        config = RetryConfig(max_retries=3, initial_delay_ms=100, backoff_factor=2.0)
        assert retry_with_backoff(fn, config) == "ok"
        assert fn.call_count == 3
        assert sleep.call_args_list == [call(0.1), call(0.2)]

    def test_exhausted_budget_reraises_last_error(self, sleep: MagicMock):
        fn = MagicMock(side_effect=LlmError("rate limit", retryable=True))
        with pytest.raises(LlmError, match="rate limit"):
            retry_with_backoff(fn, RetryConfig(max_retries=2))
        assert fn.call_count == 3
        assert sleep.call_count == 2

    def test_non_retryable_error_propagates_immediately(self, sleep: MagicMock):
        fn = MagicMock(side_effect=LlmError("bad request"))
        with pytest.raises(LlmError):
            retry_with_backoff(fn, RetryConfig(max_retries=5))
        assert fn.call_count == 1
        sleep.assert_not_called()

    def test_unrelated_exception_not_retried(self, sleep: MagicMock):
        fn = MagicMock(side_effect=ValueError("boom"))
        with pytest.raises(ValueError):
            retry_with_backoff(fn, RetryConfig())
        assert fn.call_count == 1

    def test_zero_retries(self, sleep: MagicMock):
        fn = MagicMock(side_effect=LlmError("timeout", retryable=True))
        with pytest.raises(LlmError):
            retry_with_backoff(fn, RetryConfig(max_retries=0))
        assert fn.call_count == 1
        sleep.assert_not_called()

    def test_delay_capped(self, sleep: MagicMock):
        fn = MagicMock(side_effect=[LlmError("x", retryable=True)] * 3 + ["ok"])
        config = RetryConfig(max_retries=3, initial_delay_ms=1000, max_delay_ms=1500, backoff_factor=2.0)
        retry_with_backoff(fn, config)
        assert sleep.call_args_list == [call(1.0), call(1.5), call(1.5)]


# ---------------------------------------------------------------------------
# Client construction
# ---------------------------------------------------------------------------


class TestClientSetup:
    @pytest.mark.parametrize(
        ("provider", "api_key", "expected"),
        [
            (LlmProvider.OPENAI, None, False),
            (LlmProvider.OPENAI, "sk", True),
            (LlmProvider.ANTHROPIC, None, False),
            (LlmProvider.OLLAMA, None, True),
        ],
    )
    def test_has_llm_access(self, provider: LlmProvider, api_key: str | None, expected: bool):
        assert has_llm_access(LlmConfig(provider=provider, api_key=api_key)) is expected

    def test_cloud_provider_requires_key(self):
        with pytest.raises(LlmError, match="API key required for Anthropic"):
            LlmClient(LlmConfig(provider=LlmProvider.ANTHROPIC))

    def test_default_model(self):
        transport, _ = _transport(OPENAI_OK)
        assert _client(LlmProvider.OPENAI, transport).model == "gpt-4"
        assert _client(LlmProvider.OPENAI, transport, model="gpt-4o").model == "gpt-4o"

    def test_injected_http_client_left_open(self):
        transport, _ = _transport(OLLAMA_OK)
        http = httpx.Client(transport=transport)
        with LlmClient(LlmConfig(), http_client=http) as client:
            assert client.provider == LlmProvider.OLLAMA
        assert not http.is_closed


# ---------------------------------------------------------------------------
# Provider requests
# ---------------------------------------------------------------------------


class TestProviders:
    def test_openai(self):
        transport, requests = _transport(OPENAI_OK)
        assert _client(LlmProvider.OPENAI, transport).complete("hello") == "Use idx_email."
        (request,) = requests
        assert str(request.url) == OPENAI_URL
        assert request.headers["authorization"] == "Bearer sk-test"
        assert json.loads(request.content) == {
            "model": "gpt-4",
            "messages": [{"role": "user", "content": "hello"}],
        }

    def test_anthropic(self):
        transport, requests = _transport(ANTHROPIC_OK)
        client = _client(LlmProvider.ANTHROPIC, transport, max_tokens=1024)
        assert client.complete("hello") == "Use idx_email."
        (request,) = requests
        assert str(request.url) == ANTHROPIC_URL
        assert request.headers["x-api-key"] == "sk-test"
        assert request.headers["anthropic-version"] == "2023-06-01"
        assert json.loads(request.content) == {
            "model": "claude-sonnet-4-20250514",
            "max_tokens": 1024,
            "messages": [{"role": "user", "content": "hello"}],
        }

    def test_ollama(self):
        transport, requests = _transport(OLLAMA_OK)
        client = _client(LlmProvider.OLLAMA, transport, api_key=None, ollama_url="http://ollama.local:11434/")
        assert client.complete("hello") == "Use idx_email."
        (request,) = requests
        assert str(request.url) == "http://ollama.local:11434/api/generate"
        assert "authorization" not in request.headers
        assert json.loads(request.content) == {"model": "llama3.2", "prompt": "hello", "stream": False}

    def test_review_sends_built_prompt(self):
        transport, requests = _transport(OLLAMA_OK)
        client = _client(LlmProvider.OLLAMA, transport)
        queries = parse_queries("SELECT id FROM users WHERE email = 'x'")
        assert client.review(queries, parse_schema(USERS_DDL)) == "Use idx_email."
        sent = json.loads(requests[0].content)["prompt"]
        assert sent == build_review_prompt(queries, parse_schema(USERS_DDL))

    @pytest.mark.parametrize(
        ("provider", "body", "message"),
        [
            (LlmProvider.OPENAI, {"choices": []}, "Empty response from OpenAI"),
            (LlmProvider.ANTHROPIC, {"content": []}, "Empty response from Anthropic"),
            (LlmProvider.OLLAMA, {"done": True}, "Empty response from Ollama"),
        ],
    )
    def test_empty_response(self, sleep: MagicMock, provider: LlmProvider, body: dict[str, Any], message: str):
        transport, requests = _transport((200, body))
        with pytest.raises(LlmError, match=message):
            _client(provider, transport).complete("hello")
        assert len(requests) == 1


# ---------------------------------------------------------------------------
# Failures and retries
# ---------------------------------------------------------------------------


class TestProviderFailures:
    def test_service_unavailable_then_success(self, sleep: MagicMock):
        transport, requests = _transport((503, "busy"), OPENAI_OK)
        assert _client(LlmProvider.OPENAI, transport).complete("hello") == "Use idx_email."
        assert len(requests) == 2
        assert sleep.call_count == 1

    def test_rate_limit_exhausts_retries(self, sleep: MagicMock):
        transport, requests = _transport((429, "slow down"))
        with pytest.raises(LlmError) as exc_info:
            _client(LlmProvider.ANTHROPIC, transport, retry=RetryConfig(max_retries=2)).complete("hello")
        assert len(requests) == 3
        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is True
        assert str(exc_info.value) == "Anthropic API error 429: slow down"

    def test_client_error_not_retried(self, sleep: MagicMock):
        transport, requests = _transport((401, "invalid api key"))
        with pytest.raises(LlmError, match="OpenAI API error 401: invalid api key"):
            _client(LlmProvider.OPENAI, transport).complete("hello")
        assert len(requests) == 1
        sleep.assert_not_called()

    def test_connection_error_retried(self, sleep: MagicMock):
        transport, requests = _transport(httpx.ConnectError("Connection refused"), OLLAMA_OK)
        assert _client(LlmProvider.OLLAMA, transport).complete("hello") == "Use idx_email."
        assert len(requests) == 2

    def test_timeout_exhausts_retries(self, sleep: MagicMock):
        transport, requests = _transport(httpx.ReadTimeout("timed out"))
        with pytest.raises(LlmError, match="Ollama request timeout") as exc_info:
            _client(LlmProvider.OLLAMA, transport, retry=RetryConfig(max_retries=1)).complete("hello")
        assert exc_info.value.retryable is True
        assert len(requests) == 2

    def test_invalid_json(self, sleep: MagicMock):
        transport, _ = _transport((200, "<html>proxy error</html>"))
        with pytest.raises(LlmError, match="Invalid JSON from Ollama"):
            _client(LlmProvider.OLLAMA, transport).complete("hello")
