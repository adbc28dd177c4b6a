"""Optional LLM review of analysed queries.

The review is off by default.  When enabled, the client sends one prompt
(built from the schema summary and the per-query extraction summary) to
one of three providers over HTTP:

* ``openai``: ``POST https://api.openai.com/v1/chat/completions``, bearer
  token authentication.
* ``anthropic``: ``POST https://api.anthropic.com/v1/messages``,
  ``x-api-key`` authentication.
* ``ollama``: ``POST {ollama_url}/api/generate`` on a local server, no key.

Timeouts, dropped connections, HTTP 429 and HTTP 500/502/503/504 are
retried with exponential backoff (see :mod:`analyzer_engine.llm.retry`).
Every other failure raises :class:`~analyzer_engine.errors.LlmError` at
once.  The static report never depends on this module.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from analyzer_engine.config import LlmConfig, LlmProvider, RetryConfig
from analyzer_engine.errors import LlmError
from analyzer_engine.llm.prompts import build_review_prompt
from analyzer_engine.llm.retry import retry_with_backoff
from analyzer_engine.models.query import Query
from analyzer_engine.models.schema import Schema

logger = logging.getLogger(__name__)

OPENAI_URL = "https://api.openai.com/v1/chat/completions"
ANTHROPIC_URL = "https://api.anthropic.com/v1/messages"
ANTHROPIC_VERSION = "2023-06-01"

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})

_PROVIDER_LABELS: dict[LlmProvider, str] = {
    LlmProvider.OPENAI: "OpenAI",
    LlmProvider.ANTHROPIC: "Anthropic",
    LlmProvider.OLLAMA: "Ollama",
}


def has_llm_access(config: LlmConfig) -> bool:
    """Return True when *config* carries everything its provider needs."""
    return not config.provider.requires_api_key or config.api_key is not None


class LlmClient:
    """Synchronous review client with retry and backoff.

    Parameters
    ----------
    config:
        Provider, credentials, model and timeout.  ``config.model`` falls
        back to the provider's default model.
    retry:
        Backoff parameters for transient failures.
    http_client:
        Pre-built ``httpx.Client``, mainly so tests can inject a mock
        transport.  When omitted the client creates and owns one.

    Raises
    ------
    LlmError
        A cloud provider was selected without an API key.
    """

    def __init__(
        self,
        config: LlmConfig,
        retry: RetryConfig | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        if not has_llm_access(config):
            label = _PROVIDER_LABELS[config.provider]
            raise LlmError(f"API key required for {label} (use --api-key or LLM_API_KEY)")

        self._provider = config.provider
        self._model = config.model or config.provider.default_model
        self._api_key = config.api_key.get_secret_value() if config.api_key else None
        self._ollama_url = config.ollama_url.rstrip("/")
        self._max_tokens = config.max_tokens
        self._retry = retry or RetryConfig()
        self._owns_http = http_client is None
        self._http = http_client if http_client is not None else httpx.Client(timeout=config.timeout)

        logger.info(
            "LLM client initialised (provider=%s, model=%s, timeout=%.1fs)",
            self._provider.value,
            self._model,
            config.timeout,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> LlmClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    @property
    def provider(self) -> LlmProvider:
        return self._provider

    @property
    def model(self) -> str:
        return self._model

    def review(self, queries: Sequence[Query], schema: Schema | None = None) -> str:
        """Ask the LLM to review *queries* against *schema*.

        Returns the provider's free-text answer.

        Raises
        ------
        LlmError
            The request failed, after retries for transient failures.
        """
        return self.complete(build_review_prompt(queries, schema))

    def complete(self, prompt: str) -> str:
        """Send *prompt* and return the response text, retrying transient failures."""
        logger.info(
            "LLM call: provider=%s model=%s prompt_chars=%d",
            self._provider.value,
            self._model,
            len(prompt),
        )
        return retry_with_backoff(lambda: self._call_provider(prompt), self._retry)

    # ------------------------------------------------------------------
    # Providers
    # ------------------------------------------------------------------

    def _call_provider(self, prompt: str) -> str:
        if self._provider == LlmProvider.OPENAI:
            return self._call_openai(prompt)
        if self._provider == LlmProvider.ANTHROPIC:
            return self._call_anthropic(prompt)
        return self._call_ollama(prompt)

    def _call_openai(self, prompt: str) -> str:
        data = self._post(
            OPENAI_URL,
            {"model": self._model, "messages": [{"role": "user", "content": prompt}]},
            {"Authorization": f"Bearer {self._api_key}"},
        )
        choices = data.get("choices") or []
        content = choices[0].get("message", {}).get("content") if choices else None
        if not content:
            raise LlmError("Empty response from OpenAI")
        return str(content)

    def _call_anthropic(self, prompt: str) -> str:
        data = self._post(
            ANTHROPIC_URL,
            {
                "model": self._model,
                "max_tokens": self._max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
            {"x-api-key": self._api_key or "", "anthropic-version": ANTHROPIC_VERSION},
        )
        blocks = data.get("content") or []
        text = blocks[0].get("text") if blocks else None
        if not text:
            raise LlmError("Empty response from Anthropic")
        return str(text)

    def _call_ollama(self, prompt: str) -> str:
        data = self._post(
            f"{self._ollama_url}/api/generate",
            {"model": self._model, "prompt": prompt, "stream": False},
            {},
        )
        text = data.get("response")
        if not text:
            raise LlmError("Empty response from Ollama")
        return str(text)

    def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        """POST *payload* as JSON and decode the JSON object in the reply.

        Transport failures and HTTP errors are translated to
        :class:`LlmError`, flagged retryable where a later attempt may
        succeed.
        """
        label = _PROVIDER_LABELS[self._provider]
        try:
            response = self._http.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as exc:
            raise LlmError(f"{label} request timeout: {exc}", retryable=True) from exc
        except httpx.TransportError as exc:
            raise LlmError(f"{label} connection error: {exc}", retryable=True) from exc

        if response.is_error:
            raise LlmError(
                f"{label} API error {response.status_code}: {response.text}",
                status_code=response.status_code,
                retryable=response.status_code in RETRYABLE_STATUS_CODES,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise LlmError(f"Invalid JSON from {label}: {exc}") from exc
        if not isinstance(data, dict):
            raise LlmError(f"Unexpected response from {label}: expected a JSON object")
        return data
