"""LLM client — HTTP connection to a text-completion backend.

The pipeline injects an LLM callable matching the protocol:

    async def __call__(self, stage: str, prompt: str) -> str: ...

`stage` is the request kind ("dialogue" or "quest"). Implementations may use
it for logging; the simplest ignore it.

Two implementations are provided:

    HttpLLM   — real HTTP client, supports Gemini, OpenAI-compatible and
                 KoboldCpp backends. Selected by provider_format.
    EchoLLM   — returns the prompt back unchanged. Useful for smoke-testing
                 the wiring without a model.

invoke() wraps any LLM with bounded retry-with-backoff and an overall
deadline. Tests use StubLLM (defined in the test helpers) instead of HttpLLM.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol — every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class LLM(Protocol):
    async def __call__(self, stage: str, prompt: str) -> str: ...


# ---------------------------------------------------------------------------
# LLMError — raised for all connection and protocol failures
# ---------------------------------------------------------------------------

class LLMError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error.

    status_code is the backend's HTTP status when it answered with one,
    otherwise None (connection failure, timeout, malformed body).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


# ---------------------------------------------------------------------------
# HttpLLM — connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["gemini", "openai", "koboldcpp"]

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com"


class HttpLLM:
    """Async HTTP client for text-completion backends.

    Supported formats:
      "gemini"     — POST /v1beta/models/{model}:generateContent
                     {"contents": [{"role": "user", "parts": [{"text": ...}]}]}
                     Response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}]}
      "openai"     — POST /v1/completions   {"model": ..., "prompt": ...}
                     Response: {"choices": [{"text": "..."}]}
      "koboldcpp"  — POST /api/v1/generate  {"prompt": ...}
                     Response: {"results": [{"text": "..."}]}

    Args:
        provider_url:    Base URL of the backend.
        api_key:         Gemini API key or bearer token; empty if not required.
        provider_format: Wire format to use. Defaults to "gemini".
        model:           Model identifier (gemini and openai formats).
        timeout:         HTTP timeout in seconds. Defaults to 60.
    """

    def __init__(
        self,
        provider_url: str = GEMINI_BASE_URL,
        api_key: str = "",
        provider_format: ProviderFormat = "gemini",
        model: str = "gemini-1.5-flash-latest",
        timeout: float = 60.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if not self._api_key:
            return headers
        if self._format == "gemini":
            headers["x-goog-api-key"] = self._api_key
        else:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(self, prompt: str) -> tuple[str, dict]:
        """Return (url, body) for the configured format."""
        if self._format == "openai":
            url = f"{self._base_url}/v1/completions"
            body: dict = {"prompt": prompt}
            if self._model:
                body["model"] = self._model
            return url, body

        if self._format == "koboldcpp":
            return f"{self._base_url}/api/v1/generate", {"prompt": prompt}

        # gemini (default)
        url = f"{self._base_url}/v1beta/models/{self._model}:generateContent"
        return url, {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}

    def _parse_response(self, data: object) -> str:
        """Extract the completion text from the response body."""
        if not isinstance(data, dict):
            raise LLMError(f"Unexpected response format: expected a JSON object, got {type(data).__name__}")

        if self._format in ("openai", "koboldcpp"):
            key = "choices" if self._format == "openai" else "results"
            backend = "OpenAI-compatible" if self._format == "openai" else "KoboldCpp"
            try:
                text = data[key][0]["text"]
            except (TypeError, KeyError, IndexError) as e:
                raise LLMError(f"Unexpected response format from {backend} backend") from e
            if not isinstance(text, str):
                raise LLMError(f"Unexpected response format from {backend} backend")
            return text

        try:
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(part.get("text", "") for part in parts)
        except (TypeError, KeyError, IndexError, AttributeError) as e:
            raise LLMError("Unexpected response format from Gemini backend") from e

    async def __call__(self, stage: str, prompt: str) -> str:
        url, body = self._build_request(prompt)
        logger.debug("llm call stage=%s url=%s prompt_len=%d", stage, url, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise LLMError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise LLMError(f"LLM backend returned HTTP {status}", status_code=status) from e
        except httpx.TimeoutException as e:
            raise LLMError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise LLMError(f"LLM request failed: {type(e).__name__}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMError("LLM backend returned a non-JSON body") from e
        text = self._parse_response(data)
        logger.debug("llm response stage=%s len=%d", stage, len(text))
        return text


# ---------------------------------------------------------------------------
# EchoLLM — returns the prompt unchanged; useful for smoke tests
# ---------------------------------------------------------------------------

class EchoLLM:
    """Returns the prompt text as-is. No network calls.

    The output won't be valid JSON, so a generation run against it ends in
    an unparsable-output error; use StubLLM in tests for controlled responses.
    """

    async def __call__(self, stage: str, prompt: str) -> str:
        logger.debug("EchoLLM stage=%s prompt_len=%d", stage, len(prompt))
        return prompt


# ---------------------------------------------------------------------------
# invoke — retry with exponential backoff under an overall deadline
# ---------------------------------------------------------------------------

TRANSIENT_STATUSES = frozenset({408, 429, 500, 502, 503, 504})


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0  # seconds; attempt n waits base_delay * 2**n
    deadline: float | None = 60.0  # seconds for all attempts together


def is_transient(error: LLMError) -> bool:
    return error.status_code is None or error.status_code in TRANSIENT_STATUSES


async def invoke(
    llm: LLM,
    stage: str,
    prompt: str,
    policy: RetryPolicy = RetryPolicy(),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> str:
    """Call llm, retrying transient LLMErrors up to policy.max_attempts times.

    The last error propagates once the budget is spent. Non-transient
    statuses (bad key, bad request) propagate on the first failure.
    """

    async def _attempts() -> str:
        attempts = max(1, policy.max_attempts)
        for attempt in range(attempts):
            try:
                return await llm(stage, prompt)
            except LLMError as e:
                if attempt + 1 >= attempts or not is_transient(e):
                    raise
                delay = policy.base_delay * (2 ** attempt)
                logger.warning(
                    "llm attempt %d/%d failed stage=%s: %s; retrying in %.1fs",
                    attempt + 1, attempts, stage, e, delay,
                )
                await sleep(delay)
        raise AssertionError("unreachable")

    if policy.deadline is None:
        return await _attempts()
    try:
        async with asyncio.timeout(policy.deadline):
            return await _attempts()
    except TimeoutError as e:
        raise LLMError(f"LLM call exceeded deadline of {policy.deadline}s") from e
