"""Client-facing error taxonomy for the generation endpoint.

Every error carries the HTTP status, a short message and optional details.
The web layer renders them as {"error": message, "details": details}.
Raw exception text stays in the logs; it is never placed in message/details.
"""

from __future__ import annotations

from typing import Any


class GenerationError(Exception):
    status_code = 500
    message = "Generation failed"

    def __init__(
        self,
        message: str | None = None,
        details: dict[str, Any] | None = None,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.message = message or self.message
        self.details = details
        self.headers = headers or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_body(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(GenerationError):
    """Request rejected; retrying unchanged will fail again."""
    status_code = 400
    message = "Invalid payload. Ensure type and gameLore are provided and valid."


class RateLimited(GenerationError):
    status_code = 429
    message = "Rate limit exceeded. Please wait before retrying."


class Misconfigured(GenerationError):
    """Server is missing a required credential. Not retryable."""
    status_code = 500
    message = "Server is not configured. Missing GEMINI_API_KEY."


class UpstreamFailure(GenerationError):
    """The completion service failed after the retry budget was spent."""
    status_code = 500
    message = "Failed to generate content"

    @classmethod
    def from_status(cls, upstream_status: int | None) -> UpstreamFailure:
        status = upstream_status if upstream_status and 400 <= upstream_status < 600 else 500
        details: dict[str, Any] = {"status": status}
        if status == 429:
            details["retryAfter"] = 60
            details["suggestion"] = "Try again in 1 minute"
        else:
            details["suggestion"] = "Check your input and try again"
        return cls(details=details, status_code=status)


class UnparsableOutput(GenerationError):
    """The model answered, but no JSON could be recovered. Worth a retry."""
    status_code = 502
    message = "AI returned unstructured output"


class SchemaMismatch(GenerationError):
    """The model's JSON could not be coerced into the result schema. Worth a retry."""
    status_code = 502
    message = "AI output did not match expected schema"
