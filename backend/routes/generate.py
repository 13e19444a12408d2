"""Content generation endpoint.

POST /api/generate runs, in order: rate limit → JSON body → validation →
credential check → pipeline. Every failure is a GenerationError, rendered by
the app-level handler as {"error": ..., "details": ...}.
"""

import json
import logging
import math

from fastapi import APIRouter, Request

from rpg_weaver.errors import InvalidInput, Misconfigured, RateLimited
from rpg_weaver.pipeline import generate
from rpg_weaver.ratelimit import client_key
from rpg_weaver.validation import Invalid, validate_request

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_rate_limit(request: Request) -> None:
    settings = request.app.state.settings
    limiter = request.app.state.limiter
    decision = limiter.check(
        f"gen:{client_key(request.headers)}",
        settings.rate_limit,
        settings.rate_limit_window_ms,
    )
    if decision.allowed:
        return
    wait_ms = max(0, decision.reset_at - limiter.now())
    raise RateLimited(
        details={"remaining": decision.remaining, "resetAt": decision.reset_at},
        headers={"Retry-After": str(math.ceil(wait_ms / 1000))},
    )


@router.post("/generate")
async def generate_content(request: Request):
    """Generate a dialogue tree or quest from game lore."""
    _check_rate_limit(request)

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("Invalid JSON body")

    payload = validate_request(body)
    if isinstance(payload, Invalid):
        raise InvalidInput(details={"reason": payload.reason})

    settings = request.app.state.settings
    if not settings.api_key:
        raise Misconfigured()

    result = await generate(
        payload,
        request.app.state.llm,
        policy=settings.retry_policy(),
        strict_links=settings.strict_dialogue_links,
    )
    return result.to_wire()
