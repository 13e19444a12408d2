"""Generation pipeline — one validated request to one normalised result.

Flow:
  1. build_prompt()  — render the Handlebars prompt for the request kind.
  2. invoke()        — call the LLM with retry/backoff under a deadline.
  3. extract_json()  — recover a JSON value from the raw completion.
  4. coerce_*()      — normalise it into DialogueResult / QuestResult,
                       selected by the request's kind, never the model's.

Rate limiting and request validation happen before this, in the caller.
Failures raise GenerationError subclasses; nothing partial is returned.
"""

from __future__ import annotations

import logging

from .coerce import coerce_dialogue, coerce_quest
from .errors import SchemaMismatch, UnparsableOutput, UpstreamFailure
from .extract import extract_json
from .llm import LLM, LLMError, RetryPolicy, invoke
from .models import DialogueRequest, DialogueResult, QuestRequest, QuestResult
from .prompts import build_prompt

logger = logging.getLogger(__name__)


async def generate(
    request: DialogueRequest | QuestRequest,
    llm: LLM,
    policy: RetryPolicy = RetryPolicy(),
    strict_links: bool = False,
) -> DialogueResult | QuestResult:
    """Run prompt → completion → extraction → coercion for one request."""
    prompt = build_prompt(request)

    try:
        text = await invoke(llm, request.kind, prompt, policy)
    except LLMError as e:
        logger.warning("Completion failed kind=%s status=%s: %s", request.kind, e.status_code, e)
        raise UpstreamFailure.from_status(e.status_code) from e

    parsed = extract_json(text)
    if parsed is None:
        raise UnparsableOutput()

    if request.kind == "dialogue":
        result = coerce_dialogue(parsed, strict_links=strict_links)
    else:
        result = coerce_quest(parsed)
    if result is None:
        raise SchemaMismatch()

    logger.debug("Generated %s result", request.kind)
    return result
