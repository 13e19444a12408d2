"""FastMCP server exposing content generation as MCP tools.

Tools:
  - generate_content(request)  — validate a request body and run the pipeline
  - list_templates(type)       — built-in demo requests, optionally filtered

The LLM is replaced via set_llm() for tests, or built from environment
settings when run as __main__. No rate limiting: the MCP transport is a
single local client.

Usage:
    uv run python -m backend.mcp_server
"""

from typing import Any

from mcp.server.fastmcp import FastMCP

from rpg_weaver.errors import GenerationError
from rpg_weaver.llm import LLM, EchoLLM, RetryPolicy
from rpg_weaver.pipeline import generate
from rpg_weaver.templates import list_templates as _list_templates
from rpg_weaver.validation import Invalid, validate_request

mcp = FastMCP("rpg-weaver")

_llm: LLM = EchoLLM()
_policy = RetryPolicy()


def set_llm(llm: LLM, policy: RetryPolicy | None = None) -> None:
    """Replace the active LLM (used in tests and at startup)."""
    global _llm, _policy
    _llm = llm
    if policy is not None:
        _policy = policy


@mcp.tool()
async def generate_content(request: dict[str, Any]) -> dict[str, Any]:
    """Generate a dialogue tree or quest.

    `request` has the same shape as the HTTP body: {"type": "dialogue"|"quest",
    "gameLore": ..., plus npcName/npcPersonality/situation or
    location/primaryObjective}.
    """
    payload = validate_request(request)
    if isinstance(payload, Invalid):
        raise ValueError(f"Invalid request: {payload.reason}")
    try:
        result = await generate(payload, _llm, policy=_policy)
    except GenerationError as e:
        raise RuntimeError(e.message) from e
    return result.to_wire()


@mcp.tool()
def list_templates(type: str | None = None) -> list[dict[str, Any]]:
    """List built-in demo requests, optionally only "dialogue" or "quest" ones."""
    return _list_templates(type)


if __name__ == "__main__":
    from backend.app import build_llm
    from rpg_weaver.config import load_settings

    settings = load_settings()
    set_llm(build_llm(settings), settings.retry_policy())
    mcp.run()
