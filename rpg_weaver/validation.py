"""Inbound generation request validation.

validate_request() checks the raw JSON body rule by rule and stops at the
first failure:

  1. body is an object
  2. "type" is "dialogue" or "quest"
  3. "gameLore" is a string with at least MIN_LORE_LENGTH chars after sanitising
  4. dialogue only: "npcPersonality", when supplied, is one of PERSONALITIES
  5. every optional free-text field, when supplied, is a string

A miss is returned as an Invalid value rather than raised; the route turns it
into a 400. Optional fields that are null or empty after sanitising stay
absent so prompt defaults apply later.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models import PERSONALITIES, DialogueRequest, QuestRequest
from .sanitize import sanitize

MIN_LORE_LENGTH = 10

_TEXT_FIELDS = ("npcName", "situation", "location", "primaryObjective")


@dataclass(frozen=True)
class Invalid:
    reason: str

    def __bool__(self) -> bool:
        return False


def _optional_text(body: dict[str, Any], field: str) -> str | None:
    value = body.get(field)
    if value is None:
        return None
    cleaned = sanitize(value)
    return cleaned or None


def validate_request(body: Any) -> DialogueRequest | QuestRequest | Invalid:
    if not isinstance(body, dict):
        return Invalid("Request body must be a JSON object")

    kind = body.get("type")
    if kind not in ("dialogue", "quest"):
        return Invalid('type must be "dialogue" or "quest"')

    lore = body.get("gameLore")
    if not isinstance(lore, str) or len(sanitize(lore)) < MIN_LORE_LENGTH:
        return Invalid(f"gameLore must be a string of at least {MIN_LORE_LENGTH} characters")

    personality = body.get("npcPersonality")
    if kind == "dialogue" and personality not in (None, ""):
        if personality not in PERSONALITIES:
            return Invalid(f"npcPersonality must be one of: {', '.join(PERSONALITIES)}")

    for field in _TEXT_FIELDS:
        value = body.get(field)
        if value is not None and not isinstance(value, str):
            return Invalid(f"{field} must be a string")

    if kind == "dialogue":
        return DialogueRequest(
            lore=sanitize(lore),
            npc_name=_optional_text(body, "npcName"),
            personality=personality or None,
            situation=_optional_text(body, "situation"),
        )
    return QuestRequest(
        lore=sanitize(lore),
        location=_optional_text(body, "location"),
        primary_objective=_optional_text(body, "primaryObjective"),
    )
