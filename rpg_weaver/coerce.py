"""Normalise untrusted model output into DialogueResult / QuestResult.

Each coercer takes the value returned by extract_json() and either builds a
complete result or returns None. Malformed fields are repaired one at a time
with defaults; only two things make the whole coercion fail:

  - the value is not a mapping, or its "type" tag is not the expected kind
  - an unexpected exception while building the result

Every text field is sanitised on the way out, the same as request fields on
the way in.
"""

from __future__ import annotations

import json
import logging
import math
import random
import string
import time
from typing import Any

from .models import (
    DIFFICULTIES,
    DialogueMetadata,
    DialogueNode,
    DialogueOption,
    DialogueResult,
    QuestObjective,
    QuestResult,
    QuestRewards,
)
from .sanitize import is_non_empty_string, sanitize

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_id(prefix: str = "id") -> str:
    """prefix_<base36 epoch ms>_<6 random base36 chars>. Not cryptographically unique."""
    timestamp = _base36(time.time_ns() // 1_000_000)
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"{prefix}_{timestamp}_{suffix}"


# ── Field helpers ────────────────────────────────────────


def _as_text(value: Any) -> str:
    """Render a JSON value as text the way a JS String() call would."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _text(value: Any, default: str) -> str:
    return sanitize(_as_text(default if value is None else value))


def _optional_text(value: Any) -> str | None:
    """Sanitised value if it is a non-empty string, else None."""
    if not is_non_empty_string(value):
        return None
    return sanitize(value) or None


def _mapping(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def _count(value: Any, default: int) -> int:
    """Coerce a reward amount to a non-negative int, falling back to default."""
    number: float | None = None
    if isinstance(value, bool):
        number = None
    elif isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            number = None
    if number is None or (isinstance(number, float) and not math.isfinite(number)):
        return default
    return max(0, int(number))


def _difficulty(value: Any) -> str:
    return value if value in DIFFICULTIES else "Medium"


class _IdAllocator:
    """Keeps ids unique within one scope, generating replacements as needed."""

    def __init__(self, prefix: str) -> None:
        self._prefix = prefix
        self._seen: set[str] = set()

    def take(self, value: Any) -> str:
        candidate = sanitize(value) if is_non_empty_string(value) else ""
        while not candidate or candidate in self._seen:
            candidate = generate_id(self._prefix)
        self._seen.add(candidate)
        return candidate


# ── Dialogue ─────────────────────────────────────────────


def _coerce_option(raw: Any, ids: _IdAllocator) -> DialogueOption:
    option = _mapping(raw)
    return DialogueOption(
        id=ids.take(option.get("id")),
        text=_text(option.get("text"), ""),
        next_id=_optional_text(option.get("nextId")),
        consequence=_optional_text(option.get("consequence")),
    )


def _coerce_node(raw: Any, node_ids: _IdAllocator) -> DialogueNode:
    node = _mapping(raw)
    option_ids = _IdAllocator("opt")
    return DialogueNode(
        id=node_ids.take(node.get("id")),
        text=_text(node.get("text"), ""),
        options=[_coerce_option(o, option_ids) for o in _list(node.get("options"))],
    )


def _drop_dangling_links(nodes: list[DialogueNode]) -> list[DialogueNode]:
    known = {node.id for node in nodes}
    return [
        node.model_copy(update={"options": [
            opt if opt.next_id is None or opt.next_id in known
            else opt.model_copy(update={"next_id": None})
            for opt in node.options
        ]})
        for node in nodes
    ]


def coerce_dialogue(value: Any, strict_links: bool = False) -> DialogueResult | None:
    """Build a DialogueResult from model output, or None on a type mismatch.

    With strict_links, option nextIds that match no node id are removed;
    by default they pass through for the renderer to deal with.
    """
    if not isinstance(value, dict) or value.get("type") != "dialogue":
        logger.warning("Dialogue output has wrong or missing type tag")
        return None
    try:
        node_ids = _IdAllocator("node")
        nodes = [_coerce_node(n, node_ids) for n in _list(value.get("dialogue"))]
        if strict_links:
            nodes = _drop_dangling_links(nodes)
        metadata = _mapping(value.get("metadata"))
        return DialogueResult(
            npc_name=_text(value.get("npcName"), "Unknown"),
            nodes=nodes,
            metadata=DialogueMetadata(
                personality=_text(metadata.get("personality"), "Unknown"),
                mood=_text(metadata.get("mood"), "Neutral"),
                difficulty=_difficulty(metadata.get("difficulty")),
            ),
        )
    except Exception:
        logger.exception("Dialogue coercion failed")
        return None


# ── Quest ────────────────────────────────────────────────


def _coerce_objective(raw: Any, ids: _IdAllocator) -> QuestObjective:
    objective = _mapping(raw)
    return QuestObjective(
        id=ids.take(objective.get("id")),
        description=_text(objective.get("description"), ""),
        kind="optional" if objective.get("type") == "optional" else "main",
        reward=_optional_text(objective.get("reward")),
    )


def _coerce_rewards(raw: Any) -> QuestRewards:
    rewards = _mapping(raw)
    items = rewards.get("items")
    return QuestRewards(
        experience=_count(rewards.get("experience"), 100),
        gold=_count(rewards.get("gold"), 25),
        items=[_text(i, "") for i in items] if isinstance(items, list) else None,
    )


def coerce_quest(value: Any) -> QuestResult | None:
    """Build a QuestResult from model output, or None on a type mismatch."""
    if not isinstance(value, dict) or value.get("type") != "quest":
        logger.warning("Quest output has wrong or missing type tag")
        return None
    try:
        objective_ids = _IdAllocator("obj")
        return QuestResult(
            title=_text(value.get("title"), "Untitled Quest"),
            description=_text(value.get("description"), ""),
            objectives=[
                _coerce_objective(o, objective_ids) for o in _list(value.get("objectives"))
            ],
            estimated_duration=_text(value.get("estimatedDuration"), "30-60 minutes"),
            difficulty=_difficulty(value.get("difficulty")),
            rewards=_coerce_rewards(value.get("rewards")),
        )
    except Exception:
        logger.exception("Quest coercion failed")
        return None
