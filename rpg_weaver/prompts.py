"""Handlebars prompt rendering for generation requests.

build_prompt() is pure and deterministic: the same request always renders the
same text. Every prompt is the shared preamble, a task section filled from the
request (with defaults for missing fields), and a literal description of the
JSON shape the model must return.

Values are substituted with triple-stash ({{{...}}}) so lore containing
quotes or ampersands reaches the model unescaped.
"""

from collections.abc import Callable
from typing import Any

import pybars

from .models import DialogueRequest, QuestRequest

_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Defaults and style directives ────────────────────────

DEFAULT_NPC_NAME = "Unknown"
DEFAULT_PERSONALITY = "Mysterious"
DEFAULT_SITUATION = "General conversation"
DEFAULT_LOCATION = "Various"
DEFAULT_OBJECTIVE = "Assist locals"

PERSONALITY_GUIDES: dict[str, str] = {
    "Goofy": "Use humor, puns, and lighthearted language. Include jokes and playful responses.",
    "Serious": "Use formal, grave language. Focus on important matters and urgent concerns.",
    "Mysterious": "Use cryptic language, hints, and secrets. Be vague but intriguing.",
    "Aggressive": "Use confrontational language, threats, and hostile responses.",
}


# ── Templates ────────────────────────────────────────────

PREAMBLE = """You are RPGWeaver, an expert AI assistant that generates structured RPG content.
- Always return STRICT JSON matching the requested schema exactly.
- Do not include markdown, code fences, or explanatory text.
- Keep output consistent with the game's lore and world-building.
- Create engaging, branching content that feels natural and immersive.
- Ensure dialogue flows naturally and quests have clear objectives.
"""

DIALOGUE_SCHEMA = """{
  "type": "dialogue",
  "npcName": string,
  "dialogue": Array<{"id": string, "text": string, "options": Array<{"id": string, "text": string, "nextId"?: string, "consequence"?: string}>}>,
  "metadata": {"personality": string, "mood": string, "difficulty": "Easy" | "Medium" | "Hard"}
}"""

QUEST_SCHEMA = """{
  "type": "quest",
  "title": string,
  "description": string,
  "objectives": Array<{"id": string, "description": string, "type": "main" | "optional", "reward"?: string}>,
  "estimatedDuration": string,
  "difficulty": "Easy" | "Medium" | "Hard",
  "rewards": {"experience": number, "gold": number, "items"?: string[]}
}"""

DIALOGUE_TEMPLATE = """{{{preamble}}}
Task: Generate an NPC dialogue tree with branching conversations.

NPC Name: {{{npc_name}}}
Personality: {{{personality}}} - {{{guide}}}
Situation: {{{situation}}}
Game Lore: {{{lore}}}

Requirements:
- Create 3-5 dialogue nodes with natural branching
- Each node should have 2-3 response options
- Use the NPC's personality consistently throughout
- Reference the game lore naturally in dialogue
- Include consequences for some choices
- Make dialogue feel authentic and engaging

Return JSON exactly matching this TypeScript type:
{{{schema}}}"""

QUEST_TEMPLATE = """{{{preamble}}}
Task: Generate a compelling side quest with clear objectives.

Location: {{{location}}}
Primary Objective: {{{primary_objective}}}
Game Lore: {{{lore}}}

Requirements:
- Create 2-4 main objectives and 1-2 optional objectives
- Include meaningful rewards (experience, gold, items)
- Reference the game lore and location naturally
- Make objectives feel connected and progressive
- Include estimated duration and difficulty
- Create engaging quest description

Return JSON exactly matching this TypeScript type:
{{{schema}}}"""


def personality_guide(personality: str | None) -> str:
    """Style directive for a personality; unknown values get the Mysterious one."""
    return PERSONALITY_GUIDES.get(personality or "", PERSONALITY_GUIDES[DEFAULT_PERSONALITY])


def build_context(request: DialogueRequest | QuestRequest) -> dict[str, str]:
    """Template variables for a request, with defaults filled in."""
    if isinstance(request, DialogueRequest):
        personality = request.personality or DEFAULT_PERSONALITY
        return {
            "preamble": PREAMBLE,
            "npc_name": request.npc_name or DEFAULT_NPC_NAME,
            "personality": personality,
            "guide": personality_guide(personality),
            "situation": request.situation or DEFAULT_SITUATION,
            "lore": request.lore,
            "schema": DIALOGUE_SCHEMA,
        }
    return {
        "preamble": PREAMBLE,
        "location": request.location or DEFAULT_LOCATION,
        "primary_objective": request.primary_objective or DEFAULT_OBJECTIVE,
        "lore": request.lore,
        "schema": QUEST_SCHEMA,
    }


def build_prompt(request: DialogueRequest | QuestRequest) -> str:
    template = DIALOGUE_TEMPLATE if isinstance(request, DialogueRequest) else QUEST_TEMPLATE
    return render_prompt(template, build_context(request))
