"""Core domain models.

Requests and results are request-scoped value objects: built once per call,
frozen, and discarded after the response is sent. Attributes are snake_case;
the wire format is camelCase via the alias generator, so dump with
``by_alias=True, exclude_none=True``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, NonNegativeInt
from pydantic.alias_generators import to_camel

GenerationKind = Literal["dialogue", "quest"]
Personality = Literal["Goofy", "Serious", "Mysterious", "Aggressive"]
Difficulty = Literal["Easy", "Medium", "Hard"]
ObjectiveKind = Literal["main", "optional"]

PERSONALITIES: tuple[str, ...] = ("Goofy", "Serious", "Mysterious", "Aggressive")
DIFFICULTIES: tuple[str, ...] = ("Easy", "Medium", "Hard")


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class DialogueRequest(_WireModel):
    kind: Literal["dialogue"] = Field("dialogue", alias="type")
    lore: str = Field(alias="gameLore")
    npc_name: str | None = None
    personality: Personality | None = Field(None, alias="npcPersonality")
    situation: str | None = None


class QuestRequest(_WireModel):
    kind: Literal["quest"] = Field("quest", alias="type")
    lore: str = Field(alias="gameLore")
    location: str | None = None
    primary_objective: str | None = None


GenerationRequest = Annotated[
    Union[DialogueRequest, QuestRequest], Field(discriminator="kind")
]


# ---------------------------------------------------------------------------
# Dialogue results
# ---------------------------------------------------------------------------

class DialogueOption(_WireModel):
    id: str
    text: str
    next_id: str | None = None
    consequence: str | None = None


class DialogueNode(_WireModel):
    id: str
    text: str
    options: list[DialogueOption] = Field(default_factory=list)


class DialogueMetadata(_WireModel):
    personality: str = "Unknown"
    mood: str = "Neutral"
    difficulty: Difficulty = "Medium"


class DialogueResult(_WireModel):
    type: Literal["dialogue"] = "dialogue"
    npc_name: str = "Unknown"
    nodes: list[DialogueNode] = Field(default_factory=list, alias="dialogue")
    metadata: DialogueMetadata = Field(default_factory=DialogueMetadata)


# ---------------------------------------------------------------------------
# Quest results
# ---------------------------------------------------------------------------

class QuestObjective(_WireModel):
    id: str
    description: str
    kind: ObjectiveKind = Field("main", alias="type")
    reward: str | None = None


class QuestRewards(_WireModel):
    experience: NonNegativeInt = 100
    gold: NonNegativeInt = 25
    items: list[str] | None = None


class QuestResult(_WireModel):
    type: Literal["quest"] = "quest"
    title: str = "Untitled Quest"
    description: str = ""
    objectives: list[QuestObjective] = Field(default_factory=list)
    estimated_duration: str = "30-60 minutes"
    difficulty: Difficulty = "Medium"
    rewards: QuestRewards = Field(default_factory=QuestRewards)


GenerationResult = Annotated[
    Union[DialogueResult, QuestResult], Field(discriminator="type")
]
