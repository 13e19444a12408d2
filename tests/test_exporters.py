"""Tests for rpg_weaver.exporters."""

import json

import pytest

from rpg_weaver.exporters import EXPORT_FORMATS, export_filename, export_slug
from rpg_weaver.models import (
    DialogueMetadata,
    DialogueNode,
    DialogueOption,
    DialogueResult,
    QuestObjective,
    QuestResult,
    QuestRewards,
)


@pytest.fixture
def dialogue() -> DialogueResult:
    return DialogueResult(
        npc_name="Mira Stoneveil",
        nodes=[
            DialogueNode(id="start", text='The forge "wakes".', options=[
                DialogueOption(id="a", text="Go on.", next_id="deep"),
                DialogueOption(id="b", text="Leave.", consequence="Mira is offended"),
            ]),
            DialogueNode(id="deep", text="Beneath us, it stirs."),
        ],
        metadata=DialogueMetadata(personality="Serious", mood="Grim", difficulty="Hard"),
    )


@pytest.fixture
def quest() -> QuestResult:
    return QuestResult(
        title="The Ember Core",
        description="Retrieve the core.",
        objectives=[
            QuestObjective(id="o1", description="Enter the tunnels"),
            QuestObjective(id="o2", description="Collect slag", kind="optional", reward="10 gold"),
        ],
        rewards=QuestRewards(experience=500, gold=80, items=["Core Fragment"]),
    )


# ── Naming ───────────────────────────────────────────────────


def test_slug_and_filename(dialogue, quest):
    assert export_slug(dialogue) == "mira-stoneveil"
    assert export_filename(quest, "unity") == "the-ember-core-unity.cs"
    assert export_filename(quest, "markdown") == "the-ember-core-markdown.md"


def test_slug_falls_back_to_type():
    assert export_slug(QuestResult(title="!!!")) == "quest"


# ── Formats ──────────────────────────────────────────────────


def test_registry_keys():
    assert set(EXPORT_FORMATS) == {"json", "unity", "unreal", "markdown"}


def test_json_is_wire_format(quest):
    data = json.loads(EXPORT_FORMATS["json"].render(quest))
    assert data == quest.to_wire()


def test_unity_dialogue(dialogue):
    script = EXPORT_FORMATS["unity"].render(dialogue)
    assert "public static class MiraStoneveilDialogue" in script
    assert 'text = "The forge \\"wakes\\"."' in script
    assert 'nextId = "deep"' in script
    assert "consequence = null" in script
    assert script.count("nodes.Add(") == 2


def test_unity_quest(quest):
    script = EXPORT_FORMATS["unity"].render(quest)
    assert "public static class TheEmberCoreQuest" in script
    assert "public const int Experience = 500;" in script
    assert 'Items = { "Core Fragment" };' in script
    assert "optional = true, reward = \"10 gold\"" in script


def test_unreal_dialogue_rows(dialogue):
    rows = json.loads(EXPORT_FORMATS["unreal"].render(dialogue))
    assert [r["Name"] for r in rows] == ["start", "deep"]
    assert rows[0]["Options"][0]["NextNode"] == "deep"
    assert rows[0]["Options"][1]["NextNode"] == ""


def test_unreal_quest_rows(quest):
    rows = json.loads(EXPORT_FORMATS["unreal"].render(quest))
    assert rows[1]["bOptional"] is True
    assert rows[0]["Gold"] == 80


def test_markdown_dialogue(dialogue):
    text = EXPORT_FORMATS["markdown"].render(dialogue)
    assert text.startswith("# Mira Stoneveil\n")
    assert "- Go on. → `deep`" in text
    assert "_(Mira is offended)_" in text


def test_markdown_quest(quest):
    text = EXPORT_FORMATS["markdown"].render(quest)
    assert "- [ ] Collect slag (optional) — reward: 10 gold" in text
    assert "- Experience: 500" in text
    assert "- Core Fragment" in text
