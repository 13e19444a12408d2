"""Export formats for generated results.

EXPORT_FORMATS maps a format key to an ExportFormat:

    json      — the wire JSON, pretty-printed
    unity     — C# script with [Serializable] classes and a factory method
    unreal    — DataTable-style JSON array, one row per node / objective
    markdown  — human-readable document for design docs
"""

from __future__ import annotations

import json
import re
from collections.abc import Callable
from dataclasses import dataclass

from .models import DialogueResult, QuestResult

Result = DialogueResult | QuestResult


@dataclass(frozen=True)
class ExportFormat:
    name: str
    extension: str
    mime_type: str
    render: Callable[[Result], str]


def export_slug(result: Result) -> str:
    """Filename stem for a result: npc name or quest title, kebab-cased."""
    title = result.npc_name if isinstance(result, DialogueResult) else result.title
    slug = re.sub(r"[^a-z0-9]+", "-", title.lower()).strip("-")
    return slug or result.type


def export_filename(result: Result, key: str) -> str:
    return f"{export_slug(result)}-{key}.{EXPORT_FORMATS[key].extension}"


# ── JSON ─────────────────────────────────────────────────


def to_json(result: Result) -> str:
    return json.dumps(result.to_wire(), indent=2, ensure_ascii=False)


# ── Unity (C#) ───────────────────────────────────────────


def _cs(text: str) -> str:
    """C# string literal."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _cs_identifier(text: str, fallback: str) -> str:
    words = re.findall(r"[A-Za-z0-9]+", text)
    name = "".join(w[:1].upper() + w[1:] for w in words)
    if not name or name[0].isdigit():
        name = fallback + name
    return name


def _unity_dialogue(result: DialogueResult) -> str:
    class_name = _cs_identifier(result.npc_name, "Npc") + "Dialogue"
    lines = [
        "using System;",
        "using System.Collections.Generic;",
        "",
        "[Serializable]",
        "public class DialogueOption",
        "{",
        "    public string id;",
        "    public string text;",
        "    public string nextId;",
        "    public string consequence;",
        "}",
        "",
        "[Serializable]",
        "public class DialogueNode",
        "{",
        "    public string id;",
        "    public string text;",
        "    public List<DialogueOption> options = new List<DialogueOption>();",
        "}",
        "",
        f"public static class {class_name}",
        "{",
        f"    public const string NpcName = {_cs(result.npc_name)};",
        f"    public const string Personality = {_cs(result.metadata.personality)};",
        f"    public const string Mood = {_cs(result.metadata.mood)};",
        f"    public const string Difficulty = {_cs(result.metadata.difficulty)};",
        "",
        "    public static List<DialogueNode> Build()",
        "    {",
        "        var nodes = new List<DialogueNode>();",
    ]
    for i, node in enumerate(result.nodes):
        var = f"node{i}"
        lines.append(
            f"        var {var} = new DialogueNode {{ id = {_cs(node.id)}, text = {_cs(node.text)} }};"
        )
        for opt in node.options:
            next_id = _cs(opt.next_id) if opt.next_id is not None else "null"
            consequence = _cs(opt.consequence) if opt.consequence is not None else "null"
            lines.append(
                f"        {var}.options.Add(new DialogueOption {{ id = {_cs(opt.id)}, "
                f"text = {_cs(opt.text)}, nextId = {next_id}, consequence = {consequence} }});"
            )
        lines.append(f"        nodes.Add({var});")
    lines += [
        "        return nodes;",
        "    }",
        "}",
        "",
    ]
    return "\n".join(lines)


def _unity_quest(result: QuestResult) -> str:
    class_name = _cs_identifier(result.title, "Quest") + "Quest"
    lines = [
        "using System;",
        "using System.Collections.Generic;",
        "",
        "[Serializable]",
        "public class QuestObjective",
        "{",
        "    public string id;",
        "    public string description;",
        "    public bool optional;",
        "    public string reward;",
        "}",
        "",
        f"public static class {class_name}",
        "{",
        f"    public const string Title = {_cs(result.title)};",
        f"    public const string Description = {_cs(result.description)};",
        f"    public const string EstimatedDuration = {_cs(result.estimated_duration)};",
        f"    public const string Difficulty = {_cs(result.difficulty)};",
        f"    public const int Experience = {result.rewards.experience};",
        f"    public const int Gold = {result.rewards.gold};",
        "    public static readonly string[] Items = { "
        + ", ".join(_cs(i) for i in result.rewards.items or [])
        + " };",
        "",
        "    public static List<QuestObjective> Build()",
        "    {",
        "        return new List<QuestObjective>",
        "        {",
    ]
    for obj in result.objectives:
        reward = _cs(obj.reward) if obj.reward is not None else "null"
        optional = "true" if obj.kind == "optional" else "false"
        lines.append(
            f"            new QuestObjective {{ id = {_cs(obj.id)}, description = {_cs(obj.description)}, "
            f"optional = {optional}, reward = {reward} }},"
        )
    lines += [
        "        };",
        "    }",
        "}",
        "",
    ]
    return "\n".join(lines)


def to_unity(result: Result) -> str:
    if isinstance(result, DialogueResult):
        return _unity_dialogue(result)
    return _unity_quest(result)


# ── Unreal (DataTable JSON) ──────────────────────────────


def to_unreal(result: Result) -> str:
    if isinstance(result, DialogueResult):
        rows = [
            {
                "Name": node.id,
                "Speaker": result.npc_name,
                "Text": node.text,
                "Mood": result.metadata.mood,
                "Options": [
                    {
                        "OptionId": opt.id,
                        "Text": opt.text,
                        "NextNode": opt.next_id or "",
                        "Consequence": opt.consequence or "",
                    }
                    for opt in node.options
                ],
            }
            for node in result.nodes
        ]
    else:
        rows = [
            {
                "Name": obj.id,
                "QuestTitle": result.title,
                "Description": obj.description,
                "bOptional": obj.kind == "optional",
                "Reward": obj.reward or "",
                "Difficulty": result.difficulty,
                "Experience": result.rewards.experience,
                "Gold": result.rewards.gold,
            }
            for obj in result.objectives
        ]
    return json.dumps(rows, indent=2, ensure_ascii=False)


# ── Markdown ─────────────────────────────────────────────


def _markdown_dialogue(result: DialogueResult) -> str:
    meta = result.metadata
    lines = [
        f"# {result.npc_name}",
        "",
        f"- **Personality:** {meta.personality}",
        f"- **Mood:** {meta.mood}",
        f"- **Difficulty:** {meta.difficulty}",
        "",
        "## Dialogue",
    ]
    for node in result.nodes:
        lines += ["", f"### {node.id}", "", f"> {node.text}", ""]
        for opt in node.options:
            line = f"- {opt.text}"
            if opt.next_id:
                line += f" → `{opt.next_id}`"
            if opt.consequence:
                line += f" _({opt.consequence})_"
            lines.append(line)
    return "\n".join(lines) + "\n"


def _markdown_quest(result: QuestResult) -> str:
    rewards = result.rewards
    lines = [
        f"# {result.title}",
        "",
        result.description,
        "",
        f"- **Difficulty:** {result.difficulty}",
        f"- **Estimated duration:** {result.estimated_duration}",
        "",
        "## Objectives",
        "",
    ]
    for obj in result.objectives:
        tag = " (optional)" if obj.kind == "optional" else ""
        line = f"- [ ] {obj.description}{tag}"
        if obj.reward:
            line += f" — reward: {obj.reward}"
        lines.append(line)
    lines += [
        "",
        "## Rewards",
        "",
        f"- Experience: {rewards.experience}",
        f"- Gold: {rewards.gold}",
    ]
    for item in rewards.items or []:
        lines.append(f"- {item}")
    return "\n".join(lines) + "\n"


def to_markdown(result: Result) -> str:
    if isinstance(result, DialogueResult):
        return _markdown_dialogue(result)
    return _markdown_quest(result)


EXPORT_FORMATS: dict[str, ExportFormat] = {
    "json": ExportFormat("JSON", "json", "application/json", to_json),
    "unity": ExportFormat("Unity C#", "cs", "text/x-csharp", to_unity),
    "unreal": ExportFormat("Unreal Engine", "json", "application/json", to_unreal),
    "markdown": ExportFormat("Markdown", "md", "text/markdown", to_markdown),
}
