"""Tests for rpg_weaver.sanitize."""

import pytest

from rpg_weaver.sanitize import is_non_empty_string, sanitize


# ── sanitize ─────────────────────────────────────────────────


def test_strips_surrounding_whitespace():
    assert sanitize("   The Ember Core   ") == "The Ember Core"


def test_removes_control_characters():
    assert sanitize("Mira\x00 Stone\x1bveil\x7f") == "Mira Stoneveil"


def test_removes_newlines_and_tabs():
    assert sanitize("line one\nline two\ttab") == "line oneline twotab"


def test_keeps_non_ascii_text():
    assert sanitize("Zara l'Éclat — ☾") == "Zara l'Éclat — ☾"


def test_empty_and_whitespace_only():
    assert sanitize("") == ""
    assert sanitize(" \n\t ") == ""


@pytest.mark.parametrize("text", [
    "plain",
    "  padded  ",
    "\x00\x01 mixed \x1f controls \x7f",
    "\n\n  \x05nested\t whitespace \x06 \n",
    " non-breaking ",
    "",
])
def test_idempotent(text):
    once = sanitize(text)
    assert sanitize(once) == once


# ── is_non_empty_string ──────────────────────────────────────


def test_non_empty_string_checks():
    assert is_non_empty_string("a")
    assert not is_non_empty_string("   ")
    assert not is_non_empty_string(None)
    assert not is_non_empty_string(42)


def test_non_empty_string_min_length_uses_trimmed_length():
    assert is_non_empty_string("0123456789", 10)
    assert not is_non_empty_string("   12345   ", 10)
