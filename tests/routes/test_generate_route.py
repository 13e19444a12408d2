"""Tests for POST /api/generate — status mapping, rate limiting, error bodies."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from backend.app import create_app
from rpg_weaver.config import Settings
from rpg_weaver.llm import HttpLLM, LLMError
from rpg_weaver.ratelimit import RateLimiter

LORE = "A city built on ancient tunnels and guild rivalries."

SETTINGS = Settings(api_key="test-key", retry_base_delay=0, rate_limit=30)


@pytest.fixture
def make_client(stub_llm, fake_clock):
    """make_client(responses, settings=...) → (client, llm)."""

    def _make(responses=(), settings: Settings = SETTINGS):
        llm = stub_llm(list(responses))
        app = create_app(settings=settings, llm=llm, limiter=RateLimiter(clock=fake_clock))
        return TestClient(app), llm

    return _make


# ── Success ──────────────────────────────────────────────────


def test_dialogue_success(make_client):
    client, llm = make_client(['{"type":"dialogue","dialogue":[]}'])
    resp = client.post("/api/generate", json={
        "type": "dialogue", "gameLore": LORE, "npcPersonality": "Serious",
    })
    assert resp.status_code == 200
    assert resp.json() == {
        "type": "dialogue",
        "npcName": "Unknown",
        "dialogue": [],
        "metadata": {"personality": "Unknown", "mood": "Neutral", "difficulty": "Medium"},
    }
    assert "Serious" in llm.calls[0][1]


def test_quest_success(make_client):
    output = json.dumps({"type": "quest", "title": "Ash", "rewards": {"experience": "abc"}})
    client, _ = make_client([output])
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 200
    body = resp.json()
    assert body["title"] == "Ash"
    assert body["rewards"] == {"experience": 100, "gold": 25}


# ── Input errors ─────────────────────────────────────────────


def test_invalid_json_body(make_client):
    client, llm = make_client()
    resp = client.post(
        "/api/generate", content=b"{not json", headers={"content-type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid JSON body"
    assert llm.calls == []


def test_unknown_type_is_400(make_client):
    client, llm = make_client()
    resp = client.post("/api/generate", json={
        "type": "epic", "gameLore": LORE, "npcPersonality": "Serious",
    })
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"].startswith("Invalid payload")
    assert "type" in body["details"]["reason"]
    assert llm.calls == []


def test_short_lore_is_400(make_client):
    client, llm = make_client()
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": "short"})
    assert resp.status_code == 400
    assert llm.calls == []


def test_missing_api_key_is_500(make_client):
    client, llm = make_client(settings=Settings(api_key=""))
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 500
    assert "GEMINI_API_KEY" in resp.json()["error"]
    assert llm.calls == []


# ── Generation errors ────────────────────────────────────────


def test_unparsable_output_is_502(make_client):
    client, _ = make_client(["Sorry, I can't help with that."])
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 502
    assert resp.json()["error"] == "AI returned unstructured output"


def test_schema_mismatch_is_502(make_client):
    client, _ = make_client(['{"type": "dialogue"}'])
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 502
    assert resp.json()["error"] == "AI output did not match expected schema"


def test_upstream_status_passed_through(make_client):
    client, llm = make_client([LLMError("quota exceeded: secret detail", 429)] * 3)
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 429
    body = resp.json()
    assert body["error"] == "Failed to generate content"
    assert body["details"]["retryAfter"] == 60
    assert "secret detail" not in resp.text
    assert len(llm.calls) == 3


def test_upstream_auth_failure_not_retried(make_client):
    client, llm = make_client([LLMError("forbidden", 403)])
    resp = client.post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 403
    assert len(llm.calls) == 1


# ── Rate limiting ────────────────────────────────────────────


def test_rate_limited_after_limit(make_client, fake_clock):
    client, _ = make_client(
        ['{"type": "quest"}'] * 2, settings=Settings(api_key="k", rate_limit=2),
    )
    body = {"type": "quest", "gameLore": LORE}
    headers = {"x-forwarded-for": "203.0.113.7"}
    assert client.post("/api/generate", json=body, headers=headers).status_code == 200
    assert client.post("/api/generate", json=body, headers=headers).status_code == 200

    resp = client.post("/api/generate", json=body, headers=headers)
    assert resp.status_code == 429
    details = resp.json()["details"]
    assert details["remaining"] == 0
    assert details["resetAt"] == fake_clock.now + 60_000
    assert resp.headers["retry-after"] == "60"


def test_rate_limit_counts_rejected_requests(make_client):
    """The limiter runs before validation, so bad requests use up the window too."""
    client, _ = make_client(settings=Settings(api_key="k", rate_limit=1))
    assert client.post("/api/generate", json={"type": "epic"}).status_code == 400
    assert client.post("/api/generate", json={"type": "epic"}).status_code == 429


def test_rate_limit_is_per_client(make_client):
    client, _ = make_client(['{"type": "quest"}'], settings=Settings(api_key="k", rate_limit=1))
    body = {"type": "quest", "gameLore": LORE}
    assert client.post("/api/generate", json=body, headers={"x-forwarded-for": "a"}).status_code == 200
    assert client.post("/api/generate", json=body, headers={"x-forwarded-for": "a"}).status_code == 429
    assert client.post("/api/generate", json={"type": "epic"}, headers={"x-forwarded-for": "b"}).status_code == 400


def test_non_object_upstream_body_is_opaque_500():
    llm = HttpLLM(api_key="test-key")
    resp_mock = MagicMock()
    resp_mock.json.return_value = ["oops"]
    resp_mock.raise_for_status = MagicMock()
    app = create_app(settings=SETTINGS, llm=llm, limiter=RateLimiter())
    with patch("httpx.AsyncClient.post", AsyncMock(return_value=resp_mock)) as mock_post:
        resp = TestClient(app).post("/api/generate", json={"type": "quest", "gameLore": LORE})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to generate content"
    assert "oops" not in resp.text
    assert mock_post.await_count == SETTINGS.max_attempts
