"""Shared test helpers: a scripted LLM and a controllable clock."""

import pytest

from rpg_weaver.llm import LLMError


class StubLLM:
    """Replays canned responses in order; an LLMError entry is raised instead."""

    def __init__(self, responses: list[str | LLMError]) -> None:
        self._responses = list(responses)
        self.calls: list[tuple[str, str]] = []

    async def __call__(self, stage: str, prompt: str) -> str:
        self.calls.append((stage, prompt))
        if not self._responses:
            raise AssertionError("StubLLM ran out of responses")
        response = self._responses.pop(0)
        if isinstance(response, LLMError):
            raise response
        return response


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, start: int = 1_760_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def stub_llm():
    """Factory: stub_llm(["...", LLMError(...)]) → StubLLM."""
    return StubLLM


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def no_sleep():
    """Async sleep replacement that records requested delays."""
    delays: list[float] = []

    async def _sleep(seconds: float) -> None:
        delays.append(seconds)

    _sleep.delays = delays
    return _sleep
