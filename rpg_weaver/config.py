"""Process configuration read from the environment (and .env via python-dotenv)."""

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from .llm import GEMINI_BASE_URL, ProviderFormat, RetryPolicy

ROOT = Path(__file__).parent.parent

_DEFAULTS: dict[str, str] = {
    "LLM_PROVIDER_URL": GEMINI_BASE_URL,
    "LLM_PROVIDER_FORMAT": "gemini",
    "LLM_MODEL": "gemini-1.5-flash-latest",
    "LLM_TIMEOUT": "60",
    "LLM_MAX_ATTEMPTS": "3",
    "LLM_RETRY_BASE_DELAY": "1.0",
    "LLM_DEADLINE": "",
    "RATE_LIMIT": "30",
    "RATE_LIMIT_WINDOW_MS": "60000",
    "STRICT_DIALOGUE_LINKS": "false",
}


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: str = ""
    provider_url: str = GEMINI_BASE_URL
    provider_format: ProviderFormat = "gemini"
    model: str = "gemini-1.5-flash-latest"
    timeout: float = 60.0  # per attempt
    max_attempts: int = 3
    retry_base_delay: float = 1.0
    deadline: float | None = None  # all attempts together; None derives it
    rate_limit: int = 30
    rate_limit_window_ms: int = 60_000
    strict_dialogue_links: bool = False

    def retry_policy(self) -> RetryPolicy:
        """Retry policy whose deadline leaves room for every attempt to time out.

        Without an explicit deadline it is max_attempts * timeout plus the
        backoff sleeps between attempts.
        """
        attempts = max(1, self.max_attempts)
        deadline = self.deadline
        if deadline is None:
            backoff = sum(self.retry_base_delay * 2 ** n for n in range(attempts - 1))
            deadline = attempts * self.timeout + backoff
        return RetryPolicy(
            max_attempts=attempts,
            base_delay=self.retry_base_delay,
            deadline=deadline,
        )


def _env(name: str) -> str:
    return os.getenv(name, _DEFAULTS.get(name, ""))


def load_settings(env_file: Path | None = ROOT / ".env") -> Settings:
    """Build Settings from environment variables, loading env_file first if present.

    Values already set in the environment win over the file.
    """
    if env_file is not None:
        load_dotenv(env_file)
    return Settings(
        api_key=os.getenv("GEMINI_API_KEY", ""),
        provider_url=_env("LLM_PROVIDER_URL"),
        provider_format=_env("LLM_PROVIDER_FORMAT"),
        model=_env("LLM_MODEL"),
        timeout=_env("LLM_TIMEOUT"),
        max_attempts=_env("LLM_MAX_ATTEMPTS"),
        retry_base_delay=_env("LLM_RETRY_BASE_DELAY"),
        deadline=_env("LLM_DEADLINE") or None,
        rate_limit=_env("RATE_LIMIT"),
        rate_limit_window_ms=_env("RATE_LIMIT_WINDOW_MS"),
        strict_dialogue_links=_env("STRICT_DIALOGUE_LINKS"),
    )
