"""FastAPI application factory. Serves the JSON API under /api only; no UI is bundled."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from backend.routes import router
from rpg_weaver.config import Settings, load_settings
from rpg_weaver.errors import GenerationError
from rpg_weaver.llm import LLM, HttpLLM
from rpg_weaver.ratelimit import RateLimiter

logger = logging.getLogger(__name__)


def build_llm(settings: Settings) -> HttpLLM:
    return HttpLLM(
        provider_url=settings.provider_url,
        api_key=settings.api_key,
        provider_format=settings.provider_format,
        model=settings.model,
        timeout=settings.timeout,
    )


async def _generation_error_handler(request: Request, exc: GenerationError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s → %d %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(exc.to_body(), status_code=exc.status_code, headers=exc.headers)


def create_app(
    settings: Settings | None = None,
    llm: LLM | None = None,
    limiter: RateLimiter | None = None,
) -> FastAPI:
    """Build the app. The limiter and LLM live on app.state for the process lifetime."""
    resolved = settings or load_settings()

    app = FastAPI(title="RPG Weaver")
    app.state.settings = resolved
    app.state.llm = llm or build_llm(resolved)
    app.state.limiter = limiter or RateLimiter()
    app.add_exception_handler(GenerationError, _generation_error_handler)
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (reads settings from env / .env)
app = create_app()
