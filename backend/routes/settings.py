"""Health check and public settings endpoints."""

from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/settings")
async def get_settings(request: Request):
    """Non-secret view of the active configuration."""
    settings = request.app.state.settings
    return {
        "configured": bool(settings.api_key),
        "provider_format": settings.provider_format,
        "model": settings.model,
        "rate_limit": settings.rate_limit,
        "rate_limit_window_ms": settings.rate_limit_window_ms,
        "strict_dialogue_links": settings.strict_dialogue_links,
    }
