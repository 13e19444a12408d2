"""FastAPI API endpoints under /api.

Endpoint groups: generate (rate-limited content generation), templates
(built-in demo requests), export (render a result in a download format),
and settings (health check and public configuration).
"""

from fastapi import APIRouter

from .export import router as export_router
from .generate import router as generate_router
from .settings import router as settings_router
from .templates import router as templates_router

router = APIRouter()
router.include_router(settings_router)
router.include_router(templates_router)
router.include_router(generate_router)
router.include_router(export_router)
