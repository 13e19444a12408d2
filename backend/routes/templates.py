"""Demo template listing endpoint."""

from fastapi import APIRouter

from rpg_weaver.templates import list_templates as _list_templates

router = APIRouter()


@router.get("/templates")
async def list_templates(type: str | None = None):
    """List demo requests, optionally filtered by type (dialogue/quest)."""
    return _list_templates(type)
