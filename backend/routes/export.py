"""Export endpoint: render a generated result in one of the download formats."""

from fastapi import APIRouter, Request
from fastapi.responses import Response
from pydantic import TypeAdapter, ValidationError

from rpg_weaver.errors import GenerationError, InvalidInput
from rpg_weaver.exporters import EXPORT_FORMATS, export_filename
from rpg_weaver.models import GenerationResult

router = APIRouter()

_result_adapter = TypeAdapter(GenerationResult)


@router.get("/export")
async def list_formats():
    """List available export formats."""
    return [
        {"key": key, "name": fmt.name, "extension": fmt.extension}
        for key, fmt in EXPORT_FORMATS.items()
    ]


@router.post("/export/{format}")
async def export_result(format: str, request: Request):
    """Render a dialogue or quest result as a downloadable file."""
    fmt = EXPORT_FORMATS.get(format)
    if fmt is None:
        raise GenerationError("Unknown export format", details={"format": format}, status_code=404)
    try:
        result = _result_adapter.validate_json(await request.body())
    except ValidationError as e:
        raise InvalidInput("Invalid result body", details={"errors": e.error_count()})

    return Response(
        content=fmt.render(result),
        media_type=fmt.mime_type,
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(result, format)}"',
        },
    )
