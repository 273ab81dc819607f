"""
Cat API — Uploaded File Serving
=================================

What:  Serves stored cat photos and their thumbnails at /uploads/{filename}.
Who:   <img> tags in the frontend, built from a cat's `filename`.

Security:
    The requested path is resolved against STORAGE_ROOT and refused when it
    lands outside it (../ sequences, absolute paths).
"""

import logging
from pathlib import Path

from fastapi import APIRouter
from fastapi.responses import FileResponse

from catapi.config import settings
from catapi.exceptions import NotFoundError, ValidationError
from catapi.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])


@router.get(
    "/uploads/{file_path:path}",
    summary="Serve an uploaded cat photo",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid file path", "model": ErrorResponse},
        404: {"description": "File not found", "model": ErrorResponse},
    },
)
async def serve_file(file_path: str) -> FileResponse:
    storage_root = Path(settings.storage_root).resolve()
    full_path = (storage_root / file_path).resolve()

    if not full_path.is_relative_to(storage_root):
        logger.warning("Refused file path outside storage: %s", file_path)
        raise ValidationError(message="Invalid file path", field="file_path")

    if not full_path.is_file():
        raise NotFoundError("File not found", context={"file_path": file_path})

    # media type is guessed from the extension
    return FileResponse(
        path=str(full_path),
        headers={"Cache-Control": "public, max-age=86400"},
    )
