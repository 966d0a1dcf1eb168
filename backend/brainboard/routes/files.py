"""Serves objects written by LocalObjectStorage at GET /files/{key}."""

import mimetypes

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from brainboard.dependencies import ServiceContainer, get_services
from brainboard.exceptions import NotFoundError
from brainboard.services.object_storage import LocalObjectStorage

router = APIRouter(tags=["Files"])


@router.get("/files/{key:path}", summary="Download a locally stored image")
async def get_file(key: str, services: ServiceContainer = Depends(get_services)) -> Response:
    storage = services.storage
    if not isinstance(storage, LocalObjectStorage):
        # S3 URLs point straight at the bucket
        raise NotFoundError(resource="file", message="File not found")

    content = await storage.read(key)
    media_type = mimetypes.guess_type(key)[0] or "application/octet-stream"
    return Response(content=content, media_type=media_type)
