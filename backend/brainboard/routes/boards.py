"""
Brainboard Backend: Board Routes
================================

What:  Board collection, board detail, thumbnail and image upload endpoints.

Three routers, registered at different points of the routing table
(see routes/__init__.py):

    collection_router    GET|POST|PUT|DELETE /boards
    subresource_router   POST|DELETE /boards/{id}/thumbnail, POST /boards/{id}/images
    detail_router        GET|PUT|DELETE /boards/{id}

PUT and DELETE exist in two forms: with the id in the path, and on the
collection with the id in the JSON body. Both run the same owner check.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.database import get_db_session
from brainboard.dependencies import ServiceContainer, authorize, get_current_user, get_services
from brainboard.schemas.board import (
    BoardCreate,
    BoardDetail,
    BoardListItem,
    BoardRef,
    BoardRename,
    BoardResponse,
    ThumbnailResponse,
)
from brainboard.schemas.common import ErrorResponse, StatusResponse, UrlResponse
from brainboard.services.permissions import Permission, UserPrincipal

logger = logging.getLogger(__name__)

FORBIDDEN = {403: {"description": "Insufficient permission", "model": ErrorResponse}}

collection_router = APIRouter(tags=["Boards"])
subresource_router = APIRouter(tags=["Boards"])
detail_router = APIRouter(tags=["Boards"])


# ── Collection ────────────────────────────────────────────────────────────

@collection_router.get(
    "/boards",
    response_model=List[BoardListItem],
    summary="Boards owned by or shared with the caller, newest first",
)
async def list_boards(
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> List[BoardListItem]:
    return await services.boards.list_for_user(db, principal.user_id)


@collection_router.post("/boards", response_model=BoardResponse, summary="Create a board")
async def create_board(
    body: BoardCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> BoardResponse:
    board = await services.boards.create(db, principal.user_id, body.title)
    return BoardResponse.model_validate(board)


@collection_router.put(
    "/boards",
    response_model=StatusResponse,
    responses=FORBIDDEN,
    summary="Rename a board (id in body)",
)
async def rename_board_by_body(
    body: BoardRename,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, body.id, Permission.OWNER)
    await services.boards.rename(db, body.id, body.title)
    return StatusResponse(status="updated")


@collection_router.delete(
    "/boards",
    response_model=StatusResponse,
    responses=FORBIDDEN,
    summary="Delete a board (id in body)",
)
async def delete_board_by_body(
    body: BoardRef,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, body.id, Permission.OWNER)
    await services.boards.delete(db, body.id)
    return StatusResponse(status="deleted")


# ── Thumbnail and images ──────────────────────────────────────────────────

@subresource_router.post(
    "/boards/{board_id}/thumbnail",
    response_model=ThumbnailResponse,
    responses=FORBIDDEN,
    summary="Set the board thumbnail (owner only)",
)
async def set_thumbnail(
    board_id: int,
    file: UploadFile = File(..., description="PNG, JPG, GIF or WEBP image"),
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> ThumbnailResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    try:
        content = await file.read()
        url = await services.boards.set_thumbnail(
            db, board_id, file.filename, content, file.content_type
        )
    finally:
        await file.close()
    return ThumbnailResponse(thumbnail_url=url)


@subresource_router.delete(
    "/boards/{board_id}/thumbnail",
    response_model=StatusResponse,
    responses=FORBIDDEN,
    summary="Remove the board thumbnail (owner only)",
)
async def clear_thumbnail(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.boards.clear_thumbnail(db, board_id)
    return StatusResponse(status="deleted")


@subresource_router.post(
    "/boards/{board_id}/images",
    response_model=UrlResponse,
    responses=FORBIDDEN,
    summary="Upload an image for an image card; returns its URL only",
)
async def upload_image(
    board_id: int,
    file: UploadFile = File(..., description="PNG, JPG, GIF or WEBP image"),
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> UrlResponse:
    await authorize(db, services, principal, board_id, Permission.EDIT)
    try:
        content = await file.read()
        url = await services.uploads.upload_image(
            board_id, file.filename, content, file.content_type
        )
    finally:
        await file.close()
    return UrlResponse(url=url)


# ── Detail ────────────────────────────────────────────────────────────────

@detail_router.get(
    "/boards/{board_id}",
    response_model=BoardDetail,
    responses=FORBIDDEN,
    summary="Board metadata with all cards",
)
async def get_board(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> BoardDetail:
    permission = await authorize(db, services, principal, board_id, Permission.READ)
    return await services.boards.detail(db, board_id, permission)


@detail_router.put(
    "/boards/{board_id}",
    response_model=StatusResponse,
    responses=FORBIDDEN,
    summary="Rename a board (owner only)",
)
async def rename_board(
    board_id: int,
    body: BoardCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.boards.rename(db, board_id, body.title)
    return StatusResponse(status="updated")


@detail_router.delete(
    "/boards/{board_id}",
    response_model=StatusResponse,
    responses=FORBIDDEN,
    summary="Delete a board and everything on it (owner only)",
)
async def delete_board(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.boards.delete(db, board_id)
    return StatusResponse(status="deleted")
