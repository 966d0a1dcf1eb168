"""
Brainboard Backend: Share Link Routes
=====================================

What:  Owner-side management of share links and the anonymous routes that
       accept a share token in place of a session.

    manage_router (owner only)
        GET    /boards/{board_id}/share          → [share]
        POST   /boards/{board_id}/share          {permission} → share
        DELETE /boards/{board_id}/share          {share_id}   → {status: "deleted"}

    public_router (token in the path, no session)
        PUT|DELETE /share/{token}/cards/{card_id}   edit
        GET        /share/{token}/cards             read
        POST       /share/{token}/cards             edit
        POST       /share/{token}/images            edit
        GET        /share/{token}                   read (board detail)

    permission_router
        GET /permission/{token} → {permission}; "none" for unknown tokens

Unknown or revoked tokens are rejected with 403 by get_share_access. Cards
addressed through a token must belong to the token's board; anything else
is 404.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.database import get_db_session
from brainboard.dependencies import (
    ServiceContainer,
    authorize,
    authorize_share,
    get_current_user,
    get_services,
    get_share_access,
)
from brainboard.schemas.access import PermissionResponse, ShareCreate, ShareResponse, ShareRevoke
from brainboard.schemas.board import BoardDetail
from brainboard.schemas.card import CardCreate, CardResponse, CardUpdate
from brainboard.schemas.common import ErrorResponse, StatusResponse, UrlResponse
from brainboard.services.permissions import Permission, ShareAccess, UserPrincipal

logger = logging.getLogger(__name__)

RESPONSES = {403: {"description": "Invalid share link or insufficient permission", "model": ErrorResponse}}

manage_router = APIRouter(tags=["Share"])
public_router = APIRouter(tags=["Share"])
permission_router = APIRouter(tags=["Share"])


# ── Owner management ──────────────────────────────────────────────────────

@manage_router.get("/boards/{board_id}/share", response_model=List[ShareResponse], responses=RESPONSES)
async def list_shares(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> List[ShareResponse]:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    return [ShareResponse.model_validate(share) for share in await services.shares.list(db, board_id)]


@manage_router.post("/boards/{board_id}/share", response_model=ShareResponse, responses=RESPONSES)
async def create_share(
    board_id: int,
    body: ShareCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> ShareResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    share = await services.shares.create(db, board_id, body.permission)
    return ShareResponse.model_validate(share)


@manage_router.delete("/boards/{board_id}/share", response_model=StatusResponse, responses=RESPONSES)
async def revoke_share(
    board_id: int,
    body: ShareRevoke,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.shares.revoke(db, board_id, body.share_id)
    return StatusResponse(status="deleted")


# ── Anonymous access ──────────────────────────────────────────────────────

@public_router.put("/share/{token}/cards/{card_id}", response_model=StatusResponse, responses=RESPONSES)
async def update_shared_card(
    card_id: int,
    body: CardUpdate,
    access: ShareAccess = Depends(get_share_access),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    authorize_share(services, access, Permission.EDIT)
    card = await services.cards.get(db, card_id, board_id=access.board_id)
    await services.cards.update(db, card, body)
    return StatusResponse(status="updated")


@public_router.delete("/share/{token}/cards/{card_id}", response_model=StatusResponse, responses=RESPONSES)
async def delete_shared_card(
    card_id: int,
    access: ShareAccess = Depends(get_share_access),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    authorize_share(services, access, Permission.EDIT)
    card = await services.cards.get(db, card_id, board_id=access.board_id)
    await services.cards.delete(db, card)
    return StatusResponse(status="deleted")


@public_router.get("/share/{token}/cards", response_model=List[CardResponse], responses=RESPONSES)
async def list_shared_cards(
    access: ShareAccess = Depends(get_share_access),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> List[CardResponse]:
    authorize_share(services, access, Permission.READ)
    return [CardResponse.from_card(card) for card in await services.cards.list(db, access.board_id)]


@public_router.post("/share/{token}/cards", response_model=CardResponse, responses=RESPONSES)
async def create_shared_card(
    body: CardCreate,
    access: ShareAccess = Depends(get_share_access),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> CardResponse:
    authorize_share(services, access, Permission.EDIT)
    card = await services.cards.create(db, access.board_id, body)
    return CardResponse.from_card(card)


@public_router.post("/share/{token}/images", response_model=UrlResponse, responses=RESPONSES)
async def upload_shared_image(
    file: UploadFile = File(..., description="PNG, JPG, GIF or WEBP image"),
    access: ShareAccess = Depends(get_share_access),
    services: ServiceContainer = Depends(get_services),
) -> UrlResponse:
    authorize_share(services, access, Permission.EDIT)
    try:
        content = await file.read()
        url = await services.uploads.upload_image(
            access.board_id, file.filename, content, file.content_type
        )
    finally:
        await file.close()
    return UrlResponse(url=url)


@public_router.get("/share/{token}", response_model=BoardDetail, responses=RESPONSES)
async def get_shared_board(
    access: ShareAccess = Depends(get_share_access),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> BoardDetail:
    authorize_share(services, access, Permission.READ)
    return await services.boards.detail(db, access.board_id, access.permission)


# ── Permission lookup ─────────────────────────────────────────────────────

@permission_router.get("/permission/{token}", response_model=PermissionResponse)
async def share_permission(
    token: str,
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> PermissionResponse:
    access = await services.resolver.resolve_share(db, token)
    return PermissionResponse(permission=access.permission.value)
