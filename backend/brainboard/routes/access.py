"""
Brainboard Backend: Access Grant Routes (owner only)
====================================================

    GET    /boards/{board_id}/access   → [{id, board_id, user_id, email, permission, created_at}]
    POST   /boards/{board_id}/access   {user_id, permission} → {status: "granted"}
    DELETE /boards/{board_id}/access   {user_id}             → {status: "revoked"}
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.database import get_db_session
from brainboard.dependencies import ServiceContainer, authorize, get_current_user, get_services
from brainboard.schemas.access import AccessGrantCreate, AccessGrantResponse, AccessRevoke
from brainboard.schemas.common import ErrorResponse, StatusResponse
from brainboard.services.permissions import Permission, UserPrincipal

router = APIRouter(tags=["Access"])

RESPONSES = {
    403: {"description": "Only the board owner manages access", "model": ErrorResponse},
    404: {"description": "User or grant not found", "model": ErrorResponse},
}


@router.get("/boards/{board_id}/access", response_model=List[AccessGrantResponse], responses=RESPONSES)
async def list_access(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> List[AccessGrantResponse]:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    return await services.access.list(db, board_id)


@router.post("/boards/{board_id}/access", response_model=StatusResponse, responses=RESPONSES)
async def grant_access(
    board_id: int,
    body: AccessGrantCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.access.grant(db, board_id, body.user_id, body.permission)
    return StatusResponse(status="granted")


@router.delete("/boards/{board_id}/access", response_model=StatusResponse, responses=RESPONSES)
async def revoke_access(
    board_id: int,
    body: AccessRevoke,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    await authorize(db, services, principal, board_id, Permission.OWNER)
    await services.access.revoke(db, board_id, body.user_id)
    return StatusResponse(status="revoked")
