"""
Brainboard Backend: Card Routes
===============================

    board_router   GET|POST   /boards/{board_id}/cards     (read / edit)
    card_router    PUT|DELETE /cards/{card_id}             (edit)

Single-card routes carry no board id; the card row is loaded first (404 if
missing) and the caller's permission is resolved on the card's board.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.database import get_db_session
from brainboard.dependencies import ServiceContainer, authorize, get_current_user, get_services
from brainboard.schemas.card import CardCreate, CardResponse, CardUpdate
from brainboard.schemas.common import ErrorResponse, StatusResponse
from brainboard.services.permissions import Permission, UserPrincipal

logger = logging.getLogger(__name__)

RESPONSES = {
    403: {"description": "Insufficient permission", "model": ErrorResponse},
    404: {"description": "Card not found", "model": ErrorResponse},
}

board_router = APIRouter(tags=["Cards"])
card_router = APIRouter(tags=["Cards"])


@board_router.get("/boards/{board_id}/cards", response_model=List[CardResponse], responses=RESPONSES)
async def list_cards(
    board_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> List[CardResponse]:
    await authorize(db, services, principal, board_id, Permission.READ)
    return [CardResponse.from_card(card) for card in await services.cards.list(db, board_id)]


@board_router.post(
    "/boards/{board_id}/cards",
    response_model=CardResponse,
    responses={400: {"description": "Invalid card payload", "model": ErrorResponse}, **RESPONSES},
)
async def create_card(
    board_id: int,
    body: CardCreate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> CardResponse:
    await authorize(db, services, principal, board_id, Permission.EDIT)
    card = await services.cards.create(db, board_id, body)
    return CardResponse.from_card(card)


@card_router.put("/cards/{card_id}", response_model=StatusResponse, responses=RESPONSES)
async def update_card(
    card_id: int,
    body: CardUpdate,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    card = await services.cards.get(db, card_id)
    await authorize(db, services, principal, card.board_id, Permission.EDIT)
    await services.cards.update(db, card, body)
    return StatusResponse(status="updated")


@card_router.delete("/cards/{card_id}", response_model=StatusResponse, responses=RESPONSES)
async def delete_card(
    card_id: int,
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> StatusResponse:
    card = await services.cards.get(db, card_id)
    await authorize(db, services, principal, card.board_id, Permission.EDIT)
    await services.cards.delete(db, card)
    return StatusResponse(status="deleted")
