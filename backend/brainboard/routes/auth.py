"""
Brainboard Backend: Authentication Routes
=========================================

    POST /signup          {email, password} → {token}
    POST /login           {email, password} → {token}
    GET  /me              → {user_id, email}
    GET  /emailToID       ?email=           → {user_id}
"""

import logging

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.database import get_db_session
from brainboard.dependencies import ServiceContainer, get_current_user, get_services
from brainboard.exceptions import NotFoundError, UnauthenticatedError
from brainboard.schemas.auth import Credentials, MeResponse, TokenResponse, UserIdResponse
from brainboard.schemas.common import ErrorResponse
from brainboard.services.permissions import UserPrincipal

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.post(
    "/signup",
    response_model=TokenResponse,
    responses={400: {"description": "Invalid input or duplicate email", "model": ErrorResponse}},
    summary="Create an account and start a session",
)
async def signup(
    body: Credentials,
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> TokenResponse:
    user = await services.credentials.create(db, body.email, body.password)
    return TokenResponse(token=services.identity.issue(user.id))


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Start a session",
)
async def login(
    body: Credentials,
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> TokenResponse:
    user = await services.credentials.verify(db, body.email, body.password)
    logger.info("User %d logged in", user.id)
    return TokenResponse(token=services.identity.issue(user.id))


@router.get("/me", response_model=MeResponse, summary="Identity behind the session token")
async def me(
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> MeResponse:
    user = await services.credentials.get(db, principal.user_id)
    if user is None:
        # Token signed for an account that has since been removed
        raise UnauthenticatedError(message="Session user no longer exists")
    return MeResponse(user_id=user.id, email=user.email)


@router.get(
    "/emailToID",
    response_model=UserIdResponse,
    responses={404: {"description": "No account with this email", "model": ErrorResponse}},
    summary="Look up a user id by email (used when granting access)",
)
async def email_to_id(
    email: str = Query(min_length=1, max_length=255),
    principal: UserPrincipal = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> UserIdResponse:
    user = await services.credentials.find_by_email(db, email)
    if user is None:
        raise NotFoundError(resource="user", message="User not found")
    return UserIdResponse(user_id=user.id)
