"""
Brainboard Backend: Request Dependencies
========================================

What:  The service container built once per application, plus the FastAPI
       dependencies that turn a request into an explicit principal.

How:
    create_app() builds a ServiceContainer and stores it on app.state.services.
    Routes receive it through `get_services` and pass the resolved principal
    (UserPrincipal or ShareAccess) into every service call; no identity is
    read from ambient request state below the route layer.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Path, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.config import Settings
from brainboard.database import get_db_session
from brainboard.exceptions import ForbiddenError, UnauthenticatedError
from brainboard.services.access_service import AccessGrantStore
from brainboard.services.board_service import BoardStore
from brainboard.services.card_service import CardStore
from brainboard.services.credentials import CredentialStore
from brainboard.services.identity import IdentityProvider
from brainboard.services.object_storage import ObjectStorage
from brainboard.services.permissions import (
    Permission,
    PermissionResolver,
    ShareAccess,
    UserPrincipal,
)
from brainboard.services.share_service import ShareStore
from brainboard.services.upload_service import ImageUploadGateway

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass
class ServiceContainer:
    identity: IdentityProvider
    credentials: CredentialStore
    resolver: PermissionResolver
    storage: ObjectStorage
    uploads: ImageUploadGateway
    boards: BoardStore
    cards: CardStore
    access: AccessGrantStore
    shares: ShareStore


def build_services(settings: Settings, storage: ObjectStorage) -> ServiceContainer:
    uploads = ImageUploadGateway(storage, max_size=settings.max_upload_size)
    cards = CardStore(storage)
    return ServiceContainer(
        identity=IdentityProvider.from_settings(settings),
        credentials=CredentialStore(bcrypt_rounds=settings.bcrypt_rounds),
        resolver=PermissionResolver(),
        storage=storage,
        uploads=uploads,
        boards=BoardStore(storage, uploads, cards),
        cards=cards,
        access=AccessGrantStore(),
        shares=ShareStore(),
    )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    services: ServiceContainer = Depends(get_services),
) -> UserPrincipal:
    """Validates the bearer session token; 401 when it is missing or invalid."""
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()
    return UserPrincipal(user_id=services.identity.validate(credentials.credentials))


async def get_share_access(
    token: str = Path(description="Share link token"),
    db: AsyncSession = Depends(get_db_session),
    services: ServiceContainer = Depends(get_services),
) -> ShareAccess:
    """Resolves a /share/{token} path; unknown or revoked tokens are 403."""
    access = await services.resolver.resolve_share(db, token)
    if access.board_id is None:
        raise ForbiddenError(message="Invalid or expired share link")
    return access


async def authorize(
    db: AsyncSession,
    services: ServiceContainer,
    principal: UserPrincipal,
    board_id: int,
    required: Permission,
) -> Permission:
    """Resolves `principal` on `board_id` and raises ForbiddenError below `required`."""
    permission = await services.resolver.resolve(db, principal, board_id)
    services.resolver.require(permission, required)
    return permission


def authorize_share(services: ServiceContainer, access: ShareAccess, required: Permission) -> None:
    services.resolver.require(access.permission, required)
