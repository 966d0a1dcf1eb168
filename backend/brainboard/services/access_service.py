"""
Brainboard Backend: Access Grant Store
======================================

What:  Per-user read/edit grants on a board, managed by the board owner.
How:   Granting is an upsert keyed by (board_id, user_id): an existing row has
       its permission replaced, so repeated grants never create duplicates.
       The unique constraint on board_access backs this up at the store level.
"""

import logging
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import InvalidInputError, NotFoundError
from brainboard.models.access import AccessGrant
from brainboard.models.board import Board
from brainboard.models.user import User
from brainboard.schemas.access import AccessGrantResponse

logger = logging.getLogger(__name__)


class AccessGrantStore:
    async def list(self, db: AsyncSession, board_id: int) -> List[AccessGrantResponse]:
        result = await db.execute(
            select(AccessGrant, User.email)
            .join(User, User.id == AccessGrant.user_id)
            .where(AccessGrant.board_id == board_id)
            .order_by(AccessGrant.id)
        )
        return [
            AccessGrantResponse(
                id=grant.id,
                board_id=grant.board_id,
                user_id=grant.user_id,
                email=email,
                permission=grant.permission,
                created_at=grant.created_at,
            )
            for grant, email in result.all()
        ]

    async def grant(self, db: AsyncSession, board_id: int, user_id: int, permission: str) -> AccessGrant:
        """
        Creates or replaces the grant for (board_id, user_id).

        Raises:
            NotFoundError: the user does not exist
            InvalidInputError: the user owns the board
        """
        if await db.get(User, user_id) is None:
            raise NotFoundError(resource="user", resource_id=user_id, message="User not found")

        owner_id = await db.scalar(select(Board.owner_id).where(Board.id == board_id))
        if owner_id == user_id:
            raise InvalidInputError(
                message="The board owner already has full access",
                field="user_id",
            )

        existing = await db.scalar(
            select(AccessGrant).where(
                AccessGrant.board_id == board_id,
                AccessGrant.user_id == user_id,
            )
        )
        if existing is None:
            existing = AccessGrant(board_id=board_id, user_id=user_id, permission=permission)
            db.add(existing)
        elif existing.permission != permission:
            existing.permission = permission

        await db.flush()
        logger.info("User %d granted %s on board %d", user_id, permission, board_id)
        return existing

    async def revoke(self, db: AsyncSession, board_id: int, user_id: int) -> None:
        result = await db.execute(
            delete(AccessGrant).where(
                AccessGrant.board_id == board_id,
                AccessGrant.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="access grant", message="No access entry found")
        logger.info("Access for user %d revoked on board %d", user_id, board_id)
