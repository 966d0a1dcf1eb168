"""
Brainboard Backend: Share Token Store
=====================================

What:  Creates, lists and revokes anonymous share links for a board.

Tokens are 16 bytes from `secrets.token_hex`, 32 hex characters. There is no
retry on collision; the unique constraint on board_shares.token rejects a
duplicate and the failure surfaces as DatabaseError. A token's permission is
fixed: changing scope means revoking and creating a new link.
"""

import logging
import secrets
from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import DatabaseError, NotFoundError
from brainboard.models.share import ShareToken

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def generate_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class ShareStore:
    async def list(self, db: AsyncSession, board_id: int) -> List[ShareToken]:
        result = await db.execute(
            select(ShareToken).where(ShareToken.board_id == board_id).order_by(ShareToken.id)
        )
        return list(result.scalars().all())

    async def create(self, db: AsyncSession, board_id: int, permission: str) -> ShareToken:
        share = ShareToken(board_id=board_id, token=generate_token(), permission=permission)
        db.add(share)
        try:
            await db.flush()
            await db.refresh(share)
        except SQLAlchemyError as e:
            logger.error("Failed to create share token for board %d: %s", board_id, str(e))
            raise DatabaseError(
                message="Failed to create share link",
                context={"board_id": board_id, "error": str(e)},
            )

        logger.info("Share %d (%s) created for board %d", share.id, permission, board_id)
        return share

    async def revoke(self, db: AsyncSession, board_id: int, share_id: int) -> None:
        """Deletes a share of this board; a share id belonging to another board is 404."""
        result = await db.execute(
            delete(ShareToken).where(
                ShareToken.id == share_id,
                ShareToken.board_id == board_id,
            )
        )
        if result.rowcount == 0:
            raise NotFoundError(resource="share", resource_id=share_id, message="Share link not found")
        logger.info("Share %d revoked on board %d", share_id, board_id)
