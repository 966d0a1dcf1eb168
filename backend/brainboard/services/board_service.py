"""
Brainboard Backend: Board Store
===============================

What:  CRUD for boards plus the thumbnail set/clear workflow.
How:   Stateless apart from its storage collaborators; every call receives the
       request's AsyncSession. Permission checks happen in the routes before
       any method here runs.

Deletion:
    A single DELETE on `boards`. Cards, access grants and share tokens are
    removed by the ON DELETE CASCADE foreign keys, not by this class.
"""

import logging
from typing import List, Optional

from sqlalchemy import delete, desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import NotFoundError, ObjectStorageError
from brainboard.models.access import AccessGrant
from brainboard.models.board import Board
from brainboard.schemas.board import BoardDetail, BoardListItem
from brainboard.schemas.card import CardResponse
from brainboard.services.card_service import CardStore
from brainboard.services.object_storage import ObjectStorage
from brainboard.services.permissions import Permission
from brainboard.services.upload_service import THUMBNAIL_PREFIX, ImageUploadGateway

logger = logging.getLogger(__name__)


class BoardStore:
    """
    Board persistence.

    Attributes:
        storage:  ObjectStorage holding thumbnails
        uploads:  ImageUploadGateway used to validate and store thumbnails
        cards:    CardStore used to embed cards in board detail
    """

    def __init__(self, storage: ObjectStorage, uploads: ImageUploadGateway, cards: CardStore):
        self.storage = storage
        self.uploads = uploads
        self.cards = cards

    async def get(self, db: AsyncSession, board_id: int) -> Board:
        board = await db.get(Board, board_id)
        if board is None:
            raise NotFoundError(resource="board", resource_id=board_id, message="Board not found")
        return board

    async def list_for_user(self, db: AsyncSession, user_id: int) -> List[BoardListItem]:
        """
        Boards the user owns plus boards granted to them, newest first.

        Owned boards report permission "owner"; granted boards report the
        grant's permission.
        """
        owned = await db.execute(select(Board).where(Board.owner_id == user_id))
        granted = await db.execute(
            select(Board, AccessGrant.permission)
            .join(AccessGrant, AccessGrant.board_id == Board.id)
            .where(AccessGrant.user_id == user_id, Board.owner_id != user_id)
        )

        items = [
            BoardListItem(
                id=board.id,
                title=board.title,
                owner_id=board.owner_id,
                created_at=board.created_at,
                thumbnail_url=board.thumbnail_url,
                is_owner=True,
                permission=Permission.OWNER.value,
            )
            for board in owned.scalars()
        ]
        items.extend(
            BoardListItem(
                id=board.id,
                title=board.title,
                owner_id=board.owner_id,
                created_at=board.created_at,
                thumbnail_url=board.thumbnail_url,
                is_owner=False,
                permission=Permission.from_stored(permission).value,
            )
            for board, permission in granted.all()
        )
        items.sort(key=lambda item: (item.created_at, item.id), reverse=True)
        return items

    async def create(self, db: AsyncSession, owner_id: int, title: str) -> Board:
        board = Board(owner_id=owner_id, title=title)
        db.add(board)
        await db.flush()
        await db.refresh(board)
        logger.info("Board %d created by user %d", board.id, owner_id)
        return board

    async def detail(self, db: AsyncSession, board_id: int, permission: Permission) -> BoardDetail:
        """Board metadata plus every card, as seen by a caller holding `permission`."""
        board = await self.get(db, board_id)
        cards = await self.cards.list(db, board_id)
        return BoardDetail(
            id=board.id,
            title=board.title,
            owner_id=board.owner_id,
            created_at=board.created_at,
            thumbnail_url=board.thumbnail_url,
            permission=permission.value,
            cards=[CardResponse.from_card(card) for card in cards],
        )

    async def rename(self, db: AsyncSession, board_id: int, title: str) -> None:
        board = await self.get(db, board_id)
        board.title = title
        await db.flush()

    async def delete(self, db: AsyncSession, board_id: int) -> None:
        result = await db.execute(delete(Board).where(Board.id == board_id))
        if result.rowcount == 0:
            raise NotFoundError(resource="board", resource_id=board_id, message="Board not found")
        logger.info("Board %d deleted", board_id)

    # ── Thumbnails ───────────────────────────────────────────────────────

    async def set_thumbnail(
        self,
        db: AsyncSession,
        board_id: int,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Stores a new thumbnail and points the board at it.

        A previous thumbnail stored under a different key (different extension)
        is removed best-effort.
        """
        board = await self.get(db, board_id)
        previous_key = self.storage.key_from_url(board.thumbnail_url or "", THUMBNAIL_PREFIX)

        url = await self.uploads.upload_thumbnail(board_id, filename, content, content_type)
        new_key = self.storage.key_from_url(url, THUMBNAIL_PREFIX)

        board.thumbnail_url = url
        await db.flush()

        if previous_key and previous_key != new_key:
            try:
                await self.storage.delete(previous_key)
            except ObjectStorageError as e:
                logger.warning("Failed to delete old thumbnail %s: %s", previous_key, e.message)
        return url

    async def clear_thumbnail(self, db: AsyncSession, board_id: int) -> None:
        """
        Clears the board's thumbnail column and deletes the blob.

        The column change is flushed first; a storage failure raises
        ObjectStorageError and the request's rollback restores the column.
        """
        board = await self.get(db, board_id)
        key = self.storage.key_from_url(board.thumbnail_url or "", THUMBNAIL_PREFIX)

        board.thumbnail_url = None
        await db.flush()

        if key:
            await self.storage.delete(key)
            logger.info("Thumbnail %s removed from board %d", key, board_id)
