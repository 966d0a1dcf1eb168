"""
Brainboard Backend: Card Store
==============================

What:  Card creation, partial update and deletion, dispatching on the
       TextContent / ImageContent variant rather than on raw kind strings.

Update protocol:
    1. Load the current row (404 if missing or on another board).
    2. Reject fields that contradict the stored kind: a different `kind`,
       width/height on a text card, text on an image card.
    3. Build the new variant from the stored variant, replacing only the
       fields the caller supplied (absent or null means keep).
    4. Assign only attributes whose value changed, so `{}` issues no UPDATE
       and leaves updated_at untouched.

Delete protocol:
    Image cards first get a best-effort blob delete (key located by the
    "images/" segment of the stored URL). Only keys under the card's own
    board, `images/{board_id}/`, are deleted; any other key is skipped and
    logged. A storage failure is logged at WARNING and the row is still
    deleted; the blob is advisory, the row is authoritative.
"""

import dataclasses
import logging
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import InvalidInputError, NotFoundError, ObjectStorageError
from brainboard.models.card import Card, CardContent, CardKind, ImageContent, TextContent
from brainboard.schemas.card import CardCreate, CardUpdate
from brainboard.services.object_storage import ObjectStorage
from brainboard.services.upload_service import IMAGE_PREFIX

logger = logging.getLogger(__name__)


def _parse_kind(raw: Optional[str]) -> CardKind:
    try:
        return CardKind.parse(raw)
    except ValueError:
        raise InvalidInputError(
            message=f"Invalid card kind '{raw}'. Must be 'text' or 'image'",
            field="kind",
        )


def content_from_create(payload: CardCreate) -> CardContent:
    """Builds the variant for a new card; image cards must carry an image_url."""
    kind = _parse_kind(payload.kind)
    if kind is CardKind.IMAGE:
        if not payload.image_url:
            raise InvalidInputError(message="image_url is required for kind=image", field="image_url")
        return ImageContent(image_url=payload.image_url, width=payload.width, height=payload.height)
    return TextContent(text=payload.text or "")


def owns_image_key(key: str, board_id: int) -> bool:
    """True if `key` names an uploaded image of `board_id` and nothing outside it."""
    if not key.startswith(f"{IMAGE_PREFIX}{board_id}/"):
        return False
    return all(part not in ("", ".", "..") for part in key.split("/"))


def merge_content(current: CardContent, payload: CardUpdate) -> CardContent:
    """Applies the supplied fields of `payload` on top of the stored variant."""
    if payload.kind is not None and _parse_kind(payload.kind) is not current.kind:
        raise InvalidInputError(message="Card kind cannot be changed", field="kind")

    if isinstance(current, ImageContent):
        if payload.text is not None:
            raise InvalidInputError(message="Image cards do not carry text", field="text")
        changes = {
            name: value
            for name, value in (
                ("image_url", payload.image_url),
                ("width", payload.width),
                ("height", payload.height),
            )
            if value is not None
        }
        if changes.get("image_url") == "":
            raise InvalidInputError(message="image_url must not be empty", field="image_url")
        return dataclasses.replace(current, **changes)

    if payload.width is not None or payload.height is not None:
        raise InvalidInputError(message="Text cards do not carry width or height", field="width")
    if payload.image_url is not None:
        raise InvalidInputError(message="Text cards do not carry image_url", field="image_url")
    if payload.text is None:
        return current
    return TextContent(text=payload.text)


class CardStore:
    """
    Card persistence scoped by board.

    Attributes:
        storage:  ObjectStorage holding card images (used for cleanup on delete)
    """

    def __init__(self, storage: ObjectStorage):
        self.storage = storage

    async def list(self, db: AsyncSession, board_id: int) -> List[Card]:
        result = await db.execute(
            select(Card).where(Card.board_id == board_id).order_by(Card.id)
        )
        return list(result.scalars().all())

    async def get(self, db: AsyncSession, card_id: int, board_id: Optional[int] = None) -> Card:
        """
        Loads a card. With `board_id`, a card on another board is reported as
        missing, the same as a card that does not exist.
        """
        card = await db.get(Card, card_id)
        if card is None or (board_id is not None and card.board_id != board_id):
            raise NotFoundError(resource="card", resource_id=card_id, message="Card not found")
        return card

    async def create(self, db: AsyncSession, board_id: int, payload: CardCreate) -> Card:
        content = content_from_create(payload)
        card = Card(
            board_id=board_id,
            position_x=payload.position_x,
            position_y=payload.position_y,
        )
        card.apply_content(content)
        db.add(card)
        await db.flush()
        await db.refresh(card)
        logger.debug("Card %d (%s) created on board %d", card.id, card.kind, board_id)
        return card

    async def update(self, db: AsyncSession, card: Card, payload: CardUpdate) -> Card:
        current = card.content
        merged = merge_content(current, payload)

        if merged != current:
            for field in dataclasses.fields(merged):
                value = getattr(merged, field.name)
                if getattr(card, field.name) != value:
                    setattr(card, field.name, value)

        if payload.position_x is not None and payload.position_x != card.position_x:
            card.position_x = payload.position_x
        if payload.position_y is not None and payload.position_y != card.position_y:
            card.position_y = payload.position_y

        await db.flush()
        return card

    async def delete(self, db: AsyncSession, card: Card) -> None:
        content = card.content
        if isinstance(content, ImageContent):
            await self._discard_blob(content.image_url, card)

        await db.delete(card)
        await db.flush()
        logger.debug("Card %d deleted from board %d", card.id, card.board_id)

    async def _discard_blob(self, image_url: str, card: Card) -> None:
        key = self.storage.key_from_url(image_url, IMAGE_PREFIX)
        if key is None:
            return
        if not owns_image_key(key, card.board_id):
            logger.warning(
                "Skipping image cleanup for card %d: %s is not under board %d",
                card.id,
                key,
                card.board_id,
            )
            return
        try:
            await self.storage.delete(key)
        except (ObjectStorageError, InvalidInputError) as e:
            logger.warning(
                "Failed to delete image %s for card %d: %s",
                key,
                card.id,
                e.message,
                extra={"key": key, "card_id": card.id},
            )
