"""
Brainboard Backend: Card Pydantic Schemas
=========================================

What:  Request/response models for card creation and partial update.

Partial update semantics:
    Every field of CardUpdate is optional. A field that is absent or null
    keeps its stored value, so `{}` is a no-op. Only fields that belong to
    the card's stored kind may be supplied; the card service rejects the
    rest.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from brainboard.models.card import Card


class CardCreate(BaseModel):
    """Body of POST /boards/{id}/cards and POST /share/{token}/cards."""
    kind: Optional[str] = Field(default=None, description="text (default) or image")
    text: Optional[str] = Field(default=None, description="Text payload for text cards")
    image_url: Optional[str] = Field(default=None, max_length=1024)
    width: Optional[float] = Field(default=None, allow_inf_nan=False)
    height: Optional[float] = Field(default=None, allow_inf_nan=False)
    position_x: float = Field(default=0.0, allow_inf_nan=False)
    position_y: float = Field(default=0.0, allow_inf_nan=False)


class CardUpdate(BaseModel):
    """Body of PUT /cards/{id} and PUT /share/{token}/cards/{id}."""
    kind: Optional[str] = None
    text: Optional[str] = None
    image_url: Optional[str] = Field(default=None, max_length=1024)
    width: Optional[float] = Field(default=None, allow_inf_nan=False)
    height: Optional[float] = Field(default=None, allow_inf_nan=False)
    position_x: Optional[float] = Field(default=None, allow_inf_nan=False)
    position_y: Optional[float] = Field(default=None, allow_inf_nan=False)


class CardResponse(BaseModel):
    """
    Serialized card. Fields of the other variant are null: a text card has
    null image_url/width/height, an image card has null text.
    """
    id: int
    board_id: int
    kind: str
    text: Optional[str] = None
    image_url: Optional[str] = None
    width: Optional[float] = None
    height: Optional[float] = None
    position_x: float
    position_y: float
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        content = card.content
        return cls(
            id=card.id,
            board_id=card.board_id,
            kind=content.kind.value,
            text=getattr(content, "text", None),
            image_url=getattr(content, "image_url", None),
            width=getattr(content, "width", None),
            height=getattr(content, "height", None),
            position_x=card.position_x,
            position_y=card.position_y,
            created_at=card.created_at,
            updated_at=card.updated_at,
        )
