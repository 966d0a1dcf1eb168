"""
Brainboard Backend: Card SQLAlchemy Model
=========================================

What:  ORM model for the `cards` table plus the tagged content variant that
       the card service dispatches on.

Card Variants:
    A card is either a text card or an image card. Both share id, board_id
    and position; the payload differs:

        TextContent(text)                     kind = "text"
        ImageContent(image_url, width, height) kind = "image"

    The row stores the union of both payloads in nullable columns. Reading a
    row through `Card.content` yields exactly one variant, so callers
    pattern-match on the variant type instead of comparing `kind` strings.
    Rows written before `kind` existed carry an empty string; they read as
    text cards.
"""

import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Union

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy import text as sql_text
from sqlalchemy.orm import Mapped, mapped_column

from brainboard.database import Base


class CardKind(str, enum.Enum):
    TEXT = "text"
    IMAGE = "image"

    @classmethod
    def parse(cls, raw: Optional[str]) -> "CardKind":
        """Maps a stored or submitted kind string to a CardKind; blank means text."""
        if raw is None or not raw.strip():
            return cls.TEXT
        return cls(raw.strip().lower())


@dataclass(frozen=True)
class TextContent:
    text: str = ""

    kind = CardKind.TEXT


@dataclass(frozen=True)
class ImageContent:
    image_url: str
    width: Optional[float] = None
    height: Optional[float] = None

    kind = CardKind.IMAGE


CardContent = Union[TextContent, ImageContent]


class Card(Base):
    """A positioned text note or image reference on one board."""

    __tablename__ = "cards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    board_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )

    kind: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=CardKind.TEXT.value,
        server_default=sql_text("'text'"),
        comment="text | image; immutable after creation",
    )

    text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    width: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    height: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    position_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    position_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        server_default=sql_text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_cards_board_id", "board_id"),
    )

    @property
    def card_kind(self) -> CardKind:
        return CardKind.parse(self.kind)

    @property
    def content(self) -> CardContent:
        """The stored payload as a TextContent or ImageContent variant."""
        if self.card_kind is CardKind.IMAGE:
            return ImageContent(image_url=self.image_url or "", width=self.width, height=self.height)
        return TextContent(text=self.text or "")

    def apply_content(self, content: CardContent) -> None:
        """Writes a variant into the row's columns, clearing the other variant's fields."""
        if isinstance(content, ImageContent):
            self.kind = CardKind.IMAGE.value
            self.text = None
            self.image_url = content.image_url
            self.width = content.width
            self.height = content.height
        else:
            self.kind = CardKind.TEXT.value
            self.text = content.text
            self.image_url = None
            self.width = None
            self.height = None

    def __repr__(self) -> str:
        return f"<Card(id={self.id}, board_id={self.board_id}, kind='{self.kind}')>"
