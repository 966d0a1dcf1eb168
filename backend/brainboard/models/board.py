"""
Brainboard Backend: Board SQLAlchemy Model
==========================================

What:  ORM model for the `boards` table.

Table Design:
    - owner_id: the single owning user. Ownership is never duplicated into
      board_access; the permission resolver reads this column directly.
    - thumbnail_url: nullable, set and cleared through /boards/{id}/thumbnail
    - Deleting a board removes its cards, access grants and share tokens
      through ON DELETE CASCADE foreign keys declared on those tables.

    Index on (owner_id, created_at DESC):
        Serves the "my boards, newest first" listing.
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from brainboard.database import Base


class Board(Base):
    """A whiteboard owned by exactly one user."""

    __tablename__ = "boards"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)

    thumbnail_url: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
        default=None,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_boards_owner_created", "owner_id", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Board(id={self.id}, owner_id={self.owner_id}, title='{self.title}')>"
