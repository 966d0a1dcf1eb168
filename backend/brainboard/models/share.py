"""
Brainboard Backend: Share Token SQLAlchemy Model
================================================

What:  ORM model for `board_shares`: anonymous bearer links to one board.

Possession of `token` is the only proof required. Tokens never expire;
deleting the row revokes the link. The permission ("read" or "edit") is
fixed at creation.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column

from brainboard.database import Base


class ShareToken(Base):
    __tablename__ = "board_shares"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    board_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )

    token: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="32 hex chars from 16 random bytes",
    )

    permission: Mapped[str] = mapped_column(String(16), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_board_shares_board_id", "board_id"),
    )

    def __repr__(self) -> str:
        return f"<ShareToken(id={self.id}, board_id={self.board_id}, permission='{self.permission}')>"
