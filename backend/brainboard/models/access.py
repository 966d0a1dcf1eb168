"""
Brainboard Backend: Access Grant SQLAlchemy Model
=================================================

What:  ORM model for `board_access`: durable per-user permissions on a board.

Constraints:
    - UNIQUE (board_id, user_id): at most one grant per user and board.
      Granting again replaces the permission (upsert in AccessGrantStore).
    - permission is "read" or "edit". Ownership lives on boards.owner_id.
    - Both foreign keys cascade, so deleting the board or the user removes
      the grant.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from brainboard.database import Base


class AccessGrant(Base):
    __tablename__ = "board_access"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    board_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("boards.id", ondelete="CASCADE"),
        nullable=False,
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    permission: Mapped[str] = mapped_column(String(16), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        UniqueConstraint("board_id", "user_id", name="uq_board_access_board_user"),
    )

    def __repr__(self) -> str:
        return (
            f"<AccessGrant(board_id={self.board_id}, user_id={self.user_id}, "
            f"permission='{self.permission}')>"
        )
