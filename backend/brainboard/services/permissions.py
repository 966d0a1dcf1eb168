"""
Brainboard Backend: Permission Resolver
=======================================

What:  Computes a principal's effective permission on a board.
How:   Reads the three sources of truth (boards.owner_id, board_access,
       board_shares) and folds them into one value of the Permission lattice.
       Nothing is cached or written; every call reads current state.

Permission lattice (low → high):

    none  <  read  <  edit  <  owner

    - list/read a board or its cards         requires >= read
    - create/update/delete cards, upload     requires >= edit
    - manage grants and shares, rename,
      delete, thumbnail                      requires owner exactly

Principals:
    UserPrincipal(user_id)   from a validated session token
        owner_id match → owner, else the board_access row, else none.
        Ownership is checked first so a stray grant row for the owner
        never lowers their permission.
    SharePrincipal(token)    from a /share/{token} path
        the token's bound permission, or none for unknown tokens.
        A token never yields owner.

Storage failures surface as DatabaseError (500). They are never treated as
"no access".
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from brainboard.exceptions import DatabaseError, ForbiddenError
from brainboard.models.access import AccessGrant
from brainboard.models.board import Board
from brainboard.models.share import ShareToken

logger = logging.getLogger(__name__)


class Permission(str, enum.Enum):
    NONE = "none"
    READ = "read"
    EDIT = "edit"
    OWNER = "owner"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def allows(self, required: "Permission") -> bool:
        """True if holding `self` is enough for an action that needs `required`."""
        if required is Permission.OWNER:
            return self is Permission.OWNER
        return self.rank >= required.rank

    @classmethod
    def from_stored(cls, raw: Optional[str]) -> "Permission":
        """Maps a board_access/board_shares permission column to read or edit."""
        if raw == cls.EDIT.value:
            return cls.EDIT
        if raw == cls.READ.value:
            return cls.READ
        return cls.NONE


_RANKS = {
    Permission.NONE: 0,
    Permission.READ: 1,
    Permission.EDIT: 2,
    Permission.OWNER: 3,
}


@dataclass(frozen=True)
class UserPrincipal:
    user_id: int


@dataclass(frozen=True)
class SharePrincipal:
    token: str


Principal = Union[UserPrincipal, SharePrincipal]


@dataclass(frozen=True)
class ShareAccess:
    """Result of resolving a share token on its own: the bound board and permission."""
    board_id: Optional[int]
    permission: Permission


class PermissionResolver:
    """Side-effect-free permission lookups. Safe to call any number of times."""

    async def resolve(self, db: AsyncSession, principal: Principal, board_id: int) -> Permission:
        """Returns `principal`'s effective permission on `board_id`."""
        if isinstance(principal, SharePrincipal):
            access = await self.resolve_share(db, principal.token)
            if access.board_id != board_id:
                return Permission.NONE
            return access.permission
        return await self._resolve_user(db, principal.user_id, board_id)

    async def _resolve_user(self, db: AsyncSession, user_id: int, board_id: int) -> Permission:
        try:
            owner_id = await db.scalar(select(Board.owner_id).where(Board.id == board_id))
            if owner_id is None:
                return Permission.NONE
            if owner_id == user_id:
                return Permission.OWNER

            granted = await db.scalar(
                select(AccessGrant.permission).where(
                    AccessGrant.board_id == board_id,
                    AccessGrant.user_id == user_id,
                )
            )
        except SQLAlchemyError as e:
            logger.error("Permission lookup failed for board %d: %s", board_id, str(e))
            raise DatabaseError(context={"board_id": board_id, "error": str(e)})

        return Permission.from_stored(granted)

    async def resolve_share(self, db: AsyncSession, token: str) -> ShareAccess:
        """Looks up a share token. Unknown tokens give ShareAccess(None, NONE)."""
        try:
            result = await db.execute(
                select(ShareToken.board_id, ShareToken.permission).where(ShareToken.token == token)
            )
            row = result.first()
        except SQLAlchemyError as e:
            logger.error("Share token lookup failed: %s", str(e))
            raise DatabaseError(context={"error": str(e)})

        if row is None:
            return ShareAccess(board_id=None, permission=Permission.NONE)
        return ShareAccess(board_id=row.board_id, permission=Permission.from_stored(row.permission))

    @staticmethod
    def require(permission: Permission, required: Permission) -> None:
        """
        Raises ForbiddenError unless `permission` is enough for `required`.

        Missing boards resolve to `none`, so a caller without access cannot
        tell a missing board from an inaccessible one.
        """
        if not permission.allows(required):
            raise ForbiddenError(
                context={"permission": permission.value, "required": required.value},
            )
