"""
Brainboard Backend: Permission Resolver Tests
=============================================

What we test:
    ✅ Lattice ordering and the "owner exactly" rule
    ✅ Resolution order: ownership wins over a stray grant row for the owner
    ✅ Grants, strangers and missing boards
    ✅ Share tokens: bound permission, wrong board, revoked token
    ✅ Storage failures surface as DatabaseError, never as "none"
"""

import pytest
from sqlalchemy.exc import OperationalError

from brainboard.exceptions import DatabaseError, ForbiddenError
from brainboard.models.access import AccessGrant
from brainboard.models.board import Board
from brainboard.models.share import ShareToken
from brainboard.models.user import User
from brainboard.services.permissions import (
    Permission,
    PermissionResolver,
    SharePrincipal,
    UserPrincipal,
)


async def _seed(db):
    owner = User(email="owner@example.com", password_hash="x")
    friend = User(email="friend@example.com", password_hash="x")
    stranger = User(email="stranger@example.com", password_hash="x")
    db.add_all([owner, friend, stranger])
    await db.flush()

    board = Board(owner_id=owner.id, title="Plan")
    other = Board(owner_id=friend.id, title="Other")
    db.add_all([board, other])
    await db.flush()
    return owner, friend, stranger, board, other


class TestPermissionLattice:
    @pytest.mark.parametrize(
        "held, required, expected",
        [
            (Permission.NONE, Permission.READ, False),
            (Permission.READ, Permission.READ, True),
            (Permission.READ, Permission.EDIT, False),
            (Permission.EDIT, Permission.READ, True),
            (Permission.EDIT, Permission.EDIT, True),
            (Permission.EDIT, Permission.OWNER, False),
            (Permission.OWNER, Permission.EDIT, True),
            (Permission.OWNER, Permission.OWNER, True),
        ],
    )
    def test_allows(self, held, required, expected):
        assert held.allows(required) is expected

    def test_require_raises_forbidden(self):
        with pytest.raises(ForbiddenError):
            PermissionResolver.require(Permission.READ, Permission.EDIT)

    def test_require_passes(self):
        PermissionResolver.require(Permission.OWNER, Permission.OWNER)

    def test_from_stored_unknown_is_none(self):
        assert Permission.from_stored("admin") is Permission.NONE
        assert Permission.from_stored(None) is Permission.NONE


class TestUserResolution:
    def setup_method(self):
        self.resolver = PermissionResolver()

    @pytest.mark.asyncio
    async def test_owner_wins_over_stray_grant(self, db_session):
        owner, _, _, board, _ = await _seed(db_session)
        db_session.add(AccessGrant(board_id=board.id, user_id=owner.id, permission="read"))
        await db_session.flush()

        result = await self.resolver.resolve(db_session, UserPrincipal(owner.id), board.id)
        assert result is Permission.OWNER

    @pytest.mark.asyncio
    async def test_grant_permission_is_returned(self, db_session):
        _, friend, _, board, _ = await _seed(db_session)
        db_session.add(AccessGrant(board_id=board.id, user_id=friend.id, permission="edit"))
        await db_session.flush()

        result = await self.resolver.resolve(db_session, UserPrincipal(friend.id), board.id)
        assert result is Permission.EDIT

    @pytest.mark.asyncio
    async def test_stranger_has_none(self, db_session):
        _, _, stranger, board, _ = await _seed(db_session)
        result = await self.resolver.resolve(db_session, UserPrincipal(stranger.id), board.id)
        assert result is Permission.NONE

    @pytest.mark.asyncio
    async def test_missing_board_is_none(self, db_session):
        owner, *_ = await _seed(db_session)
        result = await self.resolver.resolve(db_session, UserPrincipal(owner.id), 9999)
        assert result is Permission.NONE

    @pytest.mark.asyncio
    async def test_resolution_is_repeatable(self, db_session):
        _, friend, _, board, _ = await _seed(db_session)
        db_session.add(AccessGrant(board_id=board.id, user_id=friend.id, permission="read"))
        await db_session.flush()

        first = await self.resolver.resolve(db_session, UserPrincipal(friend.id), board.id)
        second = await self.resolver.resolve(db_session, UserPrincipal(friend.id), board.id)
        assert first is second is Permission.READ

    @pytest.mark.asyncio
    async def test_storage_failure_raises_database_error(self, mock_db_session):
        mock_db_session.scalar.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(DatabaseError):
            await self.resolver.resolve(mock_db_session, UserPrincipal(1), 1)


class TestShareResolution:
    def setup_method(self):
        self.resolver = PermissionResolver()

    @pytest.mark.asyncio
    async def test_token_carries_bound_permission(self, db_session):
        _, _, _, board, _ = await _seed(db_session)
        db_session.add(ShareToken(board_id=board.id, token="a" * 32, permission="read"))
        await db_session.flush()

        access = await self.resolver.resolve_share(db_session, "a" * 32)
        assert access.board_id == board.id
        assert access.permission is Permission.READ

        result = await self.resolver.resolve(db_session, SharePrincipal("a" * 32), board.id)
        assert result is Permission.READ

    @pytest.mark.asyncio
    async def test_token_never_grants_other_boards(self, db_session):
        _, _, _, board, other = await _seed(db_session)
        db_session.add(ShareToken(board_id=board.id, token="b" * 32, permission="edit"))
        await db_session.flush()

        result = await self.resolver.resolve(db_session, SharePrincipal("b" * 32), other.id)
        assert result is Permission.NONE

    @pytest.mark.asyncio
    async def test_revoked_token_resolves_to_none(self, db_session):
        _, _, _, board, _ = await _seed(db_session)
        share = ShareToken(board_id=board.id, token="c" * 32, permission="edit")
        db_session.add(share)
        await db_session.flush()

        await db_session.delete(share)
        await db_session.flush()

        access = await self.resolver.resolve_share(db_session, "c" * 32)
        assert access.board_id is None
        assert access.permission is Permission.NONE

    @pytest.mark.asyncio
    async def test_share_lookup_failure_raises_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("down"))
        with pytest.raises(DatabaseError):
            await self.resolver.resolve_share(mock_db_session, "d" * 32)
