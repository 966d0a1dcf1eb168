"""Access grant store: upsert semantics, owner and unknown-user rejections, revoke."""

import pytest
from sqlalchemy import select

from brainboard.exceptions import InvalidInputError, NotFoundError
from brainboard.models.access import AccessGrant
from brainboard.models.board import Board
from brainboard.models.user import User


async def _seed(db):
    owner = User(email="owner@example.com", password_hash="x")
    friend = User(email="friend@example.com", password_hash="x")
    db.add_all([owner, friend])
    await db.flush()
    board = Board(owner_id=owner.id, title="Shared")
    db.add(board)
    await db.flush()
    return owner, friend, board


@pytest.mark.asyncio
async def test_second_grant_replaces_first(db_session, services):
    _, friend, board = await _seed(db_session)

    await services.access.grant(db_session, board.id, friend.id, "read")
    await services.access.grant(db_session, board.id, friend.id, "edit")
    await db_session.commit()

    rows = (await db_session.execute(
        select(AccessGrant).where(AccessGrant.board_id == board.id)
    )).scalars().all()
    assert len(rows) == 1
    assert rows[0].permission == "edit"


@pytest.mark.asyncio
async def test_list_includes_email(db_session, services):
    _, friend, board = await _seed(db_session)
    await services.access.grant(db_session, board.id, friend.id, "read")

    grants = await services.access.list(db_session, board.id)
    assert [(g.user_id, g.email, g.permission) for g in grants] == [
        (friend.id, "friend@example.com", "read")
    ]


@pytest.mark.asyncio
async def test_grant_to_unknown_user_is_not_found(db_session, services):
    _, _, board = await _seed(db_session)
    with pytest.raises(NotFoundError):
        await services.access.grant(db_session, board.id, 4242, "read")


@pytest.mark.asyncio
async def test_grant_to_owner_is_rejected(db_session, services):
    owner, _, board = await _seed(db_session)
    with pytest.raises(InvalidInputError):
        await services.access.grant(db_session, board.id, owner.id, "edit")


@pytest.mark.asyncio
async def test_revoke_removes_grant(db_session, services):
    _, friend, board = await _seed(db_session)
    await services.access.grant(db_session, board.id, friend.id, "read")

    await services.access.revoke(db_session, board.id, friend.id)
    assert await services.access.list(db_session, board.id) == []


@pytest.mark.asyncio
async def test_revoke_without_grant_is_not_found(db_session, services):
    _, friend, board = await _seed(db_session)
    with pytest.raises(NotFoundError, match="No access entry found"):
        await services.access.revoke(db_session, board.id, friend.id)
