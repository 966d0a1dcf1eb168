"""
Brainboard Backend: Share Token Store Tests
===========================================

What we test:
    ✅ Token format: 32 lower-case hex characters, distinct per share
    ✅ Listing is scoped to the board
    ✅ Revocation is scoped to the board in the path
    ✅ A uniqueness violation surfaces as DatabaseError
"""

import string
from unittest.mock import patch

import pytest

from brainboard.exceptions import DatabaseError, NotFoundError
from brainboard.models.board import Board
from brainboard.models.user import User
from brainboard.services.share_service import generate_token


async def _boards(db):
    owner = User(email="sharer@example.com", password_hash="x")
    db.add(owner)
    await db.flush()
    first = Board(owner_id=owner.id, title="First")
    second = Board(owner_id=owner.id, title="Second")
    db.add_all([first, second])
    await db.flush()
    return first, second


def test_generate_token_is_32_hex_chars():
    token = generate_token()
    assert len(token) == 32
    assert set(token) <= set(string.hexdigits.lower())
    assert generate_token() != token


@pytest.mark.asyncio
async def test_create_and_list(db_session, services):
    first, second = await _boards(db_session)

    read_share = await services.shares.create(db_session, first.id, "read")
    edit_share = await services.shares.create(db_session, first.id, "edit")
    await services.shares.create(db_session, second.id, "read")

    shares = await services.shares.list(db_session, first.id)
    assert [s.id for s in shares] == [read_share.id, edit_share.id]
    assert read_share.token != edit_share.token
    assert edit_share.permission == "edit"


@pytest.mark.asyncio
async def test_revoke_is_scoped_to_board(db_session, services):
    first, second = await _boards(db_session)
    share = await services.shares.create(db_session, first.id, "read")

    with pytest.raises(NotFoundError):
        await services.shares.revoke(db_session, second.id, share.id)

    await services.shares.revoke(db_session, first.id, share.id)
    assert await services.shares.list(db_session, first.id) == []


@pytest.mark.asyncio
async def test_duplicate_token_surfaces_database_error(db_session, services):
    first, _ = await _boards(db_session)
    with patch("brainboard.services.share_service.generate_token", return_value="f" * 32):
        await services.shares.create(db_session, first.id, "read")
        with pytest.raises(DatabaseError):
            await services.shares.create(db_session, first.id, "edit")
