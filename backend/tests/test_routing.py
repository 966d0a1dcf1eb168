"""
Brainboard Backend: Routing, Auth and Envelope Tests
====================================================

What we test:
    ✅ Error envelope shape and status codes (400/401/403/404/405)
    ✅ CORS preflight answered with 204
    ✅ X-Request-ID and Cache-Control on every response
    ✅ Signup / login / me / emailToID
    ✅ Share links: read vs edit, revocation, cross-board card ids
    ✅ Health check
"""

import logging

import pytest


async def _board_with_card(client, headers, title="Board"):
    board_id = (await client.post("/boards", json={"title": title}, headers=headers)).json()["id"]
    card_id = (await client.post(f"/boards/{board_id}/cards", json={"text": "x"}, headers=headers)).json()["id"]
    return board_id, card_id


# ── Envelope and status codes ─────────────────────────────────────────────

class TestStatusCodes:
    @pytest.mark.asyncio
    async def test_missing_session_is_401(self, client):
        response = await client.get("/boards")
        assert response.status_code == 401
        body = response.json()
        assert body["code"] == "unauthenticated"
        assert body["error"]
        assert body["request_id"]

    @pytest.mark.asyncio
    async def test_malformed_session_is_401(self, client):
        response = await client.get("/boards", headers={"Authorization": "Bearer nonsense"})
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_numeric_id_is_400(self, client, register):
        headers, _ = await register("a@example.com")
        response = await client.get("/boards/abc", headers=headers)
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_input"
        assert "details" in response.json()

    @pytest.mark.asyncio
    async def test_blank_title_is_400(self, client, register):
        headers, _ = await register("a@example.com")
        response = await client.post("/boards", json={"title": "   "}, headers=headers)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_route_is_404(self, client):
        response = await client.get("/nowhere")
        assert response.status_code == 404
        assert response.json()["code"] == "not_found"

    @pytest.mark.asyncio
    async def test_wrong_method_is_405(self, client, register):
        headers, _ = await register("a@example.com")
        response = await client.patch("/boards/1", json={}, headers=headers)
        assert response.status_code == 405
        assert response.json()["code"] == "method_not_allowed"

    @pytest.mark.asyncio
    async def test_unknown_board_is_403(self, client, register):
        headers, _ = await register("a@example.com")
        assert (await client.get("/boards/9999", headers=headers)).status_code == 403

    @pytest.mark.asyncio
    async def test_unknown_card_is_404(self, client, register):
        headers, _ = await register("a@example.com")
        response = await client.put("/cards/9999", json={"text": "y"}, headers=headers)
        assert response.status_code == 404
        assert response.json()["error"] == "Card not found"

    @pytest.mark.asyncio
    async def test_stranger_cannot_touch_card(self, client, register):
        alice, _ = await register("alice@example.com")
        mallory, _ = await register("mallory@example.com")
        _, card_id = await _board_with_card(client, alice)

        assert (await client.put(f"/cards/{card_id}", json={"text": "pwned"}, headers=mallory)).status_code == 403
        assert (await client.delete(f"/cards/{card_id}", headers=mallory)).status_code == 403


class TestCrossCuttingHeaders:
    @pytest.mark.asyncio
    async def test_preflight_returns_204(self, client):
        response = await client.options(
            "/boards",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Authorization, Content-Type",
            },
        )
        assert response.status_code == 204
        assert response.headers["access-control-allow-origin"] == "http://localhost:5173"
        assert "PUT" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_request_id_generated_and_echoed(self, client):
        generated = await client.get("/health")
        assert len(generated.headers["x-request-id"]) == 8

        echoed = await client.get("/health", headers={"X-Request-ID": "abc123"})
        assert echoed.headers["x-request-id"] == "abc123"

    @pytest.mark.asyncio
    async def test_responses_are_not_cached(self, client):
        response = await client.get("/health")
        assert response.headers["cache-control"] == "no-store"


# ── Auth ──────────────────────────────────────────────────────────────────

class TestAuth:
    @pytest.mark.asyncio
    async def test_signup_then_login(self, client, register):
        _, user_id = await register("alice@example.com", "pw-1")

        response = await client.post("/login", json={"email": "ALICE@example.com", "password": "pw-1"})
        assert response.status_code == 200
        me = await client.get("/me", headers={"Authorization": f"Bearer {response.json()['token']}"})
        assert me.json() == {"user_id": user_id, "email": "alice@example.com"}

    @pytest.mark.asyncio
    async def test_duplicate_signup(self, client, register):
        await register("alice@example.com")
        response = await client.post("/signup", json={"email": "alice@example.com", "password": "x"})
        assert response.status_code == 400
        assert response.json()["code"] == "duplicate_email"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client, register):
        await register("alice@example.com", "right")
        response = await client.post("/login", json={"email": "alice@example.com", "password": "wrong"})
        assert response.status_code == 401
        assert response.json()["code"] == "invalid_credentials"

    @pytest.mark.asyncio
    async def test_signup_requires_email_shape(self, client):
        response = await client.post("/signup", json={"email": "nope", "password": "x"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_email_to_id(self, client, register):
        headers, _ = await register("alice@example.com")
        _, bob_id = await register("bob@example.com")

        found = await client.get("/emailToID", params={"email": "Bob@Example.com"}, headers=headers)
        assert found.json() == {"user_id": bob_id}

        missing = await client.get("/emailToID", params={"email": "nobody@example.com"}, headers=headers)
        assert missing.status_code == 404

        assert (await client.get("/emailToID", params={"email": "bob@example.com"})).status_code == 401


# ── Share links ───────────────────────────────────────────────────────────

class TestShareLinks:
    @pytest.mark.asyncio
    async def test_read_link(self, client, register, png_upload):
        alice, _ = await register("alice@example.com")
        board_id, card_id = await _board_with_card(client, alice, "Shared")
        token = (await client.post(f"/boards/{board_id}/share", json={"permission": "read"}, headers=alice)).json()["token"]

        board = await client.get(f"/share/{token}")
        assert board.status_code == 200
        assert board.json()["title"] == "Shared"
        assert board.json()["permission"] == "read"
        assert [c["id"] for c in (await client.get(f"/share/{token}/cards")).json()] == [card_id]
        assert (await client.get(f"/permission/{token}")).json() == {"permission": "read"}

        assert (await client.put(f"/share/{token}/cards/{card_id}", json={"text": "no"})).status_code == 403
        assert (await client.post(f"/share/{token}/cards", json={"text": "no"})).status_code == 403
        assert (await client.delete(f"/share/{token}/cards/{card_id}")).status_code == 403
        assert (await client.post(f"/share/{token}/images", files=png_upload)).status_code == 403

    @pytest.mark.asyncio
    async def test_edit_link(self, client, register, storage, png_upload):
        alice, _ = await register("alice@example.com")
        board_id, card_id = await _board_with_card(client, alice)
        token = (await client.post(f"/boards/{board_id}/share", json={"permission": "edit"}, headers=alice)).json()["token"]

        created = await client.post(f"/share/{token}/cards", json={"text": "anon", "position_x": 5.5})
        assert created.status_code == 200
        assert created.json()["board_id"] == board_id
        assert created.json()["position_x"] == 5.5

        upload = await client.post(f"/share/{token}/images", files=png_upload)
        assert upload.status_code == 200
        assert f"images/{board_id}/" in upload.json()["url"]

        deleted = await client.delete(f"/share/{token}/cards/{card_id}")
        assert deleted.json() == {"status": "deleted"}

    @pytest.mark.asyncio
    async def test_link_cannot_reach_other_boards(self, client, register):
        alice, _ = await register("alice@example.com")
        shared_board, _ = await _board_with_card(client, alice, "Shared")
        _, private_card = await _board_with_card(client, alice, "Private")
        token = (await client.post(f"/boards/{shared_board}/share", json={"permission": "edit"}, headers=alice)).json()["token"]

        response = await client.put(f"/share/{token}/cards/{private_card}", json={"text": "leak"})
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_owner_permission_cannot_be_shared(self, client, register):
        alice, _ = await register("alice@example.com")
        board_id, _ = await _board_with_card(client, alice)
        response = await client.post(f"/boards/{board_id}/share", json={"permission": "owner"}, headers=alice)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_revoked_link(self, client, register):
        alice, _ = await register("alice@example.com")
        board_id, _ = await _board_with_card(client, alice)
        share = (await client.post(f"/boards/{board_id}/share", json={"permission": "edit"}, headers=alice)).json()
        assert [s["id"] for s in (await client.get(f"/boards/{board_id}/share", headers=alice)).json()] == [share["id"]]

        revoked = await client.request(
            "DELETE", f"/boards/{board_id}/share", json={"share_id": share["id"]}, headers=alice
        )
        assert revoked.json() == {"status": "deleted"}

        response = await client.get(f"/share/{share['token']}")
        assert response.status_code == 403
        assert response.json()["error"] == "Invalid or expired share link"
        assert (await client.get(f"/permission/{share['token']}")).json() == {"permission": "none"}

    @pytest.mark.asyncio
    async def test_unknown_token(self, client):
        assert (await client.get("/share/" + "0" * 32 + "/cards")).status_code == 403
        assert (await client.get("/permission/unknown")).json() == {"permission": "none"}


# ── Health ────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["version"] == "1.0.0"


@pytest.mark.asyncio
async def test_access_log_redacts_share_tokens(client, caplog):
    token = "abcd" + "0" * 28
    caplog.set_level(logging.INFO, logger="brainboard.access")

    await client.get(f"/share/{token}/cards")

    messages = [r.getMessage() for r in caplog.records if r.name == "brainboard.access"]
    assert any("/share/abcd.../cards -> 403" in m for m in messages)
    assert not any(token in m for m in messages)
