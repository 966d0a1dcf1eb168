"""
Brainboard Backend: API Routes Package
======================================

What:  HTTP route handlers and the order they are registered in.

Routing table:
    Starlette matches routes in registration order, so ROUTERS encodes the
    dispatch priority: literal sub-resources of /boards/{id} are registered
    before the bare /boards/{id} detail route, and the share card routes
    before the bare /share/{token} view. Ids are typed `int`; a non-numeric
    id is rejected as invalid input.

    auth                  /signup /login /me /emailToID
    boards.collection     /boards
    cards.board           /boards/{id}/cards
    access                /boards/{id}/access
    share.manage          /boards/{id}/share
    boards.subresource    /boards/{id}/thumbnail /boards/{id}/images
    boards.detail         /boards/{id}
    cards.card            /cards/{id}
    share.public          /share/{token}/cards/{id} /share/{token}/cards
                          /share/{token}/images /share/{token}
    share.permission      /permission/{token}
    files                 /files/{key}
    health                /health

Routes stay thin: extract input, authorize, call one service, shape output.
"""

from fastapi import FastAPI

from brainboard.routes import access, auth, boards, cards, files, health, share

ROUTERS = (
    auth.router,
    boards.collection_router,
    cards.board_router,
    access.router,
    share.manage_router,
    boards.subresource_router,
    boards.detail_router,
    cards.card_router,
    share.public_router,
    share.permission_router,
    files.router,
    health.router,
)


def include_routers(app: FastAPI) -> None:
    for router in ROUTERS:
        app.include_router(router)
