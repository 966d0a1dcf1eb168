"""
Brainboard Backend: CORS and Cache Headers
==========================================

What:  CORS for the configured front-end origins, with preflight requests
       answered by an empty 204, and `Cache-Control: no-store` on every
       response so browsers never cache board state.
"""

from typing import List

from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import Response

ALLOWED_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
ALLOWED_HEADERS = ["Content-Type", "Authorization"]


class PreflightCORSMiddleware(CORSMiddleware):
    """Starlette's CORSMiddleware, with successful preflights returned as 204 and no body."""

    def __init__(self, app, allow_origins: List[str]):
        super().__init__(
            app,
            allow_origins=allow_origins,
            allow_methods=ALLOWED_METHODS,
            allow_headers=ALLOWED_HEADERS,
            allow_credentials=True,
            expose_headers=["X-Request-ID"],
            max_age=600,
        )

    def preflight_response(self, request_headers: Headers) -> Response:
        response = super().preflight_response(request_headers)
        if response.status_code != 200:
            return response
        headers = {
            name: value
            for name, value in response.headers.items()
            if name.lower() not in ("content-length", "content-type")
        }
        return Response(status_code=204, headers=headers)


class NoStoreMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        response.headers.setdefault("Cache-Control", "no-store")
        return response
