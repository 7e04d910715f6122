"""Response header middleware.

Cycle logs are personal health data, so API responses are marked
uncacheable and carry the usual hardening headers.  The interactive docs
pages load Swagger/ReDoc assets from a CDN and are exempt from the CSP.
"""

from __future__ import annotations

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

BASE_HEADERS: dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
    "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
}

CSP = "default-src 'none'; frame-ancestors 'none'"
DOCS_PATHS = ("/docs", "/redoc", "/openapi.json")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, api_prefix: str = "/api/") -> None:
        super().__init__(app)
        self.api_prefix = api_prefix

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        path = request.url.path
        for header, value in BASE_HEADERS.items():
            response.headers.setdefault(header, value)
        if not path.startswith(DOCS_PATHS):
            response.headers.setdefault("Content-Security-Policy", CSP)
        if path.startswith(self.api_prefix):
            response.headers["Cache-Control"] = "no-store"
        return response
