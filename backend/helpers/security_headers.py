"""
Security headers middleware for FastAPI.

Adds standard security headers to every response. Uploaded images are
allowed to be cached by the browser; JSON responses are not.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from models.config import settings

# Routes that serve uploaded image files
CACHEABLE_PREFIXES = ("/api/posts/images/",)
CACHEABLE_SUFFIXES = ("/avatar",)


def _is_cacheable(request: Request) -> bool:
    path = request.url.path
    return request.method == "GET" and (
        path.startswith(CACHEABLE_PREFIXES) or path.endswith(CACHEABLE_SUFFIXES)
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds security headers to all responses.

    Headers added:
    - X-Content-Type-Options: Prevents MIME type sniffing
    - X-Frame-Options: Prevents clickjacking attacks
    - Referrer-Policy: Controls referrer information sent
    - Content-Security-Policy: The API serves JSON and images only
    - Strict-Transport-Security: Forces HTTPS (in production)
    - Cache-Control: no-store for everything except uploaded images
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = (
            "default-src 'none'; img-src 'self'; frame-ancestors 'none'"
        )

        if settings.is_production:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        if _is_cacheable(request):
            response.headers.setdefault("Cache-Control", "public, max-age=86400")
        elif "Cache-Control" not in response.headers:
            response.headers["Cache-Control"] = "no-store, max-age=0"

        return response
