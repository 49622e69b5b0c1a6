"""Security Headers Middleware

Adds security headers to HTTP responses to protect against common web vulnerabilities.

The storefront API only serves JSON, so the Content Security Policy forbids
every resource type and framing.

Disabled by default, enable with SECURITY_HEADERS_ENABLED=true.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
import config


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware that adds security headers to all HTTP responses."""

    async def dispatch(self, request: Request, call_next) -> Response:
        response = await call_next(request)

        # Prevent MIME type sniffing
        response.headers["X-Content-Type-Options"] = "nosniff"

        # Prevent clickjacking
        response.headers["X-Frame-Options"] = "DENY"

        # Only add if serving over HTTPS
        if config.HSTS_ENABLED:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        response.headers["Referrer-Policy"] = "no-referrer"
        response.headers["Content-Security-Policy"] = "default-src 'none'; frame-ancestors 'none'"

        # Order responses carry shipping details
        if request.url.path.startswith("/api/"):
            response.headers["Cache-Control"] = "no-store"

        return response
