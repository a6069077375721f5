"""
HTTP Middleware
Response caching headers, rate limiting and maintenance gating
"""

import logging
import time
from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from app.dependencies import request_host
from app.errors import RegistrationError
from app.services import rate_limiter as rate_limiting
from app.services.conference_service import conference_service, is_on_maintenance

logger = logging.getLogger(__name__)

MAINTENANCE_EXEMPT_PATHS = ("/api/check-maintenance", "/api/health")


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Prevent browser and CDN caching of API responses"""
    async def dispatch(self, request: Request, call_next):
        response: Response = await call_next(request)
        if request.url.path.startswith("/api/") and "cache-control" not in response.headers:
            response.headers["Cache-Control"] = "no-cache, no-store, must-revalidate"
            response.headers["Pragma"] = "no-cache"
            response.headers["Expires"] = "0"
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window throttling per endpoint and client IP"""
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith("/api/") or path == "/api/health":
            return await call_next(request)

        fallback = request.client.host if request.client else None
        ip = rate_limiting.client_ip(request.headers, fallback)
        decision = await rate_limiting.rate_limiter.check(path, ip)

        headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
            "X-RateLimit-Reset": str(int(decision.reset_at)),
        }

        if not decision.allowed:
            retry_after = decision.retry_after(time.time())
            logger.warning("Rate limit exceeded for %s on %s", ip, path)
            headers["Retry-After"] = str(retry_after)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Too many requests. Please try again later.",
                    "retryAfter": retry_after,
                },
                headers=headers
            )

        response: Response = await call_next(request)
        response.headers.update(headers)
        return response


class MaintenanceMiddleware(BaseHTTPMiddleware):
    """Answer 503 for API calls while the conference is on maintenance"""
    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith("/api/") or path in MAINTENANCE_EXEMPT_PATHS:
            return await call_next(request)

        try:
            conference = await conference_service.resolve(request_host(request), request.query_params.get("confcode"))
        except RegistrationError as e:
            # Resolution failures surface from the endpoint itself
            logger.warning("Maintenance check skipped for %s: %s", path, e)
            return await call_next(request)

        if conference and is_on_maintenance(conference):
            return JSONResponse(
                status_code=503,
                content={
                    "error": "Registration is temporarily unavailable due to maintenance. Please check back later.",
                    "onMaintenance": True,
                }
            )

        return await call_next(request)
