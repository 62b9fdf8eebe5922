# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app (Swagger UI at /docs).
* Register CORS and request-logging middleware.
* Install the domain-error → HTTP status mapping.
* Mount the auth and users routers under ``settings.api_prefix``.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
CORS origins come from settings and default to localhost only.  Set
CORS_ALLOW_ORIGINS to the exact frontend origin before deploying.
"""

import time

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from auth.router import router as auth_router
from users.router import router as users_router
from core.config import settings
from core.errors import register_exception_handlers
from core.logger import logger
from core.security import get_client_ip

app = FastAPI(title="User Management API", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Bodies and headers are NOT echoed – they carry passwords and tokens.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            get_client_ip(request),
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Errors & routers
# ---------------------------------------------------------------------------
register_exception_handlers(app)

app.include_router(auth_router, prefix=settings.api_prefix)
app.include_router(users_router, prefix=settings.api_prefix)

# ---------------------------------------------------------------------------
# Lifecycle & health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("User Management service starting up")


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("User Management service shutting down")


@app.get("/health")
def health():
    return {"status": "ok"}
