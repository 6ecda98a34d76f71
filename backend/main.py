# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261017v1
# ---------------------------------------------------------------------------
"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS, request-logging and admin page guard middleware.
* Register the error handlers that render ``core.errors`` as JSON.
* Mount the feature routers (auth, admin, posts, comments, tags) under /api.
* Mount the frontend static files so a single ``uvicorn`` process serves
  both the API and the pages.
* Expose a /health endpoint for container liveness checks.

Production note
---------------
CORS origins come from settings (``CORS_ORIGINS``).  The default only allows
localhost:8000.
"""

import time
from pathlib import Path
from urllib.parse import quote

from fastapi import APIRouter, FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles

from auth.router import router as auth_router
from admin.router import router as admin_router
from posts.router import router as admin_posts_router
from posts.public import router as posts_router
from comments.router import router as comments_router, admin_router as admin_comments_router
from tags.router import router as tags_router, admin_router as admin_tags_router
from core.config import settings
from core.errors import AuthenticationError, register_error_handlers
from core.logger import logger
from core.policy import LOGIN_PATH, has_role, required_role_for_path
from core.security import decode_access_token

app = FastAPI(title="Microblog CMS", version="1.0.0")

register_error_handlers(app)

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Admin page guard
# ---------------------------------------------------------------------------
# Browser pages under /admin are checked against the role claim in the
# session cookie so unauthenticated visitors bounce to the login page early.
# The API routes re-check everything through core.policy.authorize.


class _AdminPageGuardMiddleware(BaseHTTPMiddleware):
    """Redirect anonymous visitors to login; 403 under-privileged ones."""

    async def dispatch(self, request: Request, call_next) -> Response:
        path = request.url.path
        required = required_role_for_path(path)
        if required is None:
            return await call_next(request)

        payload = None
        token = request.cookies.get(settings.session_cookie_name)
        if token:
            try:
                payload = decode_access_token(token)
            except AuthenticationError:
                payload = None

        if payload is None:
            return RedirectResponse(f"{LOGIN_PATH}?returnUrl={quote(path, safe='/')}", status_code=303)

        if not has_role(payload.get("role"), required):
            logger.info("Page %s refused for role %s", path, payload.get("role"))
            return JSONResponse(
                status_code=403,
                content={
                    "error": "Forbidden",
                    "message": f"This page requires the {required.value} role",
                    "reason": "insufficient_role",
                },
            )
        return await call_next(request)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Sensitive paths (login payload, password fields) are NOT echoed – only the
# URL and metadata are recorded.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_AdminPageGuardMiddleware)
# Added last so it wraps the guard and logs its redirects too
app.add_middleware(_RequestLogMiddleware)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
api = APIRouter(prefix="/api")
api.include_router(auth_router)
api.include_router(admin_router)
api.include_router(admin_posts_router)
api.include_router(admin_comments_router)
api.include_router(admin_tags_router)
api.include_router(posts_router)
api.include_router(comments_router)
api.include_router(tags_router)
app.include_router(api)

# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Microblog CMS service starting up (rate limit backend: %s)", settings.rate_limit_backend)


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Microblog CMS service shutting down")


@app.get("/health")
def health():
    return {"status": "ok"}


# ---------------------------------------------------------------------------
# Static files – frontend
# ---------------------------------------------------------------------------
# Mounted *after* the API routers so that /api/* is handled by FastAPI
# first.  ``html=True`` makes the mount serve index.html for directory
# requests.
_FRONTEND_DIR = Path(__file__).resolve().parent.parent / "frontend"

if _FRONTEND_DIR.is_dir():
    app.mount("/", StaticFiles(directory=str(_FRONTEND_DIR), html=True), name="frontend")
