"""
FastAPI application for the scribe service.

This is the HTTP boundary: it builds the process-wide collaborators at
startup, mounts the routers, and maps core failures onto responses.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from scribe.config import get_settings, Settings
from scribe.storage import create_local_storage, StorageProvider
from scribe.auth import AccountService, TokenService, auth_router
from scribe.core.errors import AuthenticationRequired, ScribeError
from scribe.integrations.sentry import capture_exception, init_sentry
from scribe.services.posts import PostService
from scribe.api.blog import router as blog_router

logger = logging.getLogger(__name__)


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
) -> FastAPI:
    """
    Build the application.

    `settings` and `storage` default to the environment config and the
    in-memory store; tests pass their own.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize and cleanup app resources."""
        if init_sentry(settings):
            logger.info("Sentry error tracking enabled")

        # The signing secret is read here once and never touched again
        state = app.state
        state.settings = settings
        state.storage = storage if storage is not None else create_local_storage()
        state.tokens = TokenService.from_settings(settings)
        state.accounts = AccountService(state.storage, state.tokens, settings)
        state.posts = PostService(state.storage, state.accounts, settings)

        logger.info("Scribe API starting in %s mode", settings.environment)

        yield

        logger.info("Scribe API shutting down")

    app = FastAPI(
        title="Scribe API",
        description="Multi-user publishing: accounts, posts, comments and likes",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def clear_rejected_session(request: Request, call_next):
        """Drop the cookie of any request whose token failed to resolve."""
        response = await call_next(request)
        if getattr(request.state, "clear_session", False):
            response.delete_cookie(settings.session_cookie_name, httponly=True)
        return response

    _register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(blog_router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "scribe-api"}

    return app


# =============================================================================
# Error Handling
# =============================================================================


def _wants_html(request: Request) -> bool:
    return "text/html" in request.headers.get("accept", "")


def _describe_invalid(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = first.get("msg", "invalid value")
    return f"Invalid {field}: {message}" if field else f"Invalid request: {message}"


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(AuthenticationRequired)
    async def handle_auth_required(request: Request, exc: AuthenticationRequired):
        # Browsers go to the login page, API clients get a 401
        if _wants_html(request):
            return RedirectResponse(exc.login_url, status_code=303)
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "login_url": exc.login_url},
        )

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError):
        # Malformed input gets the same 400 shape as a ValidationError
        return JSONResponse(status_code=400, content={"error": _describe_invalid(exc)})

    @app.exception_handler(ScribeError)
    async def handle_scribe_error(request: Request, exc: ScribeError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        capture_exception(exc, path=request.url.path, method=request.method)
        return JSONResponse(status_code=500, content={"error": "Something went wrong!"})
