"""
FastAPI application for the blog API.

Use `create_app()` to build an app; `blogapi.main:app` is the instance
served by uvicorn.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from blogapi.api import categories, comments, posts, users
from blogapi.api.deps import describe_errors
from blogapi.api.state import AppState, create_storage
from blogapi.auth.routes import password_router, router as auth_router
from blogapi.config import Settings, get_settings
from blogapi.core.errors import BlogError, PartialFailure
from blogapi.integrations.email import EmailService
from blogapi.integrations.sentry import capture_exception, init_sentry
from blogapi.storage import StorageProvider

logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings: Settings = app.state.settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    init_sentry(settings)

    logger.info(f"Blog API starting in {settings.environment} mode")

    yield

    logger.info("Blog API shutting down")


# =============================================================================
# Error handlers
# =============================================================================


async def handle_blog_error(request: Request, exc: BlogError) -> JSONResponse:
    if exc.status_code >= 500:
        context = {"path": request.url.path}
        if isinstance(exc, PartialFailure):
            context.update(
                target=exc.target,
                completed_steps=exc.completed_steps,
                failed_step=exc.failed_step,
            )
        logger.error(f"{exc.code}: {exc.message} {context}")
        capture_exception(exc, **context)

    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": describe_errors(list(exc.errors())), "code": "validation_error"},
    )


# =============================================================================
# App Setup
# =============================================================================


def create_app(
    settings: Settings | None = None,
    storage: StorageProvider | None = None,
    notifier: EmailService | None = None,
) -> FastAPI:
    """
    Build the API with all services wired.

    Any collaborator not supplied is created from settings.
    """
    settings = settings or get_settings()
    state = AppState.build(
        settings,
        storage=storage or create_storage(settings),
        notifier=notifier or EmailService(settings),
    )

    app = FastAPI(
        title="Blog API",
        description="Posts, comments, likes and categories with owner/admin moderation",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = state
    app.state.tokens = state.tokens

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BlogError, handle_blog_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation)

    for router in (
        auth_router,
        password_router,
        users.router,
        posts.router,
        comments.router,
        categories.router,
    ):
        app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "blogapi"}

    return app
