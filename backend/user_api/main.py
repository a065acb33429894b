"""User API - FastAPI application factory and entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - One InMemoryUserStore per application, injected into UserService and
      exposed to routes through app.state
    - Global error handlers map UserApiError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Tracing provider installed on creation when enabled, flushed on shutdown
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from user_api.api.error_handlers import register_error_handlers
from user_api.api.middleware import JSONContentTypeMiddleware, LoggingMiddleware
from user_api.api.routes import health, users
from user_api.config import Settings, get_settings
from user_api.infrastructure.observability import setup_logging
from user_api.infrastructure.tracing import flush_tracing, setup_tracing
from user_api.infrastructure.user_store import InMemoryUserStore
from user_api.services.user_service import UserService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings: Settings = app.state.settings
    setup_logging(settings.log_level, settings.log_format)
    logger.info(
        "User API started on %s:%s (environment=%s, tracing=%s)",
        settings.host, settings.port, settings.environment, settings.tracing_enabled,
    )
    yield
    logger.info("User API shutting down")
    if app.state.tracer_provider is not None:
        flush_tracing()


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build a fully wired application with its own store."""
    settings = settings or get_settings()
    app = FastAPI(
        title="User API", version=settings.service_version, lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.user_service = UserService(InMemoryUserStore())
    app.state.tracer_provider = setup_tracing(settings, app)

    # Added innermost first: CORS wraps logging wraps the JSON guard
    app.add_middleware(JSONContentTypeMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Origin", "Content-Type", "Content-Length", "Accept-Encoding",
            "X-CSRF-Token", "Authorization",
        ],
    )

    app.include_router(health.router)
    app.include_router(users.router)

    register_error_handlers(app)
    return app


app = create_app()
