"""FastAPI application factory."""

from __future__ import annotations

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from foome.config.logging import setup_logging
from foome.config.settings import get_settings
from foome.web.errors import register_exception_handlers
from foome.web.health import VERSION
from foome.web.health import router as health_router
from foome.web.middleware import ErrorEnvelopeMiddleware, RateLimitMiddleware, RequestIDMiddleware
from foome.web.routes.addresses import router as addresses_router
from foome.web.routes.auth import router as auth_router
from foome.web.routes.companies import router as companies_router
from foome.web.routes.dependents import router as dependents_router
from foome.web.routes.documents import router as documents_router
from foome.web.routes.employees import router as employees_router
from foome.web.routes.onboarding import router as onboarding_router
from foome.web.routes.photos import router as photos_router
from foome.web.routes.roles import router as roles_router
from foome.web.routes.teams import router as teams_router
from foome.web.routes.time_off import router as time_off_router

logger = structlog.get_logger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_output=not settings.debug)

    app = FastAPI(
        title="Foome",
        description="Multi-tenant HR management API",
        version=VERSION,
    )
    register_exception_handlers(app)

    # Last added runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )
    app.add_middleware(
        RateLimitMiddleware, max_requests=settings.rate_limit_per_minute, window_seconds=60
    )
    app.add_middleware(ErrorEnvelopeMiddleware)
    app.add_middleware(RequestIDMiddleware)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(companies_router)
    app.include_router(photos_router)
    app.include_router(roles_router)
    app.include_router(dependents_router)
    app.include_router(addresses_router)
    app.include_router(time_off_router)
    app.include_router(employees_router)
    app.include_router(teams_router)
    app.include_router(onboarding_router)
    app.include_router(documents_router)

    logger.info("app_created")
    return app
