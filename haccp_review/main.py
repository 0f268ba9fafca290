from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import sessionmaker

from haccp_review import __version__
from haccp_review.api.v1.router import router as api_v1_router
from haccp_review.config.logging import get_logger, setup_logging
from haccp_review.config.settings import Settings, get_settings
from haccp_review.core.middleware import register_exception_handlers
from haccp_review.db.init_db import init_db
from haccp_review.db.session import get_session_factory
from haccp_review.utils.datetime_utils import utcnow

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[sessionmaker] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Application factory for the FastAPI app.

    - Configures title, version, debug mode from Settings.
    - Registers CORS and exception handlers.
    - Includes the versioned API router under API_V1_STR.
    """
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    app.state.settings = settings
    app.state.session_factory = session_factory or get_session_factory()
    app.state.clock = clock or utcnow

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=settings.CORS_ORIGINS != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    app.include_router(api_v1_router, prefix=settings.API_V1_STR)

    # Create missing tables outside production; production uses migrations
    @app.on_event("startup")
    async def on_startup() -> None:
        if not settings.is_production():
            init_db(app.state.session_factory.kw.get("bind"))
        logger.info(f"{settings.APP_NAME} {__version__} started ({settings.ENVIRONMENT})")

    return app


app = create_app()
