"""
Application entry point.

Creates the FastAPI application and wires together:
- Routers
- Fault pipeline (boundary, translator, not-found handler)
- Security middleware (headers, CORS, rate limiting)
- Logging configuration
- Process-wide fault handlers (installed by ``run``)

Serve through ``run()`` (the ``faultline`` console script). A bare
``uvicorn faultline.main:app`` skips the process fault handlers.

No business logic belongs here.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from faultline.core.config import Settings, settings
from faultline.infrastructure.database import connect_database
from faultline.interfaces.examples import router as examples_router
from faultline.interfaces.health import router as health_router
from faultline.shared.errors.boundary import AsyncBoundaryMiddleware
from faultline.shared.errors.handlers import register_error_handlers
from faultline.shared.errors.not_found import install_not_found_handler
from faultline.shared.errors.process import (
    current_process_handlers,
    install_process_handlers,
)
from faultline.shared.logging import configure_logging
from faultline.shared.security.headers import SecurityHeadersMiddleware
from faultline.shared.security.rate_limiting import limiter

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: attach loop fault handling, open the database."""
    handlers = current_process_handlers()
    if handlers is not None:
        handlers.attach_loop(asyncio.get_running_loop())

    config: Settings = app.state.settings
    if config.database_url:
        app.state.db_engine = connect_database(config.database_url)

    yield

    engine = getattr(app.state, "db_engine", None)
    if engine is not None:
        engine.dispose()


def create_app(config: Optional[Settings] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    This is the composition root of the application.

    Args:
        config: Settings to build the app with. Defaults to the
            environment-loaded settings.

    Returns:
        A fully configured FastAPI application instance.
    """
    config = config or settings
    configure_logging(level=config.log_level)

    app = FastAPI(
        title=config.project_name,
        version=config.version,
        docs_url="/docs" if config.debug else None,
        redoc_url="/redoc" if config.debug else None,
        lifespan=lifespan,
    )
    app.state.settings = config

    # --- Rate Limiting ---
    app.state.limiter = limiter

    # --- Fault pipeline ---
    translator = register_error_handlers(app, debug=config.debug)
    install_not_found_handler(app)

    # --- Middleware (last added runs first) ---
    app.add_middleware(AsyncBoundaryMiddleware, translator=translator)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.frontend_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Routers ---
    app.include_router(health_router, prefix="/api/v1")
    if config.expose_examples:
        app.include_router(examples_router, prefix="/api/v1")

    return app


app = create_app()


def run(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Serve the application, guarded by the process fault handlers."""
    install_process_handlers(
        debug=settings.debug,
        grace_seconds=settings.shutdown_grace_seconds,
    )
    logger.info(
        "Starting %s on port %d (debug=%s)", settings.project_name, port, settings.debug
    )
    uvicorn.run(app, host=host, port=port, log_config=None)


if __name__ == "__main__":
    run()
