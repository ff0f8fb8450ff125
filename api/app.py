"""
Application factory.

Builds the FastAPI app around one InferenceCoordinator:
  - body size limit (outermost, before any decoding)
  - JSON error translation for every route
  - inference / health / status routes
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from config import Config
from inference import InferenceCoordinator

from .errors import install_error_handlers
from .limits import BodySizeLimitMiddleware
from .routes import router

logger = logging.getLogger(__name__)

APP_TITLE = "On-Device Inference API"
APP_VERSION = "1.0.0"


def _default_coordinator() -> InferenceCoordinator:
    from infra import bootstrap_infrastructure

    return bootstrap_infrastructure().get_coordinator()


def create_app(
    coordinator: Optional[InferenceCoordinator] = None,
    max_body_bytes: Optional[int] = None,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        coordinator: Coordinator to serve (bootstrapped from environment when omitted)
        max_body_bytes: Request body limit (Config.MAX_BODY_BYTES when omitted)

    Returns:
        Configured FastAPI app
    """
    if coordinator is None:
        coordinator = _default_coordinator()
    limit = Config.MAX_BODY_BYTES if max_body_bytes is None else max_body_bytes
    if limit <= 0:
        raise ValueError(f"max_body_bytes must be positive, got {limit}")

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan: startup and shutdown handlers.
        """
        # Startup
        available, message = await coordinator.oracle.status()
        logger.info("=" * 60)
        logger.info("Inference server starting up...")
        logger.info(f"Backend: {type(coordinator.backend).__name__}")
        logger.info(f"Model: {message}")
        logger.info(f"Max body size: {limit} bytes")
        logger.info("=" * 60)

        yield

        # Shutdown
        logger.info("Inference server shutting down...")
        await coordinator.aclose()

    app = FastAPI(
        title=APP_TITLE,
        description="Local text generation over HTTP",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.coordinator = coordinator

    install_error_handlers(app)
    app.add_middleware(BodySizeLimitMiddleware, max_body_bytes=limit)
    app.include_router(router)

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": APP_TITLE,
            "version": APP_VERSION,
            "endpoints": {
                "inference": "POST /inference",
                "health": "GET /health",
                "status": "GET /status",
            },
        }

    return app
