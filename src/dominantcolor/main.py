"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dominantcolor.api.routes import router
from dominantcolor.config import get_settings
from dominantcolor.engine.pool import ExtractionPool

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan: initialize on startup, clean up on shutdown."""
    settings = get_settings()
    app.state.settings = settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    logger.info(
        "Starting DominantColor (algorithm=%s, quantization_bits=%s, max_concurrent=%s)",
        settings.algorithm,
        settings.quantization_bits,
        settings.max_concurrent,
    )

    extraction_pool = ExtractionPool(settings.max_concurrent)
    app.state.extraction_pool = extraction_pool

    logger.info("DominantColor ready")
    yield

    logger.info("Shutting down DominantColor")
    extraction_pool.shutdown()
    logger.info("DominantColor shutdown complete")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="DominantColor",
        description="Dominant color extraction API for images",
        version="0.1.0",
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(router)
    return application


app = create_app()


def run() -> None:
    """Serve the app with uvicorn on the configured host and port."""
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
