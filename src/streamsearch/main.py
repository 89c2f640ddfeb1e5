"""Streamsearch API - Main application entry point."""

from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import FastAPI

from streamsearch.core.config import settings
from streamsearch.search.router import router as search_router

log = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    log.info(
        "Starting Streamsearch API",
        version=settings.version,
        environment=settings.environment,
        engines=settings.enabled_engines,
    )

    yield

    log.info("Shutting down Streamsearch API")


app = FastAPI(
    title="Streamsearch API",
    description="Concurrent multi-engine search with results streamed as they are parsed",
    version=settings.version,
    lifespan=lifespan,
)

app.include_router(search_router)


@app.get("/health")
async def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.version,
        "environment": settings.environment,
    }
