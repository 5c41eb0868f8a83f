"""
FastAPI Backend for the Petro-Core catalog.

Read-only API over the rock and mineral catalog pipeline: combined search
with facets, and duplicate reports for curators.
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from api.routes import catalog
from catalog.config import get_settings
from catalog.connectors import MemoryCache, create_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    settings = get_settings()

    # Startup: one store and one gallery cache shared by all requests
    logger.info("Starting Petro-Core Catalog API...")
    app.state.store = create_store(settings)
    app.state.image_cache = None
    if settings.pipeline.image_cache_ttl > 0:
        app.state.image_cache = MemoryCache(
            max_size=settings.pipeline.image_cache_size,
            default_ttl=settings.pipeline.image_cache_ttl,
        )
    logger.info(f"[STARTUP] Using store: {app.state.store.store_id}")

    yield
    # Shutdown
    logger.info("Shutting down...")
    await app.state.store.aclose()


app = FastAPI(
    title="Petro-Core Catalog API",
    description="Rock and mineral specimen catalog",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS - allow frontend to connect (configured via API_CORS_ORIGINS env var)
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins_list,
    allow_credentials=True,
    allow_methods=["GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
)

# GZip compression for responses > 500 bytes
app.add_middleware(GZipMiddleware, minimum_size=500)

# Include routers
app.include_router(catalog.router, prefix="/api/catalog", tags=["catalog"])


@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "version": "1.0.0", "service": "Petro-Core Catalog API"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        log_level="debug" if settings.api.debug else "info",
    )
