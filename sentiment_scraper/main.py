"""Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .core.cache import ContentCache
from .core.http_client import PageFetcher
from .extractors.generic import GenericExtractor
from .extractors.registry import create_default_registry
from .services.analytics import LoggingAnalyticsSink
from .services.content_service import ContentService
from .services.sentiment_client import SentimentClient
from .utils.logging_config import setup_logging


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(settings.log_level)
    app.state.started_at = datetime.now(timezone.utc)

    fetcher = PageFetcher()
    await fetcher.start()
    registry = create_default_registry(fetcher)
    cache = ContentCache()

    app.state.fetcher = fetcher
    app.state.registry = registry
    app.state.cache = cache
    app.state.content_service = ContentService(fetcher, registry=registry, cache=cache, generic=GenericExtractor())
    app.state.sentiment_client = SentimentClient()
    app.state.analytics = LoggingAnalyticsSink()
    logger.info(f"✅ Ready: {len(registry)} site extractors, cache capacity {cache.max_entries}")

    yield

    # Shutdown
    await app.state.sentiment_client.close()
    await fetcher.close()
    logger.info("✅ HTTP sessions closed")


app = FastAPI(
    title="Sentiment Scraper",
    description="Article extraction and sentiment analysis for news URLs",
    version="1.0.0",
    lifespan=lifespan
)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors, reported as 400."""
    return JSONResponse(status_code=400, content={'error': 'Invalid request body'})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"❌ Unhandled error on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={'error': 'Internal server error'})


# API routes
from .api import router as api_router
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    started_at = getattr(app.state, "started_at", None)
    return {
        "status": "healthy",
        "version": app.version,
        "started_at": started_at.isoformat() if started_at else None,
        "uptime_seconds": (datetime.now(timezone.utc) - started_at).total_seconds() if started_at else None,
    }
