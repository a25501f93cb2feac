"""API routers package for the sentiment scraper."""

from fastapi import APIRouter

from .content_router import router as content_router
from .sentiment_router import router as sentiment_router


def create_api_router() -> APIRouter:
    """Create the main API router with all sub-routers."""
    router = APIRouter()
    router.include_router(content_router, tags=["content"])
    router.include_router(sentiment_router, tags=["sentiment"])
    return router


router = create_api_router()

__all__ = ['router', 'create_api_router']
