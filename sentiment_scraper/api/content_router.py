"""Content API router - page fetching, extraction and cache introspection."""

import logging
from typing import Any, Optional
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.cache import ContentCache
from ..extraction.extraction_utils import extraction_utils
from ..extractors.registry import ExtractorRegistry
from ..models import BatchResult, BatchStats, ErrorType, FetchResult
from ..services.content_service import ContentService


logger = logging.getLogger(__name__)

router = APIRouter()


class FetchContentRequest(BaseModel):
    url: Optional[Any] = None


class FetchContentBatchRequest(BaseModel):
    urls: Optional[Any] = None
    concurrency: Optional[int] = None


def get_content_service(request: Request) -> ContentService:
    return request.app.state.content_service


def get_registry(request: Request) -> ExtractorRegistry:
    return request.app.state.registry


def get_cache(request: Request) -> ContentCache:
    return request.app.state.cache


def bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={'error': message})


def normalize_url(value: Any) -> Optional[str]:
    """Cleaned http(s) URL, or None if the value is not one."""
    if not isinstance(value, str) or not value.strip():
        return None
    url = extraction_utils.clean_url(value)
    parsed = urlparse(url)
    if parsed.scheme not in ('http', 'https') or not parsed.netloc:
        return None
    return url


@router.post("/fetch-content")
async def fetch_content(body: FetchContentRequest, service: ContentService = Depends(get_content_service)):
    """Fetch and extract a single URL."""
    if not body.url:
        return bad_request('URL is required')
    url = normalize_url(body.url)
    if url is None:
        return bad_request('URL must be an absolute http(s) URL')

    try:
        result = await service.fetch_and_extract(url)
    except Exception as e:
        logger.error(f"❌ Content fetch failed for {url}: {e}")
        return JSONResponse(status_code=500, content={'error': 'Failed to fetch content'})
    return result.to_dict()


@router.post("/fetch-content-batch")
async def fetch_content_batch(body: FetchContentBatchRequest,
                              service: ContentService = Depends(get_content_service)):
    """Fetch and extract many URLs under a concurrency bound."""
    if body.urls is None or not isinstance(body.urls, list):
        return bad_request('URLs array is required')
    if not body.urls:
        return bad_request('At least one URL is required')

    urls = [normalize_url(url) for url in body.urls]
    valid = [url for url in urls if url is not None]

    try:
        batch = await service.process_batch(valid, body.concurrency)
    except Exception as e:
        logger.error(f"❌ Batch processing failed: {e}")
        return JSONResponse(
            status_code=500,
            content={'error': 'Batch processing failed', 'processed': 0, 'total': len(urls)},
        )

    if len(valid) == len(urls):
        return batch.to_dict()

    # Malformed entries become validation results at their own positions
    processed = iter(batch.results)
    results = []
    for raw, url in zip(body.urls, urls):
        if url is None:
            results.append(FetchResult.failure(raw if isinstance(raw, str) else str(raw),
                                               'Invalid URL', ErrorType.VALIDATION))
        else:
            results.append(next(processed))
    return BatchResult(results=results, stats=BatchStats.from_results(results, batch.stats.concurrency)).to_dict()


@router.get("/extractors")
async def list_extractors(registry: ExtractorRegistry = Depends(get_registry)):
    """Registered site extractors and the domains they claim."""
    return {
        'domains': registry.get_supported_domains(),
        'extractors': registry.get_extractor_info(),
    }


@router.get("/cache/stats")
async def cache_stats(cache: ContentCache = Depends(get_cache)):
    """Content cache statistics."""
    return cache.stats()
