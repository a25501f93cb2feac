"""Fetch, extract and cache article content for single URLs and batches."""

import asyncio
from typing import List, Optional, Sequence, Tuple

from ..config import settings
from ..core.cache import ContentCache, get_content_cache
from ..core.exceptions import (
    AccessForbiddenError,
    BotDetectionError,
    ContentExtractionError,
    NetworkError,
    PageNotFoundError,
)
from ..extraction.extraction_constants import MIN_CONTENT_LENGTH
from ..extractors.generic import GenericExtractor
from ..extractors.registry import ExtractorRegistry, get_extractor_registry
from ..models import BatchResult, BatchStats, ErrorType, FetchResult, UrlState
from ..utils.logging_config import get_logger, log_operation


logger = get_logger(__name__, component='CONTENT')


GENERIC_EXTRACTOR_NAME = 'generic'

# (error type, user-facing message, message substrings) checked in order when the
# exception type alone does not identify the failure
MESSAGE_CLASSIFIERS = (
    (ErrorType.BOT_DETECTION, 'Site blocked automated access (anti-bot protection)',
     ('blocking automated access', 'anti-bot protection', 'header overflow')),
    (ErrorType.NETWORK, 'Network timeout or connection issue', ('timeout', 'econnreset', 'connection reset')),
    (ErrorType.NOT_FOUND, 'Page not found (404)', ('404', 'not found')),
    (ErrorType.FORBIDDEN, 'Access forbidden (403)', ('403', 'forbidden')),
    (ErrorType.CONTENT, 'Unable to extract meaningful content from page', ('insufficient content',)),
)

TYPED_CLASSIFIERS = (
    (BotDetectionError, ErrorType.BOT_DETECTION),
    (NetworkError, ErrorType.NETWORK),
    (PageNotFoundError, ErrorType.NOT_FOUND),
    (AccessForbiddenError, ErrorType.FORBIDDEN),
    (ContentExtractionError, ErrorType.CONTENT),
)


def classify_error(error: BaseException) -> Tuple[ErrorType, str]:
    """Map a per-URL failure onto an error type and a message safe to show users."""
    messages = {error_type: message for error_type, message, _ in MESSAGE_CLASSIFIERS}

    for exc_type, error_type in TYPED_CLASSIFIERS:
        if isinstance(error, exc_type):
            return error_type, messages[error_type]

    text = str(error).lower()
    for error_type, message, markers in MESSAGE_CLASSIFIERS:
        if any(marker in text for marker in markers):
            return error_type, message

    return ErrorType.GENERAL, str(error) or error.__class__.__name__


class ContentService:
    """
    Orchestrates cache lookup, page fetch and extraction per URL.

    Collaborators are injected; the registry and cache default to the
    process-wide instances.
    """

    def __init__(self, fetcher, registry: ExtractorRegistry = None, cache: ContentCache = None,
                 generic: GenericExtractor = None, chunk_delay: float = None):
        self.fetcher = fetcher
        self.registry = registry or get_extractor_registry()
        self.cache = cache or get_content_cache()
        self.generic = generic or GenericExtractor()
        self.chunk_delay = settings.batch_chunk_delay if chunk_delay is None else chunk_delay

    def _transition(self, url: str, state: UrlState) -> None:
        logger.debug(f"{url} -> {state.value}")

    async def fetch_and_extract(self, url: str) -> FetchResult:
        """Serve a URL from cache or fetch and extract it; never raises."""
        self._transition(url, UrlState.PENDING)
        try:
            return await self._fetch_and_extract(url)
        except Exception as e:
            error_type, message = classify_error(e)
            logger.warning(f"❌ Failed to fetch {url}: {e}")
            self._transition(url, UrlState.DONE)
            return FetchResult.failure(url, message, error_type)

    async def _fetch_and_extract(self, url: str) -> FetchResult:
        self._transition(url, UrlState.CACHE_CHECK)
        entry = self.cache.get(url)
        if entry is not None:
            self._transition(url, UrlState.CACHE_HIT)
            age = self.cache.age_minutes(entry)
            logger.info(f"📦 Cache hit for {url} (age {age}m, hits {entry.hit_count})")
            self._transition(url, UrlState.DONE)
            return FetchResult(
                url=url,
                status='success',
                content=entry.content,
                title=entry.title,
                author=entry.author,
                published_date=entry.published_date,
                cached=True,
                content_hash=entry.content_hash,
                cache_age_minutes=age,
                extractor=entry.extractor,
            )

        self._transition(url, UrlState.CACHE_MISS)
        previous = self.cache.peek(url)

        self._transition(url, UrlState.FETCHING)
        try:
            page = await self.fetcher.fetch(url)
        except Exception:
            self._transition(url, UrlState.FETCH_FAIL)
            raise
        if page.status == 404:
            self._transition(url, UrlState.FETCH_FAIL)
            raise PageNotFoundError(f"HTTP 404 Not Found: {url}", url=url, status_code=404)
        if page.status == 403:
            self._transition(url, UrlState.FETCH_FAIL)
            raise AccessForbiddenError(f"HTTP 403 Forbidden: {url}", url=url, status_code=403)
        self._transition(url, UrlState.FETCH_OK)

        self._transition(url, UrlState.EXTRACTING)
        content, title, author, published_date, extractor_name = await self.extract(page.html, url)
        if not content or len(content) < MIN_CONTENT_LENGTH:
            self._transition(url, UrlState.EXTRACT_FAIL)
            raise ContentExtractionError(f"Insufficient content extracted from {url}")
        self._transition(url, UrlState.EXTRACT_OK)

        self._transition(url, UrlState.CACHE_WRITE)
        entry = self.cache.set(url, content, title=title, author=author,
                               published_date=published_date, extractor=extractor_name)
        content_changed = None
        if previous is not None:
            content_changed = previous.content_hash != entry.content_hash

        self._transition(url, UrlState.DONE)
        return FetchResult(
            url=url,
            status='success',
            content=content,
            title=title,
            author=author,
            published_date=published_date,
            cached=False,
            content_hash=entry.content_hash,
            content_changed=content_changed,
            extractor=extractor_name,
        )

    async def extract(self, html: str, url: str) -> Tuple[Optional[str], Optional[str], Optional[str],
                                                          Optional[str], str]:
        """
        Site extractor first, generic heuristics when it yields no content.

        Title and author prefer the site extractor's values and fall back to
        the generic page-level ones.

        Returns:
            Tuple of (content, title, author, published_date, extractor_name)
        """
        site_result = None
        try:
            site_result = await self.registry.extract_content(html, url)
        except Exception as e:
            logger.warning(f"Site extractor error for {url}: {e}")

        if site_result is not None and site_result.content:
            extractor = self.registry.find_extractor(url)
            content = site_result.content
            extractor_name = extractor.name if extractor else GENERIC_EXTRACTOR_NAME
            published_date = site_result.published_date
        else:
            logger.info(f"🔄 Using generic extraction for {url}")
            generic_result = await self.generic.extract(html, url)
            content = generic_result.content if generic_result else None
            extractor_name = GENERIC_EXTRACTOR_NAME
            published_date = generic_result.published_date if generic_result else None

        title = (site_result.title if site_result else None) or self.generic.extract_title(html)
        author = (site_result.author if site_result else None) or self.generic.extract_author(html)
        return content, title, author, published_date, extractor_name

    async def process_batch(self, urls: Sequence[str], concurrency: Optional[int] = None) -> BatchResult:
        """
        Process URLs in sequential chunks of ``concurrency``, concurrently within a chunk.

        Results keep input order; a failing URL becomes an error result and
        never aborts the batch.
        """
        concurrency = settings.clamp_batch_concurrency(concurrency)
        urls = list(urls)
        log_operation(logger, 'process_batch', 'started', urls=len(urls), concurrency=concurrency)
        self.cache.maybe_cleanup()

        results: List[FetchResult] = []
        for start in range(0, len(urls), concurrency):
            chunk = urls[start:start + concurrency]
            outcomes = await asyncio.gather(
                *(self.fetch_and_extract(url) for url in chunk),
                return_exceptions=True,
            )

            for url, outcome in zip(chunk, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Unexpected error processing URL {url}: {outcome}")
                    outcome = FetchResult.failure(url, f"Unexpected error: {outcome}", ErrorType.GENERAL)
                results.append(outcome)

            if start + concurrency < len(urls) and self.chunk_delay > 0:
                await asyncio.sleep(self.chunk_delay)

        stats = BatchStats.from_results(results, concurrency)
        log_operation(
            logger, 'process_batch', 'completed',
            total=stats.total, successful=stats.successful, failed=stats.failed, cached=stats.cached,
        )
        return BatchResult(results=results, stats=stats)
