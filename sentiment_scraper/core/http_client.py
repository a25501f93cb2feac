"""Async page fetcher with retries, user-agent rotation and anti-bot classification."""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import urlparse

import aiohttp
import chardet
from aiohttp import ClientTimeout
from aiohttp.http_exceptions import HttpProcessingError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_incrementing,
)

from ..config import settings
from .exceptions import BotDetectionError, FetchError, NetworkError


logger = logging.getLogger(__name__)


USER_AGENTS = [
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
]

BROWSER_HEADERS = {
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'Cache-Control': 'no-cache',
    'Pragma': 'no-cache',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
    'Upgrade-Insecure-Requests': '1',
    'sec-ch-ua': '"Not_A Brand";v="8", "Chromium";v="120", "Google Chrome";v="120"',
    'sec-ch-ua-mobile': '?0',
    'sec-ch-ua-platform': '"macOS"',
}

# Finance portals that are friendlier to requests arriving from their own front page
REFERERS = {
    'yahoo.com': 'https://finance.yahoo.com/',
    'moneycontrol.com': 'https://www.moneycontrol.com/',
    'marketwatch.com': 'https://www.marketwatch.com/',
    'zeebiz.com': 'https://www.zeebiz.com/',
}

# Substrings of parser errors raised when a server sends oversized or garbled headers
HEADER_FAILURE_MARKERS = (
    'header overflow', 'header value is too long', 'line too long', 'too long',
    'parse error', 'bad http message', 'invalid header', 'invalid http', 'got more than',
)


class HeaderParseFailure(FetchError):
    """Response headers could not be parsed; retried, then reported as bot detection."""
    pass


@dataclass
class FetchedPage:
    """Raw page returned by the fetcher."""
    url: str
    status: int
    html: str
    final_url: str


def is_header_parse_failure(error: BaseException) -> bool:
    """Whether the exception comes from an unparseable response header block."""
    if isinstance(error, HttpProcessingError):
        return True
    message = str(error).lower()
    return any(marker in message for marker in HEADER_FAILURE_MARKERS)


class PageFetcher:
    """Fetch raw HTML resiliently against transient failures and trivial bot checks."""

    def __init__(self, timeout: float = None, max_attempts: int = None,
                 backoff_seconds: float = None, max_redirects: int = None,
                 max_response_bytes: int = None, max_header_size: int = None):
        self.timeout = ClientTimeout(total=timeout or settings.fetch_timeout, connect=10)
        self.max_attempts = max_attempts or settings.fetch_max_attempts
        self.backoff_seconds = settings.fetch_backoff_seconds if backoff_seconds is None else backoff_seconds
        self.max_redirects = max_redirects or settings.fetch_max_redirects
        self.max_response_bytes = max_response_bytes or settings.fetch_max_response_bytes
        self.max_header_size = max_header_size or settings.fetch_max_header_size
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        """Start the HTTP client session."""
        if self.session is None or self.session.closed:
            connector = aiohttp.TCPConnector(
                limit=20,
                limit_per_host=5,
                ttl_dns_cache=300,
            )
            self.session = aiohttp.ClientSession(
                connector=connector,
                timeout=self.timeout,
                max_line_size=self.max_header_size,
                max_field_size=self.max_header_size,
            )

    async def close(self):
        """Close the HTTP client session."""
        if self.session and not self.session.closed:
            await self.session.close()

    def build_headers(self, url: str, user_agent: Optional[str] = None) -> Dict[str, str]:
        """Browser-like header set with a rotated user agent."""
        headers = dict(BROWSER_HEADERS)
        headers['User-Agent'] = user_agent or random.choice(USER_AGENTS)

        hostname = (urlparse(url).hostname or '').lower()
        for domain, referer in REFERERS.items():
            if domain in hostname:
                headers['Referer'] = referer
                break
        return headers

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch a page, retrying network, 5xx and header-parse failures.

        4xx answers are returned as-is. Header-parse failures that survive
        every attempt are raised as BotDetectionError naming the domain.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_incrementing(start=self.backoff_seconds, increment=self.backoff_seconds),
            retry=retry_if_exception_type((NetworkError, HeaderParseFailure)),
            before_sleep=self._log_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    return await self._fetch_once(url)
        except HeaderParseFailure:
            domain = urlparse(url).hostname or url
            logger.warning(f"⚠️ Bot detection via malformed headers from: {domain}")
            raise BotDetectionError(domain, url=url)

    async def fetch_html(self, url: str) -> str:
        """Fetch a page and return only its HTML."""
        page = await self.fetch(url)
        return page.html

    async def _fetch_once(self, url: str) -> FetchedPage:
        """Single GET attempt, with failures mapped onto fetch exceptions."""
        await self.start()
        headers = self.build_headers(url)
        logger.debug(f"Attempting to fetch: {url} with User-Agent: {headers['User-Agent']}")

        try:
            async with self.session.get(url, headers=headers, max_redirects=self.max_redirects) as response:
                if response.status >= 500:
                    raise NetworkError(f"HTTP {response.status} from {url}", url=url, status_code=response.status)

                body = await self._read_limited(response, url)
                html = self._decode(body, response.charset)
                return FetchedPage(url=url, status=response.status, html=html, final_url=str(response.url))

        except aiohttp.TooManyRedirects as e:
            raise FetchError(f"Too many redirects for {url}", url=url) from e
        except (aiohttp.ClientResponseError, HttpProcessingError) as e:
            if is_header_parse_failure(e):
                raise HeaderParseFailure(f"Parse Error: {e}", url=url) from e
            raise NetworkError(f"Network error for {url}: {e}", url=url) from e
        except asyncio.TimeoutError as e:
            raise NetworkError(f"Network timeout for {url}", url=url) from e
        except aiohttp.ClientError as e:
            if is_header_parse_failure(e):
                raise HeaderParseFailure(f"Parse Error: {e}", url=url) from e
            raise NetworkError(f"Network error for {url}: {e}", url=url) from e

    async def _read_limited(self, response: aiohttp.ClientResponse, url: str) -> bytes:
        """Read the body, refusing anything over the configured size ceiling."""
        declared = response.content_length
        if declared is not None and declared > self.max_response_bytes:
            raise FetchError(f"Response too large ({declared} bytes) for {url}", url=url)

        chunks = []
        total = 0
        async for chunk in response.content.iter_chunked(64 * 1024):
            total += len(chunk)
            if total > self.max_response_bytes:
                raise FetchError(f"Response exceeded {self.max_response_bytes} bytes for {url}", url=url)
            chunks.append(chunk)
        return b''.join(chunks)

    def _decode(self, body: bytes, charset: Optional[str]) -> str:
        """Decode with the declared charset, else detect it."""
        if charset:
            try:
                return body.decode(charset)
            except (LookupError, UnicodeDecodeError):
                pass

        detected = chardet.detect(body[:100_000]) if body else {}
        encoding = detected.get('encoding') or 'utf-8'
        confidence = detected.get('confidence') or 0

        if confidence >= 0.7:
            try:
                return body.decode(encoding)
            except (LookupError, UnicodeDecodeError):
                pass

        for fallback_encoding in ('utf-8', 'cp1252'):
            try:
                return body.decode(fallback_encoding)
            except UnicodeDecodeError:
                continue
        return body.decode('iso-8859-1', errors='replace')

    @staticmethod
    def _log_retry(retry_state):
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(f"Attempt {retry_state.attempt_number} failed: {error}")
