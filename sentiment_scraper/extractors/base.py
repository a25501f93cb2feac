"""Base class all site-specific extractors extend."""

import inspect
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence, Tuple, Union
from urllib.parse import urlparse

from ..extraction import json_ld
from ..extraction.date_extractor import date_extractor
from ..extraction.extraction_constants import SOCIAL_MARKERS
from ..extraction.extraction_utils import extraction_utils
from ..extraction.html_processor import html_processor
from ..models import ExtractionResult


logger = logging.getLogger(__name__)


DEFAULT_TITLE_SELECTORS = (
    'h1',
    '.article-title',
    '.story-title',
    '.news-title',
    '[class*="headline"]',
    'meta[property="og:title"]',
    'title',
)

DEFAULT_AUTHOR_SELECTORS = (
    '[class*="author"]',
    '[class*="byline"]',
    'meta[name="author"]',
    'meta[property="article:author"]',
    '.writer',
    '.journalist',
)

DEFAULT_TITLE_PATTERNS = (
    re.compile(r'<h1[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<meta[^>]*property=["\']og:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

DEFAULT_AUTHOR_PATTERNS = (
    re.compile(r'<meta[^>]*name=["\']author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*author[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*byline[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
)


StepResult = Optional[ExtractionResult]
Step = Callable[[], Union[StepResult, Awaitable[StepResult]]]


class BaseExtractor(ABC):
    """
    One publisher's extraction strategy behind a uniform contract.

    Subclasses set ``name`` and ``domains`` and implement ``_extract``.
    Instances hold no per-call state; an optional page fetcher is injected
    for extractors that need a second request (AMP alternates).
    """

    name: str = 'BaseExtractor'
    domains: Tuple[str, ...] = ()
    method: str = 'multi-strategy'
    note: Optional[str] = None
    title_suffixes: Sequence = ()

    def __init__(self, fetcher=None):
        self.fetcher = fetcher
        self.utils = extraction_utils
        self.html = html_processor
        self.dates = date_extractor

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} domains={list(self.domains)}>"

    def can_handle(self, url: str) -> bool:
        """True if any configured domain is a substring of the URL's hostname."""
        if not self.domains or not isinstance(url, str):
            return False
        try:
            hostname = (urlparse(url).hostname or '').lower()
        except (ValueError, TypeError):
            return False
        if not hostname:
            return False
        return any(domain in hostname for domain in self.domains)

    async def extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        """Run the extraction chain; never raises.

        Content, when present, has passed ``validate_content``.
        """
        try:
            result = await self._extract(html, url)
        except Exception as e:
            logger.warning(f"❌ {self.name} extraction failed for {url}: {e}")
            return None

        if result is None:
            return None
        if result.content is not None and not self.validate_content(result.content):
            logger.warning(f"❌ {self.name}: extracted content failed validation for {url}")
            return None
        return result

    @abstractmethod
    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        """Publisher-specific extraction; may raise, ``extract`` contains it."""

    def extract_metadata(self, html: str, url: str) -> Dict[str, Any]:
        metadata = {'extractorUsed': self.name, 'method': self.method}
        if self.note:
            metadata['note'] = self.note
        return metadata

    # Shared helpers

    def validate_content(self, content) -> bool:
        return self.utils.validate_content(content)

    def clean_html_content(self, html_content: Optional[str]) -> str:
        return self.utils.clean_html_content(html_content)

    def extract_published_date(self, html: str) -> Optional[str]:
        return self.dates.extract_published_date(html)

    def normalize_date_string(self, date_str: str) -> str:
        return self.dates.normalize_date_string(date_str)

    def clean_title(self, title: Optional[str]) -> Optional[str]:
        return self.utils.clean_title(title, self.title_suffixes)

    def clean_author(self, author: Optional[str]) -> Optional[str]:
        return self.utils.clean_author(author)

    async def run_chain(self, url: str, steps: Sequence[Tuple[str, Step]]) -> Optional[ExtractionResult]:
        """Run ordered (name, step) pairs; the first non-None result wins.

        A step that raises is logged and counted as a miss.
        """
        for step_name, step in steps:
            try:
                result = step()
                if inspect.isawaitable(result):
                    result = await result
            except Exception as e:
                logger.debug(f"{self.name}: {step_name} pass raised for {url}: {e}")
                continue

            if result is not None:
                size = len(result.content) if result.content else 0
                logger.info(f"✅ {self.name}: extracted {size} characters via {step_name}")
                return result
            logger.debug(f"{self.name}: {step_name} pass found nothing for {url}")

        return None

    async def fetch_page(self, url: str) -> Optional[str]:
        """Fetch a secondary page (AMP alternate) through the injected fetcher."""
        if self.fetcher is None:
            logger.debug(f"{self.name}: no fetcher configured, skipping {url}")
            return None
        return await self.fetcher.fetch_html(url)

    def from_json_ld(self, html, **metadata) -> Optional[ExtractionResult]:
        """Structured-data pass: first valid Article/NewsArticle JSON-LD item."""
        item = json_ld.find_article(html, self.validate_content)
        if item is None:
            return None

        raw_html = html if isinstance(html, str) else str(html)
        published = self.dates.normalize_date(item.get('datePublished')) or self.extract_published_date(raw_html)
        return ExtractionResult(
            content=self.utils.clean_content(json_ld.article_content(item)),
            title=self.clean_title(json_ld.headline(item)),
            author=self.clean_author(json_ld.extract_author(item.get('author'))),
            published_date=published,
            metadata={
                'extractionMethod': 'json-ld',
                'structuredData': True,
                'section': item.get('articleSection') if isinstance(item.get('articleSection'), str) else None,
                **metadata,
            },
        )

    # Title / author chains

    def title_from_soup(self, soup, selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS) -> Optional[str]:
        return self.html.select_first_value(soup, selectors, self.clean_title)

    def author_from_soup(self, soup, selectors: Sequence[str] = DEFAULT_AUTHOR_SELECTORS) -> Optional[str]:
        return self.html.select_first_value(soup, selectors, self.clean_author)

    def title_from_html(self, html: str, patterns: Sequence = DEFAULT_TITLE_PATTERNS) -> Optional[str]:
        return self.html.first_regex_match(html, patterns, self.clean_title)

    def author_from_html(self, html: str, patterns: Sequence = DEFAULT_AUTHOR_PATTERNS) -> Optional[str]:
        return self.html.first_regex_match(html, patterns, self.clean_author)

    # Passes shared by the site extractors

    def from_dom(self, html: str, url: str, content_selectors: Sequence[str],
                 title_selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS,
                 author_selectors: Sequence[str] = DEFAULT_AUTHOR_SELECTORS,
                 noise_selectors: Sequence[str] = (),
                 markers: Sequence[str] = SOCIAL_MARKERS,
                 text_fallback: bool = False, **metadata) -> Optional[ExtractionResult]:
        """DOM-selector pass: publisher containers first, generic containers last."""
        soup = self.html.make_soup(html)
        if soup is None:
            return None

        title = self.title_from_soup(soup, title_selectors)
        author = self.author_from_soup(soup, author_selectors)
        self.html.remove_elements(soup, noise_selectors)

        content, selector = self.html.extract_by_selectors(
            soup, content_selectors, markers=markers, text_fallback=text_fallback
        )
        if not content:
            return None

        return ExtractionResult(
            content=self.utils.clean_content(content),
            title=title,
            author=author,
            published_date=self.extract_published_date(html),
            metadata={'extractionMethod': 'dom-parsing', 'selector': selector, 'source': url, **metadata},
        )

    def from_regex(self, html: str, title_patterns: Sequence = DEFAULT_TITLE_PATTERNS,
                   author_patterns: Sequence = DEFAULT_AUTHOR_PATTERNS,
                   markers: Sequence[str] = SOCIAL_MARKERS,
                   container_patterns: Sequence = None,
                   method: str = 'regex-fallback', **metadata) -> Optional[ExtractionResult]:
        """Raw-HTML paragraph scan, the last-resort pass."""
        content, count = self.html.extract_by_regex(html, markers=markers, container_patterns=container_patterns)
        if not content:
            return None

        return ExtractionResult(
            content=self.utils.clean_content(content),
            title=self.title_from_html(html, title_patterns),
            author=self.author_from_html(html, author_patterns),
            published_date=self.extract_published_date(html),
            metadata={'extractionMethod': method, 'paragraphCount': count, **metadata},
        )

    async def from_amp(self, amp_url: str, title_patterns: Sequence = DEFAULT_TITLE_PATTERNS,
                       author_patterns: Sequence = DEFAULT_AUTHOR_PATTERNS) -> Optional[ExtractionResult]:
        """Fetch the AMP alternate and rerun the structured-data then regex passes on it."""
        amp_html = await self.fetch_page(amp_url)
        if not amp_html:
            return None

        result = self.from_json_ld(amp_html, ampUrl=amp_url)
        if result is not None:
            result.metadata['extractionMethod'] = 'amp-json-ld'
            return result

        return self.from_regex(
            amp_html, title_patterns, author_patterns, method='amp-version', ampUrl=amp_url
        )
