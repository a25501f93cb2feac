"""zeebiz.com: JSON-LD first, then DOM and regex passes."""

import re
from typing import Optional

from ..models import ExtractionResult
from .base import BaseExtractor


CONTENT_SELECTORS = (
    '.article-para',
    '.article-para p',
    '.story-content',
    '.news-content',
    'article .content',
    '.articleContent',
)

NOISE_SELECTORS = (
    '.f-nav',
    '.socialicon',
    '.taboola-below-article-thumbnails',
    '[data-module="taboola"]',
    '.gpt-ad',
    '[class*="gpt-"]',
    '.breadcrumb',
    '.advertisement',
    '.ad-container',
    '.related-articles',
    '.share-buttons',
    '.newsletter-signup',
    'script',
    'style',
    'noscript',
)

TITLE_SELECTORS = (
    '.articleheading',
    'h1.articleheading',
    'h1',
    '.article-title',
    '.news-title',
    'meta[property="og:title"]',
    'title',
)

AUTHOR_SELECTORS = (
    '.writer-name span',
    '.writerbox .writer-name span',
    '.writer-name',
    '.author-name',
    '.byline',
    '.article-author',
    'meta[name="author"]',
    'meta[property="article:author"]',
)

TITLE_PATTERNS = (
    re.compile(r'<h1[^>]*class="[^"]*articleheading[^"]*"[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<h1[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<meta[^>]*property=["\']og:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

AUTHOR_PATTERNS = (
    re.compile(r'<div[^>]*class="[^"]*writer-name[^"]*"[^>]*>.*?<span[^>]*>(.*?)</span>', re.DOTALL),
    re.compile(r'<meta[^>]*name=["\']author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*writer-name[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
)

CONTAINER_PATTERNS = (
    re.compile(r'<div[^>]*class="[^"]*article-para[^"]*"[^>]*>(.*?)</div>', re.DOTALL),
)

PARAGRAPH_MARKERS = ('advertisement', 'taboola')


class ZeeBizExtractor(BaseExtractor):
    name = 'ZeeBizExtractor'
    domains = ('zeebiz.com',)
    method = 'json-ld-prioritized-zeebiz'
    note = 'Uses JSON-LD structured data with ZeeBiz-specific DOM fallbacks'
    title_suffixes = (
        re.compile(r'\s*\|\s*Zee Business\s*$', re.IGNORECASE),
        re.compile(r'\s*-\s*ZeeBiz\s*$', re.IGNORECASE),
    )

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        return await self.run_chain(url, [
            ('json-ld', lambda: self.from_json_ld(html)),
            ('dom', lambda: self.from_dom(
                html, url, CONTENT_SELECTORS, TITLE_SELECTORS, AUTHOR_SELECTORS,
                noise_selectors=NOISE_SELECTORS,
            )),
            ('regex', lambda: self.from_regex(
                html, TITLE_PATTERNS, AUTHOR_PATTERNS,
                markers=PARAGRAPH_MARKERS, container_patterns=CONTAINER_PATTERNS,
            )),
        ])
