"""moneycontrol.com: lenient JSON-LD, then regex and DOM passes."""

import re
from typing import Optional

from ..models import ExtractionResult
from .base import BaseExtractor


CONTENT_SELECTORS = (
    '.article_body',
    '.content_wrapper',
    '.news_body',
    '.story-element',
    'article .content',
    '.articleContent',
    '#article-content',
)

NOISE_SELECTORS = (
    '.advertisement',
    '.ad-container',
    '.google-ad',
    '.social-share',
    '.related-articles',
    '.newsletter-signup',
    '.breadcrumb',
    '.tags',
    '.disclaimer',
    '.author-bio',
    'script',
    'style',
    'noscript',
    '.mc-tooltip',
    '.mc-widget',
)

TITLE_SELECTORS = (
    'h1.article_title',
    'h1.news_title',
    '.headline h1',
    'h1',
    '.article-title',
    'meta[property="og:title"]',
    'title',
)

AUTHOR_SELECTORS = (
    '.author-name',
    '.byline .author',
    '.article-author',
    '.author',
    '.byline',
    '.post-author',
    'span[itemprop="author"]',
    'meta[name="author"]',
    'meta[property="article:author"]',
)

TITLE_PATTERNS = (
    re.compile(r'<h1[^>]*class="[^"]*article_title[^"]*"[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<h1[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<meta[^>]*property=["\']og:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

# Author objects as they appear inside MoneyControl's (often malformed) JSON-LD
JSON_AUTHOR_PATTERNS = (
    re.compile(r'"author"\s*:\s*\{[^}]*"@type"\s*:\s*"Person"[^}]*"name"\s*:\s*"([^"]+)"', re.DOTALL),
    re.compile(r'"author"\s*:\s*\{[^}]*"name"\s*:\s*"([^"]+)"', re.DOTALL),
    re.compile(r'"@type"\s*:\s*"Person"[^}]*"name"\s*:\s*"([^"]+)"', re.DOTALL),
)
PERSON_NAME_RE = re.compile(r'^[a-z\s.]+$', re.IGNORECASE)

AUTHOR_PATTERNS = (
    re.compile(r'<[^>]*class="[^"]*author-name[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
    re.compile(r'<meta[^>]*name=["\']author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*author[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
)

CONTAINER_PATTERNS = (
    re.compile(r'<div[^>]*class="[^"]*article_body[^"]*"[^>]*>(.*?)</div>', re.DOTALL),
    re.compile(r'<div[^>]*class="[^"]*content_wrapper[^"]*"[^>]*>(.*?)</div>', re.DOTALL),
    re.compile(r'<div[^>]*class="[^"]*news_body[^"]*"[^>]*>(.*?)</div>', re.DOTALL),
)

PARAGRAPH_MARKERS = ('advertisement', 'disclaimer')


class MoneyControlExtractor(BaseExtractor):
    name = 'MoneyControlExtractor'
    domains = ('moneycontrol.com',)
    method = 'json-ld-prioritized-moneycontrol'
    note = 'Uses JSON-LD structured data with MoneyControl-specific author parsing'
    title_suffixes = (
        re.compile(r'\s*\|\s*Moneycontrol\s*$', re.IGNORECASE),
        re.compile(r'\s*-\s*Moneycontrol\s*$', re.IGNORECASE),
    )

    def author_from_raw_json(self, html: str) -> Optional[str]:
        """Pull a Person name out of JSON-LD text that did not parse cleanly."""
        for pattern in JSON_AUTHOR_PATTERNS:
            match = pattern.search(html or '')
            if not match:
                continue
            author = match.group(1).strip()
            if (2 < len(author) < 100
                    and 'moneycontrol' not in author.lower()
                    and PERSON_NAME_RE.match(author)):
                return author
        return None

    def author_fallback(self, html: str) -> Optional[str]:
        return self.author_from_raw_json(html) or self.author_from_html(html, AUTHOR_PATTERNS)

    def from_structured_data(self, html: str) -> Optional[ExtractionResult]:
        result = self.from_json_ld(html)
        if result is not None and not result.author:
            result.author = self.author_fallback(html)
        return result

    def from_page_regex(self, html: str) -> Optional[ExtractionResult]:
        result = self.from_regex(
            html, TITLE_PATTERNS, AUTHOR_PATTERNS,
            markers=PARAGRAPH_MARKERS, container_patterns=CONTAINER_PATTERNS,
        )
        if result is not None and not result.author:
            result.author = self.author_from_raw_json(html)
        return result

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        return await self.run_chain(url, [
            ('json-ld', lambda: self.from_structured_data(html)),
            ('regex', lambda: self.from_page_regex(html)),
            ('dom', lambda: self.from_dom(
                html, url, CONTENT_SELECTORS, TITLE_SELECTORS, AUTHOR_SELECTORS,
                noise_selectors=NOISE_SELECTORS, text_fallback=True,
            )),
        ])
