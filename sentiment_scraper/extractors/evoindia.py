"""evoindia.com: AMP alternate, JSON-LD, DOM and regex passes."""

import re
from typing import Optional

from ..models import ExtractionResult
from .base import BaseExtractor


CONTENT_SELECTORS = (
    '.details-content-story .story',
    '.story-wrap .story',
    '.content .story',
    '.article-content',
    '.story-content',
    'article .content',
)

TITLE_SELECTORS = (
    'h1.article-title',
    'h1.title',
    '.article-title',
    'h1',
    'meta[property="og:title"]',
    'title',
)

AUTHOR_SELECTORS = (
    '.about-author .title',
    '.about-author a',
    '.author-name',
    '.byline',
    'meta[name="author"]',
    'meta[property="article:author"]',
)

CATEGORY_SELECTORS = (
    '.category-name.detail',
    '.category-name',
    '.article-section',
    'meta[property="article:section"]',
)

TITLE_PATTERNS = (
    re.compile(r'<h1[^>]*class="[^"]*article-title[^"]*"[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<h1[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<meta[^>]*property=["\']og:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

AUTHOR_PATTERNS = (
    re.compile(r'<meta[^>]*name=["\']author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*about-author[^"]*"[^>]*>.*?<[^>]*class="[^"]*title[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
    re.compile(r'<[^>]*class="[^"]*author[^"]*"[^>]*>(.*?)</[^>]*>', re.DOTALL),
)


class EvoIndiaExtractor(BaseExtractor):
    name = 'EvoIndiaExtractor'
    domains = ('evoindia.com',)
    method = 'multi-strategy-evoindia'
    note = 'Uses JSON-LD, AMP discovery, and DOM parsing for EvoIndia.com'
    title_suffixes = (' | evo India',)

    def category(self, html: str) -> Optional[str]:
        soup = self.html.make_soup(html)
        if soup is None:
            return None
        return self.html.select_first_value(
            soup, CATEGORY_SELECTORS, lambda value: value if len(value) > 2 else None
        )

    def from_page_dom(self, html: str, url: str) -> Optional[ExtractionResult]:
        result = self.from_dom(html, url, CONTENT_SELECTORS, TITLE_SELECTORS, AUTHOR_SELECTORS)
        if result is not None:
            result.metadata['category'] = self.category(html)
        return result

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        amp_url = self.html.find_amp_url(html, url)

        steps = []
        if amp_url:
            steps.append(('amp', lambda: self.from_amp(amp_url, TITLE_PATTERNS, AUTHOR_PATTERNS)))
        steps.extend([
            ('json-ld', lambda: self.from_json_ld(html)),
            ('dom', lambda: self.from_page_dom(html, url)),
            ('regex', lambda: self.from_regex(html, TITLE_PATTERNS, AUTHOR_PATTERNS)),
        ])
        return await self.run_chain(url, steps)
