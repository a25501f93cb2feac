"""autocarindia.com: AMP alternate first, then JSON-LD, DOM and regex passes."""

import re
from typing import Optional
from urllib.parse import urlparse

from ..models import ExtractionResult
from .base import DEFAULT_AUTHOR_PATTERNS, DEFAULT_TITLE_PATTERNS, BaseExtractor


# Sections confirmed to serve a working "<section>-amp/" version
AMP_SUPPORTED_SECTIONS = ('auto-features', 'advice')

CONTENT_SELECTORS = (
    '.article-content',
    '.story-content',
    '.news-content',
    '.post-content',
    '[class*="article"][class*="body"]',
    '[class*="story"][class*="text"]',
    '.content p',
    'article p',
)

AMP_TITLE_PATTERNS = (
    re.compile(r'<h6[^>]*class="[^"]*heding[^"]*"[^>]*>(.*?)</h6>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

AMP_AUTHOR_PATTERNS = (
    re.compile(r'<p[^>]*class="[^"]*author[^"]*"[^>]*>(.*?)</p>', re.DOTALL),
    re.compile(r'<span[^>]*class="[^"]*author[^"]*"[^>]*>(.*?)</span>', re.DOTALL),
    re.compile(r'<div[^>]*class="[^"]*byline[^"]*"[^>]*>(.*?)</div>', re.DOTALL),
)


class AutocarIndiaExtractor(BaseExtractor):
    name = 'AutocarIndiaExtractor'
    domains = ('autocarindia.com',)
    method = 'enhanced-multi-strategy'
    note = 'Uses AMP discovery, JSON-LD, and DOM parsing'
    title_suffixes = (' | Autocar India',)

    def amp_url_fallback(self, url: str) -> Optional[str]:
        """Known-path AMP substitution for sections that have one."""
        path = urlparse(url).path
        for section in AMP_SUPPORTED_SECTIONS:
            if f'/{section}/' in path:
                return url.replace(f'/{section}/', f'/{section}-amp/', 1)
        return None

    def find_amp_url(self, html: str, url: str) -> Optional[str]:
        return self.html.find_amp_url(html, url) or self.amp_url_fallback(url)

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        amp_url = self.find_amp_url(html, url)

        steps = []
        if amp_url:
            steps.append(('amp', lambda: self.from_amp(amp_url, AMP_TITLE_PATTERNS, AMP_AUTHOR_PATTERNS)))
        steps.extend([
            ('json-ld', lambda: self.from_json_ld(html)),
            ('dom', lambda: self.from_dom(html, url, CONTENT_SELECTORS)),
            ('regex', lambda: self.from_regex(html, DEFAULT_TITLE_PATTERNS, DEFAULT_AUTHOR_PATTERNS)),
        ])
        return await self.run_chain(url, steps)
