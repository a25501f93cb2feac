"""cardekho.com extractor."""

import re
from typing import Optional

from ..models import ExtractionResult
from .base import BaseExtractor


NOISE_SELECTORS = (
    '.article-right',
    '.article-left-datatbl',
    '.commentbox',
    '.gsc-comments-container',
    '.tags',
    '.share-it',
    '.related-articles',
    '.trending-cars',
    '#rhs-ad-container',
    '#sticky-ad-container',
    '.similar-cars-container',
    '.latest-news-container',
    '.author-bio',
    'script',
    'style',
    'noscript',
    'iframe',
    '.ad-container',
    '.ad-wrapper',
    '.ad-slot',
)

TITLE_SELECTORS = (
    'h1.article-title',
    'h1.article-heading',
    'meta[property="og:title"]',
    'title',
)

AUTHOR_SELECTORS = (
    'a.author',
    'meta[name="author"]',
    'meta[property="article:author"]',
    'meta[name="twitter:creator"]',
    '.author-info-block .name a',
    '.author-info-block .name',
    'span[itemprop="author"]',
    '.author-name',
    '.byline',
)

PARAGRAPH_EXCLUSIONS = ('read more', 'also read', 'image source', 'disclaimer', 'copyright', 'privacy policy')
MIN_BODY_PARAGRAPH_LENGTH = 100


class CarDekhoExtractor(BaseExtractor):
    name = 'CarDekhoExtractor'
    domains = ('cardekho.com',)
    method = 'paragraph-scan'
    note = 'Collects long body paragraphs after stripping sidebars, ads and comments'
    title_suffixes = (re.compile(r'\s*[|-]\s*CarDekho(\.com)?\s*$', re.IGNORECASE),)

    def body_paragraphs(self, soup) -> str:
        paragraphs = []
        for p in soup.find_all('p'):
            text = p.get_text(' ', strip=True)
            if len(text) <= MIN_BODY_PARAGRAPH_LENGTH:
                continue
            lowered = text.lower()
            if any(phrase in lowered for phrase in PARAGRAPH_EXCLUSIONS):
                continue
            paragraphs.append(text)
        return self.utils.join_paragraphs(paragraphs)

    def from_page_dom(self, html: str, url: str) -> Optional[ExtractionResult]:
        soup = self.html.make_soup(html)
        if soup is None:
            return None

        title = self.title_from_soup(soup, TITLE_SELECTORS)
        author = self.author_from_soup(soup, AUTHOR_SELECTORS)
        self.html.remove_elements(soup, NOISE_SELECTORS)

        content = self.body_paragraphs(soup)
        if not self.validate_content(content):
            return None

        return ExtractionResult(
            content=content,
            title=title,
            author=author,
            published_date=self.extract_published_date(html),
            metadata={'extractionMethod': 'dom-parsing', 'source': url},
        )

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        return await self.run_chain(url, [
            ('dom', lambda: self.from_page_dom(html, url)),
        ])
