"""hindustantimes.com extractor."""

import re
from typing import Optional

from ..extraction import json_ld
from ..models import ExtractionResult
from .base import BaseExtractor


NOISE_SELECTORS = (
    'script', 'style', 'nav', 'header', 'footer', 'aside',
    '.advertisement', '.ads', '.social-share', '.comments', '.sidebar',
    'form', 'noscript', 'iframe', '.nav', '.navigation', '.menu',
    '.breadcrumb', '.related', '.trending', '.popular', '.tags', '.tag-list',
    '.share', '.sharing', '.social', '.subscribe', '.newsletter',
)

CONTENT_SELECTORS = (
    '.storyDetails',
    '.story-details',
    '.article-content',
    '.story-content',
    '.detail-story',
    'div[data-vars-pagetype="story"]',
    '.main-content article',
    'main article',
)

TITLE_SELECTORS = (
    'h1.hdg1',
    'h1.main-heading',
    'h1.story-title',
    'h1.headline',
    'meta[property="og:title"]',
    'title',
)

AUTHOR_SELECTORS = (
    '.author-name',
    '.byline',
    '.author-info .name',
    '.story-byline',
    '.writer-name',
    'meta[name="author"]',
)

# Analytics globals that carry the byline on story pages
SCRIPT_AUTHOR_PATTERNS = (
    re.compile(r'window\._sf_async_config\.authors\s*=\s*["\']([^"\']+)["\']'),
    re.compile(r'"author_name":\s*"([^"]+)"'),
)

DATE_PATTERNS = [
    (re.compile(r'<meta[^>]*property=["\']article:published_time["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I),
     'meta_article_published_time'),
    (re.compile(r'<meta[^>]*property=["\']article:modified_time["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I),
     'meta_article_modified_time'),
    (re.compile(r'<meta[^>]*name=["\']publish-date["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I),
     'meta_publish_date'),
    (re.compile(r'"published_date":\s*"([^"]+)"'), 'data_layer_published_date'),
]

PARAGRAPH_MARKERS = ('subscribe', 'newsletter', 'read more', 'also read', 'follow us')
MIN_STORY_PARAGRAPH_LENGTH = 50
MIN_STORY_PARAGRAPHS = 3
MIN_ARTICLE_TEXT_LENGTH = 500


class HindustanTimesExtractor(BaseExtractor):
    name = 'HindustanTimesExtractor'
    domains = ('hindustantimes.com',)
    method = 'json-ld-with-dom-fallback'
    note = 'Prefers NewsArticle structured data; reads the byline from analytics globals'
    title_suffixes = (re.compile(r'\s*\|\s*Hindustan Times\s*$', re.IGNORECASE),)

    def author(self, html: str, soup=None) -> Optional[str]:
        for item in json_ld.iter_json_ld_items(html):
            if json_ld.is_article(item):
                author = self.clean_author(json_ld.extract_author(item.get('author')))
                if author:
                    return author

        for pattern in SCRIPT_AUTHOR_PATTERNS:
            match = pattern.search(html)
            if match:
                author = self.clean_author(match.group(1))
                if author:
                    return author

        soup = soup if soup is not None else self.html.make_soup(html)
        if soup is None:
            return None
        return self.author_from_soup(soup, AUTHOR_SELECTORS)

    def published_date(self, html: str) -> Optional[str]:
        for item in json_ld.iter_json_ld_items(html):
            if json_ld.is_article(item):
                date = self.dates.normalize_date(item.get('datePublished'))
                if date:
                    return date
        return self.dates.extract_published_date(html, DATE_PATTERNS) or self.extract_published_date(html)

    def from_structured_data(self, html: str) -> Optional[ExtractionResult]:
        result = self.from_json_ld(html)
        if result is None:
            return None
        result.author = result.author or self.author(html)
        result.published_date = self.published_date(html)
        if not result.title:
            soup = self.html.make_soup(html)
            result.title = self.title_from_soup(soup, TITLE_SELECTORS) if soup is not None else None
        return result

    def story_text(self, soup) -> Optional[str]:
        for selector in CONTENT_SELECTORS:
            try:
                elements = soup.select(selector)
            except Exception:
                continue
            paragraphs = self.utils.filter_paragraphs(
                self.html.paragraphs_in(elements), PARAGRAPH_MARKERS, MIN_STORY_PARAGRAPH_LENGTH
            )
            if len(paragraphs) >= MIN_STORY_PARAGRAPHS:
                return self.utils.join_paragraphs(paragraphs)

        article = soup.find('article')
        if article is not None:
            text = article.get_text(' ', strip=True)
            if len(text) > MIN_ARTICLE_TEXT_LENGTH:
                return text
        return None

    def from_page_dom(self, html: str, url: str) -> Optional[ExtractionResult]:
        soup = self.html.make_soup(html)
        if soup is None:
            return None

        title = self.title_from_soup(soup, TITLE_SELECTORS)
        author = self.author(html, soup)
        self.html.remove_elements(soup, NOISE_SELECTORS)

        content = self.story_text(soup)
        if not self.validate_content(content):
            return None

        return ExtractionResult(
            content=self.utils.clean_content(content),
            title=title,
            author=author,
            published_date=self.published_date(html),
            metadata={'extractionMethod': 'dom-parsing', 'source': url},
        )

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        return await self.run_chain(url, [
            ('json-ld', lambda: self.from_structured_data(html)),
            ('dom', lambda: self.from_page_dom(html, url)),
        ])
