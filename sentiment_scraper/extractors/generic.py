"""Heuristic fallback extractor for sites without a dedicated extractor."""

import logging
import re
from typing import Optional, Tuple

from bs4 import BeautifulSoup

from ..extraction import json_ld
from ..extraction.extraction_constants import (
    GENERIC_BODY_PARAGRAPH_LENGTH,
    GENERIC_FALLBACK_THRESHOLD,
    GENERIC_GOOD_ENOUGH_LENGTH,
    GENERIC_MAX_CONTENT_LENGTH,
    GENERIC_MIN_CANDIDATE_LENGTH,
    GENERIC_MIN_CONTENT_LENGTH,
    GENERIC_MIN_PARAGRAPH_LENGTH,
    GENERIC_NOISE_SAMPLE_LENGTH,
    SHORT_PHRASE_LENGTH,
    SHORT_PHRASE_MIN_COUNT,
    SHORT_PHRASE_RATIO,
)
from ..models import ExtractionResult
from .base import BaseExtractor


logger = logging.getLogger(__name__)


NOISE_SELECTORS = (
    'script', 'style', 'nav', 'header', 'footer', 'aside', '.advertisement', '.ads',
    '.social-share', '.comments', '.sidebar', 'form', 'noscript', 'iframe', 'svg',
    'canvas', 'audio', 'video',
    '.nav', '.navigation', '.menu', '.breadcrumb', '.breadcrumbs', '.related',
    '.trending', '.popular', '.most-read',
    '.tags', '.tag-list', '.category', '.categories', '.share', '.sharing', '.social', '.subscribe',
    '.widget', '.widgets', '.ad', '.banner', '.promo', '.promotion', '.newsletter',
    '.search', '.search-box', '.search-form', '.login', '.signup', '.register',
    '[class*="ad-"]', '[class*="advertisement"]', '[id*="ad-"]', '[id*="advertisement"]',
    '[class*="popup"]', '[class*="modal"]', '[class*="overlay"]', '[class*="cookie"]',
)

JSON_LD_GROUP = 'script[type="application/ld+json"]'

# Most specific article containers first, structured data last
PRIORITY_SELECTORS = (
    'article .content, article .article-content, article .post-content',
    'article .entry-content, article .story-content, article .text',
    '.article-body, .story-body, .post-body, .entry-body',
    '.article-text, .story-text, .post-text, .content-text',
    'article, main, [role="main"]',
    '.content, .main-content, #main-content',
    '.post, .entry, .story, .article',
    '.story-content, .article-content, .post-content',
    '.entry-content, .content-area, .text-content',
    '[class*="story"], [class*="article"], [class*="content"]',
    JSON_LD_GROUP,
)

CLUTTER_TOKENS = (
    'nav', 'menu', 'sidebar', 'widget', 'ad', 'promo', 'related', 'trending',
    'popular', 'subscribe', 'newsletter', 'comment', 'social', 'share', 'tag',
)
PROMO_PHRASES = ('subscribe', 'newsletter', 'click here', 'read more')
LABEL_PARAGRAPH_RE = re.compile(r'^\s*(tags?|categories?|share|follow)\s*:?', re.IGNORECASE)
BODY_PARAGRAPH_EXCLUSIONS = ('cookie', 'subscribe', 'newsletter')
BODY_LABEL_RE = re.compile(r'^(tags?|categories?|share|follow|related|trending)', re.IGNORECASE)
MIN_MEANINGFUL_PARAGRAPHS = 3
MIN_BODY_PARAGRAPHS = 4
MIN_ELEMENT_TEXT_LENGTH = 200
MIN_JSON_LD_DESCRIPTION_LENGTH = 200

CLEANUP_PATTERNS = (
    re.compile(r'^\s*(advertisement|sponsored|promoted content|subscribe|newsletter)\b.*$', re.IGNORECASE | re.MULTILINE),
    re.compile(r'^\s*(tags?|categories?):\s*.*$', re.IGNORECASE | re.MULTILINE),
    re.compile(r'^\s*(share|follow us|connect with us)\b.*$', re.IGNORECASE | re.MULTILINE),
    re.compile(r'\b(click here|read more|continue reading|view gallery|see also)\b.*$', re.IGNORECASE | re.MULTILINE),
)

STRONG_NOISE_PATTERNS = (
    re.compile(r'^(search results|no results found|page not found)', re.IGNORECASE),
    re.compile(r'^(404|error|access denied)', re.IGNORECASE),
    re.compile(r'^\s*(menu|navigation)\s*$', re.IGNORECASE),
    re.compile(r'^(home\s+about\s+contact|privacy\s+terms)', re.IGNORECASE),
    re.compile(r'^[A-Z\s]{40,}$'),
)
SENTENCE_SPLIT_RE = re.compile(r'[.!?]+')
PHRASE_SPLIT_RE = re.compile(r'[.!?\n]+')
MIN_SENTENCE_LENGTH = 15
MIN_PHRASE_LENGTH = 5
MIN_AVERAGE_SENTENCE_LENGTH = 10

TITLE_SELECTORS = ('h1.title', 'h1.article-title', 'h1.entry-title', 'h1[itemprop="headline"]', 'h1')
MIN_HEADING_TITLE_LENGTH = 10

AUTHOR_META_SELECTORS = (
    'meta[name="author"]',
    'meta[property="article:author"]',
    'meta[name="article:author"]',
    'meta[property="og:article:author"]',
)
AUTHOR_SELECTORS = (
    '.author', '.by-author', '.byline', '.article-author',
    '[itemprop="author"]', '[rel="author"]',
    '.author-name', '.writer', '.post-author',
    '.article-byline', '.story-byline',
    '.meta .author', '.post-meta .author',
    'p.byline', 'span.byline', 'div.byline',
)
AUTHOR_PREFIX_RE = re.compile(r'^(by|author|written by|published by|posted by):?\s*', re.IGNORECASE)
AUTHOR_TRAILER_RES = (re.compile(r'\s*\|.*$'), re.compile(r'\s+-\s.*$'))
AUTHOR_ROLE_RE = re.compile(r',?\s*(editor|reporter|correspondent|staff writer)$', re.IGNORECASE)


class GenericExtractor(BaseExtractor):
    """
    Selector-ranked content heuristics for arbitrary pages.

    Not registered with the registry: ``domains`` is empty so it never claims
    a URL. The content service runs it when no site extractor produced content.
    """

    name = 'GenericExtractor'
    method = 'generic-heuristics'

    # Candidate collection

    def is_clutter(self, element) -> bool:
        classes = element.get('class') or []
        if isinstance(classes, str):
            classes = [classes]
        attrs = f"{' '.join(classes)} {element.get('id') or ''}".lower()
        return any(token in attrs for token in CLUTTER_TOKENS)

    def is_meaningful_paragraph(self, text: str) -> bool:
        lowered = text.lower()
        return (
            len(text) > GENERIC_MIN_PARAGRAPH_LENGTH
            and not any(phrase in lowered for phrase in PROMO_PHRASES)
            and not LABEL_PARAGRAPH_RE.match(text)
        )

    def element_text(self, element) -> Optional[str]:
        """Headings plus meaningful paragraphs, or the element's whole text as a fallback."""
        paragraphs = [p.get_text(' ', strip=True) for p in element.find_all('p')]
        meaningful = [p for p in paragraphs if self.is_meaningful_paragraph(p)]
        if len(meaningful) >= MIN_MEANINGFUL_PARAGRAPHS:
            headings = [h.get_text(' ', strip=True) for h in element.find_all(['h1', 'h2', 'h3', 'h4', 'h5', 'h6'])]
            return self.utils.join_paragraphs(headings + meaningful)

        text = element.get_text(' ', strip=True)
        lowered = text.lower()
        if len(text) > MIN_ELEMENT_TEXT_LENGTH and 'subscribe' not in lowered and 'newsletter' not in lowered:
            return text
        return None

    def json_ld_text(self, html: str) -> str:
        parts = []
        for item in json_ld.iter_json_ld_items(html):
            body = item.get('articleBody')
            description = item.get('description')
            if isinstance(body, str) and body:
                parts.append(body)
            elif isinstance(description, str) and len(description) > MIN_JSON_LD_DESCRIPTION_LENGTH:
                parts.append(description)
        return self.utils.join_paragraphs(parts)

    def selector_text(self, soup: BeautifulSoup, selector: str) -> str:
        try:
            elements = soup.select(selector)
        except Exception as e:
            logger.debug(f"Generic selector {selector!r} failed: {e}")
            return ''

        parts = []
        for element in elements:
            if self.is_clutter(element):
                continue
            text = self.element_text(element)
            if text:
                parts.append(text)
        return self.utils.join_paragraphs(parts)

    def best_candidate(self, soup: BeautifulSoup, html: str) -> Tuple[str, Optional[str]]:
        """Longest candidate over the priority groups, stopping once one is long enough."""
        best, best_selector = '', None
        for selector in PRIORITY_SELECTORS:
            # Structured data is read from the raw page; the cleaned soup has no scripts left
            text = self.json_ld_text(html) if selector == JSON_LD_GROUP else self.selector_text(soup, selector)
            if len(text) > len(best) and len(text) > GENERIC_MIN_CANDIDATE_LENGTH:
                best, best_selector = text, selector
            if len(best) > GENERIC_GOOD_ENOUGH_LENGTH:
                break
        return best, best_selector

    def body_paragraphs(self, soup: BeautifulSoup) -> Optional[str]:
        body = soup.body or soup
        paragraphs = []
        for p in body.find_all('p'):
            text = p.get_text(' ', strip=True)
            lowered = text.lower()
            if (len(text) > GENERIC_BODY_PARAGRAPH_LENGTH
                    and not any(word in lowered for word in BODY_PARAGRAPH_EXCLUSIONS)
                    and not BODY_LABEL_RE.match(text)):
                paragraphs.append(text)
        if len(paragraphs) >= MIN_BODY_PARAGRAPHS:
            return self.utils.join_paragraphs(paragraphs)
        return None

    # Cleanup and shape checks

    def cleanup(self, content: str) -> str:
        content = self.utils.clean_content(content)
        for pattern in CLEANUP_PATTERNS:
            content = pattern.sub('', content)
        return self.utils.clean_content(content)

    def looks_like_noise(self, content: str) -> bool:
        """Structural check for navigation dumps and error pages."""
        sample = content[:GENERIC_NOISE_SAMPLE_LENGTH]
        if any(pattern.search(sample) for pattern in STRONG_NOISE_PATTERNS):
            return True

        sentences = [s for s in SENTENCE_SPLIT_RE.split(content) if len(s.strip()) > MIN_SENTENCE_LENGTH]
        average = len(content) / len(sentences) if sentences else 0
        if average < MIN_AVERAGE_SENTENCE_LENGTH and len(sentences) < 2:
            return True

        phrases = [s for s in PHRASE_SPLIT_RE.split(content) if len(s.strip()) > MIN_PHRASE_LENGTH]
        if len(phrases) <= SHORT_PHRASE_MIN_COUNT:
            return False
        short = [s for s in phrases if len(s.strip()) < SHORT_PHRASE_LENGTH]
        return len(short) / len(phrases) > SHORT_PHRASE_RATIO

    def extract_text(self, html: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Run the full heuristic over a page.

        Returns:
            Tuple of (content, source) where source names the selector group,
            "body-paragraphs" or "body-text"; content is None when the page
            does not look like an article.
        """
        soup = self.html.make_soup(html)
        if soup is None:
            return None, None
        self.html.remove_elements(soup, NOISE_SELECTORS)

        content, source = self.best_candidate(soup, html)
        if len(content) < GENERIC_FALLBACK_THRESHOLD:
            paragraphs = self.body_paragraphs(soup)
            if paragraphs:
                content, source = paragraphs, 'body-paragraphs'
        if len(content) < GENERIC_FALLBACK_THRESHOLD:
            body = soup.body or soup
            content, source = body.get_text('\n', strip=True), 'body-text'

        content = self.cleanup(content)
        if self.looks_like_noise(content):
            logger.debug(f"{self.name}: page text looks like navigation or an error page ({source})")
            return None, source

        if len(content) > GENERIC_MAX_CONTENT_LENGTH:
            content = content[:GENERIC_MAX_CONTENT_LENGTH] + '...'
        elif len(content) < GENERIC_MIN_CONTENT_LENGTH:
            logger.debug(f"{self.name}: only {len(content)} characters after cleanup ({source})")
            return None, source

        return content, source

    # Title / author

    def extract_title(self, html: str) -> Optional[str]:
        """``<title>``, overridden by the first descriptive article heading."""
        soup = self.html.make_soup(html)
        if soup is None:
            return None

        title = soup.title.get_text(' ', strip=True) if soup.title else ''
        for selector in TITLE_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                text = element.get_text(' ', strip=True)
                if len(text) > MIN_HEADING_TITLE_LENGTH:
                    title = text
                    break

        title = ' '.join(title.split())
        return title or None

    def clean_byline(self, text: str) -> Optional[str]:
        text = AUTHOR_PREFIX_RE.sub('', text.strip())
        for pattern in AUTHOR_TRAILER_RES:
            text = pattern.sub('', text)
        return text if 2 < len(text) < 100 else None

    def extract_author(self, html: str) -> Optional[str]:
        """Meta tags, then JSON-LD, then byline elements."""
        soup = self.html.make_soup(html)
        if soup is None:
            return None

        author = None
        for selector in AUTHOR_META_SELECTORS:
            element = soup.select_one(selector)
            value = (element.get('content') or '').strip() if element is not None else ''
            if len(value) > 2:
                author = value
                break

        if not author:
            for item in json_ld.iter_json_ld_items(soup, lenient=False):
                author = json_ld.extract_author(item.get('author'))
                if author:
                    break

        if not author:
            for selector in AUTHOR_SELECTORS:
                element = soup.select_one(selector)
                if element is None:
                    continue
                author = self.clean_byline(element.get_text(' ', strip=True))
                if author:
                    break

        if not author:
            return None
        author = AUTHOR_ROLE_RE.sub('', ' '.join(author.split()))
        return author or None

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        content, source = self.extract_text(html)
        if content is None:
            return None
        return ExtractionResult(
            content=content,
            title=self.extract_title(html),
            author=self.extract_author(html),
            published_date=self.extract_published_date(html),
            metadata={'extractionMethod': 'generic', 'selector': source},
        )
