"""DOM-selector and regex paragraph passes shared by the site extractors."""

import logging
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment

from .extraction_constants import MIN_PARAGRAPH_LENGTH, SOCIAL_MARKERS
from .extraction_utils import ExtractionUtils, extraction_utils


logger = logging.getLogger(__name__)


PARAGRAPH_RE = re.compile(r'<p[^>]*>(.*?)</p>', re.IGNORECASE | re.DOTALL)
NON_CONTENT_BLOCK_RE = re.compile(r'<(script|style|nav|header|footer|noscript)[^>]*>.*?</\1>', re.IGNORECASE | re.DOTALL)
HTML_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
AMP_LINK_RE = re.compile(r'<link[^>]*rel=["\']amphtml["\'][^>]*href=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE)


class HTMLProcessor:
    """Turn raw HTML or a parsed document into filtered article paragraphs."""

    def __init__(self, utils: ExtractionUtils = None):
        self.utils = utils or extraction_utils

    def make_soup(self, html: str) -> Optional[BeautifulSoup]:
        """Parse HTML; None when the document cannot be parsed."""
        if not html:
            return None
        try:
            return BeautifulSoup(html, 'html.parser')
        except Exception as e:
            logger.debug(f"HTML parsing failed: {e}")
            return None

    def remove_elements(self, soup: BeautifulSoup, selectors: Iterable[str]) -> None:
        """Decompose every element matching any of the selectors, and HTML comments."""
        for selector in selectors:
            try:
                for element in soup.select(selector):
                    element.decompose()
            except Exception as e:
                logger.debug(f"Bad noise selector {selector!r}: {e}")

        for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
            comment.extract()

    def element_value(self, element) -> str:
        """``content`` attribute for meta tags, visible text otherwise."""
        value = element.get('content') if element.name == 'meta' else None
        return (value or element.get_text(' ', strip=True) or '').strip()

    def select_first_value(self, soup: BeautifulSoup, selectors: Sequence[str],
                           accept: Callable[[str], Optional[str]]) -> Optional[str]:
        """Walk a selector chain; the first element whose value ``accept`` keeps wins."""
        for selector in selectors:
            try:
                element = soup.select_one(selector)
            except Exception:
                continue
            if element is None:
                continue
            value = accept(self.element_value(element))
            if value:
                return value
        return None

    def paragraphs_in(self, elements) -> List[str]:
        """Paragraph texts under the matched elements (or the elements themselves when they are <p>)."""
        paragraphs = []
        for element in elements:
            if element.name == 'p':
                paragraphs.append(element.get_text(' ', strip=True))
            else:
                paragraphs.extend(p.get_text(' ', strip=True) for p in element.find_all('p'))
        return paragraphs

    def extract_by_selectors(self, soup: BeautifulSoup, selectors: Sequence[str],
                             markers: Sequence[str] = SOCIAL_MARKERS,
                             min_length: int = MIN_PARAGRAPH_LENGTH,
                             text_fallback: bool = False) -> Tuple[Optional[str], Optional[str]]:
        """
        Try container selectors in order and join their filtered paragraphs.

        Returns:
            Tuple of (content, successful_selector)
        """
        for selector in selectors:
            try:
                elements = soup.select(selector)
            except Exception as e:
                logger.debug(f"Selector {selector!r} failed: {e}")
                continue
            if not elements:
                continue

            paragraphs = self.utils.filter_paragraphs(self.paragraphs_in(elements), markers, min_length)
            content = self.utils.join_paragraphs(paragraphs)
            if self.utils.validate_content(content):
                return content, selector

            if text_fallback:
                text = ' '.join(element.get_text(' ', strip=True) for element in elements).strip()
                if self.utils.validate_content(text):
                    return text, selector

        return None, None

    def strip_non_content(self, html: str) -> str:
        html = HTML_COMMENT_RE.sub('', html)
        return NON_CONTENT_BLOCK_RE.sub('', html)

    def extract_by_regex(self, html: str, markers: Sequence[str] = SOCIAL_MARKERS,
                         container_patterns: Sequence = None) -> Tuple[Optional[str], int]:
        """
        Last-resort ``<p>...</p>`` scan over raw HTML with the same paragraph filters.

        With ``container_patterns`` only paragraphs inside the first matching
        container are considered, trying each container pattern in turn.

        Returns:
            Tuple of (content, paragraph_count)
        """
        if not html:
            return None, 0

        cleaned = self.strip_non_content(html)
        if container_patterns:
            scopes = []
            for pattern in container_patterns:
                match = pattern.search(cleaned)
                if match:
                    scopes.append(match.group(1))
        else:
            scopes = [cleaned]

        for scope in scopes:
            paragraphs = self.utils.filter_paragraphs(PARAGRAPH_RE.findall(scope), markers)
            content = self.utils.join_paragraphs(paragraphs)
            if self.utils.validate_content(content):
                return content, len(paragraphs)

        return None, 0

    def first_regex_match(self, html: str, patterns: Sequence,
                          accept: Callable[[str], Optional[str]]) -> Optional[str]:
        """Regex counterpart of ``select_first_value``."""
        if not html:
            return None
        for pattern in patterns:
            match = pattern.search(html)
            if match:
                value = accept(self.utils.clean_html_content(match.group(1)))
                if value:
                    return value
        return None

    def find_amp_url(self, html: str, url: str) -> Optional[str]:
        """AMP alternate advertised via ``<link rel="amphtml">``, made absolute."""
        if not html:
            return None
        match = AMP_LINK_RE.search(html)
        if not match:
            return None
        return urljoin(url, match.group(1))


# Module-level instance
html_processor = HTMLProcessor()
