"""
msn.com extractor.

MSN renders article bodies client-side, so the static HTML usually carries
only metadata. Whatever pre-rendered text exists is used; otherwise the
result has no content and explains why.
"""

import logging
import re
from typing import Any, Dict, Optional

from ..extraction import json_ld
from ..models import ExtractionResult
from .base import BaseExtractor


logger = logging.getLogger(__name__)


META_DESCRIPTION_PATTERNS = (
    re.compile(r'<meta[^>]*name=["\']description["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<meta[^>]*property=["\']og:description["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
)
MIN_DESCRIPTION_LENGTH = 100

SCRIPT_LIKE_BLOCK_RE = re.compile(r'<(script|style|noscript)[^>]*>.*?</\1>', re.IGNORECASE | re.DOTALL)
HTML_COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
TEXT_BLOCK_RE = re.compile(r'>([^<]{50,})<')
CODE_LIKE_RE = re.compile(r'^(function|var|const|let|if|for|while|return|\{|\}|;)')
CSS_LIKE_RE = re.compile(r'^(font-|color:|background:|margin:|padding:)')
MIN_TEXT_BLOCK_LENGTH = 50
MIN_TEXT_CONTENT_LENGTH = 200

TITLE_PATTERNS = (
    re.compile(r'<meta[^>]*property=["\']og:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<meta[^>]*name=["\']twitter:title["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<h1[^>]*>(.*?)</h1>', re.DOTALL),
    re.compile(r'<title[^>]*>(.*?)</title>', re.DOTALL),
)

AUTHOR_PATTERNS = (
    re.compile(r'<meta[^>]*name=["\']author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<meta[^>]*property=["\']article:author["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
    re.compile(r'<meta[^>]*name=["\']twitter:creator["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.IGNORECASE),
)


class MSNExtractor(BaseExtractor):
    name = 'MSNExtractor'
    domains = ('msn.com',)
    method = 'msn-limited-extraction'
    note = 'MSN.com requires JavaScript execution for full content. Consider using browser automation.'

    def clean_title(self, title: Optional[str]) -> Optional[str]:
        # MSN's own chrome titles ("MSN", "... | MSN") are not article titles
        title = super().clean_title(title)
        if title and 'msn' in title.lower():
            return None
        return title

    def title(self, html: str) -> Optional[str]:
        return self.title_from_html(html, TITLE_PATTERNS)

    def author(self, html: str) -> Optional[str]:
        return self.author_from_html(html, AUTHOR_PATTERNS)

    def prerendered_content(self, html: str) -> Optional[str]:
        """Article JSON-LD body, else a long meta or Open Graph description."""
        item = json_ld.find_article(html, self.validate_content)
        if item is not None:
            return json_ld.article_content(item)

        for pattern in META_DESCRIPTION_PATTERNS:
            match = pattern.search(html)
            if match and len(match.group(1)) > MIN_DESCRIPTION_LENGTH and self.validate_content(match.group(1)):
                return match.group(1)
        return None

    def is_text_block(self, text: str) -> bool:
        lowered = text.lower()
        return (
            len(text) > MIN_TEXT_BLOCK_LENGTH
            and not CODE_LIKE_RE.match(text)
            and not CSS_LIKE_RE.match(text)
            and 'javascript' not in lowered
            and 'stylesheet' not in lowered
        )

    def text_blocks(self, html: str) -> Optional[str]:
        """Any long text runs left once scripts, styles and comments are gone."""
        cleaned = HTML_COMMENT_RE.sub('', SCRIPT_LIKE_BLOCK_RE.sub('', html))
        blocks = []
        for raw in TEXT_BLOCK_RE.findall(cleaned):
            text = self.clean_html_content(raw)
            if self.is_text_block(text):
                blocks.append(text)

        content = self.utils.join_paragraphs(blocks)
        if len(content) > MIN_TEXT_CONTENT_LENGTH and self.validate_content(content):
            return content
        return None

    def from_initial_html(self, html: str) -> Optional[ExtractionResult]:
        content = self.prerendered_content(html)
        method, note = 'msn-prerendered', 'Extracted from pre-rendered content in initial HTML'
        if content is None:
            content = self.text_blocks(html)
            method, note = 'msn-text-extraction', 'Extracted available text from initial HTML'
        if content is None:
            return None

        return ExtractionResult(
            content=content,
            title=self.title(html),
            author=self.author(html),
            published_date=self.extract_published_date(html),
            metadata={'extractionMethod': method, 'note': note},
        )

    def javascript_required(self, html: str, url: str) -> ExtractionResult:
        return ExtractionResult(
            content=None,
            title=self.title(html),
            author=None,
            metadata={
                'extractionMethod': 'msn-javascript-required',
                'error': 'MSN.com requires JavaScript execution for content loading',
                'recommendation': 'Use a browser automation tool for full content extraction',
                'url': url,
            },
        )

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        result = await self.run_chain(url, [
            ('initial-html', lambda: self.from_initial_html(html)),
        ])
        if result is not None:
            return result
        logger.info(f"⚠️ {self.name}: no content in initial HTML for {url}, page requires JavaScript")
        return self.javascript_required(html, url)

    def extract_metadata(self, html: str, url: str) -> Dict[str, Any]:
        metadata = super().extract_metadata(html, url)
        metadata['limitations'] = [
            'Content loaded dynamically via JavaScript',
            'Initial HTML contains minimal content',
            'Requires browser automation for full extraction',
        ]
        metadata['alternatives'] = [
            'Use headless browser automation',
            'Try RSS feeds if available',
            'Use MSN API if accessible',
        ]
        return metadata
