"""Utility functions for content extraction."""

import re
import unicodedata
from typing import Iterable, List, Optional, Sequence
from urllib.parse import urlparse

from .extraction_constants import (
    AUTHOR_PREFIX,
    BOILERPLATE_PREFIX,
    MAX_AUTHOR_LENGTH,
    MIN_AUTHOR_LENGTH,
    MIN_CONTENT_LENGTH,
    MIN_PARAGRAPH_LENGTH,
    MIN_TITLE_LENGTH,
    NOISE_PATTERNS,
    NOISE_SAMPLE_LENGTH,
    SOCIAL_MARKERS,
)


TAG_RE = re.compile(r'<[^>]*>')
ENTITY_RE = re.compile(r'&#?\w+;')
WHITESPACE_RE = re.compile(r'\s+')
INLINE_SPACE_RE = re.compile(r'[ \t\r\f\v]+')
BLANK_LINES_RE = re.compile(r'\n\s*\n+')


class ExtractionUtils:
    """Sanitizing and quality helpers shared by every extractor."""

    def __init__(self):
        self.min_content_length = MIN_CONTENT_LENGTH

    def extract_domain(self, url: str) -> str:
        """Lowercased hostname of a URL, or "unknown"."""
        try:
            return (urlparse(url).hostname or 'unknown').lower()
        except ValueError:
            return 'unknown'

    def clean_url(self, url: str) -> str:
        """Clean URL from invisible and problematic characters."""
        problematic_chars = [
            '\u200B',  # Zero Width Space
            '\u200C',  # Zero Width Non-Joiner
            '\u200D',  # Zero Width Joiner
            '\u2060',  # Word Joiner
            '\uFEFF',  # BOM
            '\u00A0',  # Non-breaking space
        ]

        cleaned_url = url
        for char in problematic_chars:
            cleaned_url = cleaned_url.replace(char, '')

        cleaned_url = unicodedata.normalize('NFKC', cleaned_url)
        cleaned_url = ''.join(char for char in cleaned_url if not unicodedata.category(char).startswith('C'))
        return cleaned_url.strip()

    def clean_html_content(self, html_content: Optional[str]) -> str:
        """Strip tags and entities, collapse whitespace."""
        if not html_content:
            return ''
        text = TAG_RE.sub('', html_content)
        text = ENTITY_RE.sub(' ', text)
        return WHITESPACE_RE.sub(' ', text).strip()

    def validate_content(self, content) -> bool:
        """Single content-quality gate: a string of 100+ chars not opening with a noise signature."""
        if not content or not isinstance(content, str):
            return False
        if len(content) < self.min_content_length:
            return False

        sample = content[:NOISE_SAMPLE_LENGTH]
        return not any(pattern.search(sample) for pattern in NOISE_PATTERNS)

    def clean_content(self, content: Optional[str]) -> str:
        """Normalize whitespace while keeping paragraph breaks."""
        if not content:
            return ''
        text = INLINE_SPACE_RE.sub(' ', content)
        text = BLANK_LINES_RE.sub('\n\n', text)
        lines = [line.strip() for line in text.split('\n')]
        return '\n'.join(lines).strip()

    def is_boilerplate_paragraph(self, text: str, markers: Sequence[str] = SOCIAL_MARKERS,
                                 min_length: int = MIN_PARAGRAPH_LENGTH) -> bool:
        """Short paragraphs, share/follow call-to-actions and social widgets."""
        if len(text) <= min_length:
            return True
        lowered = text.lower()
        if BOILERPLATE_PREFIX.match(lowered):
            return True
        return any(marker in lowered for marker in markers)

    def filter_paragraphs(self, paragraphs: Iterable[str], markers: Sequence[str] = SOCIAL_MARKERS,
                          min_length: int = MIN_PARAGRAPH_LENGTH) -> List[str]:
        """Keep the paragraphs that are not boilerplate."""
        kept = []
        for paragraph in paragraphs:
            text = self.clean_html_content(paragraph)
            if text and not self.is_boilerplate_paragraph(text, markers, min_length):
                kept.append(text)
        return kept

    def join_paragraphs(self, paragraphs: Iterable[str]) -> str:
        return '\n\n'.join(p for p in paragraphs if p)

    def clean_author(self, author: Optional[str]) -> Optional[str]:
        """Strip "By"/"Written by" prefixes; None unless a plausible name remains."""
        if not author or not isinstance(author, str):
            return None
        author = WHITESPACE_RE.sub(' ', author).strip()
        if not (MIN_AUTHOR_LENGTH < len(author) < MAX_AUTHOR_LENGTH):
            return None
        author = AUTHOR_PREFIX.sub('', author).strip()
        return author or None

    def clean_title(self, title: Optional[str], suffixes: Sequence = ()) -> Optional[str]:
        """Collapse whitespace and strip publisher suffixes such as " | SiteName"."""
        if not title or not isinstance(title, str):
            return None
        title = WHITESPACE_RE.sub(' ', title).strip()
        if len(title) <= MIN_TITLE_LENGTH:
            return None
        for suffix in suffixes:
            if isinstance(suffix, str):
                title = title.replace(suffix, '')
            else:
                title = suffix.sub('', title)
        return title.strip() or None


# Module-level instance; the helpers hold no per-call state
extraction_utils = ExtractionUtils()
