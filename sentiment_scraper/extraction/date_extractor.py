"""Date extraction and normalization for content extraction."""

import logging
import re
from datetime import timezone
from typing import Optional, Sequence, Tuple

import dateutil.parser


logger = logging.getLogger(__name__)


# Ordered: structured data, meta tags, <time>, free text
PUBLISHED_DATE_PATTERNS = [
    (re.compile(r'"datePublished"\s*:\s*"([^"]+)"'), 'json_ld_datePublished'),
    (re.compile(r'"publishedTime"\s*:\s*"([^"]+)"'), 'json_ld_publishedTime'),
    (re.compile(r'"dateCreated"\s*:\s*"([^"]+)"'), 'json_ld_dateCreated'),
    (re.compile(r'<meta[^>]*property=["\']article:published_time["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I),
     'meta_article_published_time'),
    (re.compile(r'<meta[^>]*name=["\']publish-date["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I),
     'meta_publish_date'),
    (re.compile(r'<meta[^>]*name=["\']date["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I), 'meta_date'),
    (re.compile(r'<meta[^>]*name=["\']pubdate["\'][^>]*content=["\']([^"\']+)["\'][^>]*>', re.I), 'meta_pubdate'),
    (re.compile(r'<time[^>]*datetime=["\']([^"\']+)["\'][^>]*>', re.I), 'time_datetime'),
    (re.compile(r'Published on:\s*([^<\n]+)', re.I), 'text_published_on'),
    (re.compile(r'Published:\s*([^<\n]+)', re.I), 'text_published'),
    (re.compile(r'Date:\s*([^<\n]+)', re.I), 'text_date'),
    (re.compile(r'Posted:\s*([^<\n]+)', re.I), 'text_posted'),
]

# A date string must contain one of these shapes before we hand it to dateutil
DATE_SHAPES = [
    re.compile(r'\d{4}-\d{2}-\d{2}'),
    re.compile(r'\d{4}/\d{2}/\d{2}'),
    re.compile(r'\d{1,2}/\d{1,2}/\d{4}'),
    re.compile(r'[A-Za-z]+\.?\s+\d{1,2},?\s+\d{4}'),
    re.compile(r'\d{1,2}\s+[A-Za-z]+,?\s+\d{4}'),
]

# CarDekho writes "2023-06-01G14:30:00"
MALFORMED_SEPARATOR_RE = re.compile(r'(\d{4}-\d{2}-\d{2})G(\d{2})')
COMPACT_OFFSET_RE = re.compile(r'\s+([+-])(\d{2})(\d{2})$')
NAMED_ZONES = [
    (re.compile(r'\s+(UTC|GMT|Z)$', re.I), '+00:00'),
    (re.compile(r'\s+IST$', re.I), '+05:30'),
    (re.compile(r'\s+EST$', re.I), '-05:00'),
    (re.compile(r'\s+PST$', re.I), '-08:00'),
]


class DateExtractor:
    """Extract and normalize publication dates from raw HTML."""

    def normalize_date_string(self, date_str: str) -> str:
        """Repair malformed separators and timezone spellings before parsing."""
        date_str = date_str.strip()
        date_str = MALFORMED_SEPARATOR_RE.sub(r'\1T\2', date_str)
        date_str = COMPACT_OFFSET_RE.sub(r'\1\2:\3', date_str)
        for pattern, offset in NAMED_ZONES:
            date_str = pattern.sub(offset, date_str)
        return date_str

    def is_valid_date_string(self, date_str: Optional[str]) -> bool:
        """Check if string looks like a date."""
        if not date_str or len(date_str) < 8:
            return False
        return any(shape.search(date_str) for shape in DATE_SHAPES)

    def normalize_date(self, date_str: Optional[str]) -> Optional[str]:
        """Parse a date string into a UTC ISO-8601 instant, or None.

        Naive values are taken as UTC.
        """
        if not date_str or not isinstance(date_str, str):
            return None
        if not self.is_valid_date_string(date_str):
            return None

        normalized = self.normalize_date_string(date_str)
        try:
            dt = dateutil.parser.parse(normalized)
        except (ValueError, OverflowError) as e:
            logger.debug(f"Unparseable date {date_str!r}: {e}")
            return None

        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat()

    def extract_published_date(self, html: Optional[str], patterns: Sequence = None) -> Optional[str]:
        """First published date in the page that parses, as UTC ISO-8601."""
        date, _ = self.extract_published_date_with_source(html, patterns)
        return date

    def extract_published_date_with_source(self, html: Optional[str],
                                           patterns: Sequence = None) -> Tuple[Optional[str], Optional[str]]:
        """
        Extract publication date using the ordered pattern chain.

        Returns:
            Tuple of (normalized_date, pattern_name)
        """
        if not html:
            return None, None

        for pattern, name in (patterns or PUBLISHED_DATE_PATTERNS):
            for match in pattern.finditer(html):
                normalized = self.normalize_date(match.group(1))
                if normalized:
                    return normalized, name
        return None, None


# Module-level instance
date_extractor = DateExtractor()
