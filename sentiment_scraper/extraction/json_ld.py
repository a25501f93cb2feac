"""Lenient JSON-LD parsing.

Publishers ship structured data with raw control characters, trailing
commas and doubled commas. ``parse_json_lenient`` tries the text as-is
first and only falls back to the repaired form when that fails, so
well-formed blocks are never rewritten.
"""

import json
import logging
import re
from typing import Any, Callable, Iterator, List, Optional

from bs4 import BeautifulSoup


logger = logging.getLogger(__name__)


JSON_LD_SCRIPT_RE = re.compile(
    r'<script[^>]*type=["\']application/ld\+json["\'][^>]*>(.*?)</script>',
    re.IGNORECASE | re.DOTALL
)
CONTROL_CHARS_RE = re.compile(r'[\x00-\x1F\x7F-\x9F]')
DUPLICATE_COMMA_RE = re.compile(r',(\s*,)+')
TRAILING_COMMA_RE = re.compile(r',(\s*[}\]])')

ARTICLE_TYPES = ('Article', 'NewsArticle')
ORGANIZATION_TYPES = ('Organization', 'NewsMediaOrganization', 'Corporation')


def repair_json(text: str) -> str:
    """Remove the malformed-JSON artifacts seen in publisher markup."""
    text = CONTROL_CHARS_RE.sub('', text)
    text = DUPLICATE_COMMA_RE.sub(',', text)
    text = TRAILING_COMMA_RE.sub(r'\1', text)
    return text.strip()


def parse_json_lenient(text: str) -> Any:
    """Parse JSON, repairing common breakage if strict parsing fails.

    Raises:
        ValueError: if the text is not JSON even after repair
    """
    if text is None:
        raise ValueError("No JSON text")
    try:
        return json.loads(text.strip())
    except ValueError:
        return json.loads(repair_json(text))


def find_json_ld_blocks(html) -> List[str]:
    """Raw text of every JSON-LD script block in a page (string or soup)."""
    if isinstance(html, BeautifulSoup):
        return [
            script.string or script.get_text()
            for script in html.find_all('script', type='application/ld+json')
        ]
    if not html:
        return []
    return JSON_LD_SCRIPT_RE.findall(html)


def _flatten(data: Any) -> Iterator[dict]:
    if isinstance(data, list):
        for item in data:
            yield from _flatten(item)
    elif isinstance(data, dict):
        yield data
        graph = data.get('@graph')
        if isinstance(graph, list):
            yield from _flatten(graph)


def iter_json_ld_items(html, lenient: bool = True) -> Iterator[dict]:
    """Yield every JSON-LD object in the page, skipping blocks that do not parse."""
    for block in find_json_ld_blocks(html):
        try:
            data = parse_json_lenient(block) if lenient else json.loads(block)
        except ValueError as e:
            logger.debug(f"Skipping unparseable JSON-LD block: {e}")
            continue
        yield from _flatten(data)


def item_types(item: dict) -> List[str]:
    item_type = item.get('@type', '')
    if isinstance(item_type, list):
        return [t for t in item_type if isinstance(t, str)]
    return [item_type] if isinstance(item_type, str) else []


def is_article(item: dict, types=ARTICLE_TYPES) -> bool:
    return any(t in types for t in item_types(item))


def article_content(item: dict) -> Optional[str]:
    content = item.get('articleBody') or item.get('description')
    return content if isinstance(content, str) else None


def find_article(html, validate: Callable[[str], bool], types=ARTICLE_TYPES,
                 lenient: bool = True) -> Optional[dict]:
    """First Article/NewsArticle item whose body or description passes ``validate``."""
    for item in iter_json_ld_items(html, lenient=lenient):
        if is_article(item, types) and validate(article_content(item)):
            return item
    return None


def extract_author(value: Any) -> Optional[str]:
    """Author name from a string, an object with ``name``, or a list of either.

    Objects typed as an organisation are publishers, not bylines, and are skipped.
    """
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, dict):
        if any(t in ORGANIZATION_TYPES for t in item_types(value)):
            return None
        name = value.get('name')
        if isinstance(name, str) and name.strip():
            return name.strip()
        return None
    if isinstance(value, list):
        for entry in value:
            author = extract_author(entry)
            if author:
                return author
    return None


def headline(item: dict) -> Optional[str]:
    title = item.get('headline') or item.get('name')
    return title.strip() if isinstance(title, str) and title.strip() else None
