"""carandbike.com: article data embedded in the Next.js page payload."""

import json
import logging
import re
from typing import Any, Optional

from ..models import ExtractionResult
from .base import BaseExtractor


logger = logging.getLogger(__name__)


NEXT_DATA_RE = re.compile(r'<script id="__NEXT_DATA__" type="application/json">(.*?)</script>', re.DOTALL)

# props.pageProps.section[1].data[0].data[0].data[0]
ARTICLE_PATH = ('props', 'pageProps', 'section', 1, 'data', 0, 'data', 0, 'data', 0)


def dig(data: Any, path) -> Any:
    """Follow a key/index path, returning None at the first missing step."""
    for key in path:
        try:
            data = data[key]
        except (KeyError, IndexError, TypeError):
            return None
    return data


class CarAndBikeExtractor(BaseExtractor):
    name = 'CarAndBikeExtractor'
    domains = ('carandbike.com',)
    method = 'nextjs-data-api'

    async def _extract(self, html: str, url: str) -> Optional[ExtractionResult]:
        match = NEXT_DATA_RE.search(html or '')
        if not match:
            logger.info("❌ CarAndBike: No __NEXT_DATA__ script found")
            return None

        article = dig(json.loads(match.group(1)), ARTICLE_PATH)
        if not isinstance(article, dict):
            logger.info("❌ CarAndBike: Article data not found in expected location")
            return None

        content = self.clean_html_content(article.get('content') or '')
        if not self.validate_content(content):
            logger.info("❌ CarAndBike: Extracted content failed validation")
            return None

        return ExtractionResult(
            content=content,
            title=self.clean_title(article.get('title')),
            author=self.clean_author(article.get('author_name')),
            published_date=self.dates.normalize_date(article.get('pubDate')),
            metadata={
                'extractionMethod': 'nextjs-data',
                'excerpt': article.get('excerpt') or article.get('short_excerpt') or '',
                'categories': article.get('categories') or [],
                'readTime': article.get('minutes_read'),
            },
        )
