"""In-memory content cache with domain-sensitive TTL and LRU eviction."""

import hashlib
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from ..config import settings


logger = logging.getLogger(__name__)


# Domain-class TTLs (seconds)
DOMAIN_TTL_CONFIG = {
    'news': 2 * 60 * 60,
    'finance': 1 * 60 * 60,
    'social': 30 * 60,
    'blog': 12 * 60 * 60,
    'default': 6 * 60 * 60,
}

NEWS_DOMAINS = ['news.', 'cnn.com', 'bbc.com', 'reuters.com', 'bloomberg.com',
                'cnbc.com', 'ap.com', 'nbc.com', 'cbs.com', 'abc.com']
FINANCE_DOMAINS = ['finance.yahoo.com', 'marketwatch.com', 'fool.com', 'seeking',
                   'morningstar.com', 'barrons.com', 'wsj.com']
SOCIAL_DOMAINS = ['twitter.com', 'x.com', 'facebook.com', 'linkedin.com',
                  'reddit.com', 'medium.com']
BLOG_DOMAINS = ['wordpress.com', 'blogspot.com', 'substack.com', 'ghost.']

# Bytes of content sampled by the change-detection hash
HASH_SAMPLE_SIZE = 1024


@dataclass
class CacheEntry:
    """Cached extraction for one URL."""
    url: str
    content: str
    title: Optional[str]
    author: Optional[str]
    content_hash: str
    timestamp: float
    last_accessed: float
    ttl: int
    published_date: Optional[str] = None
    extractor: Optional[str] = None
    hit_count: int = 0
    fetch_count: int = 1

    def is_valid(self, now: float) -> bool:
        return now - self.timestamp < self.ttl


def generate_content_hash(content: str) -> str:
    """Fast fingerprint: md5 over the first KB of content plus its total length."""
    sample = content[:HASH_SAMPLE_SIZE] + str(len(content))
    return hashlib.md5(sample.encode('utf-8')).hexdigest()


def classify_domain(url: str) -> str:
    """Map a URL onto one of the TTL domain classes."""
    try:
        hostname = (urlparse(url).hostname or '').lower()
    except ValueError:
        return 'default'

    if any(domain in hostname for domain in NEWS_DOMAINS):
        return 'news'
    if any(domain in hostname for domain in FINANCE_DOMAINS):
        return 'finance'
    if any(domain in hostname for domain in SOCIAL_DOMAINS):
        return 'social'
    if any(domain in hostname for domain in BLOG_DOMAINS):
        return 'blog'
    return 'default'


def get_domain_ttl(url: str) -> int:
    """TTL in seconds for the URL's domain class."""
    return DOMAIN_TTL_CONFIG[classify_domain(url)]


class ContentCache:
    """URL-keyed cache of extracted article content.

    Keys are raw URL strings. Expired entries are treated as misses on read
    and only removed by the time-gated cleanup. When the entry count goes
    over ``max_entries`` the least recently accessed entries are evicted,
    plus a small surplus so eviction does not run on every insert.

    All methods are synchronous: under asyncio they run between suspension
    points, so each single-key operation is atomic without a lock.
    """

    def __init__(self, max_entries: int = None, cleanup_interval: int = None,
                 clock: Callable[[], float] = time.time):
        self.max_entries = max_entries or settings.cache_max_entries
        self.cleanup_interval = cleanup_interval if cleanup_interval is not None else settings.cache_cleanup_interval
        self.eviction_surplus = max(1, self.max_entries // 10)
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._last_cleanup = clock()

        self._hits = 0
        self._misses = 0
        self._evicted = 0
        self._expired_removed = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, url: str) -> bool:
        return url in self._entries

    def peek(self, url: str) -> Optional[CacheEntry]:
        """Return the stored entry (valid or not) without touching access stats."""
        return self._entries.get(url)

    def get(self, url: str) -> Optional[CacheEntry]:
        """Return a fresh entry for the URL, or None on miss / expiry."""
        now = self._clock()
        entry = self._entries.get(url)

        if entry is None or not entry.is_valid(now):
            self._misses += 1
            return None

        entry.last_accessed = now
        entry.hit_count += 1
        self._hits += 1
        return entry

    def set(self, url: str, content: str, title: Optional[str] = None,
            author: Optional[str] = None, published_date: Optional[str] = None,
            extractor: Optional[str] = None) -> CacheEntry:
        """Store a freshly fetched extraction, replacing any previous generation."""
        now = self._clock()
        previous = self._entries.get(url)

        entry = CacheEntry(
            url=url,
            content=content,
            title=title,
            author=author,
            published_date=published_date,
            extractor=extractor,
            content_hash=generate_content_hash(content),
            timestamp=now,
            last_accessed=now,
            ttl=get_domain_ttl(url),
            fetch_count=(previous.fetch_count + 1) if previous else 1,
        )
        self._entries[url] = entry

        logger.debug(
            f"Cached {url} ({len(content)} chars, TTL: {entry.ttl // 3600}h, "
            f"hash: {entry.content_hash[:8]})"
        )

        self.maybe_cleanup()
        if len(self._entries) > self.max_entries:
            self.evict_lru()
        return entry

    def age_minutes(self, entry: CacheEntry) -> int:
        """Whole minutes since the entry was written."""
        return round((self._clock() - entry.timestamp) / 60)

    def delete(self, url: str) -> bool:
        return self._entries.pop(url, None) is not None

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def cleanup_expired(self) -> int:
        """Remove expired entries."""
        now = self._clock()
        expired = [url for url, entry in list(self._entries.items()) if not entry.is_valid(now)]
        for url in expired:
            self._entries.pop(url, None)

        if expired:
            self._expired_removed += len(expired)
            logger.info(f"Cache cleanup: removed {len(expired)} expired entries")
        return len(expired)

    def evict_lru(self) -> int:
        """Evict least recently accessed entries until under the capacity bound."""
        if len(self._entries) <= self.max_entries:
            return 0

        ordered = sorted(self._entries.values(), key=lambda e: e.last_accessed)
        to_remove = min(len(ordered), len(ordered) - self.max_entries + self.eviction_surplus)
        for entry in ordered[:to_remove]:
            self._entries.pop(entry.url, None)

        self._evicted += to_remove
        logger.info(f"Cache eviction: removed {to_remove} LRU entries")
        return to_remove

    def cleanup(self) -> None:
        """Expiry cleanup followed by LRU eviction if still over capacity."""
        self.cleanup_expired()
        self.evict_lru()
        self._last_cleanup = self._clock()

    def maybe_cleanup(self) -> bool:
        """Run cleanup if the cleanup interval has elapsed since the last run."""
        if self._clock() - self._last_cleanup > self.cleanup_interval:
            self.cleanup()
            return True
        return False

    def stats(self) -> dict:
        """Get cache statistics."""
        now = self._clock()
        expired = sum(1 for entry in self._entries.values() if not entry.is_valid(now))
        return {
            'entries': len(self._entries),
            'max_entries': self.max_entries,
            'expired_entries': expired,
            'active_entries': len(self._entries) - expired,
            'hits': self._hits,
            'misses': self._misses,
            'evicted': self._evicted,
            'expired_removed': self._expired_removed,
        }


# Global cache instance, created on first use
_content_cache: Optional[ContentCache] = None


def get_content_cache() -> ContentCache:
    """Get or create the process-wide content cache."""
    global _content_cache
    if _content_cache is None:
        _content_cache = ContentCache()
    return _content_cache
