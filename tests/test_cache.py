"""
Tests for the in-memory content cache.
"""

import pytest

from sentiment_scraper.core.cache import (
    ContentCache,
    classify_domain,
    generate_content_hash,
    get_domain_ttl,
)

from conftest import FakeClock


class TestDomainClasses:

    @pytest.mark.parametrize("url,domain_class", [
        ("https://www.bbc.com/news/world-1", 'news'),
        ("https://news.example.org/a", 'news'),
        ("https://finance.yahoo.com/quote/TSLA", 'finance'),
        ("https://www.reddit.com/r/cars", 'social'),
        ("https://someone.substack.com/p/post", 'blog'),
        ("https://www.example.com/a", 'default'),
        ("not a url", 'default'),
    ])
    def test_classify_domain(self, url, domain_class):
        assert classify_domain(url) == domain_class

    def test_ttls(self):
        assert get_domain_ttl("https://finance.yahoo.com/a") == 3600
        assert get_domain_ttl("https://www.reddit.com/a") == 1800
        assert get_domain_ttl("https://www.example.com/a") == 6 * 3600


class TestContentHash:

    def test_stable(self):
        assert generate_content_hash("same text") == generate_content_hash("same text")

    def test_detects_change_in_sampled_prefix(self):
        assert generate_content_hash("a" * 500) != generate_content_hash("b" + "a" * 499)

    def test_detects_length_change(self):
        assert generate_content_hash("a" * 2000) != generate_content_hash("a" * 2001)


class TestContentCache:
    """Test TTL expiry and LRU eviction."""

    def test_set_and_get(self, cache):
        cache.set("https://www.example.com/a", "body", title="Title", author="Author")
        entry = cache.get("https://www.example.com/a")
        assert entry.content == "body"
        assert entry.title == "Title"
        assert entry.hit_count == 1
        assert cache.stats()['hits'] == 1

    def test_keeps_extractor_name(self, cache):
        cache.set("https://www.zeebiz.com/a", "body", extractor="ZeeBizExtractor")
        assert cache.get("https://www.zeebiz.com/a").extractor == "ZeeBizExtractor"
        cache.set("https://www.example.com/b", "body")
        assert cache.get("https://www.example.com/b").extractor is None

    def test_miss(self, cache):
        assert cache.get("https://www.example.com/missing") is None
        assert cache.stats()['misses'] == 1

    def test_expiry(self, cache, clock):
        url = "https://finance.yahoo.com/news/a"
        cache.set(url, "body")
        clock.advance(3599)
        assert cache.get(url) is not None
        clock.advance(2)
        assert cache.get(url) is None
        # expired entries stay until cleanup
        assert url in cache
        assert cache.peek(url).content == "body"

    def test_age_minutes(self, cache, clock):
        entry = cache.set("https://www.example.com/a", "body")
        clock.advance(180)
        assert cache.age_minutes(entry) == 3

    def test_refetch_counts(self, cache):
        cache.set("https://www.example.com/a", "one")
        entry = cache.set("https://www.example.com/a", "two")
        assert entry.fetch_count == 2
        assert len(cache) == 1

    def test_lru_eviction(self):
        clock = FakeClock()
        cache = ContentCache(max_entries=10, cleanup_interval=3600, clock=clock)
        for i in range(10):
            cache.set(f"https://www.example.com/{i}", f"body {i}")
            clock.advance(1)

        cache.get("https://www.example.com/0")
        clock.advance(1)
        cache.set("https://www.example.com/10", "body 10")

        # one over capacity plus a surplus of max_entries // 10
        assert len(cache) == 9
        assert "https://www.example.com/0" in cache
        assert "https://www.example.com/1" not in cache
        assert "https://www.example.com/2" not in cache
        assert "https://www.example.com/10" in cache
        assert cache.stats()['evicted'] == 2

    def test_cleanup_is_time_gated(self, cache, clock):
        cache.set("https://www.reddit.com/a", "social body")
        cache.set("https://www.example.com/a", "default body")
        assert cache.maybe_cleanup() is False

        clock.advance(3601)
        assert cache.maybe_cleanup() is True
        assert "https://www.reddit.com/a" not in cache
        assert "https://www.example.com/a" in cache
        assert cache.stats()['expired_removed'] == 1

    def test_stats(self, cache, clock):
        cache.set("https://www.reddit.com/a", "social body")
        cache.set("https://www.example.com/a", "default body")
        clock.advance(1801)
        stats = cache.stats()
        assert stats['entries'] == 2
        assert stats['expired_entries'] == 1
        assert stats['active_entries'] == 1
        assert stats['max_entries'] == 100

    def test_delete_and_clear(self, cache):
        cache.set("https://www.example.com/a", "a")
        cache.set("https://www.example.com/b", "b")
        assert cache.delete("https://www.example.com/a") is True
        assert cache.delete("https://www.example.com/a") is False
        assert cache.clear() == 1
        assert len(cache) == 0
