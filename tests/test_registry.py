"""
Tests for the extractor registry.
"""

import pytest

from sentiment_scraper.core.exceptions import ExtractorRegistrationError
from sentiment_scraper.extractors.base import BaseExtractor
from sentiment_scraper.extractors.moneycontrol import MoneyControlExtractor
from sentiment_scraper.extractors.registry import (
    DEFAULT_EXTRACTORS,
    ExtractorRegistry,
    create_default_registry,
)
from sentiment_scraper.models import ExtractionResult

from conftest import PARAGRAPHS


class FixedExtractor(BaseExtractor):
    """Extractor returning a fixed body, tagged with its own name."""

    def __init__(self, name, domains):
        super().__init__()
        self.name = name
        self.domains = domains

    async def _extract(self, html, url):
        return ExtractionResult(content=f"{self.name}: {PARAGRAPHS[0]}")


class TestExtractorRegistry:
    """Test registration and URL dispatch."""

    @pytest.fixture
    def registry(self):
        registry = ExtractorRegistry()
        registry.register(FixedExtractor('FooExtractor', ('foo.com',)))
        registry.register(FixedExtractor('BarExtractor', ('bar.com', 'bar.org')))
        return registry

    def test_find_extractor(self, registry):
        assert registry.find_extractor("https://www.foo.com/story").name == 'FooExtractor'
        assert registry.find_extractor("https://bar.org/story").name == 'BarExtractor'
        assert registry.find_extractor("https://baz.com/story") is None

    def test_first_registered_wins(self, registry):
        registry.register(FixedExtractor('OtherFooExtractor', ('foo.com',)))
        assert registry.find_extractor("https://foo.com/a").name == 'FooExtractor'

    @pytest.mark.asyncio
    async def test_extract_content_dispatches(self, registry):
        result = await registry.extract_content("<html></html>", "https://bar.com/a")
        assert result.content.startswith("BarExtractor: ")

    @pytest.mark.asyncio
    async def test_extract_content_without_match(self, registry):
        assert await registry.extract_content("<html></html>", "https://baz.com/a") is None

    def test_supported_domains_sorted(self, registry):
        assert registry.get_supported_domains() == ['bar.com', 'bar.org', 'foo.com']

    def test_extractor_info(self, registry):
        info = registry.get_extractor_info()
        assert info[0] == {
            'name': 'FooExtractor',
            'domains': ['foo.com'],
            'canHandle': True,
            'hasExtract': True,
        }
        assert len(info) == 2

    def test_register_rejects_incomplete_extractor(self, registry):
        class NoExtract:
            name = 'Broken'
            domains = ('broken.com',)

            def can_handle(self, url):
                return True

        with pytest.raises(ExtractorRegistrationError):
            registry.register(NoExtract())
        assert len(registry) == 2


class TestDefaultRegistry:

    def test_has_every_site_extractor_in_order(self):
        registry = create_default_registry()
        assert [type(e) for e in registry.extractors] == list(DEFAULT_EXTRACTORS)
        assert len(registry) == 8

    def test_shares_fetcher(self):
        fetcher = object()
        registry = create_default_registry(fetcher)
        assert all(extractor.fetcher is fetcher for extractor in registry.extractors)

    @pytest.mark.parametrize("url,name", [
        ("https://www.carandbike.com/news/a", 'CarAndBikeExtractor'),
        ("https://www.autocarindia.com/car-news/a", 'AutocarIndiaExtractor'),
        ("https://www.evoindia.com/features/a", 'EvoIndiaExtractor'),
        ("https://www.zeebiz.com/markets/a", 'ZeeBizExtractor'),
        ("https://www.moneycontrol.com/news/a.html", 'MoneyControlExtractor'),
        ("https://www.hindustantimes.com/india-news/a.html", 'HindustanTimesExtractor'),
        ("https://www.cardekho.com/news/a", 'CarDekhoExtractor'),
        ("https://www.msn.com/en-in/news/a", 'MSNExtractor'),
    ])
    def test_dispatch(self, url, name):
        assert create_default_registry().find_extractor(url).name == name

    def test_domain_list(self):
        domains = create_default_registry().get_supported_domains()
        assert 'moneycontrol.com' in domains
        assert domains == sorted(domains)

    def test_instances_are_independent(self):
        first = create_default_registry().find_extractor("https://www.moneycontrol.com/a")
        second = create_default_registry().find_extractor("https://www.moneycontrol.com/a")
        assert isinstance(first, MoneyControlExtractor)
        assert first is not second
