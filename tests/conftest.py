"""Shared fixtures for the sentiment scraper tests."""

import json

import pytest

from sentiment_scraper.core.cache import ContentCache
from sentiment_scraper.core.http_client import FetchedPage


PARAGRAPHS = [
    "The company reported a strong quarter with revenue rising twelve percent year on year, "
    "driven by demand for its new compact SUV in urban markets.",
    "Analysts said the results beat expectations, although margins were squeezed by higher "
    "commodity prices and an unfavourable currency movement during the period.",
    "Management reiterated its guidance for the full year and announced plans to expand "
    "production capacity at its western plant by the end of next year.",
    "Dealers across the country reported longer waiting periods for popular variants, and the "
    "company said it was working with suppliers to reduce delivery times.",
]


def article_html(body: str = None, title: str = "Quarterly results beat expectations",
                 head: str = "") -> str:
    """A plain article page with four long paragraphs inside <article>."""
    if body is None:
        body = ''.join(f'<p>{p}</p>' for p in PARAGRAPHS)
    return (
        f'<html><head><title>{title}</title>{head}</head>'
        f'<body><nav><a href="/">Home</a> <a href="/about">About</a></nav>'
        f'<article><h1>{title}</h1>{body}</article>'
        f'<footer>Copyright 2024</footer></body></html>'
    )


def json_ld_script(data) -> str:
    return f'<script type="application/ld+json">{json.dumps(data)}</script>'


class FakeClock:
    """Manually advanced clock for cache TTL tests."""

    def __init__(self, start: float = 1_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeFetcher:
    """Page fetcher stand-in serving canned pages or raising canned errors."""

    def __init__(self, pages=None):
        self.pages = pages or {}
        self.calls = []

    async def fetch(self, url: str) -> FetchedPage:
        self.calls.append(url)
        page = self.pages.get(url)
        if isinstance(page, BaseException):
            raise page
        if page is None:
            return FetchedPage(url=url, status=404, html='', final_url=url)
        if isinstance(page, str):
            return FetchedPage(url=url, status=200, html=page, final_url=url)
        return page

    async def fetch_html(self, url: str) -> str:
        page = await self.fetch(url)
        return page.html


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ContentCache(max_entries=100, cleanup_interval=3600, clock=clock)


@pytest.fixture
def fetcher():
    return FakeFetcher()
