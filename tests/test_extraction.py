"""
Tests for the shared extraction helpers.
"""

import re

import pytest

from sentiment_scraper.extraction import json_ld
from sentiment_scraper.extraction.date_extractor import DateExtractor
from sentiment_scraper.extraction.extraction_utils import ExtractionUtils
from sentiment_scraper.extraction.html_processor import HTMLProcessor


class TestValidateContent:
    """Test the content-quality gate."""

    @pytest.fixture
    def utils(self):
        return ExtractionUtils()

    def test_length_boundary(self, utils):
        assert utils.validate_content("a" * 99) is False
        assert utils.validate_content("a" * 100) is True

    def test_rejects_non_strings(self, utils):
        assert utils.validate_content(None) is False
        assert utils.validate_content(12345) is False
        assert utils.validate_content(["x" * 200]) is False

    @pytest.mark.parametrize("prefix", ["Page not found", "404 error", "Access denied", "Home About Contact"])
    def test_rejects_noise_signatures(self, utils, prefix):
        assert utils.validate_content(prefix + " " + "x" * 150) is False

    def test_noise_only_checked_near_the_start(self, utils):
        content = "x" * 250 + " page not found"
        assert utils.validate_content(content) is True


class TestCleaners:
    """Test title, author, URL and HTML cleaning."""

    @pytest.fixture
    def utils(self):
        return ExtractionUtils()

    def test_clean_html_content(self, utils):
        assert utils.clean_html_content("<p>Hello&nbsp;<b>world</b></p>\n\n  again") == "Hello world again"
        assert utils.clean_html_content(None) == ""

    def test_clean_content_keeps_paragraph_breaks(self, utils):
        assert utils.clean_content("  one \t two\n\n\n\nthree  ") == "one two\n\nthree"

    def test_clean_author_strips_prefix(self, utils):
        assert utils.clean_author("By  Jane Doe") == "Jane Doe"
        assert utils.clean_author("Written by: Ravi Kumar") == "Ravi Kumar"

    def test_clean_author_rejects_implausible(self, utils):
        assert utils.clean_author("ab") is None
        assert utils.clean_author("x" * 150) is None
        assert utils.clean_author(None) is None

    def test_clean_title_strips_suffix(self, utils):
        suffix = re.compile(r'\s*\|\s*Example News\s*$')
        assert utils.clean_title("Markets rally again | Example News", [suffix]) == "Markets rally again"
        assert utils.clean_title("Short") is None

    def test_clean_url_removes_invisible_characters(self, utils):
        assert utils.clean_url("\u200bhttps://example.com/a\ufeff ") == "https://example.com/a"

    def test_filter_paragraphs(self, utils):
        paragraphs = [
            "Too short",
            "Share this story with your friends and family today",
            "Follow us on Facebook for the latest automotive updates",
            "<b>The new model</b> arrives in showrooms next month with three engine options",
        ]
        assert utils.filter_paragraphs(paragraphs) == [
            "The new model arrives in showrooms next month with three engine options"
        ]


class TestDateExtractor:
    """Test publication date extraction and normalization."""

    @pytest.fixture
    def dates(self):
        return DateExtractor()

    def test_repairs_malformed_separator_and_offset(self, dates):
        assert dates.normalize_date("2023-06-01G14:30:00 +0530") == "2023-06-01T09:00:00+00:00"

    def test_named_zone(self, dates):
        assert dates.normalize_date("2024-03-10 08:00:00 IST") == "2024-03-10T02:30:00+00:00"

    def test_naive_dates_are_utc(self, dates):
        assert dates.normalize_date("2024-01-15 10:00:00") == "2024-01-15T10:00:00+00:00"

    def test_rejects_non_dates(self, dates):
        assert dates.normalize_date("yesterday") is None
        assert dates.normalize_date("") is None
        assert dates.normalize_date(None) is None

    def test_pattern_order(self, dates):
        html = (
            '<meta property="article:published_time" content="2024-02-01T10:00:00Z">'
            '<script>{"datePublished": "2024-01-31T09:00:00Z"}</script>'
        )
        date, source = dates.extract_published_date_with_source(html)
        assert date == "2024-01-31T09:00:00+00:00"
        assert source == "json_ld_datePublished"

    def test_skips_unparseable_candidates(self, dates):
        html = '"datePublished": "not a date" <time datetime="2024-05-05T12:00:00+00:00">'
        assert dates.extract_published_date(html) == "2024-05-05T12:00:00+00:00"

    def test_no_date(self, dates):
        assert dates.extract_published_date("<p>nothing here</p>") is None


class TestJsonLd:
    """Test lenient JSON-LD parsing."""

    def test_parses_well_formed(self):
        assert json_ld.parse_json_lenient('{"a": 1}') == {"a": 1}

    def test_repairs_trailing_and_doubled_commas(self):
        assert json_ld.parse_json_lenient('{"a": [1, 2,], "b": 2,, "c": 3,}') == {"a": [1, 2], "b": 2, "c": 3}

    def test_removes_control_characters(self):
        assert json_ld.parse_json_lenient('{"a": "line\x01one"}') == {"a": "lineone"}

    def test_unrepairable_raises(self):
        with pytest.raises(ValueError):
            json_ld.parse_json_lenient('{not json')

    def test_iterates_graph_and_lists(self):
        html = (
            '<script type="application/ld+json">[{"@type": "WebSite"}, '
            '{"@graph": [{"@type": "NewsArticle", "headline": "Hi"}]}]</script>'
            '<script type="application/ld+json">{broken</script>'
        )
        types = [json_ld.item_types(item) for item in json_ld.iter_json_ld_items(html)]
        assert ["WebSite"] in types
        assert ["NewsArticle"] in types

    def test_find_article_requires_valid_body(self):
        html = (
            '<script type="application/ld+json">{"@type": "Article", "articleBody": "short"}</script>'
            '<script type="application/ld+json">{"@type": ["NewsArticle"], "articleBody": "%s"}</script>'
            % ("long body " * 20)
        )
        item = json_ld.find_article(html, lambda text: bool(text) and len(text) >= 100)
        assert item is not None
        assert item["@type"] == ["NewsArticle"]

    @pytest.mark.parametrize("value,expected", [
        ("Jane Doe", "Jane Doe"),
        ({"@type": "Person", "name": "Jane Doe"}, "Jane Doe"),
        ([{"name": ""}, {"name": "Ravi Kumar"}], "Ravi Kumar"),
        ({"@type": "Organization"}, None),
        ({"@type": "NewsMediaOrganization", "name": "Mint"}, None),
        ([{"@type": "Organization", "name": "Zee Business"}, {"@type": "Person", "name": "Ravi Kumar"}], "Ravi Kumar"),
        (None, None),
    ])
    def test_extract_author(self, value, expected):
        assert json_ld.extract_author(value) == expected


class TestHTMLProcessor:
    """Test the DOM and regex paragraph passes."""

    @pytest.fixture
    def processor(self):
        return HTMLProcessor()

    def test_extract_by_selectors_tries_in_order(self, processor):
        body = "<p>" + "Body text that is long enough to be kept as a paragraph. " * 3 + "</p>"
        soup = processor.make_soup(
            f'<div class="teaser"><p>Teaser</p></div><div class="story">{body}{body}</div>'
        )
        content, selector = processor.extract_by_selectors(soup, ['.teaser', '.story'])
        assert selector == '.story'
        assert content.count("\n\n") == 1

    def test_extract_by_regex_skips_scripts_and_nav(self, processor):
        paragraph = "A paragraph of real article text that is comfortably over the minimum length."
        html = (
            f'<nav><p>{paragraph} nav copy</p></nav><script>var p = "<p>x</p>";</script>'
            f'<p>{paragraph}</p><p>{paragraph} Second.</p>'
        )
        content, count = processor.extract_by_regex(html)
        assert count == 2
        assert "nav copy" not in content

    def test_find_amp_url_is_absolute(self, processor):
        html = '<link rel="amphtml" href="/amp/story-123">'
        assert processor.find_amp_url(html, "https://example.com/story-123") == "https://example.com/amp/story-123"

    def test_remove_elements_ignores_bad_selectors(self, processor):
        soup = processor.make_soup('<div class="ad">x</div><p>keep</p>')
        processor.remove_elements(soup, ['[[[', '.ad'])
        assert soup.get_text() == "keep"
