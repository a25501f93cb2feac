"""
Tests for the command line interface and settings.
"""

import pytest
from click.testing import CliRunner

from sentiment_scraper import cli as cli_module
from sentiment_scraper.config import Settings
from sentiment_scraper.models import BatchResult, BatchStats, ErrorType, FetchResult


@pytest.fixture
def runner(monkeypatch):
    monkeypatch.setattr(cli_module, 'setup_logging', lambda *args, **kwargs: None)
    return CliRunner()


class TestCli:

    def test_extractors(self, runner):
        result = runner.invoke(cli_module.cli, ['extractors'])
        assert result.exit_code == 0
        assert 'MoneyControlExtractor' in result.output
        assert 'carandbike.com' in result.output

    def test_batch_without_urls(self, runner):
        result = runner.invoke(cli_module.cli, ['batch'])
        assert result.exit_code == 1
        assert 'No URLs given' in result.output

    def test_batch_reads_url_file(self, runner, monkeypatch):
        seen = {}

        async def fake_run_batch(urls, concurrency):
            seen['urls'], seen['concurrency'] = urls, concurrency
            results = [FetchResult(url=url, status='success', content='body', extractor='generic') for url in urls]
            return BatchResult(results=results, stats=BatchStats(len(urls), len(urls), 0, 0, concurrency))

        monkeypatch.setattr(cli_module, 'run_batch', fake_run_batch)
        with runner.isolated_filesystem():
            with open('urls.txt', 'w') as f:
                f.write("# morning reads\nhttps://example.org/a\n\nhttps://example.org/b\n")
            result = runner.invoke(cli_module.cli, ['batch', 'https://example.org/c', '-f', 'urls.txt', '-c', '2'])

        assert result.exit_code == 0
        assert seen == {
            'urls': ['https://example.org/c', 'https://example.org/a', 'https://example.org/b'],
            'concurrency': 2,
        }
        assert 'successful' in result.output

    def test_extract_failure_exits_nonzero(self, runner, monkeypatch):
        async def fake_run_batch(urls, concurrency):
            failure = FetchResult.failure(urls[0], 'Page not found (404)', ErrorType.NOT_FOUND)
            return BatchResult(results=[failure], stats=BatchStats(1, 0, 1, 0, 1))

        monkeypatch.setattr(cli_module, 'run_batch', fake_run_batch)
        result = runner.invoke(cli_module.cli, ['extract', 'https://example.org/missing'])
        assert result.exit_code == 1
        assert 'not-found' in result.output


class TestSettings:

    def test_clamps(self):
        settings = Settings(BATCH_CONCURRENCY=5, BATCH_MAX_CONCURRENCY=10,
                            ANALYSIS_CONCURRENCY=3, ANALYSIS_MAX_CONCURRENCY=5)
        assert settings.clamp_batch_concurrency(None) == 5
        assert settings.clamp_batch_concurrency(25) == 10
        assert settings.clamp_batch_concurrency(0) == 1
        assert settings.clamp_analysis_concurrency(None) == 3
        assert settings.clamp_analysis_concurrency(8) == 5

    def test_empty_api_key_is_unset(self):
        assert Settings(OPENROUTER_API_KEY='').sentiment_api_key is None
        assert Settings(OPENROUTER_API_KEY='abc').sentiment_api_key.get_secret_value() == 'abc'

    def test_only_known_fields(self):
        assert 'development' not in Settings.model_fields
        assert 'fetch_max_response_bytes' in Settings.model_fields
