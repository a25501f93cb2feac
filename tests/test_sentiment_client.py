"""
Tests for the sentiment analysis client and analytics records.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from sentiment_scraper.core.exceptions import AnalysisParseError, APIError, NetworkError
from sentiment_scraper.models import AnalysisResult, ErrorType
from sentiment_scraper.services.analytics import (
    AnalyticsRecord,
    LoggingAnalyticsSink,
    record_analyses,
)
from sentiment_scraper.services.sentiment_client import SentimentClient


ANALYSIS = {
    'sentiment': 'positive',
    'confidence': 0.85,
    'tone': 'optimistic',
    'keyMessages': ['Revenue up twelve percent'],
    'reasoning': 'Results beat expectations',
    'themes': ['earnings', 'automotive'],
    'emotionalIntensity': 'medium',
}


def completion(text):
    return {'choices': [{'message': {'role': 'assistant', 'content': text}}]}


@pytest.fixture
def client():
    return SentimentClient(api_key='test-key', model='test-model', max_chars=4000, chunk_delay=0)


class TestSentimentClient:
    """Test request building, response parsing and error mapping."""

    def test_payload(self, client):
        payload = client.build_payload("Markets rallied today.", "https://example.org/a")
        assert payload['model'] == 'test-model'
        assert payload['temperature'] == 0.3
        assert payload['max_tokens'] == 1000
        prompt = payload['messages'][0]['content']
        assert "URL: https://example.org/a" in prompt
        assert 'Content: "Markets rallied today."' in prompt

    def test_prompt_truncates_content(self):
        client = SentimentClient(api_key='k', max_chars=10)
        assert 'Content: "0123456789"' in client.build_prompt("0123456789ABCDEF", None)

    @pytest.mark.parametrize("text", [
        json.dumps(ANALYSIS),
        "```json\n" + json.dumps(ANALYSIS) + "\n```",
        "```\n" + json.dumps(ANALYSIS) + "\n```",
    ])
    def test_parse_analysis(self, text):
        assert SentimentClient.parse_analysis(text) == ANALYSIS

    @pytest.mark.parametrize("text", ["not json", "[1, 2]", ""])
    def test_parse_analysis_rejects(self, text):
        with pytest.raises(AnalysisParseError):
            SentimentClient.parse_analysis(text)

    @pytest.mark.asyncio
    async def test_analyze(self, client):
        post = AsyncMock(return_value=completion("```json\n" + json.dumps(ANALYSIS) + "\n```"))
        with patch.object(client, '_post', post):
            analysis = await client.analyze("Revenue rose twelve percent.", "https://example.org/a")
        assert analysis == ANALYSIS
        assert post.await_count == 1

    @pytest.mark.asyncio
    async def test_analyze_item_success(self, client):
        with patch.object(client, '_post', AsyncMock(return_value=completion(json.dumps(ANALYSIS)))):
            result = await client.analyze_item("Revenue rose.", "https://example.org/a")
        assert result.to_dict() == {'url': "https://example.org/a", 'status': 'success', 'analysis': ANALYSIS}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error,error_type", [
        (APIError("Rate limit exceeded", status_code=429), ErrorType.RATE_LIMIT),
        (APIError("Unauthorized", status_code=401), ErrorType.AUTHENTICATION),
        (APIError("Bad gateway", status_code=502), ErrorType.SERVER),
        (APIError("Bad request", status_code=400), ErrorType.GENERAL),
        (NetworkError("Sentiment API request timed out"), ErrorType.NETWORK),
        (AnalysisParseError("Invalid JSON response from API"), ErrorType.PARSING),
    ])
    async def test_analyze_item_errors(self, client, error, error_type):
        with patch.object(client, '_post', AsyncMock(side_effect=error)):
            result = await client.analyze_item("Revenue rose.", "https://example.org/a")
        assert result.status == 'error'
        assert result.error_type == error_type

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, client):
        with patch.object(client, '_post', AsyncMock(return_value=completion("I think it is positive"))):
            result = await client.analyze_item("Revenue rose.", "https://example.org/a")
        assert result.error_type == ErrorType.PARSING
        assert result.error == 'Unable to parse sentiment analysis response'

    @pytest.mark.asyncio
    async def test_unexpected_response_shape(self, client):
        with patch.object(client, '_post', AsyncMock(return_value={'choices': []})):
            result = await client.analyze_item("Revenue rose.", "https://example.org/a")
        assert result.error_type == ErrorType.PARSING

    @pytest.mark.asyncio
    async def test_missing_content(self, client):
        post = AsyncMock()
        with patch.object(client, '_post', post):
            result = await client.analyze_item("", "https://example.org/a")
        assert result.error_type == ErrorType.VALIDATION
        post.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        client = SentimentClient(api_key='', chunk_delay=0)
        result = await client.analyze_item("Revenue rose.", "https://example.org/a")
        assert result.error_type == ErrorType.AUTHENTICATION

    @pytest.mark.asyncio
    async def test_batch_order_and_clamp(self, client):
        items = [{'content': f"Item {i}", 'url': f"https://example.org/{i}"} for i in range(7)]

        async def fake_post(payload):
            if '"Item 3"' in payload['messages'][0]['content']:
                raise APIError("Bad gateway", status_code=502)
            return completion(json.dumps(ANALYSIS))

        with patch.object(client, '_post', AsyncMock(side_effect=fake_post)):
            batch = await client.analyze_batch(items, concurrency=99)

        assert [r.url for r in batch.results] == [item['url'] for item in items]
        assert batch.results[3].error_type == ErrorType.SERVER
        assert batch.stats() == {'total': 7, 'successful': 6, 'failed': 1, 'concurrency': 5}
        assert batch.to_dict()['results'][3]['errorType'] == 'server'


class TestAnalytics:
    """Test analytics records and the logging sink."""

    def test_record_from_analysis(self):
        record = AnalyticsRecord.from_analysis("https://WWW.Example.org/a", {'sentiment': 'negative', 'themes': 'rates'})
        assert record.domain == "www.example.org"
        assert record.themes == ['rates']
        assert record.to_dict()['sentiment'] == 'negative'

    def test_only_successes_recorded(self):
        sink = LoggingAnalyticsSink()
        results = [
            AnalysisResult(url="https://example.org/a", status='success', analysis=ANALYSIS),
            AnalysisResult.failure("https://example.org/b", "boom", ErrorType.SERVER),
            AnalysisResult(url=None, status='success', analysis=ANALYSIS),
        ]
        sent = record_analyses(sink, results, {"https://example.org/a": "Jane Doe"})
        assert sent == 1
        assert sink.recorded == 1

    def test_sink_failures_do_not_propagate(self):
        class BrokenSink:
            def record(self, record):
                raise RuntimeError("sink down")

        results = [AnalysisResult(url="https://example.org/a", status='success', analysis=ANALYSIS)]
        assert record_analyses(BrokenSink(), results) == 0
