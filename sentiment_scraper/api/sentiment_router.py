"""Sentiment API router - single and batch sentiment analysis."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..services.analytics import AnalyticsSink, record_analyses
from ..services.sentiment_client import SentimentClient


logger = logging.getLogger(__name__)

router = APIRouter()


class AnalyzeSentimentRequest(BaseModel):
    content: Optional[Any] = None
    url: Optional[str] = None
    author: Optional[str] = None


class AnalyzeSentimentBatchRequest(BaseModel):
    contents: Optional[Any] = None
    concurrency: Optional[int] = None


def get_sentiment_client(request: Request) -> SentimentClient:
    return request.app.state.sentiment_client


def get_analytics(request: Request) -> AnalyticsSink:
    return request.app.state.analytics


def bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content={'error': message})


@router.post("/analyze-sentiment")
async def analyze_sentiment(body: AnalyzeSentimentRequest,
                            client: SentimentClient = Depends(get_sentiment_client),
                            analytics: AnalyticsSink = Depends(get_analytics)):
    """Analyze one piece of content."""
    if not body.content or not isinstance(body.content, str):
        return bad_request('Content is required')

    try:
        result = await client.analyze_item(body.content, body.url)
    except Exception as e:
        logger.error(f"❌ Sentiment analysis failed: {e}")
        return JSONResponse(status_code=500, content={'error': 'Sentiment analysis failed'})

    if body.url:
        record_analyses(analytics, [result], {body.url: body.author})
    return result.to_dict()


@router.post("/analyze-sentiment-batch")
async def analyze_sentiment_batch(body: AnalyzeSentimentBatchRequest,
                                  client: SentimentClient = Depends(get_sentiment_client),
                                  analytics: AnalyticsSink = Depends(get_analytics)):
    """Analyze many ``{content, url}`` items under the analysis concurrency bound."""
    if body.contents is None or not isinstance(body.contents, list):
        return bad_request('Contents array is required')
    if not body.contents:
        return bad_request('At least one content item is required')
    for item in body.contents:
        if not isinstance(item, dict) or not item.get('content') or not item.get('url'):
            return bad_request('Each content item must have "content" and "url" fields')

    try:
        batch = await client.analyze_batch(body.contents, body.concurrency)
    except Exception as e:
        logger.error(f"❌ Batch analysis failed: {e}")
        return JSONResponse(
            status_code=500,
            content={'error': 'Batch analysis failed', 'processed': 0, 'total': len(body.contents)},
        )

    authors = {item['url']: item.get('author') for item in body.contents}
    record_analyses(analytics, batch.results, authors)
    return batch.to_dict()
