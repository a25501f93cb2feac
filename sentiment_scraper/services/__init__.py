"""Services module."""

from .analytics import AnalyticsRecord, AnalyticsSink, LoggingAnalyticsSink
from .content_service import ContentService, classify_error
from .sentiment_client import SentimentClient

__all__ = [
    'AnalyticsRecord',
    'AnalyticsSink',
    'LoggingAnalyticsSink',
    'ContentService',
    'classify_error',
    'SentimentClient',
]
