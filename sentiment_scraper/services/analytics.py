"""Fire-and-forget analytics records for completed sentiment analyses."""

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol
from urllib.parse import urlparse


logger = logging.getLogger(__name__)


@dataclass
class AnalyticsRecord:
    """One analysed article as seen by the analytics sink."""
    url: str
    author: Optional[str]
    sentiment: Optional[str]
    themes: List[str] = field(default_factory=list)
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def domain(self) -> str:
        return (urlparse(self.url).hostname or '').lower()

    @classmethod
    def from_analysis(cls, url: str, analysis: Dict[str, Any], author: Optional[str] = None) -> 'AnalyticsRecord':
        themes = analysis.get('themes') or []
        if not isinstance(themes, list):
            themes = [themes]
        return cls(
            url=url,
            author=author,
            sentiment=analysis.get('sentiment'),
            themes=[str(theme) for theme in themes],
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AnalyticsSink(Protocol):
    """Anything that accepts analytics records; must not raise into the caller."""

    def record(self, record: AnalyticsRecord) -> None:
        ...


class LoggingAnalyticsSink:
    """Default sink: writes each record to the log."""

    def __init__(self, logger_name: str = __name__):
        self.logger = logging.getLogger(logger_name)
        self.recorded = 0

    def record(self, record: AnalyticsRecord) -> None:
        try:
            self.logger.info(
                f"📊 analysis | domain={record.domain} | author={record.author} | "
                f"sentiment={record.sentiment} | themes={','.join(record.themes)}"
            )
            self.recorded += 1
        except Exception as e:
            logger.warning(f"Analytics logging failed: {e}")


def record_analyses(sink: AnalyticsSink, results, authors: Optional[Dict[str, Optional[str]]] = None) -> int:
    """Send one record per successful analysis result; returns how many were sent."""
    authors = authors or {}
    sent = 0
    for result in results:
        if not result.ok or not result.url:
            continue
        try:
            sink.record(AnalyticsRecord.from_analysis(result.url, result.analysis or {}, authors.get(result.url)))
            sent += 1
        except Exception as e:
            logger.warning(f"Analytics sink rejected record for {result.url}: {e}")
    return sent
