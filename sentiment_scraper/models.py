"""Result types shared by extractors, the content service and the HTTP layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorType(str, Enum):
    """Error taxonomy surfaced in per-item results."""
    VALIDATION = "validation"
    BOT_DETECTION = "bot-detection"
    NETWORK = "network"
    NOT_FOUND = "not-found"
    FORBIDDEN = "forbidden"
    CONTENT = "content"
    PARSING = "parsing"
    RATE_LIMIT = "rate-limit"
    AUTHENTICATION = "authentication"
    SERVER = "server"
    GENERAL = "general"


class UrlState(str, Enum):
    """Lifecycle of a single URL inside the content service."""
    PENDING = "pending"
    CACHE_CHECK = "cache_check"
    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    FETCHING = "fetching"
    FETCH_OK = "fetch_ok"
    FETCH_FAIL = "fetch_fail"
    EXTRACTING = "extracting"
    EXTRACT_OK = "extract_ok"
    EXTRACT_FAIL = "extract_fail"
    CACHE_WRITE = "cache_write"
    DONE = "done"


@dataclass
class ExtractionResult:
    """Structured article data produced by an extractor."""
    content: Optional[str]
    title: Optional[str] = None
    author: Optional[str] = None
    published_date: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'content': self.content,
            'title': self.title,
            'author': self.author,
            'publishedDate': self.published_date,
            'metadata': self.metadata,
        }


@dataclass
class FetchResult:
    """Outcome of fetching and extracting one URL."""
    url: str
    status: str
    content: str = ""
    title: Optional[str] = None
    author: Optional[str] = None
    published_date: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None
    content_hash: Optional[str] = None
    content_changed: Optional[bool] = None
    cache_age_minutes: Optional[int] = None
    extractor: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == 'success'

    @classmethod
    def failure(cls, url: str, error: str, error_type: ErrorType) -> 'FetchResult':
        return cls(url=url, status='error', error=error, error_type=error_type)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'url': self.url,
            'content': self.content,
            'title': self.title,
            'author': self.author,
            'publishedDate': self.published_date,
            'status': self.status,
            'cached': self.cached,
        }
        if self.ok:
            data['contentHash'] = self.content_hash
            data['extractor'] = self.extractor
            if self.cache_age_minutes is not None:
                data['cacheAge'] = self.cache_age_minutes
            if self.content_changed is not None:
                data['contentChanged'] = self.content_changed
        else:
            data['error'] = self.error
            data['errorType'] = self.error_type.value if self.error_type else ErrorType.GENERAL.value
        return data


@dataclass
class BatchStats:
    """Summary statistics for a batch run."""
    total: int
    successful: int
    failed: int
    cached: int
    concurrency: int

    @classmethod
    def from_results(cls, results: List['FetchResult'], concurrency: int) -> 'BatchStats':
        return cls(
            total=len(results),
            successful=sum(1 for r in results if r.ok),
            failed=sum(1 for r in results if not r.ok),
            cached=sum(1 for r in results if r.cached),
            concurrency=concurrency,
        )

    def to_dict(self) -> Dict[str, int]:
        return {
            'total': self.total,
            'successful': self.successful,
            'failed': self.failed,
            'cached': self.cached,
            'concurrency': self.concurrency,
        }


@dataclass
class BatchResult:
    """Ordered per-URL results plus summary statistics."""
    results: List[FetchResult]
    stats: BatchStats

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [result.to_dict() for result in self.results],
            'stats': self.stats.to_dict(),
        }


@dataclass
class AnalysisResult:
    """Sentiment analysis outcome for one content item."""
    url: Optional[str]
    status: str
    analysis: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_type: Optional[ErrorType] = None

    @property
    def ok(self) -> bool:
        return self.status == 'success'

    @classmethod
    def failure(cls, url: Optional[str], error: str, error_type: ErrorType) -> 'AnalysisResult':
        return cls(url=url, status='error', error=error, error_type=error_type)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'url': self.url, 'status': self.status}
        if self.ok:
            data['analysis'] = self.analysis
        else:
            data['error'] = self.error
            data['errorType'] = self.error_type.value if self.error_type else ErrorType.GENERAL.value
        return data


@dataclass
class AnalysisBatchResult:
    """Ordered analysis results plus summary statistics."""
    results: List[AnalysisResult]
    concurrency: int

    def stats(self) -> Dict[str, int]:
        return {
            'total': len(self.results),
            'successful': sum(1 for r in self.results if r.ok),
            'failed': sum(1 for r in self.results if not r.ok),
            'concurrency': self.concurrency,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            'results': [result.to_dict() for result in self.results],
            'stats': self.stats(),
        }
