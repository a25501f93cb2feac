"""Custom exceptions for the sentiment scraper."""

from typing import Optional


class ScraperError(Exception):
    """Base exception for the sentiment scraper."""
    pass


class ConfigurationError(ScraperError):
    """Configuration related errors."""
    pass


class ExtractorRegistrationError(ScraperError):
    """Raised at startup when an extractor does not satisfy the extractor contract."""
    pass


class FetchError(ScraperError):
    """Page fetching errors."""

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class BotDetectionError(FetchError):
    """The site answered with malformed headers, i.e. it is blocking automated access."""

    def __init__(self, domain: str, url: Optional[str] = None):
        super().__init__(
            f"Site {domain} is blocking automated access using anti-bot protection. "
            f"This content cannot be scraped automatically.",
            url=url
        )
        self.domain = domain


class PageNotFoundError(FetchError):
    """HTTP 404 from the origin."""
    pass


class AccessForbiddenError(FetchError):
    """HTTP 403 from the origin."""
    pass


class ContentExtractionError(ScraperError):
    """Page fetched but no usable article text could be extracted."""
    pass


class APIError(ScraperError):
    """External API errors."""

    def __init__(self, message: str, status_code: int = None, response_text: str = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_text = response_text


class AnalysisParseError(APIError):
    """Analysis API answered, but not with the structured JSON we asked for."""
    pass


class NetworkError(FetchError):
    """Transient failure: timeout, connection reset, or a 5xx answer."""
    pass


class ValidationError(ScraperError):
    """Missing or malformed input supplied by the caller."""
    pass
