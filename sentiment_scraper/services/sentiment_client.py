"""Client for the external sentiment-analysis API (OpenAI-compatible chat completions)."""

import asyncio
import json
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

import aiohttp
from aiohttp import ClientTimeout

from ..config import settings
from ..core.exceptions import (
    AnalysisParseError,
    APIError,
    ConfigurationError,
    NetworkError,
    ValidationError,
)
from ..models import AnalysisBatchResult, AnalysisResult, ErrorType
from ..utils.logging_config import get_logger, log_operation


logger = get_logger(__name__, component='SENTIMENT')


PROMPT_TEMPLATE = """Analyze the following web content for sentiment analysis. Respond with ONLY a valid JSON object in this exact format:

{{
  "sentiment": "positive/negative/neutral",
  "confidence": 0.85,
  "tone": "professional/excited/cautious/critical/optimistic/pessimistic/etc",
  "keyMessages": ["message 1", "message 2", "message 3"],
  "reasoning": "explanation of why this sentiment was determined",
  "themes": ["theme1", "theme2", "theme3"],
  "emotionalIntensity": "low/medium/high"
}}

URL: {url}
Content: {content}"""

CODE_FENCE_RE = re.compile(r'```(?:json)?\n?')
REQUEST_TEMPERATURE = 0.3
REQUEST_MAX_TOKENS = 1000


def classify_analysis_error(error: BaseException) -> Tuple[ErrorType, str]:
    """Map an analysis failure onto an error type and a caller-facing message."""
    if isinstance(error, ValidationError):
        return ErrorType.VALIDATION, str(error)
    if isinstance(error, AnalysisParseError):
        return ErrorType.PARSING, 'Unable to parse sentiment analysis response'
    if isinstance(error, ConfigurationError):
        return ErrorType.AUTHENTICATION, str(error)
    if isinstance(error, NetworkError):
        return ErrorType.NETWORK, f"Sentiment analysis failed: {error}"
    if isinstance(error, APIError):
        status = error.status_code or 0
        if status == 429:
            error_type = ErrorType.RATE_LIMIT
        elif status == 401:
            error_type = ErrorType.AUTHENTICATION
        elif status >= 500:
            error_type = ErrorType.SERVER
        else:
            error_type = ErrorType.GENERAL
        return error_type, f"Sentiment analysis failed: {error}"
    return ErrorType.GENERAL, f"Sentiment analysis failed: {error}"


class SentimentClient:
    """Ask a chat-completions model for a structured sentiment judgement."""

    def __init__(self, api_url: str = None, api_key: Optional[str] = None, model: str = None,
                 max_chars: int = None, timeout: float = 60, chunk_delay: float = None):
        self.api_url = api_url or settings.sentiment_api_url
        if api_key is None and settings.sentiment_api_key is not None:
            api_key = settings.sentiment_api_key.get_secret_value()
        self.api_key = api_key
        self.model = model or settings.sentiment_model
        self.max_chars = max_chars or settings.sentiment_max_chars
        self.timeout = ClientTimeout(total=timeout)
        self.chunk_delay = settings.analysis_chunk_delay if chunk_delay is None else chunk_delay
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self):
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self.timeout)

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()

    def build_prompt(self, content: str, url: Optional[str]) -> str:
        return PROMPT_TEMPLATE.format(url=url, content=json.dumps(content[:self.max_chars]))

    def build_payload(self, content: str, url: Optional[str]) -> Dict[str, Any]:
        return {
            'model': self.model,
            'messages': [{'role': 'user', 'content': self.build_prompt(content, url)}],
            'temperature': REQUEST_TEMPERATURE,
            'max_tokens': REQUEST_MAX_TOKENS,
        }

    @staticmethod
    def parse_analysis(text: str) -> Dict[str, Any]:
        """Parse the model's reply, tolerating markdown code fences."""
        cleaned = CODE_FENCE_RE.sub('', text or '').strip()
        try:
            analysis = json.loads(cleaned)
        except ValueError as e:
            raise AnalysisParseError(f"Invalid JSON in analysis response: {e}", response_text=text) from e
        if not isinstance(analysis, dict):
            raise AnalysisParseError("Analysis response is not a JSON object", response_text=text)
        return analysis

    async def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST one chat-completions request and return the decoded body."""
        await self.start()
        headers = {
            'Authorization': f'Bearer {self.api_key}',
            'Content-Type': 'application/json',
        }

        try:
            async with self.session.post(self.api_url, json=payload, headers=headers) as response:
                response_text = await response.text()
                if response.status == 200:
                    try:
                        return json.loads(response_text)
                    except ValueError as e:
                        raise AnalysisParseError(
                            f"Invalid JSON response from API: {e}",
                            status_code=200,
                            response_text=response_text
                        ) from e
                elif response.status == 429:
                    raise APIError("Rate limit exceeded", status_code=429, response_text=response_text)
                else:
                    logger.error(f"❌ Sentiment API error {response.status}: {response_text[:500]}")
                    raise APIError(
                        f"Sentiment API error: {response.status}",
                        status_code=response.status,
                        response_text=response_text
                    )
        except asyncio.TimeoutError as e:
            raise NetworkError("Sentiment API request timed out", url=self.api_url) from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Sentiment API connection error: {e}", url=self.api_url) from e

    async def analyze(self, content: str, url: Optional[str] = None) -> Dict[str, Any]:
        """Analyze one piece of content; raises on any failure."""
        if not content or not isinstance(content, str):
            raise ValidationError('Content is required')
        if not self.api_key:
            raise ConfigurationError('Sentiment API key is not configured (OPENROUTER_API_KEY)')

        data = await self._post(self.build_payload(content, url))
        try:
            reply = data['choices'][0]['message']['content']
        except (KeyError, IndexError, TypeError) as e:
            raise AnalysisParseError(f"Unexpected analysis response shape: {e}") from e
        return self.parse_analysis(reply)

    async def analyze_item(self, content: Optional[str], url: Optional[str]) -> AnalysisResult:
        """Analyze one item, converting failures into an error result."""
        try:
            analysis = await self.analyze(content, url)
        except Exception as e:
            error_type, message = classify_analysis_error(e)
            logger.warning(f"Sentiment analysis error for {url}: {e}")
            return AnalysisResult.failure(url, message, error_type)
        return AnalysisResult(url=url, status='success', analysis=analysis)

    async def analyze_batch(self, items: Sequence[Dict[str, Any]],
                            concurrency: Optional[int] = None) -> AnalysisBatchResult:
        """
        Analyze ``{content, url}`` items in chunks under the analysis concurrency bound.

        Results keep input order. Chunks are separated by a delay to respect
        the API's rate limits.
        """
        concurrency = settings.clamp_analysis_concurrency(concurrency)
        items = list(items)
        log_operation(logger, 'analyze_batch', 'started', items=len(items), concurrency=concurrency)

        results: List[AnalysisResult] = []
        for start in range(0, len(items), concurrency):
            chunk = items[start:start + concurrency]
            outcomes = await asyncio.gather(
                *(self.analyze_item(item.get('content'), item.get('url')) for item in chunk),
                return_exceptions=True,
            )

            for item, outcome in zip(chunk, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(f"Unexpected error analyzing content for URL {item.get('url')}: {outcome}")
                    outcome = AnalysisResult.failure(item.get('url'), f"Unexpected error: {outcome}", ErrorType.GENERAL)
                results.append(outcome)

            if start + concurrency < len(items) and self.chunk_delay > 0:
                await asyncio.sleep(self.chunk_delay)

        batch = AnalysisBatchResult(results=results, concurrency=concurrency)
        stats = batch.stats()
        log_operation(logger, 'analyze_batch', 'completed', successful=stats['successful'], failed=stats['failed'])
        return batch
