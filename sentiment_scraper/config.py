"""Configuration management."""

from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    # Application
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Fetch layer
    fetch_timeout: float = Field(default=20.0, alias="FETCH_TIMEOUT")
    fetch_max_attempts: int = Field(default=3, alias="FETCH_MAX_ATTEMPTS")
    fetch_backoff_seconds: float = Field(default=1.0, alias="FETCH_BACKOFF_SECONDS")
    fetch_max_redirects: int = Field(default=10, alias="FETCH_MAX_REDIRECTS")
    fetch_max_response_bytes: int = Field(default=10 * 1024 * 1024, alias="FETCH_MAX_RESPONSE_BYTES")
    fetch_max_header_size: int = Field(default=80 * 1024, alias="FETCH_MAX_HEADER_SIZE")

    # In-memory content cache
    cache_max_entries: int = Field(default=2500, alias="CACHE_MAX_ENTRIES")
    cache_cleanup_interval: int = Field(default=30 * 60, alias="CACHE_CLEANUP_INTERVAL")

    # Batch processing
    batch_default_concurrency: int = Field(default=5, alias="BATCH_CONCURRENCY")
    batch_max_concurrency: int = Field(default=10, alias="BATCH_MAX_CONCURRENCY")
    batch_chunk_delay: float = Field(default=0.1, alias="BATCH_CHUNK_DELAY")

    # Sentiment analysis API (stricter rate limits than page fetches)
    analysis_default_concurrency: int = Field(default=3, alias="ANALYSIS_CONCURRENCY")
    analysis_max_concurrency: int = Field(default=5, alias="ANALYSIS_MAX_CONCURRENCY")
    analysis_chunk_delay: float = Field(default=0.5, alias="ANALYSIS_CHUNK_DELAY")
    sentiment_api_url: str = Field(
        default="https://openrouter.ai/api/v1/chat/completions",
        alias="SENTIMENT_API_URL"
    )
    sentiment_api_key: Optional[SecretStr] = Field(default=None, alias="OPENROUTER_API_KEY")
    sentiment_model: str = Field(default="google/gemini-2.5-flash-lite", alias="SENTIMENT_MODEL")
    sentiment_max_chars: int = Field(default=4000, alias="SENTIMENT_MAX_CHARS")

    class Config:
        env_file = ".env"
        case_sensitive = False
        populate_by_name = True

    @field_validator('sentiment_api_key', mode='before')
    @classmethod
    def empty_str_to_none(cls, v):
        """Convert empty strings to None for optional secrets."""
        if v == '' or v is None:
            return None
        return v

    def clamp_batch_concurrency(self, value: Optional[int]) -> int:
        """Clamp a requested fetch concurrency into 1..batch_max_concurrency."""
        if value is None:
            value = self.batch_default_concurrency
        return min(max(1, int(value)), self.batch_max_concurrency)

    def clamp_analysis_concurrency(self, value: Optional[int]) -> int:
        """Clamp a requested analysis concurrency into 1..analysis_max_concurrency."""
        if value is None:
            value = self.analysis_default_concurrency
        return min(max(1, int(value)), self.analysis_max_concurrency)


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings instance."""
    return settings
