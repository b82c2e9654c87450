"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Smart Healthcare AI Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://healthcare@localhost:5432/smart_healthcare"

    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o"
    openai_temperature: float = 0.5
    openai_max_tokens: int = 8192
    openai_timeout_seconds: float = 180.0
    openai_attempt_timeout_seconds: float = 55.0
    openai_max_retries: int = 2
    openai_backoff_seconds: float = 3.0
    openai_backoff_max_seconds: float = 30.0

    video_lookup_provider: str = "youtube"
    youtube_api_key: str | None = None
    youtube_api_url: str = "https://www.googleapis.com/youtube/v3/search"
    youtube_timeout_seconds: float = 10.0
    video_cache_size: int = 512

    recommendation_dedup_minutes: int = 10

    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "smart-healthcare"


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
